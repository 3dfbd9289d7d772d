from __future__ import annotations

import pytest

from engines.operator_filter import OperatorFilterRegistry


class Recorder:
    """Wildcard listener keeping every delivered notification in order."""

    def __init__(self):
        self.notifications: list[dict] = []

    def __call__(self, notification) -> None:
        self.notifications.append(notification.to_dict())

    @property
    def event_types(self) -> list[str]:
        return [entry["event_type"] for entry in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()


@pytest.fixture
def make_registry():
    """Build an OperatorFilterRegistry with a Recorder listening to everything."""

    def _make(*args, **kwargs) -> tuple[OperatorFilterRegistry, Recorder]:
        registry = OperatorFilterRegistry(*args, **kwargs)
        recorder = Recorder()
        registry.listeners.register_listener("*", recorder, "recorder")
        return registry, recorder

    return _make
