"""
OFR Notification Bus — Dispatcher
===================================
Hands one committed registry notification to every listener of its
event type. Called from the store's post-commit hook, so the state the
notification describes is already durable when listeners run.

A listener that raises is logged and recorded in the report; the
remaining listeners still run and nothing is raised back into the
registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from core.events.registry import ListenerRegistry

logger = logging.getLogger("ofr.events")


@dataclass(frozen=True)
class ListenerFailure:
    listener: str
    error_type: str
    error: str


@dataclass(frozen=True)
class DispatchReport:
    event_type: str
    registrant: str
    delivered: tuple[str, ...] = ()
    failures: tuple[ListenerFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures


def dispatch(notification, registry: ListenerRegistry) -> DispatchReport:
    """Deliver notification to its listeners. Never raises."""
    delivered: list[str] = []
    failures: list[ListenerFailure] = []

    for handler, listener_name in registry.get_listeners(notification.event_type):
        try:
            handler(notification)
        except Exception as exc:
            failures.append(
                ListenerFailure(
                    listener=listener_name,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
            )
            logger.error(
                f"Listener '{listener_name}' failed on {notification.event_type} "
                f"for '{notification.registrant}': {exc}",
                exc_info=True,
            )
            continue
        delivered.append(listener_name)

    report = DispatchReport(
        event_type=notification.event_type,
        registrant=notification.registrant,
        delivered=tuple(delivered),
        failures=tuple(failures),
    )
    logger.debug(
        f"{report.event_type} for '{report.registrant}': "
        f"{len(report.delivered)} delivered, {len(report.failures)} failed"
    )
    return report
