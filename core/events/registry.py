"""
OFR Notification Bus — Listener Registry
==========================================
Controls which handlers receive which registry notifications.

Rules:
- Event types must follow engine.domain.action format
- Multiple listeners per event type allowed
- Duplicate handler for same event type forbidden
- Wildcard "*" listens to every event type
- In-memory only (no DB, no files)
- Thread-safe
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateListenerError,
    EventBusError,
    InvalidEventTypeFormat,
)

logger = logging.getLogger("ofr.events")

WILDCARD = "*"


class ListenerRegistry:
    """
    In-memory registry of notification listeners.

    Each entry maps an event_type to a list of
    (handler, listener_name) tuples.
    """

    def __init__(self):
        self._listeners: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        """Validate engine.domain.action format."""
        if event_type == WILDCARD:
            return

        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")

        parts = event_type.strip().split(".")
        if len(parts) < 3 or not all(parts):
            raise InvalidEventTypeFormat(event_type)

    def register_listener(
        self,
        event_type: str,
        handler: Callable,
        listener_name: str | None = None,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:  Bad event type format
            DuplicateListenerError:  Handler already registered
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        handler_name = getattr(handler, "__qualname__", str(handler))
        listener_name = listener_name or handler_name

        with self._lock:
            entries = self._listeners.setdefault(event_type, [])

            for existing_handler, _ in entries:
                if existing_handler is handler:
                    raise DuplicateListenerError(event_type, handler_name)

            entries.append((handler, listener_name))

        logger.info(
            f"Listener registered: {handler_name} → {event_type} "
            f"(as: {listener_name})"
        )

    def unregister_listener(self, event_type: str, handler: Callable) -> bool:
        with self._lock:
            entries = self._listeners.get(event_type, [])
            for position, (existing_handler, _) in enumerate(entries):
                if existing_handler is handler:
                    del entries[position]
                    return True
        return False

    def get_listeners(self, event_type: str) -> list[tuple[Callable, str]]:
        """
        Listeners for an event type, specific ones first, then wildcard.
        Returns empty list if none (not an error).
        """
        with self._lock:
            specific = list(self._listeners.get(event_type, []))
            wildcard = list(self._listeners.get(WILDCARD, []))
        return specific + wildcard

    def has_listeners(self, event_type: str) -> bool:
        return bool(self.get_listeners(event_type))

    def get_all_event_types(self) -> frozenset[str]:
        """Return all event types with registered listeners."""
        with self._lock:
            return frozenset(
                event_type
                for event_type, entries in self._listeners.items()
                if entries
            )

    def listener_count(self, event_type: str) -> int:
        return len(self.get_listeners(event_type))
