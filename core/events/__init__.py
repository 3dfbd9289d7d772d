"""
OFR Notification Bus — Public API
===================================
The registry commits state. The bus tells observers about it.
Nothing is heard before it is committed.
"""

from core.events.dispatcher import DispatchReport, ListenerFailure, dispatch
from core.events.errors import (
    DuplicateListenerError,
    EventBusError,
    InvalidEventTypeFormat,
)
from core.events.registry import ListenerRegistry

__all__ = [
    "dispatch",
    "DispatchReport",
    "ListenerFailure",
    "ListenerRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateListenerError",
]
