"""
Tests — Notification Bus
==========================
Listener registration rules and failure-isolated dispatch.
"""

import pytest

from core.events import (
    DuplicateListenerError,
    EventBusError,
    InvalidEventTypeFormat,
    ListenerRegistry,
    dispatch,
)
from engines.operator_filter.events import (
    OPERATOR_UPDATED,
    REGISTRATION_UPDATED,
    operator_updated,
    registration_updated,
)

REGISTRANT = "0x" + "a" * 40
OPERATOR = "0x" + "b" * 40


# ══════════════════════════════════════════════════════════════
# LISTENER REGISTRY
# ══════════════════════════════════════════════════════════════

class TestListenerRegistry:
    def test_register_and_lookup(self):
        registry = ListenerRegistry()

        def on_registration(notification):
            pass

        registry.register_listener(REGISTRATION_UPDATED, on_registration)

        assert registry.has_listeners(REGISTRATION_UPDATED)
        assert not registry.has_listeners(OPERATOR_UPDATED)
        assert registry.get_all_event_types() == frozenset({REGISTRATION_UPDATED})

    @pytest.mark.parametrize("event_type", ["", "registration", "a.b", "a..c"])
    def test_invalid_event_type(self, event_type):
        registry = ListenerRegistry()
        with pytest.raises(InvalidEventTypeFormat):
            registry.register_listener(event_type, lambda n: None)

    def test_duplicate_handler_rejected(self):
        registry = ListenerRegistry()

        def handler(notification):
            pass

        registry.register_listener(REGISTRATION_UPDATED, handler)
        with pytest.raises(DuplicateListenerError):
            registry.register_listener(REGISTRATION_UPDATED, handler)

    def test_non_callable_rejected(self):
        with pytest.raises(EventBusError):
            ListenerRegistry().register_listener(REGISTRATION_UPDATED, "handler")

    def test_wildcard_listeners_follow_specific_ones(self):
        registry = ListenerRegistry()

        def specific(notification):
            pass

        def everything(notification):
            pass

        registry.register_listener("*", everything, "everything")
        registry.register_listener(OPERATOR_UPDATED, specific, "specific")

        names = [name for _, name in registry.get_listeners(OPERATOR_UPDATED)]
        assert names == ["specific", "everything"]
        assert registry.listener_count(REGISTRATION_UPDATED) == 1

    def test_unregister(self):
        registry = ListenerRegistry()

        def handler(notification):
            pass

        registry.register_listener(OPERATOR_UPDATED, handler)
        assert registry.unregister_listener(OPERATOR_UPDATED, handler) is True
        assert registry.unregister_listener(OPERATOR_UPDATED, handler) is False
        assert registry.listener_count(OPERATOR_UPDATED) == 0


# ══════════════════════════════════════════════════════════════
# DISPATCH
# ══════════════════════════════════════════════════════════════

class TestDispatch:
    def test_no_listeners(self):
        report = dispatch(registration_updated(REGISTRANT, True), ListenerRegistry())
        assert report.delivered == ()
        assert report.ok is True

    def test_failing_listener_does_not_stop_others(self):
        registry = ListenerRegistry()
        received = []

        def broken(notification):
            raise RuntimeError("index unavailable")

        def healthy(notification):
            received.append(notification.payload["operator"])

        registry.register_listener(OPERATOR_UPDATED, broken, "broken")
        registry.register_listener(OPERATOR_UPDATED, healthy, "healthy")

        report = dispatch(operator_updated(REGISTRANT, OPERATOR, True), registry)

        assert received == [OPERATOR]
        assert report.registrant == REGISTRANT
        assert report.delivered == ("healthy",)
        assert report.ok is False
        assert report.failures[0].listener == "broken"
        assert report.failures[0].error_type == "RuntimeError"
        assert report.failures[0].error == "index unavailable"


def test_notification_payload_is_read_only():
    notification = operator_updated(REGISTRANT, OPERATOR, True)
    with pytest.raises(TypeError):
        notification.payload["filtered"] = False
    assert notification.to_dict() == {
        "event_type": OPERATOR_UPDATED,
        "registrant": REGISTRANT,
        "payload": {"operator": OPERATOR, "filtered": True},
    }


def test_notification_rejects_unknown_event_type():
    from engines.operator_filter.events import Notification

    with pytest.raises(ValueError, match="event_type"):
        Notification(event_type="operator_filter.owner.updated", registrant=REGISTRANT)
