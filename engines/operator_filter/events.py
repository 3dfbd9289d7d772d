"""
OFR Operator Filter — Notification Types and Builders
=======================================================
One notification per discrete committed change. Observers use these
to build derived indices; nothing in the registry reads them back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

REGISTRATION_UPDATED = "operator_filter.registration.updated"
SUBSCRIPTION_UPDATED = "operator_filter.subscription.updated"
OPERATOR_UPDATED = "operator_filter.operator.updated"
CODE_HASH_UPDATED = "operator_filter.code_hash.updated"

OPERATOR_FILTER_EVENT_TYPES = (
    REGISTRATION_UPDATED,
    SUBSCRIPTION_UPDATED,
    OPERATOR_UPDATED,
    CODE_HASH_UPDATED,
)


# ══════════════════════════════════════════════════════════════
# NOTIFICATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Notification:
    event_type: str
    registrant: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.event_type not in OPERATOR_FILTER_EVENT_TYPES:
            raise ValueError(
                f"event_type '{self.event_type}' not valid. "
                f"Must be one of: {sorted(OPERATOR_FILTER_EVENT_TYPES)}"
            )
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "registrant": self.registrant,
            "payload": dict(self.payload),
        }


# ══════════════════════════════════════════════════════════════
# BUILDERS
# ══════════════════════════════════════════════════════════════

def registration_updated(registrant: str, registered: bool) -> Notification:
    return Notification(
        event_type=REGISTRATION_UPDATED,
        registrant=registrant,
        payload={"registered": registered},
    )


def subscription_updated(
    registrant: str,
    subscription: str,
    subscribed: bool,
) -> Notification:
    return Notification(
        event_type=SUBSCRIPTION_UPDATED,
        registrant=registrant,
        payload={"subscription": subscription, "subscribed": subscribed},
    )


def operator_updated(registrant: str, operator: str, filtered: bool) -> Notification:
    return Notification(
        event_type=OPERATOR_UPDATED,
        registrant=registrant,
        payload={"operator": operator, "filtered": filtered},
    )


def code_hash_updated(registrant: str, code_hash: str, filtered: bool) -> Notification:
    return Notification(
        event_type=CODE_HASH_UPDATED,
        registrant=registrant,
        payload={"code_hash": code_hash, "filtered": filtered},
    )
