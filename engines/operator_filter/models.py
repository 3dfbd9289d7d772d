"""
OFR Operator Filter — Value Models
====================================
Immutable registration record plus address / fingerprint
canonicalisation helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from engines.operator_filter.constants import CODE_HASH_PATTERN


def canonical_address(value, *, field_name: str = "address") -> str:
    """Strip and lower-case an address. Rejects non-strings and blanks."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    return value.strip().lower()


def canonical_code_hash(value, *, field_name: str = "code_hash") -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string.")
    normalized = value.strip().lower()
    if not CODE_HASH_PATTERN.match(normalized):
        raise ValueError(
            f"{field_name} '{value}' is not a 0x-prefixed 32-byte hex string."
        )
    return normalized


@dataclass(frozen=True)
class Registration:
    """
    Registration status of one address.

    Fields:
        registered:   True once the address opted in.
        subscription: Address whose filter lists this registrant
                      delegates to, or None.

    Invariant:
        subscription is None whenever registered is False.
    """

    registered: bool = False
    subscription: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.registered, bool):
            raise ValueError("registered must be a bool.")

        if self.subscription is not None:
            if not self.registered:
                raise ValueError(
                    "An unregistered address cannot hold a subscription."
                )
            object.__setattr__(
                self,
                "subscription",
                canonical_address(self.subscription, field_name="subscription"),
            )

    @property
    def is_subscribed(self) -> bool:
        return self.subscription is not None


UNREGISTERED = Registration()
