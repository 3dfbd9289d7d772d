"""
OFR Operator Filter — Configuration
=====================================
Registry behaviour switches, read from the Django setting
OPERATOR_FILTER when Django is configured:

    OPERATOR_FILTER = {
        "guard_reentrant_calls": False,
        "logger_name": "ofr.registry",
    }
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class RegistryConfig:
    """
    guard_reentrant_calls:
        False (default) accepts calls that re-enter the registry from
        inside a capability query. True rejects them with ReentrantCall.
    logger_name:
        Logger used by the registry for committed state changes.
    """

    guard_reentrant_calls: bool = False
    logger_name: str = "ofr.registry"

    def __post_init__(self) -> None:
        if not isinstance(self.guard_reentrant_calls, bool):
            raise ValueError("guard_reentrant_calls must be a bool.")
        if not self.logger_name or not isinstance(self.logger_name, str):
            raise ValueError("logger_name must be a non-empty string.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "RegistryConfig":
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(
                f"Unknown OPERATOR_FILTER keys: {unknown}. "
                f"Must be among: {sorted(known)}"
            )
        return cls(**values)


def load_registry_config(settings=None) -> RegistryConfig:
    """
    Build RegistryConfig from a settings object.
    Falls back to django.conf.settings, then to defaults when Django
    is not configured.
    """
    if settings is None:
        from django.conf import settings as django_settings

        if not django_settings.configured and not os.environ.get(
            "DJANGO_SETTINGS_MODULE"
        ):
            return RegistryConfig()
        settings = django_settings

    return RegistryConfig.from_mapping(getattr(settings, "OPERATOR_FILTER", None))
