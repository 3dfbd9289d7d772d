"""
OFR Operator Filter — Capability Gate
=======================================
Decides whether a caller may act as a registrant address.

Rules:
1. caller == target → authorized, no external query
2. otherwise ask the target who controls it (untrusted, external)
   - no controller interface     → NOT_CONTROLLABLE
   - controller == caller        → AUTHORIZED
   - controller != caller        → NOT_AUTHORIZED
   - the query itself raised     → INDETERMINATE (cause kept verbatim)

The external query may run arbitrary code, including calls back into
the registry. The gate runs before any state change of the operation
that invoked it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Protocol, Union

from engines.operator_filter.errors import (
    ControllerInterfaceMissing,
    NotSelfNorController,
    TargetNotControllable,
)
from engines.operator_filter.models import canonical_address

logger = logging.getLogger("ofr.capability")


# ══════════════════════════════════════════════════════════════
# CONTROLLER RESOLUTION (external collaborator)
# ══════════════════════════════════════════════════════════════

class ControllerResolver(Protocol):
    def controller_of(self, address: str) -> str:
        """
        Return the controller of address.
        Raise ControllerInterfaceMissing if address exposes none.
        """
        ...


ControllerEntry = Union[str, Callable[[str], str]]


class InMemoryControllerResolver:
    """
    Deterministic in-memory resolver used for bootstrap/tests.

    Entries are either a controller address or a callable receiving the
    queried address, which lets tests model arbitrary external code
    (failures, reentrant calls).
    """

    def __init__(self, controllers: Mapping[str, ControllerEntry] | None = None):
        self._controllers: dict[str, ControllerEntry] = {}
        for address, entry in (controllers or {}).items():
            self.set_controller(address, entry)

    def set_controller(self, address: str, entry: ControllerEntry) -> None:
        if not callable(entry):
            entry = canonical_address(entry, field_name="controller")
        self._controllers[canonical_address(address)] = entry

    def remove_controller(self, address: str) -> None:
        self._controllers.pop(canonical_address(address), None)

    def controller_of(self, address: str) -> str:
        key = canonical_address(address)
        entry = self._controllers.get(key)
        if entry is None:
            raise ControllerInterfaceMissing(key)
        if callable(entry):
            return entry(key)
        return entry


# ══════════════════════════════════════════════════════════════
# DECISION
# ══════════════════════════════════════════════════════════════

class CapabilityStatus(Enum):
    AUTHORIZED = "AUTHORIZED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    NOT_CONTROLLABLE = "NOT_CONTROLLABLE"
    INDETERMINATE = "INDETERMINATE"


@dataclass(frozen=True)
class CapabilityDecision:
    caller: str
    target: str
    status: CapabilityStatus
    controller: Optional[str] = None
    cause: Optional[BaseException] = None

    def __post_init__(self):
        if not isinstance(self.status, CapabilityStatus):
            raise ValueError(
                f"status must be CapabilityStatus, got {type(self.status).__name__}."
            )
        if self.status == CapabilityStatus.INDETERMINATE and self.cause is None:
            raise ValueError("INDETERMINATE decision must carry its cause.")
        if self.status != CapabilityStatus.INDETERMINATE and self.cause is not None:
            raise ValueError("Only INDETERMINATE decisions carry a cause.")

    @property
    def authorized(self) -> bool:
        return self.status == CapabilityStatus.AUTHORIZED


# ══════════════════════════════════════════════════════════════
# GATE
# ══════════════════════════════════════════════════════════════

class CapabilityGate:
    def __init__(self, resolver: ControllerResolver | None = None):
        self._resolver = resolver

    def check(self, caller: str, target: str) -> CapabilityDecision:
        caller = canonical_address(caller, field_name="caller")
        target = canonical_address(target, field_name="target")

        if caller == target:
            return CapabilityDecision(
                caller=caller,
                target=target,
                status=CapabilityStatus.AUTHORIZED,
                controller=caller,
            )

        if self._resolver is None:
            return CapabilityDecision(
                caller=caller,
                target=target,
                status=CapabilityStatus.NOT_CONTROLLABLE,
            )

        try:
            controller = self._resolver.controller_of(target)
        except ControllerInterfaceMissing:
            return CapabilityDecision(
                caller=caller,
                target=target,
                status=CapabilityStatus.NOT_CONTROLLABLE,
            )
        except Exception as exc:
            return CapabilityDecision(
                caller=caller,
                target=target,
                status=CapabilityStatus.INDETERMINATE,
                cause=exc,
            )

        # An answer that names no address cannot match any caller.
        if not isinstance(controller, str) or not controller.strip():
            return CapabilityDecision(
                caller=caller,
                target=target,
                status=CapabilityStatus.NOT_AUTHORIZED,
            )

        controller = canonical_address(controller, field_name="controller")
        status = (
            CapabilityStatus.AUTHORIZED
            if controller == caller
            else CapabilityStatus.NOT_AUTHORIZED
        )
        return CapabilityDecision(
            caller=caller,
            target=target,
            status=status,
            controller=controller,
        )

    def authorize(self, caller: str, target: str) -> CapabilityDecision:
        """
        Raise unless caller may act as target.

        INDETERMINATE re-raises the resolver's own exception object.
        """
        decision = self.check(caller, target)

        if decision.status == CapabilityStatus.AUTHORIZED:
            return decision

        logger.warning(
            f"Capability denied: caller '{decision.caller}' for "
            f"'{decision.target}' ({decision.status.value})"
        )

        if decision.status == CapabilityStatus.NOT_CONTROLLABLE:
            raise TargetNotControllable(decision.target)

        if decision.status == CapabilityStatus.NOT_AUTHORIZED:
            raise NotSelfNorController(
                decision.caller,
                decision.target,
                decision.controller,
            )

        raise decision.cause
