"""
OFR Operator Filter — Integrator Call Surface
===============================================
Fixed operation names integrators call the registry by, mapped to
OperatorFilterRegistry methods. Argument order is the method's
positional order; mutating operations require a caller.
"""

from __future__ import annotations

from typing import Any

from engines.operator_filter.errors import UnknownOperation

MUTATING_OPERATIONS = {
    "register": "register",
    "unregister": "unregister",
    "registerAndSubscribe": "register_and_subscribe",
    "registerAndCopyEntries": "register_and_copy_entries",
    "updateOperator": "update_operator",
    "updateOperators": "update_operators",
    "updateCodeHash": "update_code_hash",
    "updateCodeHashes": "update_code_hashes",
    "subscribe": "subscribe",
    "unsubscribe": "unsubscribe",
    "copyEntriesOf": "copy_entries_of",
}

READ_OPERATIONS = {
    "isOperatorAllowed": "is_operator_allowed",
    "subscriptionOf": "subscription_of",
    "subscribers": "subscribers",
    "subscriberAt": "subscriber_at",
    "isOperatorFiltered": "is_operator_filtered",
    "isCodeHashFiltered": "is_code_hash_filtered",
    "isCodeHashOfFiltered": "is_code_hash_of_filtered",
    "isRegistered": "is_registered",
    "filteredOperators": "filtered_operators",
    "filteredCodeHashes": "filtered_code_hashes",
    "filteredOperatorAt": "filtered_operator_at",
    "filteredCodeHashAt": "filtered_code_hash_at",
    "codeHashOf": "code_hash_of",
}

SURFACE = {**MUTATING_OPERATIONS, **READ_OPERATIONS}


def resolve_operation(name: str) -> str:
    """Resolve an integrator operation name to a registry method name."""
    method_name = SURFACE.get(name)
    if method_name is None:
        raise UnknownOperation(name)
    return method_name


def invoke(registry, name: str, *args: Any, caller: str | None = None) -> Any:
    method_name = resolve_operation(name)
    method = getattr(registry, method_name)

    if name in MUTATING_OPERATIONS:
        if caller is None:
            raise ValueError(f"Operation '{name}' requires a caller.")
        return method(*args, caller=caller)

    if caller is not None:
        raise ValueError(f"Operation '{name}' does not take a caller.")
    return method(*args)
