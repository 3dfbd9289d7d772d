"""
OFR Operator Filter — Errors
==============================
Every failure the registry can report. All are synchronous and
non-retriable; a raised error means the whole call was rolled back.

Class names are the identifiers integrators match on. Do not rename.

Groups:
    AuthorizationError     — capability gate refused the caller
    RegistrationError      — registration state precondition
    SubscriptionError      — subscription graph precondition
    FilterMembershipError  — strict set toggle precondition
    PolicyDenied           — is_operator_allowed verdicts (the product)
"""

from __future__ import annotations


class OperatorFilterError(Exception):
    """Base error for operator filter registry operations."""

    code = "OPERATOR_FILTER_ERROR"


# ══════════════════════════════════════════════════════════════
# AUTHORIZATION
# ══════════════════════════════════════════════════════════════

class AuthorizationError(OperatorFilterError):
    code = "AUTHORIZATION_FAILED"


class NotSelfNorController(AuthorizationError):
    """Caller is neither the target address nor its controller."""

    code = "NOT_SELF_NOR_CONTROLLER"

    def __init__(self, caller: str, target: str, controller: str | None = None):
        self.caller = caller
        self.target = target
        self.controller = controller
        super().__init__(
            f"Caller '{caller}' is neither '{target}' nor its controller."
        )


class TargetNotControllable(AuthorizationError):
    """Target exposes no controller interface."""

    code = "TARGET_NOT_CONTROLLABLE"

    def __init__(self, target: str):
        self.target = target
        super().__init__(
            f"Address '{target}' does not expose a controller interface."
        )


class ControllerInterfaceMissing(Exception):
    """
    Raised by a ControllerResolver when the queried address has no
    controller interface. The gate normalises it to TargetNotControllable.
    """

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address '{address}' has no controller interface.")


class ReentrantCall(OperatorFilterError):
    """A mutating call started while another was still in flight."""

    code = "REENTRANT_CALL"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Operation '{operation}' was re-entered during a gated call."
        )


# ══════════════════════════════════════════════════════════════
# REGISTRATION STATE
# ══════════════════════════════════════════════════════════════

class RegistrationError(OperatorFilterError):
    code = "REGISTRATION_STATE"


class AlreadyRegistered(RegistrationError):
    code = "ALREADY_REGISTERED"

    def __init__(self, registrant: str):
        self.registrant = registrant
        super().__init__(f"Address '{registrant}' is already registered.")


class NotRegistered(RegistrationError):
    code = "NOT_REGISTERED"

    def __init__(self, registrant: str):
        self.registrant = registrant
        super().__init__(f"Address '{registrant}' is not registered.")


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION GRAPH
# ══════════════════════════════════════════════════════════════

class SubscriptionError(OperatorFilterError):
    code = "SUBSCRIPTION_GRAPH"


class CannotSubscribeToSelf(SubscriptionError):
    code = "CANNOT_SUBSCRIBE_TO_SELF"

    def __init__(self, registrant: str):
        self.registrant = registrant
        super().__init__(f"Address '{registrant}' cannot subscribe to itself.")


class CannotSubscribeToZeroTarget(SubscriptionError):
    code = "CANNOT_SUBSCRIBE_TO_ZERO_TARGET"

    def __init__(self):
        super().__init__("Cannot subscribe to the zero address.")


class AlreadySubscribed(SubscriptionError):
    code = "ALREADY_SUBSCRIBED"

    def __init__(self, subscription: str):
        self.subscription = subscription
        super().__init__(f"Already subscribed to '{subscription}'.")


class CannotSubscribeToRegistrantWithSubscription(SubscriptionError):
    code = "CANNOT_SUBSCRIBE_TO_REGISTRANT_WITH_SUBSCRIPTION"

    def __init__(self, subscription: str):
        self.subscription = subscription
        super().__init__(
            f"Cannot subscribe to '{subscription}': it is itself subscribed."
        )


class NotSubscribed(SubscriptionError):
    code = "NOT_SUBSCRIBED"

    def __init__(self, registrant: str):
        self.registrant = registrant
        super().__init__(f"Address '{registrant}' has no subscription.")


class CannotUpdateWhileSubscribed(SubscriptionError):
    code = "CANNOT_UPDATE_WHILE_SUBSCRIBED"

    def __init__(self, subscription: str):
        self.subscription = subscription
        super().__init__(
            f"Filter lists are delegated to '{subscription}'. "
            f"Unsubscribe before updating them."
        )


class CannotCopyFromSelf(SubscriptionError):
    code = "CANNOT_COPY_FROM_SELF"

    def __init__(self, registrant: str):
        self.registrant = registrant
        super().__init__(f"Address '{registrant}' cannot copy its own entries.")


# ══════════════════════════════════════════════════════════════
# FILTER MEMBERSHIP
# ══════════════════════════════════════════════════════════════

class FilterMembershipError(OperatorFilterError):
    code = "FILTER_MEMBERSHIP"


class AddressAlreadyFiltered(FilterMembershipError):
    code = "ADDRESS_ALREADY_FILTERED"

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Operator '{operator}' is already filtered.")


class AddressNotFiltered(FilterMembershipError):
    code = "ADDRESS_NOT_FILTERED"

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Operator '{operator}' is not filtered.")


class CodeHashAlreadyFiltered(FilterMembershipError):
    code = "CODE_HASH_ALREADY_FILTERED"

    def __init__(self, code_hash: str):
        self.code_hash = code_hash
        super().__init__(f"Code hash '{code_hash}' is already filtered.")


class CodeHashNotFiltered(FilterMembershipError):
    code = "CODE_HASH_NOT_FILTERED"

    def __init__(self, code_hash: str):
        self.code_hash = code_hash
        super().__init__(f"Code hash '{code_hash}' is not filtered.")


class CannotFilterZeroCodeHash(FilterMembershipError):
    code = "CANNOT_FILTER_ZERO_CODE_HASH"

    def __init__(self):
        super().__init__(
            "The zero code hash denotes an address without code "
            "and cannot be filtered."
        )


# ══════════════════════════════════════════════════════════════
# POLICY DENY (query verdicts)
# ══════════════════════════════════════════════════════════════

class PolicyDenied(OperatorFilterError):
    """
    Authoritative "deny" from is_operator_allowed.
    Callers must not branch on the subclass; it is diagnostic only.
    """

    code = "POLICY_DENIED"


class AddressFiltered(PolicyDenied):
    code = "ADDRESS_FILTERED"

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Operator '{operator}' is filtered.")


class CodeHashFiltered(PolicyDenied):
    code = "CODE_HASH_FILTERED"

    def __init__(self, operator: str, code_hash: str):
        self.operator = operator
        self.code_hash = code_hash
        super().__init__(
            f"Operator '{operator}' runs filtered code hash '{code_hash}'."
        )


# ══════════════════════════════════════════════════════════════
# READ ACCESS / SURFACE
# ══════════════════════════════════════════════════════════════

class IndexOutOfRange(OperatorFilterError, IndexError):
    code = "INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(
            f"Index {index} out of range for collection of length {length}."
        )


class UnknownOperation(OperatorFilterError):
    code = "UNKNOWN_OPERATION"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Operation '{name}' is not part of the registry surface.")
