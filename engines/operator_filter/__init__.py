"""
OFR Operator Filter - Public API
================================
"""

from engines.operator_filter.capability import (
    CapabilityDecision,
    CapabilityGate,
    CapabilityStatus,
    ControllerResolver,
    InMemoryControllerResolver,
)
from engines.operator_filter.code import (
    CodeProvider,
    InMemoryCodeProvider,
    compute_code_hash,
)
from engines.operator_filter.config import RegistryConfig, load_registry_config
from engines.operator_filter.constants import ZERO_ADDRESS, ZERO_CODE_HASH
from engines.operator_filter.errors import (
    AddressAlreadyFiltered,
    AddressFiltered,
    AddressNotFiltered,
    AlreadyRegistered,
    AlreadySubscribed,
    AuthorizationError,
    CannotCopyFromSelf,
    CannotFilterZeroCodeHash,
    CannotSubscribeToRegistrantWithSubscription,
    CannotSubscribeToSelf,
    CannotSubscribeToZeroTarget,
    CannotUpdateWhileSubscribed,
    CodeHashAlreadyFiltered,
    CodeHashFiltered,
    CodeHashNotFiltered,
    ControllerInterfaceMissing,
    FilterMembershipError,
    IndexOutOfRange,
    NotRegistered,
    NotSelfNorController,
    NotSubscribed,
    OperatorFilterError,
    PolicyDenied,
    ReentrantCall,
    RegistrationError,
    SubscriptionError,
    TargetNotControllable,
    UnknownOperation,
)
from engines.operator_filter.events import Notification
from engines.operator_filter.models import Registration
from engines.operator_filter.registry import OperatorFilterRegistry
from engines.operator_filter.sets import EnumerableSet
from engines.operator_filter.store import InMemoryRegistryStore, RegistryStore


def __getattr__(name: str):
    if name == "DbRegistryStore":
        from engines.operator_filter.db_store import DbRegistryStore

        return DbRegistryStore
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "OperatorFilterRegistry",
    "Registration",
    "Notification",
    "EnumerableSet",
    "RegistryStore",
    "InMemoryRegistryStore",
    "DbRegistryStore",
    "CapabilityGate",
    "CapabilityDecision",
    "CapabilityStatus",
    "ControllerResolver",
    "InMemoryControllerResolver",
    "CodeProvider",
    "InMemoryCodeProvider",
    "compute_code_hash",
    "RegistryConfig",
    "load_registry_config",
    "ZERO_ADDRESS",
    "ZERO_CODE_HASH",
    "OperatorFilterError",
    "AuthorizationError",
    "NotSelfNorController",
    "TargetNotControllable",
    "ControllerInterfaceMissing",
    "ReentrantCall",
    "RegistrationError",
    "AlreadyRegistered",
    "NotRegistered",
    "SubscriptionError",
    "CannotSubscribeToSelf",
    "CannotSubscribeToZeroTarget",
    "AlreadySubscribed",
    "CannotSubscribeToRegistrantWithSubscription",
    "NotSubscribed",
    "CannotUpdateWhileSubscribed",
    "CannotCopyFromSelf",
    "FilterMembershipError",
    "AddressAlreadyFiltered",
    "AddressNotFiltered",
    "CodeHashAlreadyFiltered",
    "CodeHashNotFiltered",
    "CannotFilterZeroCodeHash",
    "PolicyDenied",
    "AddressFiltered",
    "CodeHashFiltered",
    "IndexOutOfRange",
    "UnknownOperation",
]
