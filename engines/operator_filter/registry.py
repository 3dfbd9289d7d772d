"""
OFR Operator Filter — Registry
================================
Registrants declare which operators (by address or by code
fingerprint) may not act on their behalf, or delegate that policy to
another registrant by subscribing to it.

Every mutating operation:
1. Runs inside one store transaction (all-or-nothing)
2. Passes the capability gate before anything else
3. Checks its preconditions in a fixed order
4. Queues one notification per discrete change, published only
   after the transaction commits

Subscription graph:
- A registrant subscribes to at most one target
- A target must not itself be subscribed at subscribe time
- The subscriber index is written only through _set_subscription

Effective list of a registered address r:
    own lists of r            if r has no subscription
    own lists of r's target   otherwise
Unregistered addresses are unrestricted and read as empty.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from core.events.dispatcher import dispatch
from core.events.registry import ListenerRegistry
from engines.operator_filter.capability import CapabilityGate, ControllerResolver
from engines.operator_filter.code import (
    CodeProvider,
    InMemoryCodeProvider,
    compute_code_hash,
)
from engines.operator_filter.config import RegistryConfig, load_registry_config
from engines.operator_filter.constants import (
    COLLECTION_CODE_HASHES,
    COLLECTION_OPERATORS,
    COLLECTION_SUBSCRIBERS,
    ZERO_ADDRESS,
    ZERO_CODE_HASH,
)
from engines.operator_filter.errors import (
    AddressAlreadyFiltered,
    AddressFiltered,
    AddressNotFiltered,
    AlreadyRegistered,
    AlreadySubscribed,
    CannotCopyFromSelf,
    CannotFilterZeroCodeHash,
    CannotSubscribeToRegistrantWithSubscription,
    CannotSubscribeToSelf,
    CannotSubscribeToZeroTarget,
    CannotUpdateWhileSubscribed,
    CodeHashAlreadyFiltered,
    CodeHashFiltered,
    CodeHashNotFiltered,
    IndexOutOfRange,
    NotRegistered,
    NotSubscribed,
    ReentrantCall,
)
from engines.operator_filter.events import (
    Notification,
    code_hash_updated,
    operator_updated,
    registration_updated,
    subscription_updated,
)
from engines.operator_filter.models import (
    Registration,
    canonical_address,
    canonical_code_hash,
)
from engines.operator_filter.store import InMemoryRegistryStore, RegistryStore


def _require_bool(value, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a bool.")
    return value


def _canonical_batch(values, canonicalize, field_name: str) -> tuple[str, ...]:
    if isinstance(values, (str, bytes)):
        raise ValueError(f"{field_name} must be a sequence, not a single value.")
    return tuple(canonicalize(value, field_name=field_name) for value in values)


class OperatorFilterRegistry:
    def __init__(
        self,
        store: RegistryStore | None = None,
        *,
        controller_resolver: ControllerResolver | None = None,
        code_provider: CodeProvider | None = None,
        listeners: ListenerRegistry | None = None,
        config: RegistryConfig | None = None,
        gate: CapabilityGate | None = None,
    ):
        self._store = store if store is not None else InMemoryRegistryStore()
        self._gate = gate if gate is not None else CapabilityGate(controller_resolver)
        self._code = code_provider if code_provider is not None else InMemoryCodeProvider()
        self._listeners = listeners if listeners is not None else ListenerRegistry()
        self._config = config if config is not None else load_registry_config()
        self._logger = logging.getLogger(self._config.logger_name)
        self._calls_in_flight = 0

    @property
    def store(self) -> RegistryStore:
        return self._store

    @property
    def listeners(self) -> ListenerRegistry:
        return self._listeners

    # ══════════════════════════════════════════════════════════
    # INTERNAL: transaction, gate, notifications
    # ══════════════════════════════════════════════════════════

    @contextmanager
    def _mutation(self, operation: str, registrant: str, caller: str) -> Iterator[None]:
        if self._config.guard_reentrant_calls and self._calls_in_flight:
            raise ReentrantCall(operation)

        self._calls_in_flight += 1
        try:
            with self._store.atomic():
                self._gate.authorize(caller, registrant)
                yield
        finally:
            self._calls_in_flight -= 1

    def _emit(self, notification: Notification) -> None:
        self._store.on_commit(lambda: dispatch(notification, self._listeners))

    def _registration(self, address: str) -> Registration:
        return self._store.get_registration(address)

    def _require_registered(self, address: str) -> Registration:
        registration = self._registration(address)
        if not registration.registered:
            raise NotRegistered(address)
        return registration

    def _require_own_lists(self, registrant: str) -> None:
        registration = self._require_registered(registrant)
        if registration.is_subscribed:
            raise CannotUpdateWhileSubscribed(registration.subscription)

    def _require_subscribable(self, target: str) -> None:
        registration = self._registration(target)
        if not registration.registered:
            raise NotRegistered(target)
        if registration.is_subscribed:
            raise CannotSubscribeToRegistrantWithSubscription(target)

    def _set_subscription(self, registrant: str, new_subscription: Optional[str]) -> None:
        """Only writer of Registration.subscription and the subscriber index."""
        old_subscription = self._registration(registrant).subscription

        if old_subscription is not None:
            self._store.set_remove(COLLECTION_SUBSCRIBERS, old_subscription, registrant)
            self._emit(subscription_updated(registrant, old_subscription, False))

        self._store.put_registration(
            registrant,
            Registration(registered=True, subscription=new_subscription),
        )

        if new_subscription is not None:
            self._store.set_add(COLLECTION_SUBSCRIBERS, new_subscription, registrant)
            self._emit(subscription_updated(registrant, new_subscription, True))

    def _copy_entries(self, source: str, destination: str) -> int:
        """Add source's own entries to destination's own lists. Returns count added."""
        added = 0
        for operator in self._store.set_values(COLLECTION_OPERATORS, source):
            if self._store.set_add(COLLECTION_OPERATORS, destination, operator):
                self._emit(operator_updated(destination, operator, True))
                added += 1

        for code_hash in self._store.set_values(COLLECTION_CODE_HASHES, source):
            if self._store.set_add(COLLECTION_CODE_HASHES, destination, code_hash):
                self._emit(code_hash_updated(destination, code_hash, True))
                added += 1
        return added

    def _toggle_operator(self, registrant: str, operator: str, filtered: bool) -> None:
        if filtered:
            if not self._store.set_add(COLLECTION_OPERATORS, registrant, operator):
                raise AddressAlreadyFiltered(operator)
        elif not self._store.set_remove(COLLECTION_OPERATORS, registrant, operator):
            raise AddressNotFiltered(operator)
        self._emit(operator_updated(registrant, operator, filtered))

    def _toggle_code_hash(self, registrant: str, code_hash: str, filtered: bool) -> None:
        if filtered:
            if not self._store.set_add(COLLECTION_CODE_HASHES, registrant, code_hash):
                raise CodeHashAlreadyFiltered(code_hash)
        elif not self._store.set_remove(COLLECTION_CODE_HASHES, registrant, code_hash):
            raise CodeHashNotFiltered(code_hash)
        self._emit(code_hash_updated(registrant, code_hash, filtered))

    # ══════════════════════════════════════════════════════════
    # REGISTRATION
    # ══════════════════════════════════════════════════════════

    def register(self, registrant: str, *, caller: str) -> None:
        registrant = canonical_address(registrant, field_name="registrant")

        with self._mutation("register", registrant, caller):
            if self._registration(registrant).registered:
                raise AlreadyRegistered(registrant)

            self._store.put_registration(registrant, Registration(registered=True))
            self._emit(registration_updated(registrant, True))

        self._logger.info(f"Registered '{registrant}'.")

    def unregister(self, registrant: str, *, caller: str) -> None:
        """
        Drop the registration and any subscription.
        Filter lists are kept; re-registering makes them effective again.
        """
        registrant = canonical_address(registrant, field_name="registrant")

        with self._mutation("unregister", registrant, caller):
            registration = self._require_registered(registrant)

            if registration.is_subscribed:
                self._set_subscription(registrant, None)

            self._store.delete_registration(registrant)
            self._emit(registration_updated(registrant, False))

        self._logger.info(f"Unregistered '{registrant}'.")

    def register_and_subscribe(
        self,
        registrant: str,
        subscription: str,
        *,
        caller: str,
    ) -> None:
        registrant = canonical_address(registrant, field_name="registrant")
        subscription = canonical_address(subscription, field_name="subscription")

        with self._mutation("register_and_subscribe", registrant, caller):
            if self._registration(registrant).registered:
                raise AlreadyRegistered(registrant)
            if registrant == subscription:
                raise CannotSubscribeToSelf(registrant)
            self._require_subscribable(subscription)

            self._store.put_registration(registrant, Registration(registered=True))
            self._emit(registration_updated(registrant, True))
            self._set_subscription(registrant, subscription)

        self._logger.info(f"Registered '{registrant}' subscribed to '{subscription}'.")

    def register_and_copy_entries(
        self,
        registrant: str,
        registrant_to_copy: str,
        *,
        caller: str,
    ) -> None:
        registrant = canonical_address(registrant, field_name="registrant")
        registrant_to_copy = canonical_address(
            registrant_to_copy, field_name="registrant_to_copy"
        )

        with self._mutation("register_and_copy_entries", registrant, caller):
            if self._registration(registrant).registered:
                raise AlreadyRegistered(registrant)
            self._require_registered(registrant_to_copy)

            self._store.put_registration(registrant, Registration(registered=True))
            self._emit(registration_updated(registrant, True))
            added = self._copy_entries(registrant_to_copy, registrant)

        self._logger.info(
            f"Registered '{registrant}' with {added} entries "
            f"copied from '{registrant_to_copy}'."
        )

    # ══════════════════════════════════════════════════════════
    # FILTER LISTS
    # ══════════════════════════════════════════════════════════

    def update_operator(
        self,
        registrant: str,
        operator: str,
        filtered: bool,
        *,
        caller: str,
    ) -> None:
        registrant = canonical_address(registrant, field_name="registrant")
        operator = canonical_address(operator, field_name="operator")
        filtered = _require_bool(filtered, "filtered")

        with self._mutation("update_operator", registrant, caller):
            self._require_own_lists(registrant)
            self._toggle_operator(registrant, operator, filtered)

        self._logger.info(
            f"Operator '{operator}' filtered={filtered} for '{registrant}'."
        )

    def update_operators(
        self,
        registrant: str,
        operators: Iterable[str],
        filtered: bool,
        *,
        caller: str,
    ) -> None:
        """All entries are applied or none: one failing entry aborts the batch."""
        registrant = canonical_address(registrant, field_name="registrant")
        operators = _canonical_batch(operators, canonical_address, "operator")
        filtered = _require_bool(filtered, "filtered")

        with self._mutation("update_operators", registrant, caller):
            self._require_own_lists(registrant)
            for operator in operators:
                self._toggle_operator(registrant, operator, filtered)

        self._logger.info(
            f"{len(operators)} operators filtered={filtered} for '{registrant}'."
        )

    def update_code_hash(
        self,
        registrant: str,
        code_hash: str,
        filtered: bool,
        *,
        caller: str,
    ) -> None:
        registrant = canonical_address(registrant, field_name="registrant")
        code_hash = canonical_code_hash(code_hash)
        filtered = _require_bool(filtered, "filtered")

        with self._mutation("update_code_hash", registrant, caller):
            if code_hash == ZERO_CODE_HASH:
                raise CannotFilterZeroCodeHash()
            self._require_own_lists(registrant)
            self._toggle_code_hash(registrant, code_hash, filtered)

        self._logger.info(
            f"Code hash '{code_hash}' filtered={filtered} for '{registrant}'."
        )

    def update_code_hashes(
        self,
        registrant: str,
        code_hashes: Iterable[str],
        filtered: bool,
        *,
        caller: str,
    ) -> None:
        """All entries are applied or none: one failing entry aborts the batch."""
        registrant = canonical_address(registrant, field_name="registrant")
        code_hashes = _canonical_batch(code_hashes, canonical_code_hash, "code_hash")
        filtered = _require_bool(filtered, "filtered")

        with self._mutation("update_code_hashes", registrant, caller):
            if ZERO_CODE_HASH in code_hashes:
                raise CannotFilterZeroCodeHash()
            self._require_own_lists(registrant)
            for code_hash in code_hashes:
                self._toggle_code_hash(registrant, code_hash, filtered)

        self._logger.info(
            f"{len(code_hashes)} code hashes filtered={filtered} for '{registrant}'."
        )

    # ══════════════════════════════════════════════════════════
    # SUBSCRIPTIONS
    # ══════════════════════════════════════════════════════════

    def subscribe(self, registrant: str, new_subscription: str, *, caller: str) -> None:
        """Replace (never stack) the registrant's subscription."""
        registrant = canonical_address(registrant, field_name="registrant")
        new_subscription = canonical_address(
            new_subscription, field_name="new_subscription"
        )

        with self._mutation("subscribe", registrant, caller):
            if registrant == new_subscription:
                raise CannotSubscribeToSelf(registrant)
            if new_subscription == ZERO_ADDRESS:
                raise CannotSubscribeToZeroTarget()

            registration = self._require_registered(registrant)
            if registration.subscription == new_subscription:
                raise AlreadySubscribed(new_subscription)
            self._require_subscribable(new_subscription)

            self._set_subscription(registrant, new_subscription)

        self._logger.info(f"'{registrant}' subscribed to '{new_subscription}'.")

    def unsubscribe(
        self,
        registrant: str,
        copy_existing_entries: bool,
        *,
        caller: str,
    ) -> str:
        """
        Detach from the current subscription and return the former target.
        copy_existing_entries keeps the former target's entries as the
        registrant's own so policy does not silently disappear.
        """
        registrant = canonical_address(registrant, field_name="registrant")
        copy_existing_entries = _require_bool(
            copy_existing_entries, "copy_existing_entries"
        )

        with self._mutation("unsubscribe", registrant, caller):
            registration = self._require_registered(registrant)
            if not registration.is_subscribed:
                raise NotSubscribed(registrant)

            former = registration.subscription
            self._set_subscription(registrant, None)
            if copy_existing_entries:
                self._copy_entries(former, registrant)

        self._logger.info(
            f"'{registrant}' unsubscribed from '{former}' "
            f"(copied entries: {copy_existing_entries})."
        )
        return former

    def copy_entries_of(
        self,
        registrant: str,
        registrant_to_copy: str,
        *,
        caller: str,
    ) -> None:
        registrant = canonical_address(registrant, field_name="registrant")
        registrant_to_copy = canonical_address(
            registrant_to_copy, field_name="registrant_to_copy"
        )

        with self._mutation("copy_entries_of", registrant, caller):
            if registrant == registrant_to_copy:
                raise CannotCopyFromSelf(registrant)
            self._require_own_lists(registrant)
            self._require_registered(registrant_to_copy)
            added = self._copy_entries(registrant_to_copy, registrant)

        self._logger.info(
            f"Copied {added} entries from '{registrant_to_copy}' to '{registrant}'."
        )

    # ══════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════

    def _effective_owner(self, registrant: str) -> Optional[str]:
        registration = self._registration(registrant)
        if not registration.registered:
            return None
        return registration.subscription or registrant

    def _effective_values(self, collection: str, registrant: str) -> tuple[str, ...]:
        owner = self._effective_owner(canonical_address(registrant, field_name="registrant"))
        if owner is None:
            return tuple()
        return self._store.set_values(collection, owner)

    def _effective_at(self, collection: str, registrant: str, index: int) -> str:
        owner = self._effective_owner(canonical_address(registrant, field_name="registrant"))
        if owner is None:
            raise IndexOutOfRange(index, 0)
        return self._store.set_at(collection, owner, index)

    def _effective_contains(self, collection: str, registrant: str, value: str) -> bool:
        owner = self._effective_owner(canonical_address(registrant, field_name="registrant"))
        if owner is None:
            return False
        return self._store.set_contains(collection, owner, value)

    def is_operator_allowed(self, registrant: str, operator: str) -> bool:
        """
        Return True or raise PolicyDenied (AddressFiltered / CodeHashFiltered).

        Treat any raised error as deny. The code-hash path only applies
        to operators that currently carry code.
        """
        registrant = canonical_address(registrant, field_name="registrant")
        operator = canonical_address(operator, field_name="operator")

        owner = self._effective_owner(registrant)
        if owner is None:
            return True

        if self._store.set_contains(COLLECTION_OPERATORS, owner, operator):
            self._logger.debug(f"Denied '{operator}' for '{registrant}' by address.")
            raise AddressFiltered(operator)

        code = self._code.get_code(operator)
        if code:
            code_hash = compute_code_hash(code)
            if self._store.set_contains(COLLECTION_CODE_HASHES, owner, code_hash):
                self._logger.debug(
                    f"Denied '{operator}' for '{registrant}' by code hash."
                )
                raise CodeHashFiltered(operator, code_hash)

        return True

    def is_registered(self, addr: str) -> bool:
        return self._registration(canonical_address(addr)).registered

    def subscription_of(self, registrant: str) -> Optional[str]:
        """Subscription target, or None. Raises NotRegistered for unknown addresses."""
        registrant = canonical_address(registrant, field_name="registrant")
        return self._require_registered(registrant).subscription

    def subscribers(self, registrant: str) -> tuple[str, ...]:
        registrant = canonical_address(registrant, field_name="registrant")
        return self._store.set_values(COLLECTION_SUBSCRIBERS, registrant)

    def subscriber_at(self, registrant: str, index: int) -> str:
        registrant = canonical_address(registrant, field_name="registrant")
        return self._store.set_at(COLLECTION_SUBSCRIBERS, registrant, index)

    def is_operator_filtered(self, registrant: str, operator: str) -> bool:
        operator = canonical_address(operator, field_name="operator")
        return self._effective_contains(COLLECTION_OPERATORS, registrant, operator)

    def is_code_hash_filtered(self, registrant: str, code_hash: str) -> bool:
        code_hash = canonical_code_hash(code_hash)
        return self._effective_contains(COLLECTION_CODE_HASHES, registrant, code_hash)

    def is_code_hash_of_filtered(self, registrant: str, operator_with_code: str) -> bool:
        code_hash = self.code_hash_of(operator_with_code)
        return self._effective_contains(COLLECTION_CODE_HASHES, registrant, code_hash)

    def filtered_operators(self, registrant: str) -> tuple[str, ...]:
        return self._effective_values(COLLECTION_OPERATORS, registrant)

    def filtered_code_hashes(self, registrant: str) -> tuple[str, ...]:
        return self._effective_values(COLLECTION_CODE_HASHES, registrant)

    def filtered_operator_at(self, registrant: str, index: int) -> str:
        return self._effective_at(COLLECTION_OPERATORS, registrant, index)

    def filtered_code_hash_at(self, registrant: str, index: int) -> str:
        return self._effective_at(COLLECTION_CODE_HASHES, registrant, index)

    def code_hash_of(self, addr: str) -> str:
        return compute_code_hash(self._code.get_code(canonical_address(addr)))
