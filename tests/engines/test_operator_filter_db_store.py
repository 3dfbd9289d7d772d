from __future__ import annotations

import pytest

from core.filter_store.models import RegistrationRecord, SetMember
from engines.operator_filter import (
    AddressAlreadyFiltered,
    AddressFiltered,
    DbRegistryStore,
    IndexOutOfRange,
    OperatorFilterRegistry,
    Registration,
    TargetNotControllable,
)
from engines.operator_filter.constants import (
    COLLECTION_OPERATORS,
    COLLECTION_SUBSCRIBERS,
)

pytestmark = pytest.mark.django_db(transaction=True)


def _address(tag: str) -> str:
    return "0x" + tag.rjust(40, "0")


ALICE = _address("a11ce")
BOB = _address("b0b")
MALLORY = _address("3a11")
OP1 = _address("0b1")
OP2 = _address("0b2")
OP3 = _address("0b3")


def _registry() -> tuple[OperatorFilterRegistry, list[str]]:
    registry = OperatorFilterRegistry(DbRegistryStore())
    heard: list[str] = []
    registry.listeners.register_listener(
        "*", lambda notification: heard.append(notification.event_type), "heard"
    )
    return registry, heard


def test_db_store_registration_roundtrip() -> None:
    store = DbRegistryStore()
    store.put_registration(BOB, Registration(registered=True))
    store.put_registration(ALICE, Registration(registered=True, subscription=BOB))

    assert store.get_registration(ALICE) == Registration(registered=True, subscription=BOB)
    assert store.get_registration(BOB).subscription is None
    assert store.get_registration(OP1).registered is False
    assert [address for address, _ in store.registrations()] == sorted([ALICE, BOB])

    store.put_registration(ALICE, Registration(registered=False))
    assert RegistrationRecord.objects.filter(address=ALICE).exists() is False


def test_db_store_set_remove_swaps_last_into_gap() -> None:
    store = DbRegistryStore()
    for operator in (OP1, OP2, OP3):
        assert store.set_add(COLLECTION_OPERATORS, ALICE, operator) is True
    assert store.set_add(COLLECTION_OPERATORS, ALICE, OP1) is False

    assert store.set_remove(COLLECTION_OPERATORS, ALICE, OP1) is True
    assert store.set_remove(COLLECTION_OPERATORS, ALICE, OP1) is False

    assert store.set_values(COLLECTION_OPERATORS, ALICE) == (OP3, OP2)
    assert store.set_at(COLLECTION_OPERATORS, ALICE, 0) == OP3
    assert store.set_length(COLLECTION_OPERATORS, ALICE) == 2
    positions = list(
        SetMember.objects.filter(collection=COLLECTION_OPERATORS, owner=ALICE)
        .order_by("position")
        .values_list("position", flat=True)
    )
    assert positions == [0, 1]

    with pytest.raises(IndexOutOfRange):
        store.set_at(COLLECTION_OPERATORS, ALICE, 2)


def test_registry_over_db_store_end_to_end() -> None:
    registry, heard = _registry()

    registry.register(BOB, caller=BOB)
    registry.update_operator(BOB, OP1, True, caller=BOB)
    registry.register_and_subscribe(ALICE, BOB, caller=ALICE)

    with pytest.raises(AddressFiltered):
        registry.is_operator_allowed(ALICE, OP1)
    assert registry.is_operator_allowed(ALICE, OP2) is True
    assert registry.subscribers(BOB) == (ALICE,)
    assert SetMember.objects.filter(
        collection=COLLECTION_SUBSCRIBERS, owner=BOB, value=ALICE
    ).exists()

    registry.unregister(ALICE, caller=ALICE)

    assert registry.is_operator_allowed(ALICE, OP1) is True
    assert registry.subscribers(BOB) == ()
    assert heard == [
        "operator_filter.registration.updated",
        "operator_filter.operator.updated",
        "operator_filter.registration.updated",
        "operator_filter.subscription.updated",
        "operator_filter.subscription.updated",
        "operator_filter.registration.updated",
    ]


def test_failed_batch_rolls_back_rows_and_notifications() -> None:
    registry, heard = _registry()
    registry.register(ALICE, caller=ALICE)
    registry.update_operator(ALICE, OP2, True, caller=ALICE)
    heard.clear()

    with pytest.raises(AddressAlreadyFiltered):
        registry.update_operators(ALICE, [OP1, OP2], True, caller=ALICE)

    assert registry.filtered_operators(ALICE) == (OP2,)
    assert heard == []


def test_rejected_caller_leaves_no_rows() -> None:
    registry, heard = _registry()

    with pytest.raises(TargetNotControllable):
        registry.register(ALICE, caller=MALLORY)

    assert RegistrationRecord.objects.count() == 0
    assert heard == []
