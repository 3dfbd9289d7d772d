"""
Tests — Operator Filter Registry: Queries and Policy Verdicts
===============================================================
"""

from __future__ import annotations

import pytest

from engines.operator_filter import (
    AddressFiltered,
    CodeHashFiltered,
    InMemoryCodeProvider,
    IndexOutOfRange,
    NotRegistered,
    OperatorFilterRegistry,
    PolicyDenied,
    ZERO_CODE_HASH,
    compute_code_hash,
)


def _address(tag: str) -> str:
    return "0x" + tag.rjust(40, "0")


ALICE = _address("a11ce")
BOB = _address("b0b")
OP1 = _address("0b1")
OP2 = _address("0b2")
OP3 = _address("0b3")
MARKET = _address("3a2c")
MARKET_CLONE = _address("3a2d")
WALLET = _address("3a11e7")

MARKET_CODE = bytes.fromhex("6080604052348015600f57600080fd5b50")
OTHER_CODE = bytes.fromhex("608060405260043610603f57")
MARKET_HASH = compute_code_hash(MARKET_CODE)


def _registry() -> OperatorFilterRegistry:
    code = InMemoryCodeProvider({
        MARKET: MARKET_CODE,
        MARKET_CLONE: MARKET_CODE,
        OP3: OTHER_CODE,
    })
    return OperatorFilterRegistry(code_provider=code)


# ══════════════════════════════════════════════════════════════
# is_operator_allowed
# ══════════════════════════════════════════════════════════════

class TestIsOperatorAllowed:
    def test_unregistered_registrant_is_unrestricted(self):
        registry = _registry()
        assert registry.is_operator_allowed(ALICE, OP1) is True
        assert registry.is_operator_allowed(ALICE, MARKET) is True

    def test_unregistered_registrant_ignores_leftover_lists(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operator(ALICE, OP1, True, caller=ALICE)
        registry.unregister(ALICE, caller=ALICE)

        assert registry.is_operator_allowed(ALICE, OP1) is True
        assert registry.filtered_operators(ALICE) == ()
        assert registry.is_operator_filtered(ALICE, OP1) is False

        registry.register(ALICE, caller=ALICE)
        with pytest.raises(AddressFiltered):
            registry.is_operator_allowed(ALICE, OP1)

    def test_filtered_address_denied(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operator(ALICE, OP1, True, caller=ALICE)

        with pytest.raises(AddressFiltered) as excinfo:
            registry.is_operator_allowed(ALICE, OP1)
        assert excinfo.value.operator == OP1
        assert registry.is_operator_allowed(ALICE, OP2) is True

    def test_code_hash_denies_every_deployment(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        for operator in (MARKET, MARKET_CLONE):
            with pytest.raises(CodeHashFiltered) as excinfo:
                registry.is_operator_allowed(ALICE, operator)
            assert excinfo.value.operator == operator
            assert excinfo.value.code_hash == MARKET_HASH

        assert registry.is_operator_allowed(ALICE, OP3) is True

    def test_codeless_operator_skips_code_hash_path(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        assert registry.code_hash_of(WALLET) == ZERO_CODE_HASH
        assert registry.is_operator_allowed(ALICE, WALLET) is True

    def test_address_path_checked_first(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operator(ALICE, MARKET, True, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        with pytest.raises(AddressFiltered):
            registry.is_operator_allowed(ALICE, MARKET)
        with pytest.raises(CodeHashFiltered):
            registry.is_operator_allowed(ALICE, MARKET_CLONE)

    def test_denials_share_one_base(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operator(ALICE, OP1, True, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        with pytest.raises(PolicyDenied):
            registry.is_operator_allowed(ALICE, OP1)
        with pytest.raises(PolicyDenied):
            registry.is_operator_allowed(ALICE, MARKET)

    def test_code_change_is_observed_at_query_time(self):
        code = InMemoryCodeProvider()
        registry = OperatorFilterRegistry(code_provider=code)
        registry.register(ALICE, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        assert registry.is_operator_allowed(ALICE, OP1) is True
        code.set_code(OP1, MARKET_CODE)
        with pytest.raises(CodeHashFiltered):
            registry.is_operator_allowed(ALICE, OP1)


# ══════════════════════════════════════════════════════════════
# LIST READS
# ══════════════════════════════════════════════════════════════

class TestListReads:
    def test_indexed_reads_match_values(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operators(ALICE, [OP1, OP2, OP3], True, caller=ALICE)

        values = registry.filtered_operators(ALICE)
        assert values == (OP1, OP2, OP3)
        assert [registry.filtered_operator_at(ALICE, i) for i in range(3)] == list(values)

    def test_removal_moves_last_into_gap(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_operators(ALICE, [OP1, OP2, OP3], True, caller=ALICE)

        registry.update_operator(ALICE, OP1, False, caller=ALICE)

        assert registry.filtered_operators(ALICE) == (OP3, OP2)
        assert registry.filtered_operator_at(ALICE, 0) == OP3

    def test_index_out_of_range(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        assert registry.filtered_code_hash_at(ALICE, 0) == MARKET_HASH
        with pytest.raises(IndexOutOfRange) as excinfo:
            registry.filtered_code_hash_at(ALICE, 1)
        assert excinfo.value.index == 1
        assert excinfo.value.length == 1
        with pytest.raises(IndexError):
            registry.filtered_operator_at(ALICE, 0)

    def test_unregistered_reads_are_empty(self):
        registry = _registry()
        assert registry.filtered_operators(BOB) == ()
        assert registry.filtered_code_hashes(BOB) == ()
        assert registry.is_code_hash_filtered(BOB, MARKET_HASH) is False
        with pytest.raises(IndexOutOfRange) as excinfo:
            registry.filtered_operator_at(BOB, 0)
        assert excinfo.value.length == 0

    def test_subscriber_reads_target_lists(self):
        registry = _registry()
        registry.register(BOB, caller=BOB)
        registry.update_operator(BOB, OP2, True, caller=BOB)
        registry.update_code_hash(BOB, MARKET_HASH, True, caller=BOB)
        registry.register_and_subscribe(ALICE, BOB, caller=ALICE)

        assert registry.filtered_operators(ALICE) == (OP2,)
        assert registry.filtered_operator_at(ALICE, 0) == OP2
        assert registry.filtered_code_hashes(ALICE) == (MARKET_HASH,)
        assert registry.is_operator_filtered(ALICE, OP2) is True
        assert registry.is_code_hash_filtered(ALICE, MARKET_HASH) is True
        assert registry.is_code_hash_of_filtered(ALICE, MARKET_CLONE) is True


# ══════════════════════════════════════════════════════════════
# REGISTRATION READS
# ══════════════════════════════════════════════════════════════

class TestRegistrationReads:
    def test_is_registered(self):
        registry = _registry()
        assert registry.is_registered(ALICE) is False
        registry.register(ALICE, caller=ALICE)
        assert registry.is_registered(ALICE) is True
        assert registry.is_registered(ALICE.upper().replace("0X", "0x")) is True

    def test_subscription_of_unregistered_raises(self):
        registry = _registry()
        with pytest.raises(NotRegistered) as excinfo:
            registry.subscription_of(ALICE)
        assert excinfo.value.registrant == ALICE

    def test_subscription_of_unsubscribed_is_none(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        assert registry.subscription_of(ALICE) is None

    def test_subscribers_and_subscriber_at(self):
        registry = _registry()
        registry.register(BOB, caller=BOB)
        registry.register_and_subscribe(ALICE, BOB, caller=ALICE)
        registry.register_and_subscribe(OP1, BOB, caller=OP1)

        assert registry.subscribers(BOB) == (ALICE, OP1)
        assert registry.subscriber_at(BOB, 1) == OP1
        with pytest.raises(IndexOutOfRange):
            registry.subscriber_at(BOB, 2)
        assert registry.subscribers(ALICE) == ()


# ══════════════════════════════════════════════════════════════
# CODE FINGERPRINTS
# ══════════════════════════════════════════════════════════════

class TestCodeHashes:
    def test_codeless_address_fingerprints_to_zero(self):
        registry = _registry()
        assert registry.code_hash_of(WALLET) == ZERO_CODE_HASH

    def test_same_code_same_fingerprint(self):
        registry = _registry()
        assert registry.code_hash_of(MARKET) == registry.code_hash_of(MARKET_CLONE)
        assert registry.code_hash_of(MARKET) == MARKET_HASH
        assert registry.code_hash_of(OP3) != MARKET_HASH

    def test_fingerprint_format(self):
        assert MARKET_HASH.startswith("0x")
        assert len(MARKET_HASH) == 66
        assert compute_code_hash(b"") == ZERO_CODE_HASH

    def test_compute_rejects_non_bytes(self):
        with pytest.raises(ValueError):
            compute_code_hash("6080")

    def test_is_code_hash_of_filtered(self):
        registry = _registry()
        registry.register(ALICE, caller=ALICE)
        registry.update_code_hash(ALICE, MARKET_HASH, True, caller=ALICE)

        assert registry.is_code_hash_of_filtered(ALICE, MARKET) is True
        assert registry.is_code_hash_of_filtered(ALICE, OP3) is False
        assert registry.is_code_hash_of_filtered(ALICE, WALLET) is False
