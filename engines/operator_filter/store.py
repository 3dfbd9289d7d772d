"""
OFR Operator Filter — Store Protocol and In-Memory Store
==========================================================
The registry never touches storage directly. It talks to a
RegistryStore, which owns:

- the registration table (address → Registration)
- named enumerable sets keyed by owner address
  (operators, code_hashes, subscribers)
- transactional boundaries: atomic() is all-or-nothing and nests
- post-commit hooks: on_commit() callbacks run only after the
  outermost atomic() block commits

InMemoryRegistryStore keeps an undo log per atomic() level. A failing
block replays its log and drops the callbacks it queued.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Protocol

from engines.operator_filter.constants import VALID_COLLECTIONS
from engines.operator_filter.models import UNREGISTERED, Registration
from engines.operator_filter.sets import EnumerableSet

logger = logging.getLogger("ofr.store")


class RegistryStore(Protocol):
    def get_registration(self, address: str) -> Registration:
        ...

    def put_registration(self, address: str, registration: Registration) -> None:
        ...

    def delete_registration(self, address: str) -> None:
        ...

    def registrations(self) -> tuple[tuple[str, Registration], ...]:
        ...

    def set_add(self, collection: str, owner: str, value: str) -> bool:
        ...

    def set_remove(self, collection: str, owner: str, value: str) -> bool:
        ...

    def set_contains(self, collection: str, owner: str, value: str) -> bool:
        ...

    def set_length(self, collection: str, owner: str) -> int:
        ...

    def set_at(self, collection: str, owner: str, index: int) -> str:
        ...

    def set_values(self, collection: str, owner: str) -> tuple[str, ...]:
        ...

    def atomic(self):
        ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        ...


def validate_collection(collection: str) -> None:
    if collection not in VALID_COLLECTIONS:
        raise ValueError(
            f"collection '{collection}' not valid. "
            f"Must be one of: {sorted(VALID_COLLECTIONS)}"
        )


_ABSENT = object()


class InMemoryRegistryStore:
    """
    Deterministic in-memory store used for bootstrap/tests.

    Each open atomic() level keeps an undo log holding the prior value of
    every registration and set it touched, recorded on first write. A
    rollback replays that log; a commit hands unseen entries to the
    enclosing level. Entering a transaction costs nothing; the first
    write to a set copies that one set.
    """

    def __init__(self):
        self._registrations: dict[str, Registration] = {}
        self._sets: dict[tuple[str, str], EnumerableSet] = {}
        self._undo_logs: list[dict[tuple, object]] = []
        self._pending_callbacks: list[Callable[[], None]] = []

    # ── Undo log ──────────────────────────────────────────────

    def _remember(self, key: tuple, current) -> None:
        if not self._undo_logs:
            return
        undo = self._undo_logs[-1]
        if key in undo:
            return
        if isinstance(current, EnumerableSet):
            current = current.copy()
        undo[key] = current

    def _remember_registration(self, address: str) -> None:
        self._remember(
            ("registration", address),
            self._registrations.get(address, _ABSENT),
        )

    def _remember_set(self, collection: str, owner: str) -> None:
        self._remember(
            ("set", collection, owner),
            self._sets.get((collection, owner), _ABSENT),
        )

    def _replay(self, undo: dict[tuple, object]) -> None:
        for key, previous in undo.items():
            if key[0] == "registration":
                target, slot = self._registrations, key[1]
            else:
                target, slot = self._sets, key[1:]
            if previous is _ABSENT:
                target.pop(slot, None)
            else:
                target[slot] = previous

    # ── Registrations ─────────────────────────────────────────

    def get_registration(self, address: str) -> Registration:
        return self._registrations.get(address, UNREGISTERED)

    def put_registration(self, address: str, registration: Registration) -> None:
        if not registration.registered:
            self.delete_registration(address)
            return
        self._remember_registration(address)
        self._registrations[address] = registration

    def delete_registration(self, address: str) -> None:
        self._remember_registration(address)
        self._registrations.pop(address, None)

    def registrations(self) -> tuple[tuple[str, Registration], ...]:
        return tuple(sorted(self._registrations.items()))

    # ── Sets ──────────────────────────────────────────────────

    def _existing(self, collection: str, owner: str) -> EnumerableSet | None:
        validate_collection(collection)
        return self._sets.get((collection, owner))

    def set_add(self, collection: str, owner: str, value: str) -> bool:
        members = self._existing(collection, owner)
        if members is not None and members.contains(value):
            return False
        self._remember_set(collection, owner)
        members = self._sets.setdefault((collection, owner), EnumerableSet())
        return members.add(value)

    def set_remove(self, collection: str, owner: str, value: str) -> bool:
        members = self._existing(collection, owner)
        if members is None or not members.contains(value):
            return False
        self._remember_set(collection, owner)
        return members.remove(value)

    def set_contains(self, collection: str, owner: str, value: str) -> bool:
        members = self._existing(collection, owner)
        return members is not None and members.contains(value)

    def set_length(self, collection: str, owner: str) -> int:
        members = self._existing(collection, owner)
        return 0 if members is None else len(members)

    def set_at(self, collection: str, owner: str, index: int) -> str:
        members = self._existing(collection, owner)
        if members is None:
            members = EnumerableSet()
        return members.at(index)

    def set_values(self, collection: str, owner: str) -> tuple[str, ...]:
        members = self._existing(collection, owner)
        return tuple() if members is None else members.values()

    # ── Transactions ──────────────────────────────────────────

    @contextmanager
    def atomic(self) -> Iterator[None]:
        undo: dict[tuple, object] = {}
        callback_mark = len(self._pending_callbacks)
        self._undo_logs.append(undo)
        try:
            yield
        except BaseException:
            self._undo_logs.pop()
            self._replay(undo)
            del self._pending_callbacks[callback_mark:]
            logger.debug(
                f"Rolled back store transaction (depth {len(self._undo_logs) + 1})."
            )
            raise

        self._undo_logs.pop()
        if self._undo_logs:
            parent = self._undo_logs[-1]
            for key, previous in undo.items():
                parent.setdefault(key, previous)
            return

        callbacks = self._pending_callbacks
        self._pending_callbacks = []
        for callback in callbacks:
            callback()

    def on_commit(self, callback: Callable[[], None]) -> None:
        if not self._undo_logs:
            callback()
            return
        self._pending_callbacks.append(callback)

    @property
    def in_transaction(self) -> bool:
        return bool(self._undo_logs)
