"""
OFR Operator Filter — Enumerable Set
======================================
Set with positional access. add/remove report whether membership
changed, so the same structure serves both as storage and as the
duplicate check for strict toggles.

Ordering:
- add() appends at the end
- remove() moves the current last element into the freed slot

Both the policy sets and the subscriber index use this type.
"""

from __future__ import annotations

from typing import Hashable, Iterator

from engines.operator_filter.errors import IndexOutOfRange


class EnumerableSet:
    def __init__(self, values=()):
        self._values: list = []
        self._positions: dict[Hashable, int] = {}
        for value in values:
            self.add(value)

    def add(self, value) -> bool:
        if value in self._positions:
            return False
        self._positions[value] = len(self._values)
        self._values.append(value)
        return True

    def remove(self, value) -> bool:
        position = self._positions.pop(value, None)
        if position is None:
            return False

        last = self._values.pop()
        if position < len(self._values):
            self._values[position] = last
            self._positions[last] = position
        return True

    def contains(self, value) -> bool:
        return value in self._positions

    def at(self, index: int):
        if not isinstance(index, int) or index < 0 or index >= len(self._values):
            raise IndexOutOfRange(index, len(self._values))
        return self._values[index]

    def values(self) -> tuple:
        return tuple(self._values)

    def copy(self) -> "EnumerableSet":
        clone = EnumerableSet()
        clone._values = list(self._values)
        clone._positions = dict(self._positions)
        return clone

    def __contains__(self, value) -> bool:
        return self.contains(value)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator:
        return iter(tuple(self._values))

    def __repr__(self) -> str:
        return f"EnumerableSet({self._values!r})"
