"""A two-way map between keys on the left and keys on the right."""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import Generic, TypeVar

L = TypeVar("L", bound=Hashable)
R = TypeVar("R", bound=Hashable)


class BiMap(Generic[L, R]):
    """Pairs of keys that can be looked up from either side.

    Inserting a key that is already present leaves the stored pair in place,
    but every insertion is counted in the map's length.
    """

    def __init__(self) -> None:
        self._left: dict[L, R] = {}
        self._right: dict[R, L] = {}
        self._size = 0

    def insert(self, left: L, right: R) -> None:
        """Add the pair ``(left, right)``."""
        self._left.setdefault(left, right)
        self._right.setdefault(right, left)
        self._size += 1

    def at_left(self, key: L) -> R:
        """Return the right key paired with the left key ``key``."""
        return self._left[key]

    def at_right(self, key: R) -> L:
        """Return the left key paired with the right key ``key``."""
        return self._right[key]

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[tuple[L, R]]:
        return iter(self._left.items())