"""A fixed-capacity bit set stored in 64-bit words."""

from __future__ import annotations

from typing import Iterator

_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1


class Bitset:
    """A set of non-negative positions below a capacity fixed at creation.

    The capacity is the requested size rounded up to whole 64-bit words.
    Two bit sets are equal when they have the same number of words and the
    same positions set.
    """

    __slots__ = ("_nwords", "_bits")

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"bitset size must be non-negative, got {size}")
        self._nwords = -(-size // _WORD_BITS)
        self._bits = 0

    @property
    def capacity(self) -> int:
        return self._nwords * _WORD_BITS

    def _mask(self, pos: int) -> int:
        if not 0 <= pos < self.capacity:
            raise IndexError(f"bit {pos} is outside a bitset of capacity {self.capacity}")
        return 1 << pos

    def clone(self) -> Bitset:
        """Return an independent copy."""
        copy = Bitset.__new__(Bitset)
        copy._nwords = self._nwords
        copy._bits = self._bits
        return copy

    def set(self, pos: int) -> Bitset:
        """Set ``pos`` and return this bit set."""
        self._bits |= self._mask(pos)
        return self

    def clear(self, pos: int) -> Bitset:
        """Clear ``pos`` and return this bit set."""
        self._bits &= ~self._mask(pos)
        return self

    def get(self, pos: int) -> bool:
        return bool(self._bits & self._mask(pos))

    def popcount(self) -> int:
        """Return the number of positions set."""
        return self._bits.bit_count()

    def __iter__(self) -> Iterator[int]:
        bits = self._bits
        while bits:
            low = bits & -bits
            yield low.bit_length() - 1
            bits ^= low

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitset):
            return NotImplemented
        return self._nwords == other._nwords and self._bits == other._bits

    def __hash__(self) -> int:
        value = self.popcount()
        bits = self._bits
        while bits:
            value ^= bits & _WORD_MASK
            bits >>= _WORD_BITS
        return hash(value)

    def __repr__(self) -> str:
        return f"Bitset(capacity={self.capacity}, set={list(self)})"