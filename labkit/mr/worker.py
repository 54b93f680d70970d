"""Shared pieces of MapReduce workers."""

from __future__ import annotations

from dataclasses import dataclass

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF


@dataclass(frozen=True)
class KeyValue:
    """One pair emitted by a map function."""

    key: str
    value: str


def ihash(key: str) -> int:
    """Return a non-negative 31-bit FNV-1a hash; ``ihash(key) % n_reduce`` picks a reduce task."""
    value = _FNV_OFFSET
    for byte in key.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK32
    return value & 0x7FFFFFFF