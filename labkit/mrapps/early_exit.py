"""A MapReduce application whose slow reduce tasks catch workers that exit early."""

from __future__ import annotations

import time

from labkit.mr.worker import KeyValue

_SLOW_MARKERS = ("sherlock", "tom")
_SLOW_SECONDS = 3


def map_function(filename: str, contents: str) -> list[KeyValue]:
    """Emit one ``(filename, "1")`` pair per input file."""
    return [KeyValue(filename, "1")]


def reduce_function(key: str, values: list[str]) -> str:
    """Return how many times the file was seen; some keys take three seconds."""
    if any(marker in key for marker in _SLOW_MARKERS):
        time.sleep(_SLOW_SECONDS)
    return str(len(values))