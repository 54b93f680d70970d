"""A MapReduce application that sometimes crashes and sometimes stalls.

It exists to exercise a MapReduce implementation's recovery from failed
and slow workers.
"""

from __future__ import annotations

import secrets
import sys
import time

from labkit.mr.worker import KeyValue

_CRASH_BELOW = 330
_DELAY_BELOW = 660
_MAX_DELAY_MS = 10 * 1000


def maybe_crash() -> None:
    """Exit with status 1 a third of the time; sleep up to ten seconds another third."""
    draw = secrets.randbelow(1000)
    if draw < _CRASH_BELOW:
        sys.exit(1)
    if draw < _DELAY_BELOW:
        time.sleep(secrets.randbelow(_MAX_DELAY_MS) / 1000)


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def map_function(filename: str, contents: str) -> list[KeyValue]:
    """Emit the file name, its length, the contents' length and a constant."""
    maybe_crash()
    return [
        KeyValue("a", filename),
        KeyValue("b", str(_byte_length(filename))),
        KeyValue("c", str(_byte_length(contents))),
        KeyValue("d", "xyzzy"),
    ]


def reduce_function(key: str, values: list[str]) -> str:
    """Return the values sorted and joined by spaces, so the output is deterministic."""
    maybe_crash()
    return " ".join(sorted(values))