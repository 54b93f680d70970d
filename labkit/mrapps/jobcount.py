"""A MapReduce application that counts how many map tasks were run.

Each map invocation leaves a marker file in the working directory; the
reduce counts them, so a job that assigns tasks more than once shows it.
"""

from __future__ import annotations

import itertools
import os
import random
import time
from pathlib import Path

from labkit.mr.worker import KeyValue

_PREFIX = "mr-worker-jobcount"
_invocations = itertools.count()


def map_function(filename: str, contents: str) -> list[KeyValue]:
    """Leave a marker file, pause two to five seconds, and emit one pair."""
    marker = Path(f"{_PREFIX}-{os.getpid()}-{next(_invocations)}")
    marker.write_text("x")
    time.sleep((2000 + random.randrange(3000)) / 1000)
    return [KeyValue("a", "x")]


def reduce_function(key: str, values: list[str]) -> str:
    """Return how many marker files are in the working directory."""
    with os.scandir(".") as entries:
        return str(sum(1 for entry in entries if entry.name.startswith(_PREFIX)))