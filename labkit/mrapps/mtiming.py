"""A MapReduce application that reports whether map tasks run in parallel."""

from __future__ import annotations

import os
import re
import time
from pathlib import Path

from labkit.mr.worker import KeyValue


def _alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def nparallel(phase: str) -> int:
    """Return how many live workers are in ``phase`` right now, this one included.

    Each worker announces itself with a marker file named after its process
    id, holds it for a second, then removes it.
    """
    marker = Path(f"mr-worker-{phase}-{os.getpid()}")
    marker.write_text("x")

    pattern = re.compile(rf"mr-worker-{re.escape(phase)}-([+-]?\d+)")
    with os.scandir(".") as entries:
        names = [entry.name for entry in entries]
    running = 0
    for name in names:
        match = pattern.match(name)
        if match and _alive(int(match.group(1))):
            running += 1

    time.sleep(1)
    marker.unlink()
    return running


def map_function(filename: str, contents: str) -> list[KeyValue]:
    """Emit this worker's start time and how many map workers ran alongside it."""
    started = time.time()
    pid = os.getpid()
    running = nparallel("map")
    return [
        KeyValue(f"times-{pid}", f"{started:.1f}"),
        KeyValue(f"parallel-{pid}", str(running)),
    ]


def reduce_function(key: str, values: list[str]) -> str:
    """Return the values sorted and joined by spaces, so the output is deterministic."""
    return " ".join(sorted(values))