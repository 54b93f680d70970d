"""The crash application's map and reduce, without the crashes or the delays."""

from __future__ import annotations

import secrets

from labkit.mr.worker import KeyValue


def maybe_crash() -> None:
    """Draw a random number, as the crashing variant does, and carry on."""
    secrets.randbelow(1000)


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