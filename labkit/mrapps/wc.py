"""Word count as a MapReduce application."""

from __future__ import annotations

import itertools
from typing import Iterator

from labkit.mr.worker import KeyValue


def _words(text: str) -> Iterator[str]:
    for is_letter, chars in itertools.groupby(text, key=str.isalpha):
        if is_letter:
            yield "".join(chars)


def map_function(filename: str, contents: str) -> list[KeyValue]:
    """Emit ``(word, "1")`` for every run of letters in ``contents``."""
    return [KeyValue(word, "1") for word in _words(contents)]


def reduce_function(key: str, values: list[str]) -> str:
    """Return the number of occurrences of the word."""
    return str(len(values))