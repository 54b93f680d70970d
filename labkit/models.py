"""A linearizability model of a key/value store with get, put and append."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from labkit.porcupine.model import Model, Operation

_GET = 0
_PUT = 1
_APPEND = 2


@dataclass(frozen=True)
class KvInput:
    """An operation on one key: 0 get, 1 put, 2 append, 3 append returning the old value."""

    op: int
    key: str
    value: str = ""


@dataclass(frozen=True)
class KvOutput:
    value: str = ""


def kv_partition(history: list[Operation]) -> list[list[Operation]]:
    """Split the history by key, in key order."""
    by_key: dict[str, list[Operation]] = {}
    for operation in history:
        by_key.setdefault(operation.input.key, []).append(operation)
    return [by_key[key] for key in sorted(by_key)]


def kv_init() -> str:
    """The state models a single key's value, since histories are partitioned by key."""
    return ""


def kv_step(state: str, input_value: KvInput, output_value: KvOutput) -> tuple[bool, Any]:
    if input_value.op == _GET:
        return output_value.value == state, state
    if input_value.op == _PUT:
        return True, input_value.value
    if input_value.op == _APPEND:
        return True, state + input_value.value
    return output_value.value == state, state + input_value.value


def kv_describe_operation(input_value: KvInput, output_value: KvOutput) -> str:
    if input_value.op == _GET:
        return f"get('{input_value.key}') -> '{output_value.value}'"
    if input_value.op == _PUT:
        return f"put('{input_value.key}', '{input_value.value}')"
    if input_value.op == _APPEND:
        return f"append('{input_value.key}', '{input_value.value}')"
    return "<invalid>"


KV_MODEL = Model(
    init=kv_init,
    step=kv_step,
    partition=kv_partition,
    describe_operation=kv_describe_operation,
)