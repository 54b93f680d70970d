"""Histories, models and results for linearizability checking."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Operation:
    """One completed operation: its input and output, and when it was called and returned."""

    input: Any
    call: int
    output: Any
    return_: int
    client_id: int = 0


class EventKind(enum.Enum):
    CALL = "call"
    RETURN = "return"


@dataclass(frozen=True)
class Event:
    """One half of an operation; the call and the return share an ``id``."""

    kind: EventKind
    value: Any
    id: int
    client_id: int = 0


class CheckResult(str, enum.Enum):
    UNKNOWN = "Unknown"
    OK = "Ok"
    ILLEGAL = "Illegal"


def no_partition(history: list[Operation]) -> list[list[Operation]]:
    """Treat the whole history as a single partition."""
    return [history]


def no_partition_event(history: list[Event]) -> list[list[Event]]:
    """Treat the whole event history as a single partition."""
    return [history]


def shallow_equal(state1: Any, state2: Any) -> bool:
    return state1 == state2


def default_describe_operation(input_value: Any, output_value: Any) -> str:
    return f"{input_value} -> {output_value}"


def default_describe_state(state: Any) -> str:
    return f"{state}"


@dataclass
class Model:
    """A sequential specification of a system.

    ``step(state, input, output)`` returns whether the step is allowed and
    the new state; it must not mutate ``state``. A history is linearizable
    if and only if each partition produced by ``partition`` is.
    """

    init: Callable[[], Any]
    step: Callable[[Any, Any, Any], tuple[bool, Any]]
    partition: Optional[Callable[[list[Operation]], list[list[Operation]]]] = None
    partition_event: Optional[Callable[[list[Event]], list[list[Event]]]] = None
    equal: Optional[Callable[[Any, Any], bool]] = None
    describe_operation: Optional[Callable[[Any, Any], str]] = None
    describe_state: Optional[Callable[[Any], str]] = None

    def with_defaults(self) -> Model:
        """Return a copy with every missing optional function filled in."""
        return dataclasses.replace(
            self,
            partition=self.partition or no_partition,
            partition_event=self.partition_event or no_partition_event,
            equal=self.equal or shallow_equal,
            describe_operation=self.describe_operation or default_describe_operation,
            describe_state=self.describe_state or default_describe_state,
        )