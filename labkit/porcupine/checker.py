"""Linearizability checking of operation and event histories."""

from __future__ import annotations

import datetime
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from labkit.porcupine.bitset import Bitset
from labkit.porcupine.model import CheckResult, Event, EventKind, Model, Operation

Timeout = Union[float, datetime.timedelta, None]


@dataclass(frozen=True)
class _Entry:
    kind: EventKind
    value: Any
    id: int
    time: int
    client_id: int


@dataclass
class LinearizationInfo:
    """Per-partition entries and the longest linearizable prefixes found."""

    history: list[list[_Entry]] = field(default_factory=list)
    partial_linearizations: list[list[list[int]]] = field(default_factory=list)


class _Node:
    __slots__ = ("value", "match", "id", "next", "prev")

    def __init__(self, value: Any, match: Optional[_Node], node_id: int) -> None:
        self.value = value
        self.match = match  # None for a return node
        self.id = node_id
        self.next: Optional[_Node] = None
        self.prev: Optional[_Node] = None


def _make_entries(history: list[Operation]) -> list[_Entry]:
    entries = []
    for op_id, op in enumerate(history):
        entries.append(_Entry(EventKind.CALL, op.input, op_id, op.call, op.client_id))
        entries.append(_Entry(EventKind.RETURN, op.output, op_id, op.return_, op.client_id))
    # at equal times, calls come before returns
    entries.sort(key=lambda e: (e.time, e.kind is EventKind.RETURN))
    return entries


def _renumber(events: list[Event]) -> list[Event]:
    mapping: dict[int, int] = {}
    renumbered = []
    for event in events:
        new_id = mapping.setdefault(event.id, len(mapping))
        renumbered.append(Event(event.kind, event.value, new_id, event.client_id))
    return renumbered


def _convert_entries(events: list[Event]) -> list[_Entry]:
    return [
        _Entry(event.kind, event.value, event.id, index, event.client_id)
        for index, event in enumerate(events)
    ]


def _insert_before(node: _Node, mark: Optional[_Node]) -> _Node:
    if mark is not None:
        before = mark.prev
        mark.prev = node
        node.next = mark
        if before is not None:
            node.prev = before
            before.next = node
    return node


def _make_linked_entries(entries: list[_Entry]) -> Optional[_Node]:
    root: Optional[_Node] = None
    returns: dict[int, _Node] = {}
    for entry in reversed(entries):
        if entry.kind is EventKind.RETURN:
            node = _Node(entry.value, None, entry.id)
            returns[entry.id] = node
        else:
            node = _Node(entry.value, returns.get(entry.id), entry.id)
        _insert_before(node, root)
        root = node
    return root


def _length(node: Optional[_Node]) -> int:
    count = 0
    while node is not None:
        node = node.next
        count += 1
    return count


def _lift(entry: _Node) -> None:
    entry.prev.next = entry.next
    entry.next.prev = entry.prev
    match = entry.match
    match.prev.next = match.next
    if match.next is not None:
        match.next.prev = match.prev


def _unlift(entry: _Node) -> None:
    match = entry.match
    match.prev.next = match
    if match.next is not None:
        match.next.prev = match
    entry.prev.next = entry
    entry.next.prev = entry


def _cache_contains(
    model: Model, cache: dict[int, list[tuple[Bitset, Any]]], linearized: Bitset, state: Any
) -> bool:
    return any(
        linearized == seen and model.equal(state, seen_state)
        for seen, seen_state in cache.get(hash(linearized), ())
    )


def _check_single(
    model: Model, history: list[_Entry], compute_partial: bool, kill: threading.Event
) -> tuple[bool, list[Optional[list[int]]]]:
    entry = _make_linked_entries(history)
    n = _length(entry) // 2
    linearized = Bitset(n)
    cache: dict[int, list[tuple[Bitset, Any]]] = {}
    calls: list[tuple[_Node, Any]] = []
    longest: list[Optional[list[int]]] = [None] * n

    state = model.init()
    head = _insert_before(_Node(None, None, -1), entry)
    while head.next is not None:
        if kill.is_set():
            return False, longest
        if entry.match is not None:
            ok, new_state = model.step(state, entry.value, entry.match.value)
            if ok:
                new_linearized = linearized.clone().set(entry.id)
                if not _cache_contains(model, cache, new_linearized, new_state):
                    cache.setdefault(hash(new_linearized), []).append(
                        (new_linearized, new_state)
                    )
                    calls.append((entry, state))
                    state = new_state
                    linearized.set(entry.id)
                    _lift(entry)
                    entry = head.next
                else:
                    entry = entry.next
            else:
                entry = entry.next
        else:
            if not calls:
                return False, longest
            if compute_partial:
                seq: Optional[list[int]] = None
                for node, _ in calls:
                    current = longest[node.id]
                    if current is None or len(calls) > len(current):
                        if seq is None:
                            seq = [n_.id for n_, _ in calls]
                        longest[node.id] = seq
            entry, state = calls.pop()
            linearized.clear(entry.id)
            _unlift(entry)
            entry = entry.next

    complete = [node.id for node, _ in calls]
    return True, [complete] * n


def _seconds(timeout: Timeout) -> float:
    if timeout is None:
        return 0.0
    if isinstance(timeout, datetime.timedelta):
        return timeout.total_seconds()
    return float(timeout)


def _check_parallel(
    model: Model, history: list[list[_Entry]], compute_info: bool, timeout: Timeout
) -> tuple[CheckResult, LinearizationInfo]:
    kill = threading.Event()
    results: queue.Queue[Union[bool, BaseException]] = queue.Queue()
    longest: list[list[Optional[list[int]]]] = [[] for _ in history]

    def run(index: int, subhistory: list[_Entry]) -> None:
        try:
            ok, partial = _check_single(model, subhistory, compute_info, kill)
        except BaseException as exc:  # handed to the waiting caller
            results.put(exc)
            return
        longest[index] = partial
        results.put(ok)

    for index, subhistory in enumerate(history):
        threading.Thread(target=run, args=(index, subhistory), daemon=True).start()

    limit = _seconds(timeout)
    deadline = time.monotonic() + limit if limit > 0 else None
    ok = True
    timed_out = False
    count = 0
    failure: Optional[BaseException] = None

    while count < len(history):
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            result = results.get(timeout=remaining)
        except queue.Empty:
            timed_out = True
            kill.set()
            break
        count += 1
        if isinstance(result, BaseException):
            kill.set()
            failure = result
            break
        ok = ok and result
        if not ok and not compute_info:
            kill.set()
            break

    if failure is not None:
        raise failure

    info = LinearizationInfo()
    if compute_info:
        while count < len(history):
            result = results.get()
            count += 1
            if isinstance(result, BaseException):
                raise result
        partials = []
        for per_partition in longest:
            unique = {id(seq): seq for seq in per_partition if seq is not None}
            partials.append([list(seq) for seq in unique.values()])
        info = LinearizationInfo(history=history, partial_linearizations=partials)

    if not ok:
        return CheckResult.ILLEGAL, info
    if timed_out:
        return CheckResult.UNKNOWN, info
    return CheckResult.OK, info


def _check_events(
    model: Model, history: list[Event], verbose: bool, timeout: Timeout
) -> tuple[CheckResult, LinearizationInfo]:
    model = model.with_defaults()
    partitions = model.partition_event(history)
    entries = [_convert_entries(_renumber(part)) for part in partitions]
    return _check_parallel(model, entries, verbose, timeout)


def _check_operations(
    model: Model, history: list[Operation], verbose: bool, timeout: Timeout
) -> tuple[CheckResult, LinearizationInfo]:
    model = model.with_defaults()
    partitions = model.partition(history)
    entries = [_make_entries(part) for part in partitions]
    return _check_parallel(model, entries, verbose, timeout)


def check_operations(model: Model, history: list[Operation]) -> bool:
    """Return whether the operation history is linearizable."""
    result, _ = _check_operations(model, history, False, None)
    return result is CheckResult.OK


def check_operations_timeout(
    model: Model, history: list[Operation], timeout: Timeout
) -> CheckResult:
    """Check with a time limit in seconds; 0 or None means none. Timing out gives UNKNOWN."""
    result, _ = _check_operations(model, history, False, timeout)
    return result


def check_operations_verbose(
    model: Model, history: list[Operation], timeout: Timeout
) -> tuple[CheckResult, LinearizationInfo]:
    """Check, and also return the longest linearizable prefixes found."""
    return _check_operations(model, history, True, timeout)


def check_events(model: Model, history: list[Event]) -> bool:
    """Return whether the event history is linearizable."""
    result, _ = _check_events(model, history, False, None)
    return result is CheckResult.OK


def check_events_timeout(model: Model, history: list[Event], timeout: Timeout) -> CheckResult:
    """Check with a time limit in seconds; 0 or None means none. Timing out gives UNKNOWN."""
    result, _ = _check_events(model, history, False, timeout)
    return result


def check_events_verbose(
    model: Model, history: list[Event], timeout: Timeout
) -> tuple[CheckResult, LinearizationInfo]:
    """Check, and also return the longest linearizable prefixes found."""
    return _check_events(model, history, True, timeout)