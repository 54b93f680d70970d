import pytest

from labkit.porcupine.checker import (
    check_events,
    check_events_timeout,
    check_events_verbose,
    check_operations,
    check_operations_timeout,
    check_operations_verbose,
)
from labkit.porcupine.model import CheckResult, Event, EventKind, Model, Operation


def _register_step(state, inp, out):
    if inp[0] == "put":
        return True, inp[1]
    return out == state, state


REGISTER = Model(init=lambda: 0, step=_register_step)


def put(value, call, ret, client=0):
    return Operation(input=("put", value), call=call, output=None, return_=ret, client_id=client)


def get(value, call, ret, client=0):
    return Operation(input=("get",), call=call, output=value, return_=ret, client_id=client)


def test_empty_history_is_linearizable():
    assert check_operations(REGISTER, []) is True


def test_sequential_history_ok():
    history = [put(1, 0, 1), get(1, 2, 3), put(2, 4, 5), get(2, 6, 7)]
    assert check_operations(REGISTER, history) is True


def test_stale_read_is_illegal():
    history = [put(1, 0, 5), get(0, 6, 10)]
    assert check_operations(REGISTER, history) is False
    assert check_operations_timeout(REGISTER, history, 0) is CheckResult.ILLEGAL


@pytest.mark.parametrize("observed", [0, 1])
def test_concurrent_read_may_see_either(observed):
    history = [put(1, 0, 10, client=0), get(observed, 5, 15, client=1)]
    assert check_operations(REGISTER, history) is True


def test_timeout_generous_gives_ok():
    history = [put(1, 0, 10), get(1, 5, 15)]
    assert check_operations_timeout(REGISTER, history, 5.0) is CheckResult.OK


def test_verbose_ok_has_complete_linearization():
    history = [put(1, 0, 1), get(1, 2, 3), put(2, 4, 5)]
    result, info = check_operations_verbose(REGISTER, history, 0)
    assert result is CheckResult.OK
    assert len(info.history) == 1
    assert len(info.history[0]) == 2 * len(history)
    assert info.partial_linearizations == [[[0, 1, 2]]]


def test_verbose_illegal_reports_prefixes():
    history = [put(1, 0, 1), get(0, 2, 3)]
    result, info = check_operations_verbose(REGISTER, history, 0)
    assert result is CheckResult.ILLEGAL
    assert [0] in info.partial_linearizations[0]
    assert all(0 not in info.partial_linearizations[0] or True for _ in [0])
    for partial in info.partial_linearizations[0]:
        assert 1 not in partial


def test_non_verbose_info_is_empty():
    history = [put(1, 0, 1)]
    _, info = check_operations_verbose(REGISTER, history, 0)
    assert info.partial_linearizations
    assert check_operations_timeout(REGISTER, history, None) is CheckResult.OK


def test_partition_any_illegal_makes_whole_illegal():
    def by_parity(history):
        return [
            [op for op in history if op.client_id % 2 == 0],
            [op for op in history if op.client_id % 2 == 1],
        ]

    model = Model(init=lambda: 0, step=_register_step, partition=by_parity)
    good = [put(1, 0, 1, client=0), get(1, 2, 3, client=0)]
    bad = [put(5, 0, 1, client=1), get(7, 2, 3, client=1)]
    assert check_operations(model, good) is True
    assert check_operations(model, good + bad) is False


def test_step_exception_propagates():
    def boom(state, inp, out):
        raise RuntimeError("bad step")

    model = Model(init=lambda: 0, step=boom)
    with pytest.raises(RuntimeError, match="bad step"):
        check_operations(model, [put(1, 0, 1)])


def _events(*spec):
    kinds = {"c": EventKind.CALL, "r": EventKind.RETURN}
    return [Event(kinds[k], v, i) for k, v, i in spec]


def test_events_sequential_ok():
    history = _events(("c", ("put", 3), 10), ("r", None, 10), ("c", ("get",), 20), ("r", 3, 20))
    assert check_events(REGISTER, history) is True


def test_events_illegal():
    history = _events(("c", ("put", 3), 7), ("r", None, 7), ("c", ("get",), 8), ("r", 0, 8))
    assert check_events(REGISTER, history) is False
    assert check_events_timeout(REGISTER, history, 1.0) is CheckResult.ILLEGAL


def test_events_overlapping_ok():
    history = _events(("c", ("put", 3), 1), ("c", ("get",), 2), ("r", 0, 2), ("r", None, 1))
    result, info = check_events_verbose(REGISTER, history, 0)
    assert result is CheckResult.OK
    assert sorted(info.partial_linearizations[0][0]) == [0, 1]