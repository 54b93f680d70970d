from unittest import mock

import pytest

from labkit.mr.worker import KeyValue
from labkit.mrapps import crash


def _draws(*values):
    return mock.patch("secrets.randbelow", side_effect=list(values))


def _expected(filename, contents):
    return [
        KeyValue("a", filename),
        KeyValue("b", str(len(filename))),
        KeyValue("c", str(len(contents))),
        KeyValue("d", "xyzzy"),
    ]


def test_low_draw_exits_with_status_one():
    with _draws(100), mock.patch("time.sleep") as sleep:
        with pytest.raises(SystemExit) as info:
            crash.maybe_crash()
    assert info.value.code == 1
    assert sleep.call_count == 0


def test_draw_just_below_crash_limit_exits():
    with _draws(329):
        with pytest.raises(SystemExit) as info:
            crash.maybe_crash()
    assert info.value.code == 1


def test_middle_draw_sleeps_for_drawn_milliseconds():
    with _draws(330, 2500), mock.patch("time.sleep") as sleep:
        result = crash.map_function("f", "abc")
    assert result == _expected("f", "abc")
    assert sleep.call_count == 1
    assert sleep.call_args.args[0] * 1000 == pytest.approx(2500)


def test_delay_draw_is_bounded_by_ten_seconds():
    with mock.patch("secrets.randbelow", side_effect=[500, 0]) as draw, mock.patch(
        "time.sleep"
    ):
        result = crash.reduce_function("k", ["b", "a"])
    assert result == "a b"
    assert draw.call_args_list == [mock.call(1000), mock.call(10 * 1000)]


def test_high_draw_neither_exits_nor_sleeps():
    with _draws(660), mock.patch("time.sleep") as sleep:
        result = crash.map_function("g", "xy")
    assert result == _expected("g", "xy")
    assert sleep.call_count == 0


def test_map_emits_four_pairs():
    filename = "pg-being_ernest.txt"
    contents = "some text\nmore text\n"
    with mock.patch("secrets.randbelow", return_value=999):
        result = crash.map_function(filename, contents)
    assert result == _expected(filename, contents)


def test_map_can_crash():
    with _draws(0):
        with pytest.raises(SystemExit):
            crash.map_function("f", "x")


def test_reduce_sorts_without_mutating_input():
    values = ["pear", "apple", "fig"]
    with mock.patch("secrets.randbelow", return_value=999):
        result = crash.reduce_function("a", values)
    assert result == "apple fig pear"
    assert values == ["pear", "apple", "fig"]