from labkit.mr.worker import KeyValue
from labkit.mrapps.wc import map_function, reduce_function


def test_map_splits_on_non_letters():
    result = map_function("ignored.txt", "Hello, world! Hello")
    assert result == [KeyValue("Hello", "1"), KeyValue("world", "1"), KeyValue("Hello", "1")]


def test_map_treats_digits_as_separators():
    assert [kv.key for kv in map_function("f", "abc123def")] == ["abc", "def"]


def test_map_keeps_non_ascii_letters():
    assert [kv.key for kv in map_function("f", "naïve café")] == ["naïve", "café"]


def test_map_of_empty_contents():
    assert map_function("f", "") == []
    assert map_function("f", "  12 -- !!") == []


def test_map_ignores_filename():
    assert map_function("a.txt", "one two") == map_function("b.txt", "one two")


def test_reduce_counts_values():
    assert reduce_function("word", ["1", "1", "1"]) == "3"
    assert reduce_function("word", []) == "0"


def test_map_then_reduce_counts_words():
    pairs = map_function("f", "a b a c a")
    values = [kv.value for kv in pairs if kv.key == "a"]
    assert reduce_function("a", values) == "3"