import pytest

from labkit.mr.worker import KeyValue, ihash


def test_ihash_of_empty_string_is_masked_offset_basis():
    assert ihash("") == 0x011C9DC5


def test_ihash_known_vector():
    assert ihash("a") == 0x640C292C


@pytest.mark.parametrize("key", ["", "a", "hello", "naïve", "x" * 1000])
def test_ihash_is_non_negative_31_bit(key):
    assert 0 <= ihash(key) < 2**31


def test_ihash_spreads_keys():
    buckets = {ihash(f"word{n}") % 10 for n in range(200)}
    assert len(buckets) == 10


def test_key_value_fields():
    kv = KeyValue("word", "1")
    assert (kv.key, kv.value) == ("word", "1")
    assert kv == KeyValue(key="word", value="1")