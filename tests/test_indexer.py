from labkit.mrapps.indexer import map_function, reduce_function


def test_map_emits_each_word_once():
    result = map_function("doc1", "the cat the dog")
    keys = [kv.key for kv in result]
    assert sorted(keys) == ["cat", "dog", "the"]
    assert len(keys) == len(set(keys))


def test_map_values_are_the_document():
    result = map_function("doc1", "alpha beta, alpha")
    assert {kv.value for kv in result} == {"doc1"}


def test_map_of_text_without_letters():
    assert map_function("doc", "123 !!") == []


def test_reduce_sorts_and_counts_documents():
    assert reduce_function("w", ["b", "a", "c"]) == "3 a,b,c"


def test_reduce_single_document():
    assert reduce_function("w", ["only.txt"]) == "1 only.txt"


def test_map_then_reduce_builds_index_entry():
    pairs = map_function("d2", "cat") + map_function("d1", "cat dog")
    documents = [kv.value for kv in pairs if kv.key == "cat"]
    assert reduce_function("cat", documents) == "2 d1,d2"