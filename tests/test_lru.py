import os
import threading

import pytest

from bchlight.lru import (
    CacheableBlock,
    CacheableFilter,
    ElementNotFoundError,
    FilterCacheKey,
    LRUCache,
)


class Sizeable:
    def __init__(self, value, size):
        self.value = value
        self._size = size

    def size(self):
        return self._size


def value_of(cache, key):
    return cache.get(key).value


def test_empty_cache_size_zero():
    assert len(LRUCache(10)) == 0


def test_cache_never_exceeds_size():
    c = LRUCache(2)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    assert len(c) == 2
    for i in range(10):
        c.put(i, Sizeable(i, 1))
        assert len(c) == 2


def test_cache_always_has_last_accessed_items():
    c = LRUCache(2)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    assert value_of(c, 2) == 2
    assert value_of(c, 1) == 1

    c = LRUCache(2)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    c.put(3, Sizeable(3, 1))
    with pytest.raises(ElementNotFoundError):
        c.get(1)
    assert value_of(c, 2) == 2
    assert value_of(c, 3) == 3

    c = LRUCache(2)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    c.get(1)
    c.put(3, Sizeable(3, 1))
    assert value_of(c, 1) == 1
    with pytest.raises(ElementNotFoundError):
        c.get(2)
    assert value_of(c, 3) == 3


def test_element_size_capacity_evicts_everything():
    c = LRUCache(3)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    c.put(3, Sizeable(3, 1))
    assert c.put(4, Sizeable(4, 3)) is True
    assert len(c) == 1
    assert value_of(c, 4) == 4

    c = LRUCache(6)
    assert c.put(1, Sizeable(1, 1)) is False
    assert c.put(2, Sizeable(2, 2)) is False
    assert c.put(3, Sizeable(3, 3)) is False
    assert len(c) == 3
    c.put(4, Sizeable(4, 6))
    assert len(c) == 1
    assert value_of(c, 4) == 4


def test_cache_fails_insertion_size_bigger_capacity():
    c = LRUCache(2)
    with pytest.raises(ValueError):
        c.put(1, Sizeable(1, 3))
    assert len(c) == 0


def test_many_small_elements_can_insert_after_big_eviction():
    c = LRUCache(3)
    c.put(1, Sizeable(1, 3))
    assert len(c) == 1

    c.put(2, Sizeable(2, 1))
    assert value_of(c, 2) == 2
    with pytest.raises(ElementNotFoundError):
        c.get(1)
    assert len(c) == 1

    assert c.put(3, Sizeable(3, 1)) is False
    assert len(c) == 2
    assert c.put(4, Sizeable(4, 1)) is False
    assert len(c) == 3

    assert value_of(c, 2) == 2
    assert value_of(c, 3) == 3
    assert value_of(c, 4) == 4


def test_replacing_element_value_smaller_size():
    c = LRUCache(2)
    c.put(1, Sizeable(1, 2))
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    assert value_of(c, 1) == 1
    assert value_of(c, 2) == 2
    assert len(c) == 2


def test_replacing_element_value_bigger_size():
    c = LRUCache(2)
    c.put(1, Sizeable(1, 1))
    c.put(2, Sizeable(2, 1))
    c.put(1, Sizeable(3, 2))
    assert len(c) == 1
    assert value_of(c, 1) == 3


@pytest.mark.parametrize("capacity,count", [(5, 5), (5, 20), (100, 50)])
def test_concurrency(capacity, count):
    c = LRUCache(capacity)
    errors = []

    def put(i):
        try:
            c.put(i, Sizeable(i, 1))
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    def get(i):
        try:
            c.get(i)
        except ElementNotFoundError:
            pass
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=put, args=(i,)) for i in range(count)]
    threads += [threading.Thread(target=get, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(c) == min(capacity, count)


class FakeBlock:
    def __init__(self, payload):
        self.payload = payload

    def __bytes__(self):
        return self.payload


def test_block_filter_caches():
    filter_type = 0
    num_elements = 10
    cache_size = 100000

    filter_cache = LRUCache(cache_size)
    block_cache = LRUCache(cache_size)

    hashes, filters, blocks = [], [], []
    for i in range(num_elements):
        block_hash = os.urandom(32)
        hashes.append(block_hash)

        filt = bytes([i]) * (i + 1)
        filters.append(filt)
        filter_cache.put(FilterCacheKey(block_hash, filter_type), CacheableFilter(filt))

        block = FakeBlock(b"\x00" * 81)
        blocks.append(block)
        block_cache.put(("block", block_hash), CacheableBlock(block))

    for i, block_hash in enumerate(hashes):
        entry = filter_cache.get(FilterCacheKey(block_hash, filter_type))
        assert entry.filter is filters[i]
        block_entry = block_cache.get(("block", block_hash))
        assert block_entry.block is blocks[i]


def test_cacheable_sizes_follow_serialized_length():
    assert CacheableFilter(b"abcd").size() == 4
    assert CacheableBlock(FakeBlock(b"x" * 80)).size() == 80


def test_element_not_found_message():
    with pytest.raises(ElementNotFoundError, match="unable to find element"):
        LRUCache(1).get("missing")