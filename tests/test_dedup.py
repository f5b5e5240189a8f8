"""
Tests for the bounded dedup cache.
"""

import pytest

from signal_monitor.core.dedup import DedupCache


def test_mark_and_seen():
    cache = DedupCache()
    assert not cache.seen("a")
    cache.mark_seen("a")
    assert cache.seen("a")
    assert "a" in cache
    assert len(cache) == 1


def test_no_eviction_at_max_size():
    cache = DedupCache(max_size=1000, trim_to=500)
    for i in range(1000):
        cache.mark_seen(str(i))
    assert cache.evict_if_needed() == 0
    assert len(cache) == 1000


def test_overflow_keeps_most_recent_in_insertion_order():
    cache = DedupCache(max_size=1000, trim_to=500)
    for i in range(1001):
        cache.mark_seen(str(i))

    assert cache.evict_if_needed() == 501
    assert cache.ids() == [str(i) for i in range(501, 1001)]
    assert not cache.seen("500")
    assert cache.seen("1000")


def test_remark_does_not_refresh_position():
    cache = DedupCache(max_size=3, trim_to=2)
    for item_id in ["a", "b", "c"]:
        cache.mark_seen(item_id)
    cache.mark_seen("a")  # already present, stays oldest
    cache.mark_seen("d")

    cache.evict_if_needed()
    assert cache.ids() == ["c", "d"]


def test_clear():
    cache = DedupCache()
    cache.mark_seen("x")
    cache.clear()
    assert len(cache) == 0


def test_trim_larger_than_max_rejected():
    with pytest.raises(ValueError):
        DedupCache(max_size=10, trim_to=20)
