from __future__ import annotations

import threading

import pytest

from notebudget.core.cache import PromptCache, make_cache_key


def test_put_and_get() -> None:
    cache = PromptCache()
    cache.put("k", "value")

    assert cache.get("k") == "value"
    assert cache.get("missing") is None
    assert cache.stats() == {"entries": 1, "max_entries": 128, "hits": 1, "misses": 1}


def test_least_recently_used_entry_is_evicted() -> None:
    cache = PromptCache(max_entries=2)
    cache.put("a", "1")
    cache.put("b", "2")
    cache.get("a")
    cache.put("c", "3")

    assert cache.get("b") is None
    assert cache.get("a") == "1"
    assert cache.get("c") == "3"


def test_overwrite_does_not_evict() -> None:
    cache = PromptCache(max_entries=2)
    cache.put("a", "1")
    cache.put("b", "2")
    cache.put("a", "updated")

    assert len(cache) == 2
    assert cache.get("a") == "updated"
    assert cache.get("b") == "2"


def test_zero_capacity_stores_nothing() -> None:
    cache = PromptCache(max_entries=0)
    cache.put("a", "1")

    assert cache.get("a") is None
    assert len(cache) == 0


def test_invalidate_and_clear() -> None:
    cache = PromptCache()
    cache.put("a", "1")
    cache.put("b", "2")

    cache.invalidate("a")
    assert cache.get("a") is None

    cache.clear()
    assert cache.stats() == {"entries": 0, "max_entries": 128, "hits": 0, "misses": 0}


def test_negative_capacity_rejected() -> None:
    with pytest.raises(ValueError):
        PromptCache(max_entries=-1)


def test_cache_key_is_stable_and_namespaced() -> None:
    key = make_cache_key("article", "prompt", 1200)

    assert key == make_cache_key("article", "prompt", 1200)
    assert key.startswith("article_")
    assert key != make_cache_key("article", "prompt", 1201)
    assert key != make_cache_key("email", "prompt", 1200)
    # part boundaries matter
    assert make_cache_key("x", "ab", "c") != make_cache_key("x", "a", "bc")


def test_concurrent_puts_respect_capacity() -> None:
    cache = PromptCache(max_entries=10)

    def worker(offset: int) -> None:
        for i in range(100):
            cache.put(f"{offset}-{i}", "v")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 10
