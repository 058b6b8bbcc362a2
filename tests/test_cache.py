"""Tests for the analysis result cache."""

import threading
import time

import pytest

from pullwise.analysis.cache import AnalysisCache, CacheKey
from pullwise.schemas import AnalysisResult


def test_key_string():
    assert str(CacheKey("42", "main")) == "42@main"


def test_get_or_compute_stores_result():
    cache = AnalysisCache()
    key = CacheKey("1", "main")
    result = AnalysisResult()

    assert cache.get_or_compute(key, lambda: result) is result
    assert key in cache
    assert cache.get(key) is result
    assert cache.get_or_compute(key, AnalysisResult) is result


def test_injected_storage_is_used():
    storage = {}
    cache = AnalysisCache(storage=storage)
    key = CacheKey("1", "main")

    cache.set(key, AnalysisResult())

    assert key in storage
    assert len(cache) == 1


def test_concurrent_callers_compute_once():
    cache = AnalysisCache()
    key = CacheKey("7", "feature")
    calls = []
    start = threading.Barrier(8)
    results = []

    def compute():
        calls.append(1)
        time.sleep(0.05)
        return AnalysisResult()

    def worker():
        start.wait()
        results.append(cache.get_or_compute(key, compute))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_different_keys_do_not_wait_on_each_other():
    cache = AnalysisCache()
    inside = threading.Event()
    release = threading.Event()

    def slow():
        inside.set()
        release.wait(timeout=5)
        return AnalysisResult()

    worker = threading.Thread(target=cache.get_or_compute, args=(CacheKey("1", "a"), slow))
    worker.start()
    assert inside.wait(timeout=5)

    # Another key completes while the first is still computing.
    other = cache.get_or_compute(CacheKey("2", "a"), AnalysisResult)

    assert CacheKey("1", "a") not in cache
    release.set()
    worker.join()
    assert cache.get(CacheKey("2", "a")) is other
    assert CacheKey("1", "a") in cache


def test_clear_single_key():
    cache = AnalysisCache()
    cache.set(CacheKey("1", "main"), AnalysisResult())
    cache.set(CacheKey("1", "dev"), AnalysisResult())

    assert cache.clear(CacheKey("1", "main")) == 1
    assert cache.clear(CacheKey("1", "main")) == 0
    assert CacheKey("1", "dev") in cache


def test_clear_all():
    cache = AnalysisCache()
    cache.set(CacheKey("1", "main"), AnalysisResult())
    cache.set(CacheKey("2", "main"), AnalysisResult())

    assert cache.clear() == 2
    assert len(cache) == 0


def test_clear_change_removes_every_branch():
    cache = AnalysisCache()
    cache.set(CacheKey("1", "main"), AnalysisResult())
    cache.set(CacheKey("1", "dev"), AnalysisResult())
    cache.set(CacheKey("12", "main"), AnalysisResult())

    assert cache.clear_change("1") == 2
    assert list(cache._storage) == [CacheKey("12", "main")]


def _start_blocked_computation(cache, key):
    """Run get_or_compute on a thread whose compute blocks until released."""
    inside = threading.Event()
    release = threading.Event()
    results = []

    def slow():
        inside.set()
        release.wait(timeout=5)
        return AnalysisResult()

    worker = threading.Thread(target=lambda: results.append(cache.get_or_compute(key, slow)))
    worker.start()
    assert inside.wait(timeout=5)
    return worker, release, results


@pytest.mark.parametrize("clear", [
    lambda cache: cache.clear(CacheKey("1", "main")),
    lambda cache: cache.clear_change("1"),
    lambda cache: cache.clear(),
], ids=["key", "change", "everything"])
def test_clear_during_computation_discards_stale_result(clear):
    cache = AnalysisCache()
    key = CacheKey("1", "main")
    worker, release, results = _start_blocked_computation(cache, key)

    clear(cache)
    release.set()
    worker.join()

    assert len(results) == 1
    assert key not in cache

    fresh = AnalysisResult()
    assert cache.get_or_compute(key, lambda: fresh) is fresh
    assert cache.get(key) is fresh


def test_clearing_another_key_keeps_running_computation():
    cache = AnalysisCache()
    key = CacheKey("1", "main")
    worker, release, results = _start_blocked_computation(cache, key)

    cache.clear(CacheKey("1", "dev"))
    cache.clear_change("2")
    release.set()
    worker.join()

    assert cache.get(key) is results[0]


def test_clear_keeps_key_lock_of_running_computation():
    cache = AnalysisCache()
    key = CacheKey("1", "main")
    lock = cache._lock_for(key)
    worker, release, _ = _start_blocked_computation(cache, key)

    cache.clear(key)

    assert cache._lock_for(key) is lock
    release.set()
    worker.join()
