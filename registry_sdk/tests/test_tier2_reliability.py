"""Tests for tier2_reliability modules."""
from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from registry_sdk.tier2_reliability.cache import SchemaCache, _reset_cache, get_cache
from registry_sdk.tier2_reliability.singleflight import SingleFlight


def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.005)


# ── cache ──────────────────────────────────────────────────────────────────

class TestSchemaCache:
    def test_get_missing_returns_none(self):
        assert SchemaCache().get(1) is None

    def test_put_then_get(self):
        cache = SchemaCache()
        schema = {"type": "string"}
        assert cache.put_if_absent(1, schema) is schema
        assert cache.get(1) is schema
        assert 1 in cache
        assert len(cache) == 1

    def test_first_write_wins(self):
        cache = SchemaCache()
        first, second = {"type": "string"}, {"type": "int"}
        cache.put_if_absent((b"Foo", b"1"), first)
        assert cache.put_if_absent((b"Foo", b"1"), second) is first
        assert cache.get((b"Foo", b"1")) is first

    def test_concurrent_writers_agree(self):
        cache = SchemaCache()
        candidates = [{"n": i} for i in range(32)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            stored = list(pool.map(lambda s: cache.put_if_absent("k", s), candidates))
        assert all(s is stored[0] for s in stored)
        assert cache.get("k") is stored[0]

    def test_clear(self):
        cache = SchemaCache()
        cache.put_if_absent(1, "string")
        cache.clear()
        assert len(cache) == 0

    def test_get_cache_is_process_wide(self):
        assert get_cache() is get_cache()
        first = get_cache()
        _reset_cache()
        assert get_cache() is not first


# ── singleflight ───────────────────────────────────────────────────────────

class TestSingleFlight:
    def test_single_caller_gets_value(self):
        assert SingleFlight().do("k", lambda: 42) == 42

    def test_concurrent_callers_share_one_execution(self):
        flight = SingleFlight()
        release = threading.Event()
        calls = []

        def fn():
            calls.append(1)
            release.wait(5)
            return object()

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(flight.do, "k", fn) for _ in range(8)]
            _wait_for(lambda: flight.waiters("k") == 7)
            release.set()
            results = [f.result(timeout=5) for f in futures]

        assert len(calls) == 1
        assert all(r is results[0] for r in results)
        assert not flight.in_flight("k")

    def test_error_reaches_every_waiter_and_is_not_remembered(self):
        flight = SingleFlight()
        release = threading.Event()
        calls = []

        def failing():
            calls.append(1)
            release.wait(5)
            raise RuntimeError("download failed")

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(flight.do, "k", failing) for _ in range(4)]
            _wait_for(lambda: flight.waiters("k") == 3)
            release.set()
            for f in futures:
                with pytest.raises(RuntimeError, match="download failed"):
                    f.result(timeout=5)

        assert len(calls) == 1
        assert not flight.in_flight("k")
        assert flight.do("k", lambda: "retried") == "retried"

    def test_different_keys_run_concurrently(self):
        flight = SingleFlight()
        # Both calls must be inside fn at once; a global lock would break the barrier.
        barrier = threading.Barrier(2, timeout=5)

        def fn(key):
            barrier.wait()
            return key

        with ThreadPoolExecutor(max_workers=2) as pool:
            a = pool.submit(flight.do, "a", lambda: fn("a"))
            b = pool.submit(flight.do, "b", lambda: fn("b"))
            assert (a.result(timeout=5), b.result(timeout=5)) == ("a", "b")
