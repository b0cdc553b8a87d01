"""
registry_sdk.tier2_reliability.singleflight
─────────────────────────────────────────────
Duplicate-call suppression. Concurrent callers of ``do()`` with the same key
share one execution of ``fn``: the first caller runs it, the others block
until it finishes and then return its value (or re-raise its exception).

The group lock only guards the in-flight table; ``fn`` always runs outside
it, so calls for different keys never wait on each other.

Usage:
    flight = SingleFlight()
    schema = flight.do(key, lambda: download(key))
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Hashable, TypeVar

T = TypeVar("T")


class _Call:
    __slots__ = ("done", "value", "error", "waiters")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.value: Any = None
        self.error: BaseException | None = None
        self.waiters = 0


class SingleFlight:
    """Per-key single-flight group."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[Hashable, _Call] = {}

    def do(self, key: Hashable, fn: Callable[[], T]) -> T:
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = self._calls[key] = _Call()
            else:
                call.waiters += 1

        if not leader:
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.value

        try:
            call.value = fn()
        except BaseException as exc:
            call.error = exc
            raise
        finally:
            with self._lock:
                del self._calls[key]
            call.done.set()
        return call.value

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._calls

    def waiters(self, key: Hashable) -> int:
        """Number of callers currently blocked on *key*'s in-flight call."""
        with self._lock:
            call = self._calls.get(key)
            return call.waiters if call is not None else 0


__all__ = ["SingleFlight"]
