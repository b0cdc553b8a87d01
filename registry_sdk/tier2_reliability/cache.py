"""
registry_sdk.tier2_reliability.cache
───────────────────────────────────────
Process-wide cache of parsed schemas, keyed by canonical reference.

Entries are write-once: the first schema stored for a key wins and is never
replaced, expired or evicted. A reference is assumed to resolve to the same
schema for the lifetime of the process, and the number of distinct
references a process sees is assumed small, so the cache is unbounded.

Reads take no lock. Writes take a lock only to make insert-if-absent atomic.
"""
from __future__ import annotations

import threading
from typing import Any

from registry_sdk.tier1_runtime.reference import CanonicalKey


class SchemaCache:
    """Write-once, thread-safe mapping of CanonicalKey → parsed schema."""

    def __init__(self) -> None:
        self._store: dict[CanonicalKey, Any] = {}
        self._write_lock = threading.Lock()

    def get(self, key: CanonicalKey) -> Any | None:
        return self._store.get(key)

    def put_if_absent(self, key: CanonicalKey, schema: Any) -> Any:
        """Store *schema* unless *key* is present; return the stored instance."""
        existing = self._store.get(key)
        if existing is not None:
            return existing
        with self._write_lock:
            return self._store.setdefault(key, schema)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def clear(self) -> None:
        """For tests only. Entries are never removed in normal operation."""
        with self._write_lock:
            self._store.clear()


# ── Process-wide instance ─────────────────────────────────────────────────────

_cache: SchemaCache | None = None
_cache_lock = threading.Lock()


def get_cache() -> SchemaCache:
    global _cache
    if _cache is None:
        with _cache_lock:
            if _cache is None:
                _cache = SchemaCache()
    return _cache


def _reset_cache() -> None:
    global _cache
    _cache = None


__all__ = ["SchemaCache", "get_cache"]
