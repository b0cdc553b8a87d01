"""
registry_sdk.tier4_advanced.schemas
─────────────────────────────────────
Schema resolution and registration against a Confluent-compatible registry.

A reference (registration id or name + fingerprint) is resolved to a parsed
schema at most once per process: the cache answers every later lookup, and
concurrent first lookups for the same reference share a single download
through a per-key single-flight group. Downloads for different references
run concurrently. Failed downloads are not cached; the next call retries.

Registration does not populate the cache. The first resolve after a
registration pays for one download.

Backed by: RegistryClient (httpx) + SchemaCache + SingleFlight + fastavro.

Usage:
    schema = resolve(42)
    schema = resolve(("com.example.Foo", 123456789))
    register_schema_with_fp("com.example.Foo", schema_json)
"""
from __future__ import annotations

import threading
from typing import Any

from registry_sdk.tier0_core.config import get_config
from registry_sdk.tier0_core.errors import RegistryError
from registry_sdk.tier0_core.http import RegistryResult, fail, ok
from registry_sdk.tier0_core.logging import get_logger
from registry_sdk.tier0_core.metrics import cache_lookups
from registry_sdk.tier1_runtime.reference import (
    CanonicalKey,
    Fingerprint,
    Name,
    NameFingerprint,
    Reference,
    RefLike,
    as_reference,
    normalize,
)
from registry_sdk.tier1_runtime.serialize import (
    DEFAULT_ENCODING,
    Schema,
    check_encoding,
    fingerprint,
    parse_schema,
    schema_to_json,
)
from registry_sdk.tier2_reliability.cache import SchemaCache, get_cache
from registry_sdk.tier2_reliability.singleflight import SingleFlight
from registry_sdk.tier3_platform.registry_client import RegistryClient, SubjectSchema

log = get_logger(__name__)

# A fingerprint subject only ever has one version registered under it.
FINGERPRINT_SUBJECT_VERSION = 1


class SchemaResolver:
    """
    Cache-first schema resolver with single-flight downloads.

    Usage::

        resolver = SchemaResolver(RegistryClient("http://localhost:8081"))
        schema = resolver.resolve(42)
    """

    def __init__(
        self,
        client: RegistryClient,
        *,
        cache: SchemaCache | None = None,
        flight: SingleFlight | None = None,
        default_encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else SchemaCache()
        self._flight = flight if flight is not None else SingleFlight()
        self.default_encoding = check_encoding(default_encoding)

    @property
    def client(self) -> RegistryClient:
        return self._client

    @property
    def cache(self) -> SchemaCache:
        return self._cache

    # ── Resolution ────────────────────────────────────────────────────────────

    def lookup(self, ref: RefLike) -> Schema | None:
        """Cache-only probe; never touches the network."""
        return self._cache.get(normalize(as_reference(ref)))

    def resolve(self, ref: RefLike) -> Schema:
        """
        Return the parsed schema for *ref*, downloading it on first use.
        Raises the typed RegistryError of a failed download.
        """
        reference = as_reference(ref)
        key = normalize(reference)
        schema = self._cache.get(key)
        if schema is not None:
            cache_lookups(result="hit").inc()
            return schema
        cache_lookups(result="miss").inc()
        return self._flight.do(key, lambda: self._download(reference, key))

    def _download(self, reference: Reference, key: CanonicalKey) -> Schema:
        # A previous leader may have finished between the miss and election.
        schema = self._cache.get(key)
        if schema is not None:
            return schema

        if isinstance(reference, NameFingerprint):
            result = self._client.fetch_by_subject_version(
                reference.subject, FINGERPRINT_SUBJECT_VERSION
            )
            if not result.ok:
                raise self._download_failed(reference, result)
            schema_json = result.data.schema_json
        else:
            result = self._client.fetch_by_id(reference)
            if not result.ok:
                raise self._download_failed(reference, result)
            schema_json = result.data

        schema = self._cache.put_if_absent(key, parse_schema(schema_json))
        log.info("schema.cached", reference=repr(reference), cache_size=len(self._cache))
        return schema

    @staticmethod
    def _download_failed(reference: Reference, result: RegistryResult[Any]) -> RegistryError:
        log.warning(
            "schema.download_failed",
            reference=repr(reference),
            error_code=result.error.code,
            status_code=result.status_code,
        )
        return result.error

    # ── Subject lookup ────────────────────────────────────────────────────────

    def get_schema(
        self, subject: str, version: int | str = "latest"
    ) -> RegistryResult[SubjectSchema]:
        """Fetch a subject version (default: latest) without caching."""
        return self._client.fetch_by_subject_version(subject, version)

    # ── Registration ──────────────────────────────────────────────────────────

    def register_schema(self, subject: str, schema: Schema | str | bytes) -> RegistryResult[int]:
        """Register schema JSON (or a schema object) under *subject*."""
        return self._client.register(subject, schema_to_json(schema))

    def register_schema_with_fp(
        self,
        name: Name,
        schema: Schema | str | bytes,
        fp: Fingerprint | None = None,
    ) -> RegistryResult[Fingerprint]:
        """
        Register under the subject ``<name>-<fp>`` and return the fingerprint.

        When *fp* is omitted the CRC-64-AVRO fingerprint of the schema is
        used. If the reference is already cached the schema is assumed to be
        registered and no request is made.
        """
        schema_json = schema_to_json(schema)
        if fp is None:
            fp = fingerprint(schema_json)
        reference = NameFingerprint(name, fp)
        if self._cache.get(normalize(reference)) is not None:
            return ok(fp)
        result = self._client.register(reference.subject, schema_json)
        if not result.ok:
            return fail(result.error, status_code=result.status_code)
        return ok(fp, status_code=result.status_code, schema_id=result.data)

    def close(self) -> None:
        self._client.close()


# ── Process-wide resolver ─────────────────────────────────────────────────────

_resolver: SchemaResolver | None = None
_resolver_lock = threading.Lock()


def get_resolver() -> SchemaResolver:
    """
    Return the process-wide resolver, building it from get_config() on first
    use. A missing SCHEMA_REGISTRY_URL raises ConfigurationError here.
    """
    global _resolver
    if _resolver is None:
        with _resolver_lock:
            if _resolver is None:
                cfg = get_config()
                _resolver = SchemaResolver(
                    RegistryClient(
                        cfg.schema_registry_url,
                        auth=cfg.basic_auth,
                        timeout=cfg.schema_registry_timeout,
                    ),
                    cache=get_cache(),
                    default_encoding=cfg.default_encoding,
                )
    return _resolver


def set_resolver(resolver: SchemaResolver) -> None:
    """Install an explicitly wired resolver as the process-wide one."""
    global _resolver
    with _resolver_lock:
        _resolver = resolver


def shutdown() -> None:
    """Close the process-wide resolver's HTTP client. The cache is kept."""
    global _resolver
    with _resolver_lock:
        if _resolver is not None:
            _resolver.close()
        _resolver = None


def _reset_resolver() -> None:
    global _resolver
    _resolver = None


# ── Module-level API ──────────────────────────────────────────────────────────

def resolve(ref: RefLike) -> Schema:
    return get_resolver().resolve(ref)


def maybe_download(ref: RefLike) -> Schema:
    """
    Return the cached schema for *ref*, downloading it if needed.
    Surfaces, does not swallow: a failed download raises its RegistryError.
    """
    return get_resolver().resolve(ref)


def get_schema(subject: str, version: int | str = "latest") -> RegistryResult[SubjectSchema]:
    return get_resolver().get_schema(subject, version)


def register_schema(subject: str, schema: Schema | str | bytes) -> RegistryResult[int]:
    return get_resolver().register_schema(subject, schema)


def register_schema_with_fp(
    name: Name, schema: Schema | str | bytes, fp: Fingerprint | None = None
) -> RegistryResult[Fingerprint]:
    return get_resolver().register_schema_with_fp(name, schema, fp)


__all__ = [
    "FINGERPRINT_SUBJECT_VERSION",
    "SchemaResolver",
    "get_resolver",
    "set_resolver",
    "shutdown",
    "resolve",
    "maybe_download",
    "get_schema",
    "register_schema",
    "register_schema_with_fp",
]
