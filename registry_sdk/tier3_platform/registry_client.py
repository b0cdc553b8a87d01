"""
registry_sdk.tier3_platform.registry_client
─────────────────────────────────────────────
Blocking HTTP client for a Confluent-compatible schema registry. Performs the
three remote operations the resolver needs and maps every failure to a typed
error inside a RegistryResult, logging the URL, status and response body
first. Nothing here raises for a registry or network failure, and nothing is
retried automatically.

Backed by: httpx (sync). MockSchemaRegistry serves the same REST surface
in-process through httpx.MockTransport for tests and local dev.

Equivalent cURL for registration:
    curl -X POST -H "Content-Type: application/vnd.schemaregistry.v1+json" \\
         --data '{"schema": "{\\"type\\": \\"string\\"}"}' \\
         http://localhost:8081/subjects/com.example.name/versions
"""
from __future__ import annotations

import json
import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Type, TypeVar

import httpx
from pydantic import BaseModel

from registry_sdk.tier0_core.errors import (
    BadHttpStatus,
    MalformedResponse,
    RegistryError,
    TransportError,
    UnknownReference,
)
from registry_sdk.tier0_core.http import (
    DEFAULT_TIMEOUT,
    HTTP,
    SCHEMA_REGISTRY_CONTENT_TYPE,
    RegistryResult,
    fail,
    is_success,
    ok,
)
from registry_sdk.tier0_core.logging import get_logger
from registry_sdk.tier0_core.metrics import registry_request_duration, registry_requests
from registry_sdk.tier1_runtime.validate import (
    RegisterResponse,
    SchemaByIdResponse,
    SubjectVersionResponse,
    validate_response,
)

log = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class SubjectSchema:
    """A schema version as returned by GET /subjects/{subject}/versions/{version}."""
    id: int
    schema_json: str
    subject: str | None = None
    version: int | None = None


class RegistryClient:
    """
    Sync HTTP client for the schema registry REST API.

    Usage::

        client = RegistryClient("http://localhost:8081", auth=("user", "pass"))
        result = client.fetch_by_id(42)
        if result.ok:
            schema_json = result.data
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth: tuple[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = httpx.Client(
            base_url=self._base_url,
            auth=httpx.BasicAuth(*auth) if auth else None,
            timeout=timeout,
            transport=transport,
            headers={"Accept": SCHEMA_REGISTRY_CONTENT_TYPE},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── Remote operations ─────────────────────────────────────────────────────

    def fetch_by_id(self, regid: int) -> RegistryResult[str]:
        """GET /schemas/ids/{id} → schema JSON text."""
        result = self._request(
            "fetch_by_id", "GET", f"/schemas/ids/{regid}", SchemaByIdResponse
        )
        if not result.ok:
            return result
        return ok(result.data.schema_text, status_code=result.status_code)

    def fetch_by_subject_version(
        self, subject: str, version: int | str = "latest"
    ) -> RegistryResult[SubjectSchema]:
        """GET /subjects/{subject}/versions/{version} → id + schema JSON text."""
        result = self._request(
            "fetch_by_subject_version",
            "GET",
            f"/subjects/{subject}/versions/{version}",
            SubjectVersionResponse,
        )
        if not result.ok:
            return result
        body = result.data
        return ok(
            SubjectSchema(
                id=body.id,
                schema_json=body.schema_text,
                subject=body.subject,
                version=body.version,
            ),
            status_code=result.status_code,
        )

    def register(self, subject: str, schema_json: str) -> RegistryResult[int]:
        """POST /subjects/{subject}/versions → registration id."""
        result = self._request(
            "register",
            "POST",
            f"/subjects/{subject}/versions",
            RegisterResponse,
            content=json.dumps({"schema": schema_json}).encode("utf-8"),
            headers={"Content-Type": SCHEMA_REGISTRY_CONTENT_TYPE},
        )
        if not result.ok:
            return result
        log.info("schema.registered", subject=subject, schema_id=result.data.id)
        return ok(result.data.id, status_code=result.status_code)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Internals ─────────────────────────────────────────────────────────────

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        model: Type[M],
        **kwargs: Any,
    ) -> RegistryResult[M]:
        url = f"{self._base_url}{path}"
        start = time.monotonic()
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.DecodingError as exc:
            # Body arrived but its Content-Encoding could not be undone.
            registry_request_duration(operation=operation).observe(time.monotonic() - start)
            log.error(
                "schema.response_malformed",
                operation=operation,
                url=url,
                reason=repr(exc),
            )
            return self._failed(
                operation,
                MalformedResponse(f"{method} {url} returned an undecodable body: {exc!r}", url=url),
            )
        except httpx.RequestError as exc:
            registry_request_duration(operation=operation).observe(time.monotonic() - start)
            log.error(
                "schema.request_failed",
                operation=operation,
                url=url,
                reason=repr(exc),
            )
            return self._failed(
                operation,
                TransportError(f"{method} {url} failed: {exc!r}", url=url),
            )
        registry_request_duration(operation=operation).observe(time.monotonic() - start)

        status = response.status_code
        if not is_success(status):
            log.error(
                "schema.request_failed",
                operation=operation,
                url=url,
                status_code=status,
                body=response.text,
            )
            error_cls = UnknownReference if status == HTTP.NOT_FOUND else BadHttpStatus
            return self._failed(
                operation,
                error_cls(status, response.text, url=url),
                status_code=status,
            )

        try:
            body = validate_response(model, response.json(), url=url)
        except ValueError as exc:
            error = MalformedResponse(f"{method} {url} returned non-JSON body: {exc}", url=url)
            return self._malformed(operation, url, status, response.text, error)
        except MalformedResponse as exc:
            return self._malformed(operation, url, status, response.text, exc)

        registry_requests(operation=operation, outcome="ok").inc()
        return ok(body, status_code=status)

    def _malformed(
        self,
        operation: str,
        url: str,
        status: int,
        body: str,
        error: MalformedResponse,
    ) -> RegistryResult[Any]:
        log.error(
            "schema.response_malformed",
            operation=operation,
            url=url,
            status_code=status,
            body=body,
            fields=error.fields,
        )
        return self._failed(operation, error, status_code=status)

    @staticmethod
    def _failed(
        operation: str, error: RegistryError, status_code: int | None = None
    ) -> RegistryResult[Any]:
        registry_requests(operation=operation, outcome=error.code).inc()
        return fail(error, status_code=status_code)


# ── Mock registry ─────────────────────────────────────────────────────────────

_ID_PATH = re.compile(r"/schemas/ids/(?P<id>\d+)$")
_VERSION_PATH = re.compile(r"/subjects/(?P<subject>[^/]+)/versions/(?P<version>[^/]+)$")
_REGISTER_PATH = re.compile(r"/subjects/(?P<subject>[^/]+)/versions$")


class MockSchemaRegistry:
    """
    In-memory schema registry for tests and local dev. Serves the registry
    REST surface through ``httpx.MockTransport`` and records every request.

    Usage::

        registry = MockSchemaRegistry()
        regid = registry.add("com.example.Foo-1", '{"type": "string"}')
        client = RegistryClient("http://registry", transport=registry.transport())
    """

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.requests: list[httpx.Request] = []
        self._subjects: dict[str, list[int]] = {}
        self._schemas: dict[int, str] = {}
        self._ids_by_schema: dict[str, int] = {}
        self._id_counter = 1
        self._failures: list[int | Exception] = []
        self._lock = threading.Lock()

    # ── Seeding / inspection ──────────────────────────────────────────────────

    def add(self, subject: str, schema_json: str) -> int:
        """Register *schema_json* under *subject* directly; return its id."""
        with self._lock:
            return self._add(subject, schema_json)

    def add_with_id(self, regid: int, schema_json: str) -> None:
        """Seed a schema under a fixed registration id, outside any subject."""
        with self._lock:
            self._schemas[regid] = schema_json
            self._ids_by_schema.setdefault(schema_json, regid)
            self._id_counter = max(self._id_counter, regid + 1)

    def versions(self, subject: str) -> list[int]:
        return list(self._subjects.get(subject, []))

    def fail_next(self, *failures: int | Exception) -> None:
        """Answer the next requests with these HTTP statuses or raise these errors."""
        with self._lock:
            self._failures.extend(failures)

    def count(self, method: str | None = None, path: str | None = None) -> int:
        return sum(
            1 for r in self.requests
            if (method is None or r.method == method)
            and (path is None or r.url.path == path)
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ── Request handling ──────────────────────────────────────────────────────

    def handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
            failure = self._failures.pop(0) if self._failures else None
        if self.latency:
            time.sleep(self.latency)
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return _error(failure, 50001, "Injected failure")

        path = request.url.path
        with self._lock:
            if request.method == "GET":
                match = _ID_PATH.search(path)
                if match:
                    return self._get_by_id(int(match["id"]))
                match = _VERSION_PATH.search(path)
                if match:
                    return self._get_version(match["subject"], match["version"])
            elif request.method == "POST":
                match = _REGISTER_PATH.search(path)
                if match:
                    return self._register(match["subject"], request)
        return _error(HTTP.NOT_FOUND, 404, "HTTP 404 Not Found")

    def _get_by_id(self, regid: int) -> httpx.Response:
        schema_json = self._schemas.get(regid)
        if schema_json is None:
            return _error(HTTP.NOT_FOUND, 40403, "Schema not found")
        return httpx.Response(HTTP.OK, json={"schema": schema_json})

    def _get_version(self, subject: str, version: str) -> httpx.Response:
        ids = self._subjects.get(subject)
        if not ids:
            return _error(HTTP.NOT_FOUND, 40401, "Subject not found.")
        if version == "latest":
            index = len(ids)
        elif version.isdigit() and 1 <= int(version) <= len(ids):
            index = int(version)
        else:
            return _error(HTTP.NOT_FOUND, 40402, "Version not found.")
        regid = ids[index - 1]
        return httpx.Response(
            HTTP.OK,
            json={
                "subject": subject,
                "version": index,
                "id": regid,
                "schema": self._schemas[regid],
            },
        )

    def _register(self, subject: str, request: httpx.Request) -> httpx.Response:
        try:
            schema_json = json.loads(request.content)["schema"]
        except (ValueError, KeyError, TypeError):
            return _error(HTTP.UNPROCESSABLE_ENTITY, 42201, "Invalid schema")
        return httpx.Response(HTTP.OK, json={"id": self._add(subject, schema_json)})

    def _add(self, subject: str, schema_json: str) -> int:
        regid = self._ids_by_schema.get(schema_json)
        if regid is None:
            regid = self._id_counter
            self._id_counter += 1
            self._schemas[regid] = schema_json
            self._ids_by_schema[schema_json] = regid
        ids = self._subjects.setdefault(subject, [])
        if regid not in ids:
            ids.append(regid)
        return regid


def _error(status: int, error_code: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error_code": error_code, "message": message})


__all__ = ["RegistryClient", "SubjectSchema", "MockSchemaRegistry"]
