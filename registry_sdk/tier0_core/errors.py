"""
registry_sdk.tier0_core.errors
───────────────────────────────
Error taxonomy for schema resolution, registration and wire tagging, with
optional Sentry/OTel error capture. Constructing a RegistryError reports it
if an error backend is configured.

Minimal stack: Sentry OSS + OTel error signals
Select via:    REGISTRY_ERROR_BACKEND=sentry|otel|none
"""
from __future__ import annotations

import os
from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class RegistryError(Exception):
    """
    Base class for all registry_sdk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context (URL, response body, ...), never shown to users
    - metadata: structured fields for logs and error backends
    """

    code: str = "registry_error"
    user_message: str = "Schema registry operation failed."

    def __init__(
        self,
        detail: str | None = None,
        *,
        user_message: str | None = None,
        **metadata: Any,
    ) -> None:
        self.user_message = user_message or self.__class__.user_message
        self.detail = detail or self.user_message
        self.metadata = metadata
        super().__init__(self.detail)
        _capture(self)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class TransportError(RegistryError):
    """Connection, DNS or timeout failure talking to the registry."""
    code = "transport_error"
    user_message = "Schema registry is unreachable."


class BadHttpStatus(RegistryError):
    """Registry answered with a non-2xx status."""
    code = "bad_http_status"
    user_message = "Schema registry rejected the request."

    def __init__(
        self,
        status_code: int,
        body: str = "",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            detail or f"bad http status {status_code}: {body}",
            status_code=status_code,
            **metadata,
        )

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["error"]["status_code"] = self.status_code
        return d


class UnknownReference(BadHttpStatus):
    """The registry does not know the requested id or subject (HTTP 404)."""
    code = "unknown_reference"
    user_message = "Schema reference is not registered."


class MalformedResponse(RegistryError):
    """Registry response body is not JSON or lacks the expected fields."""
    code = "malformed_response"
    user_message = "Schema registry returned an unexpected response."

    def __init__(
        self,
        detail: str | None = None,
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(detail, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class MalformedTag(RegistryError):
    """Tagged payload is too short, carries an unknown version byte, or the id is out of range."""
    code = "malformed_tag"
    user_message = "Payload is not tagged with a schema registration id."


class SchemaParseError(RegistryError):
    """Schema JSON could not be parsed by the codec library."""
    code = "schema_parse_error"
    user_message = "Schema could not be parsed."


class ConfigurationError(RegistryError):
    """Misconfiguration detected at startup."""
    code = "configuration_error"
    user_message = "registry_sdk is misconfigured."


# ── Error capture backend ─────────────────────────────────────────────────────

def _capture(error: RegistryError) -> None:
    """Send error to configured backend. Called automatically by RegistryError.__init__."""
    backend = os.getenv("REGISTRY_ERROR_BACKEND", "none").lower()
    if backend == "none":
        return
    if backend == "sentry":
        _capture_sentry(error)
    elif backend == "otel":
        _capture_otel(error)


def _capture_sentry(error: RegistryError) -> None:
    try:
        import sentry_sdk
    except ImportError:
        return
    if isinstance(error, (TransportError, ConfigurationError)):
        sentry_sdk.capture_exception(error)
    else:
        sentry_sdk.capture_message(
            str(error),
            level="warning",
            extras={"code": error.code, **error.metadata},
        )


def _capture_otel(error: RegistryError) -> None:
    try:
        from opentelemetry import trace
    except ImportError:
        return
    span = trace.get_current_span()
    span.record_exception(error)
    span.set_status(trace.StatusCode.ERROR, str(error))


__all__ = [
    "RegistryError",
    "TransportError",
    "BadHttpStatus",
    "UnknownReference",
    "MalformedResponse",
    "MalformedTag",
    "SchemaParseError",
    "ConfigurationError",
]
