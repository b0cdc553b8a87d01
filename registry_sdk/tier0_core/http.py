"""
registry_sdk.tier0_core.http
─────────────────────────────
HTTP primitives for talking to the schema registry: status codes, the
registry content type, and the typed result envelope every registry call
returns instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from registry_sdk.tier0_core.errors import RegistryError

T = TypeVar("T")

SCHEMA_REGISTRY_CONTENT_TYPE = "application/vnd.schemaregistry.v1+json"
DEFAULT_TIMEOUT = 10.0


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """HTTP status codes the registry client cares about."""

    OK = 200
    MULTIPLE_CHOICES = 300

    NOT_FOUND = 404
    UNPROCESSABLE_ENTITY = 422


def is_success(status_code: int) -> bool:
    return HTTP.OK <= status_code < HTTP.MULTIPLE_CHOICES


# ── Result envelope ───────────────────────────────────────────────────────

@dataclass
class RegistryResult(Generic[T]):
    """
    Typed result of a registry call. Exactly one of ``data``/``error`` is
    meaningful: check ``.ok`` or call ``.unwrap()`` to raise the error.
    """
    data: T | None = None
    error: RegistryError | None = None
    status_code: int | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return ``data`` or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]

    def as_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "error": self.error.to_dict()["error"] if self.error else None,
            "status_code": self.status_code,
            "meta": self.meta,
        }


def ok(data: T, status_code: int | None = None, **meta: Any) -> RegistryResult[T]:
    """Return a successful RegistryResult."""
    return RegistryResult(data=data, status_code=status_code, meta=dict(meta))


def fail(
    error: RegistryError, status_code: int | None = None, **meta: Any
) -> RegistryResult[Any]:
    """Return a failed RegistryResult."""
    return RegistryResult(error=error, status_code=status_code, meta=dict(meta))


__all__ = [
    "HTTP",
    "SCHEMA_REGISTRY_CONTENT_TYPE",
    "DEFAULT_TIMEOUT",
    "RegistryResult",
    "is_success",
    "ok",
    "fail",
]
