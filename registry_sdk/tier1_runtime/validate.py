"""
registry_sdk.tier1_runtime.validate
──────────────────────────────────────
Response contracts for the schema registry REST API via Pydantic v2.
Raises MalformedResponse (not raw Pydantic errors) so every caller sees the
same error type for a bad registry answer.
"""
from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from registry_sdk.tier0_core.errors import MalformedResponse

T = TypeVar("T", bound=BaseModel)


class _RegistryModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SchemaByIdResponse(_RegistryModel):
    """GET /schemas/ids/{id}"""
    schema_text: str = Field(alias="schema")


class SubjectVersionResponse(_RegistryModel):
    """GET /subjects/{subject}/versions/{version}"""
    id: int
    schema_text: str = Field(alias="schema")
    subject: str | None = None
    version: int | None = None


class RegisterResponse(_RegistryModel):
    """POST /subjects/{subject}/versions"""
    id: int


def validate_response(model: Type[T], data: Any, **metadata: Any) -> T:
    """
    Validate a decoded registry response body against *model*.
    Raises MalformedResponse with per-field messages on failure.

    Usage:
        body = validate_response(RegisterResponse, response.json())
        body.id
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]) or "body": err["msg"]
            for err in exc.errors()
        }
        raise MalformedResponse(
            f"{model.__name__} validation failed: {fields}",
            fields=fields,
            **metadata,
        ) from exc


__all__ = [
    "SchemaByIdResponse",
    "SubjectVersionResponse",
    "RegisterResponse",
    "validate_response",
]
