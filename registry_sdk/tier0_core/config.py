"""
registry_sdk.tier0_core.config
────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic. A missing registry URL raises
ConfigurationError when the config is first loaded, not on the first fetch.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from registry_sdk.tier0_core.errors import ConfigurationError

Encoding = Literal["avro_binary", "avro_json"]


class RegistryConfig(BaseSettings):
    """
    Typed registry_sdk configuration. Only the registry URL is required.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Registry ──────────────────────────────────────────────────────────────
    schema_registry_url: str = Field(alias="SCHEMA_REGISTRY_URL")
    schema_registry_username: str | None = Field(
        default=None, alias="SCHEMA_REGISTRY_USERNAME"
    )
    schema_registry_password: SecretStr | None = Field(
        default=None, alias="SCHEMA_REGISTRY_PASSWORD"
    )
    schema_registry_timeout: float = Field(
        default=10.0, gt=0, alias="SCHEMA_REGISTRY_TIMEOUT"
    )

    # ── Codec ─────────────────────────────────────────────────────────────────
    default_encoding: Encoding = Field(
        default="avro_binary", alias="REGISTRY_DEFAULT_ENCODING"
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="REGISTRY_LOG_LEVEL")
    log_format: str = Field(default="json", alias="REGISTRY_LOG_FORMAT")

    # ── Error reporting ───────────────────────────────────────────────────────
    error_backend: str = Field(default="none", alias="REGISTRY_ERROR_BACKEND")

    @field_validator("schema_registry_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"schema registry URL must be http(s), got {v!r}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_auth_pair(self) -> "RegistryConfig":
        if (self.schema_registry_username is None) != (self.schema_registry_password is None):
            raise ValueError(
                "SCHEMA_REGISTRY_USERNAME and SCHEMA_REGISTRY_PASSWORD must be set together"
            )
        return self

    @property
    def basic_auth(self) -> tuple[str, str] | None:
        if self.schema_registry_username is None or self.schema_registry_password is None:
            return None
        return (
            self.schema_registry_username,
            self.schema_registry_password.get_secret_value(),
        )


@lru_cache(maxsize=1)
def get_config() -> RegistryConfig:
    """
    Return the singleton registry config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    try:
        return RegistryConfig()  # type: ignore[call-arg]
    except ValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]) or "config": err["msg"]
            for err in exc.errors()
        }
        raise ConfigurationError(
            f"invalid schema registry configuration: {fields}",
            user_message="Schema registry configuration is missing or invalid.",
            fields=fields,
        ) from exc


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["Encoding", "RegistryConfig", "get_config"]
