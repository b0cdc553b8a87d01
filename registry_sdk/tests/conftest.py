"""
registry_sdk test configuration.

All tests run against MockSchemaRegistry through httpx.MockTransport; no
registry or network access required.
"""
from __future__ import annotations

import os

import pytest

# ── Environment defaults ───────────────────────────────────────────────────
# These must be set before any registry_sdk modules are imported.

os.environ.setdefault("SCHEMA_REGISTRY_URL", "http://schema-registry.test:8081")
os.environ.setdefault("REGISTRY_LOG_FORMAT", "console")
os.environ.setdefault("REGISTRY_ERROR_BACKEND", "none")
os.environ.setdefault("APP_ENV", "test")

REGISTRY_URL = "http://schema-registry.test:8081"


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset process-wide config, cache and resolver between tests so no state
    bleeds across tests.
    """
    from registry_sdk.tier0_core.config import _reset_config
    from registry_sdk.tier2_reliability.cache import _reset_cache
    from registry_sdk.tier4_advanced.schemas import _reset_resolver

    yield

    _reset_config()
    _reset_cache()
    _reset_resolver()


@pytest.fixture
def mock_registry():
    """Return an empty MockSchemaRegistry."""
    from registry_sdk.tier3_platform.registry_client import MockSchemaRegistry
    return MockSchemaRegistry()


@pytest.fixture
def client(mock_registry):
    """Return a RegistryClient wired to mock_registry."""
    from registry_sdk.tier3_platform.registry_client import RegistryClient
    with RegistryClient(REGISTRY_URL, transport=mock_registry.transport()) as c:
        yield c


@pytest.fixture
def resolver(client):
    """Return a SchemaResolver with a private cache, backed by mock_registry."""
    from registry_sdk.tier4_advanced.schemas import SchemaResolver
    return SchemaResolver(client)
