"""
registry_sdk
────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from registry_sdk.tier0_core.logging import get_logger
from registry_sdk.tier0_core.errors import (
    RegistryError,
    TransportError,
    BadHttpStatus,
    UnknownReference,
    MalformedResponse,
    MalformedTag,
    SchemaParseError,
    ConfigurationError,
)
from registry_sdk.tier0_core.config import get_config, RegistryConfig
from registry_sdk.tier0_core.http import RegistryResult

from registry_sdk.tier1_runtime.reference import NameFingerprint, as_reference, normalize, subject_for
from registry_sdk.tier1_runtime.wire import tag_data, untag_data
from registry_sdk.tier1_runtime.serialize import fingerprint, parse_schema

from registry_sdk.tier2_reliability.cache import SchemaCache, get_cache
from registry_sdk.tier2_reliability.singleflight import SingleFlight

from registry_sdk.tier3_platform.registry_client import MockSchemaRegistry, RegistryClient, SubjectSchema

from registry_sdk.tier4_advanced.schemas import (
    SchemaResolver,
    get_resolver,
    set_resolver,
    shutdown,
    resolve,
    maybe_download,
    get_schema,
    register_schema,
    register_schema_with_fp,
)
from registry_sdk.tier4_advanced.codec import (
    make_decoder,
    make_encoder,
    get_decoder,
    get_encoder,
    decode,
    decode_with,
    encode,
    encode_tagged,
)

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "RegistryError", "TransportError", "BadHttpStatus", "UnknownReference",
    "MalformedResponse", "MalformedTag", "SchemaParseError", "ConfigurationError",
    # config
    "get_config", "RegistryConfig",
    # http
    "RegistryResult",
    # references
    "NameFingerprint", "as_reference", "normalize", "subject_for",
    # wire
    "tag_data", "untag_data",
    # avro
    "fingerprint", "parse_schema",
    # cache
    "SchemaCache", "get_cache", "SingleFlight",
    # registry client
    "RegistryClient", "SubjectSchema", "MockSchemaRegistry",
    # resolver
    "SchemaResolver", "get_resolver", "set_resolver", "shutdown",
    "resolve", "maybe_download", "get_schema",
    "register_schema", "register_schema_with_fp",
    # codec
    "make_decoder", "make_encoder", "get_decoder", "get_encoder",
    "decode", "decode_with", "encode", "encode_tagged",
]
