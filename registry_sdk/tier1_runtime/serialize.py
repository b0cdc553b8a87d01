"""
registry_sdk.tier1_runtime.serialize
───────────────────────────────────────
Avro codec boundary. Everything that touches the Avro library goes through
this module; the resolver and codec factory treat parsed schemas as opaque.

Formats: avro_binary (default) | avro_json

Minimal stack: fastavro
"""
from __future__ import annotations

import io
import json
from typing import Any

import fastavro
from fastavro.schema import (
    SchemaParseException,
    UnknownType,
    fingerprint as _fingerprint,
    to_parsing_canonical_form,
)

from registry_sdk.tier0_core.errors import SchemaParseError

Schema = Any
ENCODINGS = ("avro_binary", "avro_json")
DEFAULT_ENCODING = "avro_binary"

# Keys fastavro adds to parsed schemas; not part of the Avro schema language.
_PARSER_KEYS = frozenset({"__fastavro_parsed", "__named_schemas"})


def _load_json(schema_json: str | bytes) -> Any:
    if isinstance(schema_json, bytes):
        schema_json = schema_json.decode("utf-8")
    try:
        return json.loads(schema_json)
    except json.JSONDecodeError as exc:
        raise SchemaParseError(f"schema is not valid JSON: {exc}") from exc


def parse_schema(schema_json: str | bytes) -> Schema:
    """
    Parse schema JSON text into a fastavro schema.

    Usage:
        schema = parse_schema('{"type": "string"}')
    """
    try:
        return fastavro.parse_schema(_load_json(schema_json))
    except (SchemaParseException, UnknownType) as exc:
        raise SchemaParseError(f"invalid avro schema: {exc}") from exc


def check_encoding(encoding: str) -> str:
    if encoding not in ENCODINGS:
        raise ValueError(
            f"Unsupported avro encoding: {encoding!r}. Supported: {', '.join(ENCODINGS)}"
        )
    return encoding


def encode(schema: Schema, value: Any, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Encode a single record (no container, no tag)."""
    if check_encoding(encoding) == "avro_json":
        out = io.StringIO()
        fastavro.json_writer(out, schema, [value])
        return out.getvalue().strip().encode("utf-8")
    buf = io.BytesIO()
    fastavro.schemaless_writer(buf, schema, value)
    return buf.getvalue()


def decode(schema: Schema, data: bytes, encoding: str = DEFAULT_ENCODING) -> Any:
    """Decode a single record encoded by encode()."""
    if check_encoding(encoding) == "avro_json":
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        for record in fastavro.json_reader(io.StringIO(text), schema):
            return record
        raise ValueError("avro_json payload contains no record")
    return fastavro.schemaless_reader(io.BytesIO(data), schema)


def _strip_parser_keys(node: Any) -> Any:
    if isinstance(node, dict):
        return {k: _strip_parser_keys(v) for k, v in node.items() if k not in _PARSER_KEYS}
    if isinstance(node, list):
        return [_strip_parser_keys(item) for item in node]
    return node


def schema_to_json(schema: Schema | str | bytes) -> str:
    """Render a schema as JSON text. Text input is returned unchanged."""
    if isinstance(schema, bytes):
        return schema.decode("utf-8")
    if isinstance(schema, str):
        return schema
    return json.dumps(_strip_parser_keys(schema), separators=(",", ":"))


def fingerprint(schema_json: str | bytes) -> int:
    """
    CRC-64-AVRO fingerprint of the schema's parsing canonical form, as an
    unsigned 64-bit integer. Whitespace and attribute order do not change it.

    Implementations that hash the raw schema JSON bytes instead agree with
    this value only when the text is already in parsing canonical form. When
    sharing ``<name>-<fp>`` subjects with such a writer, pass its fingerprint
    explicitly to register_schema_with_fp() rather than relying on this one.
    """
    canonical = to_parsing_canonical_form(_load_json(schema_json))
    digest = _fingerprint(canonical, "CRC-64-AVRO")
    # fastavro renders the CRC as little-endian bytes, like the Java library
    return int.from_bytes(bytes.fromhex(digest), "little")


__all__ = [
    "Schema",
    "ENCODINGS",
    "check_encoding",
    "DEFAULT_ENCODING",
    "parse_schema",
    "encode",
    "decode",
    "schema_to_json",
    "fingerprint",
]
