"""
registry_sdk.tier4_advanced.codec
───────────────────────────────────
Encoder/decoder construction on top of the schema resolver.

Two flavors:
- make_decoder / make_encoder resolve the schema once and return a closure
  bound to it. Prefer these when encoding or decoding many records against
  the same reference.
- get_decoder / get_encoder return closures that resolve the schema on every
  call (a cache hit after the first). Convenient when holding on to a
  closure is awkward.

decode() handles payloads tagged with a registration id; decode_with() and
encode() work on untagged bodies against an explicit reference.

Every entry point accepts ``encoding`` ("avro_binary" | "avro_json"); when
omitted the resolver's configured default applies.
"""
from __future__ import annotations

from typing import Any, Callable

from registry_sdk.tier1_runtime import serialize
from registry_sdk.tier1_runtime.reference import RefLike, as_reference
from registry_sdk.tier1_runtime.wire import tag_data, untag_data
from registry_sdk.tier4_advanced.schemas import SchemaResolver, get_resolver

Decoder = Callable[[bytes], Any]
Encoder = Callable[[Any], bytes]


def _setup(
    resolver: SchemaResolver | None, encoding: str | None
) -> tuple[SchemaResolver, str]:
    resolver = resolver or get_resolver()
    return resolver, serialize.check_encoding(encoding or resolver.default_encoding)


# ── Eager-bind ────────────────────────────────────────────────────────────────

def make_decoder(
    ref: RefLike, encoding: str | None = None, *, resolver: SchemaResolver | None = None
) -> Decoder:
    """Resolve *ref* now and return a decoder bound to that schema."""
    resolver, encoding = _setup(resolver, encoding)
    schema = resolver.resolve(ref)

    def decoder(data: bytes) -> Any:
        return serialize.decode(schema, data, encoding)

    return decoder


def make_encoder(
    ref: RefLike, encoding: str | None = None, *, resolver: SchemaResolver | None = None
) -> Encoder:
    """Resolve *ref* now and return an encoder bound to that schema."""
    resolver, encoding = _setup(resolver, encoding)
    schema = resolver.resolve(ref)

    def encoder(value: Any) -> bytes:
        return serialize.encode(schema, value, encoding)

    return encoder


# ── Lookup-per-call ───────────────────────────────────────────────────────────

def get_decoder(
    ref: RefLike, encoding: str | None = None, *, resolver: SchemaResolver | None = None
) -> Decoder:
    """Return a decoder that resolves *ref* on every call."""
    resolver, encoding = _setup(resolver, encoding)
    reference = as_reference(ref)

    def decoder(data: bytes) -> Any:
        return serialize.decode(resolver.resolve(reference), data, encoding)

    return decoder


def get_encoder(
    ref: RefLike, encoding: str | None = None, *, resolver: SchemaResolver | None = None
) -> Encoder:
    """Return an encoder that resolves *ref* on every call."""
    resolver, encoding = _setup(resolver, encoding)
    reference = as_reference(ref)

    def encoder(value: Any) -> bytes:
        return serialize.encode(resolver.resolve(reference), value, encoding)

    return encoder


# ── One-shot entry points ─────────────────────────────────────────────────────

def decode(
    payload: bytes, encoding: str | None = None, *, resolver: SchemaResolver | None = None
) -> Any:
    """Decode a payload tagged with its registration id."""
    regid, body = untag_data(payload)
    return decode_with(regid, body, encoding, resolver=resolver)


def decode_with(
    ref: RefLike,
    body: bytes,
    encoding: str | None = None,
    *,
    resolver: SchemaResolver | None = None,
) -> Any:
    """Decode an untagged body against an explicit reference."""
    return get_decoder(ref, encoding, resolver=resolver)(body)


def encode(
    ref: RefLike,
    value: Any,
    encoding: str | None = None,
    *,
    resolver: SchemaResolver | None = None,
) -> bytes:
    """Encode *value* against *ref*. The result is not tagged."""
    return get_encoder(ref, encoding, resolver=resolver)(value)


def encode_tagged(
    regid: int,
    value: Any,
    encoding: str | None = None,
    *,
    resolver: SchemaResolver | None = None,
) -> bytes:
    """Encode *value* against registration id *regid* and prefix the tag."""
    return tag_data(regid, encode(regid, value, encoding, resolver=resolver))


__all__ = [
    "Decoder",
    "Encoder",
    "make_decoder",
    "make_encoder",
    "get_decoder",
    "get_encoder",
    "decode",
    "decode_with",
    "encode",
    "encode_tagged",
]
