"""
registry_sdk.tier1_runtime.reference
──────────────────────────────────────
Schema references and their canonical cache keys.

A reference is either a registry-assigned registration id (``int``) or a
``NameFingerprint`` pair. Registration ids are compact on the wire (5 bytes
of overhead) but are assigned at runtime and differ across registries. A
name + fingerprint pair is static (the fingerprint can be computed at build
time); the name is part of the registry subject to lower the risk of a
collision on the 64-bit fingerprint.

Usage:
    ref = as_reference(("com.example.Foo", 123456789))
    normalize(ref)                       # → (b"com.example.Foo", b"123456789")
    subject_for("com.example.Foo", 123)  # → "com.example.Foo-123"
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

Name = Union[str, bytes]
Fingerprint = Union[int, str, bytes]


@dataclass(frozen=True)
class NameFingerprint:
    """Schema addressed by logical name and 64-bit fingerprint."""
    name: Name
    fp: Fingerprint

    @property
    def subject(self) -> str:
        return subject_for(self.name, self.fp)


Reference = Union[int, NameFingerprint]
CanonicalKey = Union[int, Tuple[bytes, bytes]]
RefLike = Union[int, NameFingerprint, Tuple[Name, Fingerprint]]


def as_reference(obj: RefLike) -> Reference:
    """
    Convert caller input into a Reference. Call once at the public boundary.

    Accepts a non-negative int, a NameFingerprint, or a ``(name, fp)`` tuple.
    """
    if isinstance(obj, NameFingerprint):
        return obj
    if isinstance(obj, bool):
        raise ValueError(f"not a schema reference: {obj!r}")
    if isinstance(obj, int):
        if obj < 0:
            raise ValueError(f"registration id must be non-negative, got {obj}")
        return obj
    if isinstance(obj, tuple) and len(obj) == 2:
        name, fp = obj
        if isinstance(name, (str, bytes)) and isinstance(fp, (int, str, bytes)) \
                and not isinstance(fp, bool):
            return NameFingerprint(name, fp)
    raise ValueError(f"not a schema reference: {obj!r}")


def _to_bytes(value: Name | Fingerprint) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, int):
        return str(value).encode("ascii")
    return value.encode("utf-8")


def _to_text(value: Name | Fingerprint) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def normalize(ref: Reference) -> CanonicalKey:
    """
    Return the canonical cache key for *ref*.

    Ids pass through; both fields of a name/fingerprint pair become bytes,
    with integer fingerprints rendered in decimal first.
    """
    if isinstance(ref, NameFingerprint):
        return (_to_bytes(ref.name), _to_bytes(ref.fp))
    return ref


def subject_for(name: Name, fp: Fingerprint) -> str:
    """Registry subject for a name/fingerprint pair: ``<name>-<fp>``."""
    return f"{_to_text(name)}-{_to_text(fp)}"


__all__ = [
    "NameFingerprint",
    "Reference",
    "CanonicalKey",
    "RefLike",
    "as_reference",
    "normalize",
    "subject_for",
]
