"""
registry_sdk.tier1_runtime.wire
─────────────────────────────────
Confluent schema-id tagging convention:

    [0x00][registration id, 4-byte big-endian unsigned][encoded record]

The first byte is a format version and is always 0. Any other reader or
writer of this convention depends on the exact layout.
"""
from __future__ import annotations

import struct

from registry_sdk.tier0_core.errors import MalformedTag

MAGIC_BYTE = 0
MAX_REGISTRATION_ID = 2**32 - 1

_HEADER = struct.Struct(">BI")
HEADER_SIZE = _HEADER.size  # 5


def tag_data(regid: int, body: bytes) -> bytes:
    """
    Prefix *body* with the 5-byte header for *regid*.

    Usage:
        tag_data(5, b"abc")  # → b"\\x00\\x00\\x00\\x00\\x05abc"
    """
    if isinstance(regid, bool) or not 0 <= regid <= MAX_REGISTRATION_ID:
        raise MalformedTag(
            f"registration id {regid!r} does not fit in 32 bits",
            regid=regid,
        )
    if not isinstance(body, (bytes, bytearray, memoryview)):
        raise TypeError(f"body must be bytes-like, got {type(body).__name__}")
    return _HEADER.pack(MAGIC_BYTE, regid) + bytes(body)


def untag_data(payload: bytes) -> tuple[int, bytes]:
    """Split a tagged payload into ``(registration id, body)``."""
    if len(payload) < HEADER_SIZE:
        raise MalformedTag(
            f"tagged payload must be at least {HEADER_SIZE} bytes, got {len(payload)}",
            length=len(payload),
        )
    version, regid = _HEADER.unpack_from(payload)
    if version != MAGIC_BYTE:
        raise MalformedTag(
            f"unsupported tag version byte {version}",
            version=version,
        )
    return regid, bytes(payload[HEADER_SIZE:])


__all__ = ["MAGIC_BYTE", "HEADER_SIZE", "MAX_REGISTRATION_ID", "tag_data", "untag_data"]
