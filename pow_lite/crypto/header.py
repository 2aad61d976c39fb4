"""
Header template layout — nonce offset resolution and nonce insertion.

A header template (blob) starts with:
  - major version   (varint)
  - minor version   (varint)
  - timestamp       (varint)
  - previous hash   (32 bytes)
  - nonce           (4 bytes, little-endian)
followed by the rest of the template (merkle root, tx count, ...).

The nonce offset is found by walking the three varints and skipping the
previous hash. When the prefix cannot be decoded the canonical offset is
used instead, unless strict mode asks for an error.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from .varint import decode_varint
from ..errors import MalformedHeader, NonceOffsetError, VarintError

logger = logging.getLogger(__name__)

PREV_HASH_SIZE = 32
NONCE_SIZE = 4

# Canonical layout: 1-byte major + 1-byte minor + 5-byte timestamp varint
# + 32-byte previous hash.
DEFAULT_NONCE_OFFSET = 39

# Nonce wire format: u32, little-endian.
_NONCE_STRUCT = struct.Struct("<I")


@dataclass(frozen=True)
class HeaderLayout:
    """Decoded header template prefix."""
    major_version: int
    minor_version: int
    timestamp: int
    prev_hash: bytes
    nonce_offset: int


def parse_header(blob: bytes) -> HeaderLayout:
    """
    Decode the header prefix fields.

    Raises:
        MalformedHeader: a varint is truncated or overflows, or the
            previous hash is cut short
    """
    offset = 0
    fields = []
    try:
        for _ in range(3):
            value, consumed = decode_varint(blob, offset)
            fields.append(value)
            offset += consumed
    except VarintError as e:
        raise MalformedHeader(f"cannot decode header prefix: {e}") from e

    prev_hash = bytes(blob[offset:offset + PREV_HASH_SIZE])
    if len(prev_hash) != PREV_HASH_SIZE:
        raise MalformedHeader(
            f"previous hash truncated: {len(prev_hash)} of {PREV_HASH_SIZE} bytes"
        )
    major, minor, timestamp = fields
    return HeaderLayout(
        major_version=major,
        minor_version=minor,
        timestamp=timestamp,
        prev_hash=prev_hash,
        nonce_offset=offset + PREV_HASH_SIZE,
    )


def resolve_nonce_offset(
    blob: bytes, strict: bool = False, fallback: int = DEFAULT_NONCE_OFFSET
) -> int:
    """
    Locate the nonce field inside a header template.

    Args:
        blob: Header template bytes
        strict: Raise MalformedHeader instead of using `fallback`
        fallback: Offset used when the varint prefix cannot be decoded

    Returns:
        Byte offset of the 4-byte nonce
    """
    offset = 0
    try:
        for _ in range(3):  # major, minor, timestamp
            _, consumed = decode_varint(blob, offset)
            offset += consumed
    except VarintError as e:
        if strict:
            raise MalformedHeader(f"cannot decode header prefix: {e}") from e
        logger.debug(f"Header prefix undecodable ({e}), using fallback offset {fallback}")
        return fallback
    return offset + PREV_HASH_SIZE


def encode_nonce(nonce: int) -> bytes:
    """Encode a 32-bit nonce in its little-endian wire order."""
    if not 0 <= nonce <= 0xFFFFFFFF:
        raise ValueError(f"nonce must be a 32-bit unsigned integer, got {nonce}")
    return _NONCE_STRUCT.pack(nonce)


def _checked_offset(blob: bytes, strict: bool, fallback: int) -> int:
    offset = resolve_nonce_offset(blob, strict=strict, fallback=fallback)
    if offset < 0 or offset + NONCE_SIZE > len(blob):
        raise NonceOffsetError(offset, len(blob))
    return offset


def insert_nonce(
    blob: bytes,
    nonce: int,
    strict: bool = False,
    fallback: int = DEFAULT_NONCE_OFFSET,
) -> Tuple[bytes, int]:
    """
    Write `nonce` into a copy of `blob` at the resolved nonce offset.

    The input buffer is never modified.

    Returns:
        Tuple of (candidate_blob, offset_used)

    Raises:
        NonceOffsetError: the blob is too short for a nonce at the offset
    """
    nonce_bytes = encode_nonce(nonce)
    offset = _checked_offset(blob, strict, fallback)
    candidate = bytearray(blob)
    candidate[offset:offset + NONCE_SIZE] = nonce_bytes
    return bytes(candidate), offset


def extract_nonce(
    blob: bytes, strict: bool = False, fallback: int = DEFAULT_NONCE_OFFSET
) -> int:
    """Read the nonce back out of a candidate blob."""
    offset = _checked_offset(blob, strict, fallback)
    return _NONCE_STRUCT.unpack_from(blob, offset)[0]
