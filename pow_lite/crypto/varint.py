"""
Base-128 varint decoding, as used by the header template prefix.

Each byte carries 7 value bits (low bits first); the high bit flags that
another byte follows.
"""

from typing import Tuple

from ..errors import VarintOverflow, VarintTruncated

_MAX_SHIFT = 63


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode one unsigned varint from `data` starting at `offset`.

    Args:
        data: Buffer holding the varint
        offset: Index of the first varint byte

    Returns:
        Tuple of (value, bytes_consumed)

    Raises:
        VarintTruncated: buffer ended before a terminating byte
        VarintOverflow: shift would exceed 63 bits
    """
    value = 0
    shift = 0
    pos = offset
    while pos < len(data):
        byte = data[pos]
        value |= (byte & 0x7F) << shift
        pos += 1
        if not byte & 0x80:
            return value, pos - offset
        shift += 7
        if shift > _MAX_SHIFT:
            raise VarintOverflow(f"varint at offset {offset} exceeds {_MAX_SHIFT} bits")
    raise VarintTruncated(f"varint at offset {offset} truncated after {pos - offset} bytes")


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a varint (used to build test headers)."""
    if value < 0:
        raise ValueError("varint value must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)
