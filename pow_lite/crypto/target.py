"""
Difficulty target parsing and digest evaluation.

Two target encodings are accepted:
  - 4 bytes: compact u32 (little-endian) expanded to a 64-bit bound as
    2^64 // (2^32 // raw), truncating at each step
  - 8 bytes: the 64-bit bound itself (little-endian)

Any other length means the job carries no difficulty and every digest is
accepted. A digest is compared through its trailing 8 bytes, read as a
little-endian u64.
"""

import struct
from typing import Optional

import numpy as np

from ..errors import InvalidDigest

MIN_DIGEST_SIZE = 32
UINT64_MAX = (1 << 64) - 1

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def parse_target(target: Optional[bytes]) -> Optional[int]:
    """
    Expand a job target into a 64-bit bound.

    Args:
        target: 0, 4 or 8 target bytes (None is treated as empty)

    Returns:
        The 64-bit target, or None when every digest is accepted
    """
    if not target:
        return None
    if len(target) == 4:
        raw = _U32.unpack(target)[0]
        if raw == 0:
            return None
        # raw == 0xFFFFFFFF expands to exactly 2^64; every u64 passes either way.
        return min((1 << 64) // ((1 << 32) // raw), UINT64_MAX)
    if len(target) == 8:
        return _U64.unpack(target)[0]
    return None


def is_unsupported_target(target: Optional[bytes]) -> bool:
    """True when a non-empty target has a length that is silently accepted-all."""
    return bool(target) and len(target) not in (4, 8)


def describe_target(target: Optional[bytes]) -> str:
    """Human-readable target summary for logs."""
    bound = parse_target(target)
    if bound is None:
        if is_unsupported_target(target):
            return f"none (unsupported {len(target)}-byte target, accepting all)"
        return "none (accepting all)"
    difficulty = (1 << 64) // max(bound, 1)
    return f"0x{bound:016x} (difficulty ~{difficulty})"


def digest_value(digest: bytes) -> int:
    """Trailing 8 bytes of a digest as a little-endian u64."""
    if len(digest) < MIN_DIGEST_SIZE:
        raise InvalidDigest(len(digest))
    return _U64.unpack_from(digest, len(digest) - 8)[0]


def digest_meets(digest: bytes, bound: Optional[int]) -> bool:
    """Check a digest against an already parsed target (None accepts all)."""
    if bound is None:
        return True
    return digest_value(digest) <= bound


def meets_target(digest: bytes, target: Optional[bytes]) -> bool:
    """
    Check whether a digest satisfies a job target.

    Raises:
        InvalidDigest: the job has a target and the digest is under 32 bytes
    """
    return digest_meets(digest, parse_target(target))


def meets_target_batch(digests: np.ndarray, target: Optional[bytes]) -> np.ndarray:
    """
    Vectorized meets_target over a batch of digests.

    Args:
        digests: (N, L) uint8 array, one digest per row
        target: Job target bytes

    Returns:
        (N,) bool array
    """
    digests = np.asarray(digests, dtype=np.uint8)
    if digests.ndim != 2:
        raise ValueError(f"digests must be a 2-D array, got shape {digests.shape}")
    bound = parse_target(target)
    if bound is None:
        return np.ones(digests.shape[0], dtype=bool)
    if digests.shape[1] < MIN_DIGEST_SIZE:
        raise InvalidDigest(digests.shape[1])

    tails = np.ascontiguousarray(digests[:, -8:]).view("<u8").reshape(-1)
    return tails <= np.uint64(bound)
