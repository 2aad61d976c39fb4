"""
Exception types raised by the share search core.

All errors derive from PowError, which is a ValueError so that callers
validating untrusted job data with `except ValueError` keep working.
"""


class PowError(ValueError):
    """Base class for share search errors."""


class VarintError(PowError):
    """A base-128 varint could not be decoded."""


class VarintTruncated(VarintError):
    """The buffer ended before a terminating varint byte was seen."""


class VarintOverflow(VarintError):
    """The varint continued past 63 bits of shift."""


class MalformedHeader(PowError):
    """The header template prefix could not be decoded (strict mode)."""


class NonceOffsetError(PowError):
    """The resolved nonce offset leaves no room for a 4-byte nonce."""

    def __init__(self, offset: int, length: int):
        self.offset = offset
        self.length = length
        super().__init__(
            f"nonce offset {offset} does not fit a 4-byte nonce in a {length}-byte header template"
        )


class InvalidDigest(PowError):
    """The hash provider returned a digest shorter than 32 bytes."""

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"digest must be at least 32 bytes, got {length}")
