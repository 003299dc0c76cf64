"""HMAC-SHA256 (RFC 2104) built on the in-house SHA-256."""

from typing import Optional

from licensechain.common.exceptions import InvalidInputError
from licensechain.crypto.engine import BLOCK_SIZE, to_bytes
from licensechain.crypto.sha256_digest import sha256

INNER_PAD = 0x36
OUTER_PAD = 0x5C


def derive_pads(key: bytes) -> tuple[bytes, bytes]:
    """Return (inner_pad, outer_pad), each exactly one block long.

    Keys longer than a block are first hashed down; shorter keys are
    zero-filled.
    """
    if len(key) > BLOCK_SIZE:
        key = sha256(key)
    key = key.ljust(BLOCK_SIZE, b"\x00")
    inner = bytes(k ^ INNER_PAD for k in key)
    outer = bytes(k ^ OUTER_PAD for k in key)
    return inner, outer


def hmac_sha256(message: Optional[str | bytes], key: Optional[str | bytes]) -> bytes:
    """Raw 32-byte HMAC-SHA256 of message under key."""
    if message is None:
        raise InvalidInputError("HMAC message must not be None")
    if key is None:
        raise InvalidInputError("HMAC key must not be None")

    inner, outer = derive_pads(to_bytes(key))
    return sha256(outer + sha256(inner + to_bytes(message)))


def hmac_sha256_hex(message: Optional[str | bytes], key: Optional[str | bytes]) -> str:
    """Lowercase hex HMAC-SHA256 (64 characters)."""
    return hmac_sha256(message, key).hex()
