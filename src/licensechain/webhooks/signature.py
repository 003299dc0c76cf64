"""
Webhook signature generation and verification.

Signature format: ``sha256=<64 lowercase hex chars>``, the HMAC-SHA256 of
the raw request body under the shared webhook secret. The body must be
verified exactly as received; re-serialized JSON will not match.
"""

import logging
from typing import Iterator, Optional

from licensechain.common.exceptions import InvalidInputError
from licensechain.crypto.engine import to_bytes
from licensechain.crypto.mac import hmac_sha256_hex

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-LicenseChain-Signature"
SIGNATURE_PREFIX = "sha256="


def generate_signature(payload: str | bytes, secret: str | bytes) -> str:
    """Compute the ``sha256=<hex>`` signature for a payload."""
    return SIGNATURE_PREFIX + hmac_sha256_hex(payload, secret)


def _byte_pairs(a: bytes, b: bytes) -> Iterator[tuple[int, int]]:
    return zip(a, b)


def constant_time_compare(a: Optional[str | bytes], b: Optional[str | bytes]) -> bool:
    """Compare two values without exiting early on a content mismatch.

    Only a length mismatch returns early; for equal lengths every byte
    pair is visited.
    """
    if a is None or b is None:
        return False
    left, right = to_bytes(a), to_bytes(b)
    if len(left) != len(right):
        return False

    result = 0
    for x, y in _byte_pairs(left, right):
        result |= x ^ y
    return result == 0


class SignatureVerifier:
    """Verifies webhook signatures, or skips verification when disabled."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        if not enabled:
            logger.warning(
                "Webhook signature verification is DISABLED; "
                "inbound webhooks will not be authenticated"
            )

    def generate(self, payload: str | bytes, secret: str | bytes) -> str:
        return generate_signature(payload, secret)

    def verify(
        self,
        payload: Optional[str | bytes],
        supplied_signature: Optional[str],
        secret: Optional[str | bytes],
    ) -> bool:
        if not self.enabled:
            logger.warning("Skipping webhook signature check (verification disabled)")
            return True

        if payload is None:
            raise InvalidInputError("Webhook payload is required for verification")
        if secret is None:
            raise InvalidInputError("Webhook secret is required for verification")
        if not supplied_signature:
            logger.warning("Webhook delivered without a signature")
            return False

        expected = generate_signature(payload, secret)
        valid = constant_time_compare(expected, supplied_signature)
        if not valid:
            logger.warning("Webhook signature mismatch")
        return valid
