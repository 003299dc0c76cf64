"""LicenseChain SDK: license API client, digests and webhook verification."""

__version__ = "1.0.0"

from licensechain.client import LicenseChainClient
from licensechain.common.exceptions import ErrorType, LicenseChainError
from licensechain.common.results import ApiResult
from licensechain.crypto import hmac_sha256_hex, md5_hex, sha256_hex
from licensechain.validator import LicenseValidator, validate_format
from licensechain.webhooks import (
    SignatureVerifier,
    WebhookEvent,
    WebhookResult,
    WebhookVerifier,
    generate_signature,
)

__all__ = [
    "ApiResult",
    "ErrorType",
    "LicenseChainClient",
    "LicenseChainError",
    "LicenseValidator",
    "SignatureVerifier",
    "WebhookEvent",
    "WebhookResult",
    "WebhookVerifier",
    "generate_signature",
    "hmac_sha256_hex",
    "md5_hex",
    "sha256_hex",
    "validate_format",
]
