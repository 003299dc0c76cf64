"""Pure-Python digest primitives: MD5, SHA-256 and HMAC-SHA256."""

from licensechain.crypto.engine import BlockHasher, DigestAlgorithm, pad, to_bytes
from licensechain.crypto.mac import hmac_sha256, hmac_sha256_hex
from licensechain.crypto.md5_digest import MD5, md5, md5_hex
from licensechain.crypto.sha256_digest import SHA256, sha256, sha256_hex

__all__ = [
    "BlockHasher",
    "DigestAlgorithm",
    "MD5",
    "SHA256",
    "hmac_sha256",
    "hmac_sha256_hex",
    "md5",
    "md5_hex",
    "pad",
    "sha256",
    "sha256_hex",
    "to_bytes",
]
