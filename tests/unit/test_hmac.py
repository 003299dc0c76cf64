"""Tests for crypto.mac — HMAC-SHA256."""

import hashlib
import hmac

import pytest

from licensechain.common.exceptions import InvalidInputError
from licensechain.crypto.engine import BLOCK_SIZE
from licensechain.crypto.mac import derive_pads, hmac_sha256, hmac_sha256_hex
from licensechain.crypto.sha256_digest import sha256


def reference(message: bytes, key: bytes) -> str:
    return hmac.new(key, message, hashlib.sha256).hexdigest()


class TestDerivePads:
    def test_short_key_zero_padded(self):
        inner, outer = derive_pads(b"key")
        assert len(inner) == BLOCK_SIZE
        assert len(outer) == BLOCK_SIZE
        assert inner[:3] == bytes(b ^ 0x36 for b in b"key")
        assert inner[3:] == bytes([0x36]) * (BLOCK_SIZE - 3)
        assert outer[3:] == bytes([0x5C]) * (BLOCK_SIZE - 3)

    def test_long_key_hashed_first(self):
        key = b"k" * 100
        inner, _ = derive_pads(key)
        hashed = sha256(key)
        assert inner[:32] == bytes(b ^ 0x36 for b in hashed)
        assert len(inner) == BLOCK_SIZE

    def test_block_sized_key_not_hashed(self):
        key = b"k" * BLOCK_SIZE
        inner, _ = derive_pads(key)
        assert inner == bytes(b ^ 0x36 for b in key)


class TestHmacSha256:
    def test_rfc4231_case_1(self):
        key = b"\x0b" * 20
        assert hmac_sha256_hex(b"Hi There", key) == (
            "b0344c61d8db38535ca8afceaf0bf12b881dc200c9833da726e9376c2e32cff7"
        )

    def test_rfc4231_case_2(self):
        assert hmac_sha256_hex("what do ya want for nothing?", "Jefe") == (
            "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"
        )

    @pytest.mark.parametrize("key_length", [0, 1, 32, 63, 64, 65, 131])
    def test_matches_stdlib_for_key_lengths(self, key_length):
        key = bytes((i * 7) % 256 for i in range(key_length))
        message = b'{"event":"license.created","data":{"licenseKey":"ABC-123"}}'
        assert hmac_sha256_hex(message, key) == reference(message, key)

    def test_str_and_bytes_agree(self):
        assert hmac_sha256_hex("payload", "secret") == hmac_sha256_hex(b"payload", b"secret")

    def test_raw_digest_length(self):
        assert len(hmac_sha256(b"m", b"k")) == 32

    def test_differs_from_naive_keyed_hash(self):
        naive = hashlib.sha256(b"secret" + b"payload").hexdigest()
        assert hmac_sha256_hex(b"payload", b"secret") != naive

    def test_empty_message(self):
        assert hmac_sha256_hex(b"", b"secret") == reference(b"", b"secret")

    def test_none_message_rejected(self):
        with pytest.raises(InvalidInputError):
            hmac_sha256_hex(None, "secret")

    def test_none_key_rejected(self):
        with pytest.raises(InvalidInputError):
            hmac_sha256_hex("payload", None)

    def test_non_bytes_key_rejected(self):
        with pytest.raises(InvalidInputError):
            hmac_sha256_hex("payload", 1234)
