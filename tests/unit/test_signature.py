"""Tests for webhooks.signature — signature generation and constant-time verification."""

import hashlib
import hmac
import logging

import pytest

from licensechain.common.exceptions import InvalidInputError
from licensechain.webhooks import signature as signature_module
from licensechain.webhooks.signature import (
    SIGNATURE_PREFIX,
    SignatureVerifier,
    constant_time_compare,
    generate_signature,
)

PAYLOAD = '{"event":"license.created","data":{"licenseKey":"ABC-123"}}'
SECRET = "topsecret"


def flip_char(value: str, index: int) -> str:
    replacement = "0" if value[index] != "0" else "1"
    return value[:index] + replacement + value[index + 1:]


@pytest.fixture
def counted_pairs(monkeypatch):
    """Count how many byte pairs constant_time_compare visits."""
    counter = {"pairs": 0}
    original = signature_module._byte_pairs

    def counting(a, b):
        for pair in original(a, b):
            counter["pairs"] += 1
            yield pair

    monkeypatch.setattr(signature_module, "_byte_pairs", counting)
    return counter


class TestGenerateSignature:
    def test_format(self):
        sig = generate_signature(PAYLOAD, SECRET)
        assert sig.startswith(SIGNATURE_PREFIX)
        digest = sig[len(SIGNATURE_PREFIX):]
        assert len(digest) == 64
        assert all(c in "0123456789abcdef" for c in digest)

    def test_matches_manual_hmac(self):
        expected = hmac.new(SECRET.encode(), PAYLOAD.encode(), hashlib.sha256).hexdigest()
        assert generate_signature(PAYLOAD, SECRET) == f"sha256={expected}"

    def test_deterministic(self):
        assert generate_signature(PAYLOAD, SECRET) == generate_signature(PAYLOAD, SECRET)

    def test_different_secrets_different_sigs(self):
        assert generate_signature(PAYLOAD, "secret-one") != generate_signature(PAYLOAD, "secret-two")

    def test_bytes_payload(self):
        assert generate_signature(PAYLOAD.encode(), SECRET) == generate_signature(PAYLOAD, SECRET)


class TestConstantTimeCompare:
    def test_equal(self):
        assert constant_time_compare("abcdef", "abcdef") is True

    def test_content_mismatch(self):
        assert constant_time_compare("abcdef", "abcdeg") is False

    def test_length_mismatch(self):
        assert constant_time_compare("abc", "abcd") is False

    def test_none(self):
        assert constant_time_compare(None, "abc") is False
        assert constant_time_compare("abc", None) is False

    def test_empty_strings_equal(self):
        assert constant_time_compare("", "") is True

    def test_mixed_str_and_bytes(self):
        assert constant_time_compare("abc", b"abc") is True

    def test_visits_every_pair_when_first_byte_differs(self, counted_pairs):
        expected = generate_signature(PAYLOAD, SECRET)
        assert constant_time_compare(expected, flip_char(expected, 0)) is False
        assert counted_pairs["pairs"] == len(expected)

    def test_visits_every_pair_when_last_byte_differs(self, counted_pairs):
        expected = generate_signature(PAYLOAD, SECRET)
        assert constant_time_compare(expected, flip_char(expected, len(expected) - 1)) is False
        assert counted_pairs["pairs"] == len(expected)

    def test_first_and_last_mismatch_cost_the_same(self, counted_pairs):
        expected = generate_signature(PAYLOAD, SECRET)
        constant_time_compare(expected, flip_char(expected, 7))
        first = counted_pairs["pairs"]
        counted_pairs["pairs"] = 0
        constant_time_compare(expected, flip_char(expected, len(expected) - 1))
        assert counted_pairs["pairs"] == first

    def test_length_mismatch_short_circuits(self, counted_pairs):
        assert constant_time_compare("sha256=abc", "sha256=abcd") is False
        assert counted_pairs["pairs"] == 0


class TestSignatureVerifier:
    def test_self_consistency(self):
        verifier = SignatureVerifier()
        for payload, secret in [
            (PAYLOAD, SECRET),
            ("", "k"),
            ("{}", "x" * 200),
            ("ünïcödé", "sëcret"),
        ]:
            assert verifier.verify(payload, generate_signature(payload, secret), secret) is True

    def test_one_char_difference_rejected(self):
        verifier = SignatureVerifier()
        sig = generate_signature(PAYLOAD, SECRET)
        for index in (len(SIGNATURE_PREFIX), len(sig) // 2, len(sig) - 1):
            assert verifier.verify(PAYLOAD, flip_char(sig, index), SECRET) is False

    def test_wrong_secret(self):
        sig = generate_signature(PAYLOAD, SECRET)
        assert SignatureVerifier().verify(PAYLOAD, sig, "wrong-secret") is False

    def test_tampered_payload(self):
        sig = generate_signature(PAYLOAD, SECRET)
        tampered = PAYLOAD.replace("ABC-123", "ABC-124")
        assert SignatureVerifier().verify(tampered, sig, SECRET) is False

    def test_reserialized_payload_rejected(self):
        sig = generate_signature(PAYLOAD, SECRET)
        reserialized = PAYLOAD.replace(":", ": ")
        assert SignatureVerifier().verify(reserialized, sig, SECRET) is False

    def test_bare_hex_without_prefix_rejected(self):
        sig = generate_signature(PAYLOAD, SECRET)
        assert SignatureVerifier().verify(PAYLOAD, sig[len(SIGNATURE_PREFIX):], SECRET) is False

    def test_missing_signature(self):
        assert SignatureVerifier().verify(PAYLOAD, None, SECRET) is False
        assert SignatureVerifier().verify(PAYLOAD, "", SECRET) is False

    def test_none_payload_rejected(self):
        with pytest.raises(InvalidInputError):
            SignatureVerifier().verify(None, "sha256=00", SECRET)

    def test_none_secret_rejected(self):
        with pytest.raises(InvalidInputError):
            SignatureVerifier().verify(PAYLOAD, "sha256=00", None)

    def test_disabled_always_true(self):
        verifier = SignatureVerifier(enabled=False)
        assert verifier.verify(PAYLOAD, "sha256=bogus", SECRET) is True
        assert verifier.verify(PAYLOAD, None, None) is True

    def test_disabled_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="licensechain.webhooks.signature"):
            verifier = SignatureVerifier(enabled=False)
            verifier.verify(PAYLOAD, "sha256=bogus", SECRET)
        messages = [r.getMessage() for r in caplog.records]
        assert any("DISABLED" in m for m in messages)
        assert any("Skipping" in m for m in messages)

    def test_generate_delegates(self):
        assert SignatureVerifier().generate(PAYLOAD, SECRET) == generate_signature(PAYLOAD, SECRET)
