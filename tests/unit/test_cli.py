"""Tests for cli.py — Typer commands."""

import hashlib
import hmac

import pytest
from typer.testing import CliRunner

from licensechain.cli import app
from licensechain.webhooks.signature import generate_signature

runner = CliRunner()

BODY = b'{"event":"license.created","data":{"licenseKey":"ABC-123"}}'


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "payload.json"
    path.write_bytes(BODY)
    return path


class TestHashCommands:
    def test_sha256(self):
        result = runner.invoke(app, ["hash", "abc"])
        assert result.exit_code == 0
        assert hashlib.sha256(b"abc").hexdigest() in result.output

    def test_md5(self):
        result = runner.invoke(app, ["hash", "abc", "--algorithm", "md5"])
        assert result.exit_code == 0
        assert "900150983cd24fb0d6963f7d28e17f72" in result.output

    def test_unknown_algorithm(self):
        result = runner.invoke(app, ["hash", "abc", "--algorithm", "sha1"])
        assert result.exit_code == 2

    def test_hmac(self):
        result = runner.invoke(app, ["hmac", "payload", "--secret", "s3cret"])
        assert result.exit_code == 0
        assert hmac.new(b"s3cret", b"payload", hashlib.sha256).hexdigest() in result.output


class TestSignatureCommands:
    def test_sign(self, payload_file):
        result = runner.invoke(app, ["sign", str(payload_file), "--secret", "topsecret"])
        assert result.exit_code == 0
        assert generate_signature(BODY, "topsecret") in result.output

    def test_sign_secret_from_env(self, payload_file):
        result = runner.invoke(
            app, ["sign", str(payload_file)], env={"LICENSECHAIN_WEBHOOK_SECRET": "topsecret"},
        )
        assert result.exit_code == 0
        assert generate_signature(BODY, "topsecret") in result.output

    def test_verify_valid(self, payload_file):
        sig = generate_signature(BODY, "topsecret")
        result = runner.invoke(
            app, ["verify", str(payload_file), "--signature", sig, "--secret", "topsecret"],
        )
        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_verify_invalid(self, payload_file):
        sig = generate_signature(BODY, "other")
        result = runner.invoke(
            app, ["verify", str(payload_file), "--signature", sig, "--secret", "topsecret"],
        )
        assert result.exit_code == 1
        assert "INVALID" in result.output

    def test_missing_payload_file(self, tmp_path):
        result = runner.invoke(app, ["sign", str(tmp_path / "nope.json"), "--secret", "s"])
        assert result.exit_code == 1


class TestHwidCommand:
    def test_hwid_is_stable(self):
        first = runner.invoke(app, ["hwid", "--user", "u-1", "--app", "TestGame"])
        second = runner.invoke(app, ["hwid", "--user", "u-1", "--app", "TestGame"])
        assert first.exit_code == 0
        assert first.output == second.output
        assert len(first.output.strip()) == 32


class TestValidateCommand:
    def test_missing_configuration(self, monkeypatch):
        from licensechain.common.config import get_settings

        for var in ("LICENSECHAIN_API_KEY", "LICENSECHAIN_APP_NAME", "LICENSECHAIN_APP_VERSION"):
            monkeypatch.delenv(var, raising=False)
        get_settings.cache_clear()
        try:
            result = runner.invoke(app, ["validate", "LICENSE-ABCD-1234"])
        finally:
            get_settings.cache_clear()
        assert result.exit_code == 2
        assert "Configuration error" in result.output
