"""
License key validation.

Local format checks run before any network call; server responses are
then checked for status, expiry and hardware binding. Successful results
are cached per key for ``cache_ttl`` seconds.
"""

import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from licensechain.common.exceptions import (
    ErrorType,
    InvalidFormatError,
    InvalidInputError,
    LicenseChainError,
)
from licensechain.common.results import ApiResult

MIN_KEY_LENGTH = 10
MAX_KEY_LENGTH = 100
VALID_CHARS = re.compile(r"^[A-Za-z0-9-]+$")
KEY_PATTERNS = (
    re.compile(r"^LICENSE-"),
    re.compile(r"^LC-"),
    re.compile(r"^[A-Z0-9]+-[A-Z0-9]+-[A-Z0-9]+$"),
)
REQUIRED_FIELDS = ("key", "status", "expires", "user")
SECONDS_PER_DAY = 86400


class LicenseApi(Protocol):
    hardware_id: str

    def request(self, method: str, path: str, data: Optional[dict[str, Any]] = None) -> ApiResult:
        ...


@dataclass
class LicenseCheck:
    valid: bool
    error: Optional[LicenseChainError] = None


def validate_format(license_key: Any) -> LicenseCheck:
    """Structural check of a license key (no network access)."""
    if not isinstance(license_key, str) or not license_key:
        return LicenseCheck(False, InvalidInputError("License key cannot be empty"))
    if len(license_key) < MIN_KEY_LENGTH:
        return LicenseCheck(False, InvalidFormatError("License key is too short"))
    if len(license_key) > MAX_KEY_LENGTH:
        return LicenseCheck(False, InvalidFormatError("License key is too long"))
    if not VALID_CHARS.match(license_key):
        return LicenseCheck(False, InvalidFormatError("License key contains invalid characters"))
    if not any(pattern.match(license_key) for pattern in KEY_PATTERNS):
        return LicenseCheck(False, InvalidFormatError("License key format is invalid"))
    return LicenseCheck(True)


def _expiry_timestamp(value: Any) -> Optional[float]:
    """Unix timestamp from a numeric or ISO-8601 ``expires`` value."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()
    return None


class LicenseValidator:
    """Validates license keys against the API with a TTL result cache."""

    def __init__(
        self,
        client: LicenseApi,
        cache_ttl: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cache: dict[str, tuple[dict[str, Any], float]] = {}

    # ── Validation ──

    def validate(self, license_key: str, use_cache: bool = True) -> ApiResult:
        if not isinstance(license_key, str) or not license_key:
            return ApiResult.fail(InvalidInputError("License key is required"))

        if use_cache:
            cached = self.get_cached_result(license_key)
            if cached is not None:
                return ApiResult.ok(cached)

        fmt = validate_format(license_key)
        if not fmt.valid:
            return ApiResult.fail(fmt.error)

        result = self.client.request("POST", "/licenses/validate", {
            "licenseKey": license_key,
            "hardwareId": self.client.hardware_id,
        })
        if not result.success:
            return result

        check = self.validate_license_data(result.data)
        if not check.valid:
            return ApiResult.fail(check.error)

        self.cache_result(license_key, result.data)
        return result

    def validate_multiple(self, license_keys: list[str]) -> list[dict[str, Any]]:
        if not isinstance(license_keys, (list, tuple)):
            return []
        results = []
        for key in license_keys:
            outcome = self.validate(key)
            results.append({
                "license_key": key,
                "success": outcome.success,
                "result": outcome.data if outcome.success else outcome.error,
            })
        return results

    def validate_license_data(self, data: Any) -> LicenseCheck:
        """Check a server license record for status, expiry and binding."""
        if not isinstance(data, dict):
            return LicenseCheck(False, LicenseChainError(
                "Invalid license data received", code=ErrorType.INVALID_LICENSE,
            ))

        for field in REQUIRED_FIELDS:
            if not data.get(field):
                return LicenseCheck(False, LicenseChainError(
                    f"Missing required field: {field}", code=ErrorType.INVALID_LICENSE,
                ))

        status = data["status"]
        if status != "active":
            if status == "expired":
                code, message = ErrorType.EXPIRED_LICENSE, "License has expired"
            elif status == "revoked":
                code, message = ErrorType.REVOKED_LICENSE, "License has been revoked"
            elif status == "suspended":
                code, message = ErrorType.REVOKED_LICENSE, "License has been suspended"
            else:
                code, message = ErrorType.INVALID_LICENSE, "License is not active"
            return LicenseCheck(False, LicenseChainError(message, code=code))

        if self.get_expiration_time(data) is None:
            return LicenseCheck(False, LicenseChainError(
                f"Unrecognized expiration value: {data['expires']!r}",
                code=ErrorType.INVALID_LICENSE,
            ))

        if self.is_expired(data):
            return LicenseCheck(False, LicenseChainError(
                "License has expired", code=ErrorType.EXPIRED_LICENSE,
            ))

        bound = data.get("hardwareId")
        if bound and bound != self.client.hardware_id:
            return LicenseCheck(False, LicenseChainError(
                "License is bound to a different device", code=ErrorType.HARDWARE_MISMATCH,
            ))

        return LicenseCheck(True)

    # ── License data helpers ──

    @staticmethod
    def get_features(data: Any) -> list[str]:
        if not isinstance(data, dict):
            return []
        features = data.get("features")
        return list(features) if isinstance(features, list) else []

    def has_feature(self, data: Any, feature: str) -> bool:
        return bool(feature) and feature in self.get_features(data)

    def has_any_feature(self, data: Any, features: list[str]) -> bool:
        return any(self.has_feature(data, f) for f in features or [])

    def has_all_features(self, data: Any, features: list[str]) -> bool:
        if not isinstance(data, dict) or not isinstance(features, (list, tuple)):
            return False
        return all(self.has_feature(data, f) for f in features)

    @staticmethod
    def get_status(data: Any) -> str:
        if not isinstance(data, dict) or not data.get("status"):
            return "unknown"
        return data["status"]

    @staticmethod
    def get_user(data: Any) -> Any:
        if not isinstance(data, dict):
            return None
        return data.get("user")

    @staticmethod
    def get_expiration_time(data: Any) -> Optional[float]:
        if not isinstance(data, dict):
            return None
        return _expiry_timestamp(data.get("expires"))

    def is_expired(self, data: Any) -> bool:
        expires = self.get_expiration_time(data)
        if expires is None:
            return False  # no expiry means permanent
        return self._clock() > expires

    def days_until_expiration(self, data: Any) -> Optional[int]:
        expires = self.get_expiration_time(data)
        if expires is None:
            return None
        remaining = expires - self._clock()
        if remaining <= 0:
            return 0
        return math.floor(remaining / SECONDS_PER_DAY)

    def summary(self, data: Any) -> dict[str, Any]:
        if not data:
            return {
                "valid": False,
                "status": "unknown",
                "expired": False,
                "features": [],
                "user": None,
                "expires": None,
                "days_until_expiration": None,
            }
        return {
            "valid": self.validate_license_data(data).valid,
            "status": self.get_status(data),
            "expired": self.is_expired(data),
            "features": self.get_features(data),
            "user": self.get_user(data),
            "expires": self.get_expiration_time(data),
            "days_until_expiration": self.days_until_expiration(data),
        }

    # ── Cache ──

    def cache_result(self, license_key: str, data: dict[str, Any]) -> None:
        if not license_key or data is None:
            return
        self._cache[license_key] = (data, self._clock())

    def get_cached_result(self, license_key: str) -> Optional[dict[str, Any]]:
        entry = self._cache.get(license_key)
        if entry is None:
            return None
        data, cached_at = entry
        if self._clock() - cached_at > self.cache_ttl:
            del self._cache[license_key]
            return None
        return data

    def clear_cache(self, license_key: Optional[str] = None) -> None:
        if license_key is None:
            self._cache.clear()
        else:
            self._cache.pop(license_key, None)

    @property
    def cache_size(self) -> int:
        return len(self._cache)
