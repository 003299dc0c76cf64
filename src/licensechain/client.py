"""
LicenseChainClient SDK — sync client for the LicenseChain API.

Wraps session handling, license CRUD, hardware binding, analytics and
webhook processing. Operations return an ApiResult rather than raising.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from licensechain.common.config import DEFAULT_BASE_URL, LicenseChainSettings
from licensechain.common.exceptions import (
    ApiError,
    ErrorType,
    InvalidInputError,
    LicenseChainError,
    NotAuthenticatedError,
    NotConnectedError,
)
from licensechain.common.results import ApiResult
from licensechain.fingerprint import generate_hardware_id
from licensechain.validator import LicenseValidator
from licensechain.webhooks.verifier import WebhookHandler, WebhookResult, WebhookVerifier

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    401: ErrorType.NOT_AUTHENTICATED,
    403: ErrorType.ACCESS_DENIED,
    404: ErrorType.LICENSE_NOT_FOUND,
    429: ErrorType.RATE_LIMITED,
    503: ErrorType.MAINTENANCE_MODE,
}


@dataclass
class PerformanceMetrics:
    requests: int = 0
    errors: int = 0
    avg_response_time: float = 0.0
    last_request_time: float = 0.0

    @property
    def success_rate(self) -> float:
        if self.requests == 0:
            return 0.0
        return (self.requests - self.errors) / self.requests

    def as_dict(self) -> dict[str, float]:
        return {
            "requests": self.requests,
            "errors": self.errors,
            "avg_response_time": self.avg_response_time,
            "last_request_time": self.last_request_time,
            "success_rate": self.success_rate,
        }


def _error_for_response(resp: httpx.Response) -> LicenseChainError:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    message = ""
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or ""
    message = message or f"HTTP {resp.status_code}"

    if resp.status_code in _STATUS_CODES:
        code = _STATUS_CODES[resp.status_code]
    elif resp.status_code >= 500:
        code = ErrorType.SERVER_ERROR
    else:
        code = ErrorType.API_ERROR
    return ApiError(message, code=code, details={"status_code": resp.status_code})


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code == 429


class LicenseChainClient:
    """
    Synchronous HTTP client for the LicenseChain API.

    Can be wrapped in async by consumers; designed for simplicity in sync contexts.
    """

    def __init__(
        self,
        api_key: str,
        app_name: str,
        version: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        retries: int = 3,
        retry_backoff_base: float = 0.5,
        cache_ttl: int = 300,
        debug: bool = False,
        webhook_secret: Optional[str] = None,
        verify_webhooks: bool = True,
        hardware_id: Optional[str] = None,
        user_id: str | int = "",
    ):
        for name, value in (("API key", api_key), ("App name", app_name), ("App version", version)):
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} is required")

        self.api_key = api_key
        self.app_name = app_name
        self.version = version
        self.base_url = base_url.rstrip("/")
        self.retries = max(1, retries)
        self.retry_backoff_base = retry_backoff_base
        self.debug = debug

        self.is_connected = False
        self.session_id: Optional[str] = None
        self.current_user: Optional[dict[str, Any]] = None
        self.hardware_id = hardware_id or generate_hardware_id(user_id, app_name)
        self.metrics = PerformanceMetrics()

        self.validator = LicenseValidator(self, cache_ttl=cache_ttl)
        self.webhooks = WebhookVerifier(
            webhook_secret or None,
            api_key=api_key,
            verify_signatures=verify_webhooks,
        )
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout)

        if debug:
            logging.getLogger("licensechain").setLevel(logging.DEBUG)
        logger.debug("Client initialized with app: %s", app_name)

    @classmethod
    def from_settings(cls, settings: LicenseChainSettings) -> "LicenseChainClient":
        return cls(
            api_key=settings.api_key,
            app_name=settings.app_name,
            version=settings.app_version,
            base_url=settings.base_url,
            timeout=settings.timeout,
            retries=settings.retries,
            retry_backoff_base=settings.retry_backoff_base,
            cache_ttl=settings.cache_ttl,
            debug=settings.debug,
            webhook_secret=settings.webhook_secret or None,
            verify_webhooks=settings.verify_webhooks,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-App-Name": self.app_name,
            "X-App-Version": self.version,
            "X-Hardware-ID": self.hardware_id,
        }
        if self.session_id:
            headers["X-Session-ID"] = self.session_id
        return headers

    # ── Transport ──

    def request(
        self,
        method: str,
        path: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResult:
        """Send a request and record timing metrics."""
        started = time.perf_counter()
        result = self._request_with_retry(method, path, data, params)
        elapsed = time.perf_counter() - started

        m = self.metrics
        m.requests += 1
        m.last_request_time = time.time()
        m.avg_response_time += (elapsed - m.avg_response_time) / m.requests
        if not result.success:
            m.errors += 1

        logger.debug(
            "%s %s - %s (%dms)", method, path,
            "SUCCESS" if result.success else "ERROR", int(elapsed * 1000),
            extra={"method": method, "path": path, "elapsed_ms": int(elapsed * 1000)},
        )
        return result

    def _request_with_retry(
        self,
        method: str,
        path: str,
        data: Optional[dict[str, Any]],
        params: Optional[dict[str, Any]],
    ) -> ApiResult:
        """Retries on timeouts, transport errors, 5xx and 429. No retry on other 4xx."""
        last_error: Optional[LicenseChainError] = None
        for attempt in range(self.retries):
            try:
                resp = self._http.request(
                    method, path, json=data, params=params, headers=self._headers(),
                )
                if _is_retryable_status(resp.status_code):
                    last_error = _error_for_response(resp)
                elif resp.status_code >= 400:
                    return ApiResult.fail(_error_for_response(resp))
                elif not resp.content:
                    return ApiResult.ok({})
                else:
                    return ApiResult.ok(resp.json())
            except httpx.TimeoutException:
                last_error = ApiError("Request timed out", code=ErrorType.TIMEOUT)
            except httpx.HTTPError as e:
                last_error = ApiError(str(e), code=ErrorType.NETWORK_ERROR)
            except ValueError:
                return ApiResult.fail(ApiError("Invalid JSON response", code=ErrorType.API_ERROR))

            if attempt < self.retries - 1:
                time.sleep(self.retry_backoff_base * (2 ** attempt))

        return ApiResult.fail(ApiError(
            f"All {self.retries} retries exhausted: {last_error.message}",
            code=ErrorType.RETRY_EXHAUSTED,
            details={"last_code": last_error.code.value, **last_error.details},
        ))

    def _require_connection(self, session: bool = False) -> Optional[ApiResult]:
        if not self.is_connected:
            return ApiResult.fail(NotConnectedError())
        if session and not self.session_id:
            return ApiResult.fail(NotAuthenticatedError())
        return None

    @staticmethod
    def _require_str(value: Any, label: str) -> Optional[ApiResult]:
        if not isinstance(value, str) or not value:
            return ApiResult.fail(InvalidInputError(f"{label} is required"))
        return None

    # ── Connection ──

    def connect(self) -> ApiResult:
        if self.is_connected:
            return ApiResult.ok({"message": "Already connected"})
        result = self.request("GET", "/health")
        if result.success:
            self.is_connected = True
            logger.debug("Connected successfully")
        else:
            logger.warning("Connection failed: %s", result.message)
        return result

    def disconnect(self) -> None:
        self.is_connected = False
        self.session_id = None
        self.current_user = None
        logger.debug("Disconnected")

    # ── Authentication ──

    def _start_session(self, result: ApiResult) -> ApiResult:
        if result.success and isinstance(result.data, dict):
            self.session_id = result.data.get("sessionId")
            self.current_user = result.data.get("user")
        return result

    def register(self, username: str, password: str, email: str) -> ApiResult:
        failed = (
            self._require_connection()
            or self._require_str(username, "Username")
            or self._require_str(password, "Password")
            or self._require_str(email, "Email")
        )
        if failed:
            return failed
        return self._start_session(self.request("POST", "/auth/register", {
            "username": username,
            "password": password,
            "email": email,
            "hardwareId": self.hardware_id,
        }))

    def login(self, username: str, password: str) -> ApiResult:
        failed = (
            self._require_connection()
            or self._require_str(username, "Username")
            or self._require_str(password, "Password")
        )
        if failed:
            return failed
        return self._start_session(self.request("POST", "/auth/login", {
            "username": username,
            "password": password,
            "hardwareId": self.hardware_id,
        }))

    def logout(self) -> None:
        if self.session_id:
            result = self.request("POST", "/auth/logout", {})
            if not result.success:
                logger.warning("Server logout failed: %s", result.message)
        self.session_id = None
        self.current_user = None
        logger.debug("User logged out")

    # ── Licenses ──

    def validate_license(self, license_key: str, use_cache: bool = True) -> ApiResult:
        failed = self._require_connection() or self._require_str(license_key, "License key")
        if failed:
            return failed
        return self.validator.validate(license_key, use_cache=use_cache)

    def get_user_licenses(self) -> ApiResult:
        failed = self._require_connection(session=True)
        if failed:
            return failed
        return self.request("GET", "/licenses")

    def create_license(self, user_id: str, features: list[str], expires: int | float) -> ApiResult:
        failed = self._require_connection(session=True) or self._require_str(user_id, "User ID")
        if failed:
            return failed
        if not isinstance(features, (list, tuple)):
            return ApiResult.fail(InvalidInputError("Features array is required"))
        if isinstance(expires, bool) or not isinstance(expires, (int, float)):
            return ApiResult.fail(InvalidInputError("Expiration timestamp is required"))
        return self.request("POST", "/licenses", {
            "userId": user_id,
            "features": list(features),
            "expires": expires,
            "hardwareId": self.hardware_id,
        })

    def update_license(self, license_key: str, updates: dict[str, Any]) -> ApiResult:
        failed = self._require_connection(session=True) or self._require_str(license_key, "License key")
        if failed:
            return failed
        if not isinstance(updates, dict):
            return ApiResult.fail(InvalidInputError("Updates object is required"))
        result = self.request("PUT", f"/licenses/{license_key}", updates)
        self.validator.clear_cache(license_key)
        return result

    def revoke_license(self, license_key: str) -> ApiResult:
        failed = self._require_connection(session=True) or self._require_str(license_key, "License key")
        if failed:
            return failed
        result = self.request("DELETE", f"/licenses/{license_key}")
        self.validator.clear_cache(license_key)
        return result

    def extend_license(self, license_key: str, days: int) -> ApiResult:
        failed = self._require_connection(session=True) or self._require_str(license_key, "License key")
        if failed:
            return failed
        if isinstance(days, bool) or not isinstance(days, (int, float)):
            return ApiResult.fail(InvalidInputError("Days to extend is required"))
        result = self.request("POST", f"/licenses/{license_key}/extend", {"days": days})
        self.validator.clear_cache(license_key)
        return result

    # ── Hardware binding ──

    def validate_hardware_id(self, license_key: str, hardware_id: str) -> ApiResult:
        failed = (
            self._require_connection()
            or self._require_str(license_key, "License key")
            or self._require_str(hardware_id, "Hardware ID")
        )
        if failed:
            return failed
        return self.request("POST", "/licenses/validate-hardware", {
            "licenseKey": license_key,
            "hardwareId": hardware_id,
        })

    def bind_hardware_id(self, license_key: str, hardware_id: str) -> ApiResult:
        failed = (
            self._require_connection(session=True)
            or self._require_str(license_key, "License key")
            or self._require_str(hardware_id, "Hardware ID")
        )
        if failed:
            return failed
        return self.request("POST", "/licenses/bind-hardware", {
            "licenseKey": license_key,
            "hardwareId": hardware_id,
        })

    # ── Webhooks ──

    def set_webhook_handler(self, handler: WebhookHandler) -> None:
        if not callable(handler):
            raise InvalidInputError("Handler must be a function")
        self.webhooks.set_handler(handler)
        logger.debug("Webhook handler set")

    def process_webhook(self, body: str | bytes, signature: Optional[str]) -> WebhookResult:
        return self.webhooks.process(body, signature)

    def webhook_app(self, path: str = "/webhooks"):
        """FastAPI app that feeds deliveries into this client's verifier."""
        from licensechain.webhooks.router import create_webhook_app

        return create_webhook_app(self.webhooks, path=path)

    # ── Analytics ──

    def track_event(self, event_name: str, properties: Optional[dict[str, Any]] = None) -> ApiResult:
        failed = self._require_connection() or self._require_str(event_name, "Event name")
        if failed:
            return failed
        return self.request("POST", "/analytics/track", {
            "event": event_name,
            "properties": properties or {},
            "timestamp": int(time.time()),
            "hardwareId": self.hardware_id,
        })

    def get_analytics(
        self,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
    ) -> ApiResult:
        failed = self._require_connection(session=True)
        if failed:
            return failed
        params = {}
        if start_time is not None:
            params["startTime"] = start_time
        if end_time is not None:
            params["endTime"] = end_time
        return self.request("GET", "/analytics", params=params or None)

    def get_performance_metrics(self) -> dict[str, float]:
        return self.metrics.as_dict()

    # ── Lifecycle ──

    def close(self) -> None:
        """Close the HTTP client."""
        self.disconnect()
        self._http.close()

    def __enter__(self) -> "LicenseChainClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
