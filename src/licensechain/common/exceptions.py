"""LicenseChain exception hierarchy."""

import time
from enum import Enum
from typing import Any, Optional


class ErrorType(str, Enum):
    # Connection
    NOT_CONNECTED = "NOT_CONNECTED"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"

    # Authentication
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    ACCESS_DENIED = "ACCESS_DENIED"

    # License
    INVALID_LICENSE = "INVALID_LICENSE"
    EXPIRED_LICENSE = "EXPIRED_LICENSE"
    REVOKED_LICENSE = "REVOKED_LICENSE"
    HARDWARE_MISMATCH = "HARDWARE_MISMATCH"
    LICENSE_NOT_FOUND = "LICENSE_NOT_FOUND"

    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"

    # API
    API_ERROR = "API_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    MAINTENANCE_MODE = "MAINTENANCE_MODE"

    # Webhooks
    INVALID_WEBHOOK = "INVALID_WEBHOOK"
    WEBHOOK_VERIFICATION_FAILED = "WEBHOOK_VERIFICATION_FAILED"
    HANDLER_ERROR = "HANDLER_ERROR"

    # General
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    TIMEOUT = "TIMEOUT"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


RETRYABLE_TYPES: frozenset[ErrorType] = frozenset({
    ErrorType.NETWORK_ERROR,
    ErrorType.TIMEOUT,
    ErrorType.SERVER_ERROR,
    ErrorType.RATE_LIMITED,
})

_USER_MESSAGES: dict[ErrorType, str] = {
    ErrorType.NOT_CONNECTED: "Unable to connect to LicenseChain. Please check your internet connection.",
    ErrorType.CONNECTION_FAILED: "Failed to connect to LicenseChain servers. Please try again later.",
    ErrorType.NETWORK_ERROR: "Network error occurred. Please check your internet connection.",
    ErrorType.NOT_AUTHENTICATED: "Please log in to access this feature.",
    ErrorType.INVALID_CREDENTIALS: "Invalid username or password. Please try again.",
    ErrorType.SESSION_EXPIRED: "Your session has expired. Please log in again.",
    ErrorType.ACCESS_DENIED: "You don't have permission to access this resource.",
    ErrorType.INVALID_LICENSE: "Invalid license key. Please check your license key and try again.",
    ErrorType.EXPIRED_LICENSE: "Your license has expired. Please renew your license.",
    ErrorType.REVOKED_LICENSE: "Your license has been revoked. Please contact support.",
    ErrorType.HARDWARE_MISMATCH: "This license is bound to a different device. Please contact support.",
    ErrorType.LICENSE_NOT_FOUND: "License not found. Please check your license key.",
    ErrorType.INVALID_INPUT: "Invalid input provided. Please check your data and try again.",
    ErrorType.MISSING_REQUIRED_FIELD: "Required field is missing. Please provide all required information.",
    ErrorType.INVALID_FORMAT: "Invalid format. Please check your data format and try again.",
    ErrorType.API_ERROR: "API error occurred. Please try again later.",
    ErrorType.RATE_LIMITED: "Too many requests. Please wait before trying again.",
    ErrorType.SERVER_ERROR: "Server error occurred. Please try again later.",
    ErrorType.MAINTENANCE_MODE: "LicenseChain is currently under maintenance. Please try again later.",
    ErrorType.INVALID_WEBHOOK: "Invalid webhook received. Please check your webhook configuration.",
    ErrorType.WEBHOOK_VERIFICATION_FAILED: "Webhook verification failed. Please check your webhook secret.",
    ErrorType.HANDLER_ERROR: "A webhook handler failed while processing the event.",
    ErrorType.UNKNOWN_ERROR: "An unknown error occurred. Please try again later.",
    ErrorType.TIMEOUT: "Request timed out. Please try again later.",
    ErrorType.RETRY_EXHAUSTED: "Maximum retry attempts exceeded. Please try again later.",
}


class LicenseChainError(Exception):
    """Base exception for all LicenseChain errors.

    Instances double as typed error values: most SDK operations return them
    inside a result object instead of raising.
    """

    default_code = ErrorType.UNKNOWN_ERROR
    default_message = "An unknown error occurred"

    def __init__(
        self,
        message: str = "",
        code: ErrorType | str | None = None,
        details: Optional[dict[str, Any]] = None,
        severity: Severity = Severity.MEDIUM,
    ):
        self.message = message or self.default_message
        self.code = ErrorType(code) if code is not None else self.default_code
        self.details = details or {}
        self.severity = Severity(severity)
        self.timestamp = time.time()
        super().__init__(self.message)

    @property
    def is_retryable(self) -> bool:
        return self.code in RETRYABLE_TYPES

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL

    @property
    def user_message(self) -> str:
        """Human-facing message suitable for showing to an end user."""
        return _USER_MESSAGES.get(self.code, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "LicenseChainError":
        if not isinstance(data, dict):
            return InvalidInputError("Invalid error payload")
        try:
            code = ErrorType(data.get("code", ErrorType.UNKNOWN_ERROR))
        except ValueError:
            code = ErrorType.UNKNOWN_ERROR
        try:
            severity = Severity(data.get("severity", Severity.MEDIUM))
        except ValueError:
            severity = Severity.MEDIUM
        return cls(
            data.get("message", ""),
            code=code,
            details=data.get("details") or {},
            severity=severity,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class InvalidInputError(LicenseChainError, TypeError):
    """Raised for non-byte input to a digest, or a missing secret/payload."""

    default_code = ErrorType.INVALID_INPUT
    default_message = "Invalid input"


class InvalidFormatError(LicenseChainError):
    """Malformed webhook payload or unrecognized event name."""

    default_code = ErrorType.INVALID_FORMAT
    default_message = "Invalid format"


class SignatureVerificationError(LicenseChainError):
    """Computed and supplied webhook signatures disagree."""

    default_code = ErrorType.WEBHOOK_VERIFICATION_FAILED
    default_message = "Invalid webhook signature"

    def __init__(self, message: str = "", **kwargs: Any):
        kwargs.setdefault("severity", Severity.HIGH)
        super().__init__(message, **kwargs)


class WebhookHandlerError(LicenseChainError):
    """An application-supplied webhook handler raised."""

    default_code = ErrorType.HANDLER_ERROR
    default_message = "Webhook handler error"


class NotConnectedError(LicenseChainError):
    default_code = ErrorType.NOT_CONNECTED
    default_message = "Client not connected"


class NotAuthenticatedError(LicenseChainError):
    default_code = ErrorType.NOT_AUTHENTICATED
    default_message = "User not logged in"


class ApiError(LicenseChainError):
    """Failure reported by, or while talking to, the LicenseChain API."""

    default_code = ErrorType.API_ERROR
    default_message = "API request failed"
