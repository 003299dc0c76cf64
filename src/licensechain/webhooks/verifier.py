"""
Inbound webhook processing.

Each delivery moves through RECEIVED -> PARSED -> VERIFIED -> DISPATCHED.
A failure at PARSED or VERIFIED stops processing before any application
handler runs. Failures come back as a WebhookResult carrying a typed error;
nothing is retried here (the server redelivers on its own schedule).
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from licensechain.common.exceptions import (
    InvalidFormatError,
    InvalidInputError,
    LicenseChainError,
    SignatureVerificationError,
    WebhookHandlerError,
)
from licensechain.webhooks.events import EventCategory, WebhookEvent
from licensechain.webhooks.signature import SIGNATURE_HEADER, SignatureVerifier

logger = logging.getLogger(__name__)

WebhookHandler = Callable[[WebhookEvent, dict[str, Any]], Any]
EventHandler = Callable[[dict[str, Any]], Any]


class Stage(str, Enum):
    RECEIVED = "received"
    PARSED = "parsed"
    VERIFIED = "verified"
    DISPATCHED = "dispatched"


@dataclass
class WebhookResult:
    """Outcome of process().

    ``stage`` is DISPATCHED on success, otherwise the stage that failed.
    """

    success: bool
    stage: Stage
    event: Optional[WebhookEvent] = None
    data: dict[str, Any] = field(default_factory=dict)
    error: Optional[LicenseChainError] = None
    message: str = ""


@dataclass(frozen=True)
class ParsedWebhook:
    event: WebhookEvent
    data: dict[str, Any]


def parse_payload(body: str | bytes) -> ParsedWebhook:
    """Decode a raw webhook body into a known event and its data.

    Raises:
        InvalidFormatError: body is not a JSON object with a recognized
            ``event`` and an object-valued ``data``.
    """
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidFormatError("Webhook payload is not valid UTF-8") from exc
    if not isinstance(body, str):
        raise InvalidFormatError("Invalid webhook payload")

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        raise InvalidFormatError("Invalid webhook payload") from exc
    if not isinstance(parsed, dict):
        raise InvalidFormatError("Webhook payload must be a JSON object")

    event = WebhookEvent.parse(parsed.get("event"))
    if event is None:
        raise InvalidFormatError(
            f"Unknown webhook event: {parsed.get('event')}",
            details={"event": parsed.get("event")},
        )

    data = parsed.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidFormatError("Webhook 'data' must be a JSON object")

    return ParsedWebhook(event=event, data=data)


def event_subject(event: WebhookEvent, data: Mapping[str, Any]) -> Any:
    """The identifying field of an event's data, used for logging."""
    match event.category:
        case EventCategory.LICENSE:
            return data.get("licenseKey")
        case EventCategory.USER:
            return data.get("username")
        case EventCategory.HARDWARE:
            return data.get("hardwareId")
        case EventCategory.PAYMENT:
            return data.get("transactionId")
        case EventCategory.SYSTEM:
            if event is WebhookEvent.SYSTEM_MAINTENANCE:
                return data.get("message")
            return data.get("version")
        case _:
            return None


def _handled_message(event: WebhookEvent) -> str:
    return f"{event.name.replace('_', ' ').capitalize()} event handled"


class WebhookVerifier:
    """Parses, authenticates and dispatches inbound webhooks.

    The signing secret is the dedicated webhook secret when one is set,
    otherwise the API key.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        verify_signatures: bool = True,
        handler: Optional[WebhookHandler] = None,
    ):
        self.secret = secret
        self.api_key = api_key
        self.handler = handler
        self._signatures = SignatureVerifier(enabled=verify_signatures)
        self._event_handlers: dict[WebhookEvent, list[EventHandler]] = {}

    # ── Configuration ──

    @property
    def verify_signatures(self) -> bool:
        return self._signatures.enabled

    def set_secret(self, secret: str) -> None:
        if not isinstance(secret, str) or not secret:
            raise InvalidInputError("Webhook secret must be a non-empty string")
        self.secret = secret
        logger.debug("Webhook secret set")

    def set_signature_verification(self, enabled: bool) -> None:
        self._signatures = SignatureVerifier(enabled=enabled is True)
        logger.info(
            "Webhook signature verification %s",
            "enabled" if self._signatures.enabled else "disabled",
        )

    def set_handler(self, handler: Optional[WebhookHandler]) -> None:
        if handler is not None and not callable(handler):
            raise InvalidInputError("Webhook handler must be callable")
        self.handler = handler

    def register_handler(self, event: WebhookEvent | str, fn: EventHandler) -> None:
        parsed = WebhookEvent.parse(event)
        if parsed is None:
            raise InvalidFormatError(f"Unknown webhook event: {event}")
        if not callable(fn):
            raise InvalidInputError("Event handler must be callable")
        self._event_handlers.setdefault(parsed, []).append(fn)

    def on(self, event: WebhookEvent | str) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of register_handler."""

        def decorator(fn: EventHandler) -> EventHandler:
            self.register_handler(event, fn)
            return fn

        return decorator

    @property
    def signing_secret(self) -> Optional[str]:
        return self.secret or self.api_key

    # ── Signatures ──

    def generate_signature(self, payload: str | bytes) -> str:
        secret = self.signing_secret
        if secret is None:
            raise InvalidInputError("No webhook secret configured")
        return self._signatures.generate(payload, secret)

    def verify_signature(
        self,
        payload: str | bytes,
        signature: Optional[str],
        secret: Optional[str] = None,
    ) -> bool:
        return self._signatures.verify(payload, signature, secret or self.signing_secret)

    # ── Processing ──

    def process_request(self, body: str | bytes, headers: Mapping[str, str]) -> WebhookResult:
        """Process a delivery, reading the signature from its headers."""
        signature = None
        for name, value in headers.items():
            if name.lower() == SIGNATURE_HEADER.lower():
                signature = value
                break
        return self.process(body, signature)

    def process(self, body: str | bytes, signature: Optional[str]) -> WebhookResult:
        # PARSED
        try:
            parsed = parse_payload(body)
        except InvalidFormatError as exc:
            logger.warning("Rejected webhook: %s", exc.message, extra={"stage": Stage.PARSED.value})
            return WebhookResult(False, Stage.PARSED, error=exc, message=exc.message)

        # VERIFIED
        try:
            verified = self.verify_signature(body, signature)
        except InvalidInputError as exc:
            logger.warning("Rejected webhook: %s", exc.message, extra={"stage": Stage.VERIFIED.value})
            return WebhookResult(
                False, Stage.VERIFIED, event=parsed.event, error=exc, message=exc.message,
            )
        if not verified:
            error = SignatureVerificationError(details={"event": parsed.event.value})
            logger.warning(
                "Rejected webhook %s: invalid signature", parsed.event.value,
                extra={"stage": Stage.VERIFIED.value, "event": parsed.event.value},
            )
            return WebhookResult(
                False, Stage.VERIFIED, event=parsed.event, error=error, message=error.message,
            )

        # DISPATCHED
        return self._dispatch(parsed)

    def _dispatch(self, parsed: ParsedWebhook) -> WebhookResult:
        event, data = parsed.event, parsed.data
        # Every category resolves a subject; handlers are looked up per event
        subject = event_subject(event, data)
        callbacks: list[Callable[[], Any]] = []
        if self.handler is not None:
            callbacks.append(lambda: self.handler(event, data))
        for fn in self._event_handlers.get(event, []):
            callbacks.append(lambda fn=fn: fn(data))

        failures: list[Exception] = []
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                logger.exception(
                    "Webhook handler failed for %s: %s", event.value, subject,
                    extra={"event": event.value},
                )
                failures.append(exc)

        if failures:
            first = failures[0]
            error = WebhookHandlerError(
                f"Webhook handler error: {first}",
                details={
                    "event": event.value,
                    "exception": type(first).__name__,
                    "failed_handlers": len(failures),
                },
            )
            return WebhookResult(
                False, Stage.DISPATCHED, event=event, data=data,
                error=error, message=error.message,
            )

        logger.debug("%s: %s", event.value, subject, extra={"event": event.value})
        return WebhookResult(
            True, Stage.DISPATCHED, event=event, data=data, message=_handled_message(event),
        )
