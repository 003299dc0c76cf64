"""Webhook signature verification and event dispatch."""

from licensechain.webhooks.events import WebhookEvent, is_event_supported, supported_events
from licensechain.webhooks.signature import (
    SIGNATURE_HEADER,
    SignatureVerifier,
    constant_time_compare,
    generate_signature,
)
from licensechain.webhooks.verifier import Stage, WebhookResult, WebhookVerifier, parse_payload

__all__ = [
    "SIGNATURE_HEADER",
    "SignatureVerifier",
    "Stage",
    "WebhookEvent",
    "WebhookResult",
    "WebhookVerifier",
    "constant_time_compare",
    "generate_signature",
    "is_event_supported",
    "parse_payload",
    "supported_events",
]
