"""Webhook event kinds delivered by the LicenseChain server."""

from enum import Enum
from typing import Optional


class EventCategory(str, Enum):
    LICENSE = "license"
    USER = "user"
    HARDWARE = "hardware"
    PAYMENT = "payment"
    SYSTEM = "system"


class WebhookEvent(str, Enum):
    # License
    LICENSE_CREATED = "license.created"
    LICENSE_UPDATED = "license.updated"
    LICENSE_REVOKED = "license.revoked"
    LICENSE_EXPIRED = "license.expired"
    LICENSE_EXTENDED = "license.extended"

    # User
    USER_REGISTERED = "user.registered"
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"
    USER_UPDATED = "user.updated"

    # Hardware
    HARDWARE_BOUND = "hardware.bound"
    HARDWARE_UNBOUND = "hardware.unbound"

    # Payment
    PAYMENT_COMPLETED = "payment.completed"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_REFUNDED = "payment.refunded"

    # System
    SYSTEM_MAINTENANCE = "system.maintenance"
    SYSTEM_UPDATE = "system.update"

    @property
    def category(self) -> EventCategory:
        return EventCategory(self.value.split(".", 1)[0])

    @classmethod
    def parse(cls, name: object) -> Optional["WebhookEvent"]:
        """Return the event for a wire name, or None if unrecognized."""
        if not isinstance(name, str):
            return None
        try:
            return cls(name)
        except ValueError:
            return None


def supported_events() -> list[str]:
    return [event.value for event in WebhookEvent]


def is_event_supported(name: object) -> bool:
    return WebhookEvent.parse(name) is not None
