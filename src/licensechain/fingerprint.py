"""
Local hardware identifier.

The ID is a truncated SHA-256 over the user, the application and a machine
identifier. It contains no clock component, so the same user running the
same app on the same machine always gets the same ID.
"""

import platform
import uuid
from typing import Optional

from licensechain.crypto.sha256_digest import sha256_hex

HARDWARE_ID_LENGTH = 32


def default_machine_id() -> str:
    """Best-effort machine identity: hostname plus primary MAC address."""
    return f"{platform.node()}:{uuid.getnode():012x}"


def generate_hardware_id(
    user_id: str | int,
    app_name: str,
    machine_id: Optional[str] = None,
) -> str:
    """Derive a stable 32-hex-char hardware ID."""
    if machine_id is None:
        machine_id = default_machine_id()
    material = f"{user_id}|{app_name}|{machine_id}"
    return sha256_hex(material)[:HARDWARE_ID_LENGTH]
