"""Pydantic schemas for the webhook receiver."""

from typing import Optional

from pydantic import BaseModel


class WebhookAckResponse(BaseModel):
    success: bool = True
    event: Optional[str] = None
    message: str = ""
