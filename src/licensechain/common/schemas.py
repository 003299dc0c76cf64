"""Shared Pydantic schemas for the LicenseChain SDK."""

from pydantic import BaseModel

from licensechain import __version__


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = __version__
    service: str = "licensechain-webhooks"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""
