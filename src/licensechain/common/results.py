"""Typed result returned by SDK operations instead of raising."""

from dataclasses import dataclass
from typing import Any, Optional

from licensechain.common.exceptions import LicenseChainError


@dataclass
class ApiResult:
    """Outcome of an API call or local precondition check."""

    success: bool
    data: Any = None
    error: Optional[LicenseChainError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: LicenseChainError) -> "ApiResult":
        return cls(success=False, error=error)

    @property
    def code(self) -> str:
        return self.error.code.value if self.error else ""

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""
