"""LicenseChain SDK configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.licensechain.com"


class LicenseChainSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LICENSECHAIN_")

    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # API
    api_key: str = ""
    app_name: str = ""
    app_version: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 30
    retries: int = 3
    retry_backoff_base: float = 0.5

    # License validation cache
    cache_ttl: int = 300  # seconds

    # Webhooks
    webhook_secret: str = ""
    verify_webhooks: bool = True
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 8090

    @property
    def effective_webhook_secret(self) -> str:
        """Dedicated webhook secret, falling back to the API key."""
        return self.webhook_secret or self.api_key

    def validate_for_production(self) -> None:
        """Refuse to run with webhook verification disabled outside development."""
        if self.verify_webhooks:
            return

        if self.environment != "development":
            raise RuntimeError(
                f"Webhook signature verification is disabled in '{self.environment}' "
                "environment. Unset LICENSECHAIN_VERIFY_WEBHOOKS or set it to true."
            )

        warnings.warn(
            "Webhook signature verification is disabled — every inbound webhook "
            "will be accepted without proof of origin",
            UserWarning,
            stacklevel=2,
        )


@lru_cache
def get_settings() -> LicenseChainSettings:
    settings = LicenseChainSettings()
    settings.validate_for_production()
    return settings
