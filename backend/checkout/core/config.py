from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider environment selection
    environment: Literal["dev", "sandbox", "beta"] = Field(
        default="sandbox",
        description="Default provider environment",
    )
    payment_api_mode: Literal["live", "mock"] = Field(
        default="live",
        description="Payment API client to use",
    )

    # Provider credentials (one per environment)
    api_key_dev: str | None = Field(
        default=None,
        description="Basic credential for the DEV environment",
    )
    api_key_sandbox: str | None = Field(
        default=None,
        description="Basic credential for the SANDBOX environment",
    )
    api_key_beta: str | None = Field(
        default=None,
        description="Basic credential for the BETA environment",
    )

    # Provider base URLs
    base_url_dev: str = Field(
        default="https://api.dev.token.io",
        description="DEV environment base URL",
    )
    base_url_sandbox: str = Field(
        default="https://api.sandbox.token.io",
        description="SANDBOX environment base URL",
    )
    base_url_beta: str = Field(
        default="https://api.beta.token.io",
        description="BETA environment base URL",
    )

    # Callback deep link
    callback_scheme: str = Field(
        default="paymentdemoapp",
        min_length=1,
        description="Scheme of the callback URI",
    )
    callback_host: str = Field(
        default="payment-complete",
        min_length=1,
        description="Host of the callback URI",
    )
    flow_type: str = Field(
        default="FULL_HOSTED_PAGES",
        description="Hosted checkout flow type",
    )

    # HTTP
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )

    # Status polling
    poll_initial_interval: float = Field(
        default=2.0,
        gt=0,
        description="Delay before the second poll in seconds",
    )
    poll_backoff_factor: float = Field(
        default=1.5,
        ge=1.0,
        description="Multiplier applied to the poll interval after each attempt",
    )
    poll_max_interval: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound for the poll interval in seconds",
    )
    poll_max_wait: float = Field(
        default=120.0,
        gt=0,
        description="Total time budget for polling in seconds",
    )

    # Flow registry
    flow_retention: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds a completed flow stays queryable before eviction",
    )
    flow_max_age: float = Field(
        default=1800.0,
        gt=0,
        description="Seconds an unfinished flow is kept before eviction",
    )

    # Service API
    api_secret_key: str = Field(
        ...,
        min_length=1,
        description="Secret key for the service API",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level",
    )
    log_http_bodies: bool = Field(
        default=False,
        description="Log provider request/response bodies",
    )

    @property
    def callback_url(self) -> str:
        """Callback URI registered with the provider."""
        return f"{self.callback_scheme}://{self.callback_host}"


settings = Settings()
