"""
Gateway Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Invalid config is rejected at import time.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Gateway settings loaded from environment variables."""

    service_name: str = "payment-service-gateway"
    service_version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True

    # Payment provider
    connection_mode: str = "production"  # production or test (local sandbox)
    window_group_id: str | None = None  # Host window group for the purchase dialog

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """Reject unknown enumerated values before anything is wired up."""
        errors: list[str] = []

        if self.log_format not in ("json", "console"):
            errors.append(f"PAYMENT_LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")

        if self.connection_mode.lower() not in ("production", "test"):
            errors.append(
                f"PAYMENT_CONNECTION_MODE must be 'production' or 'test', got: {self.connection_mode}"
            )

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CONFIGURATION ERROR - PAYMENT GATEWAY CANNOT START",
                    "=" * 60,
                    *[f"  - {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def is_test_mode(self) -> bool:
        """True when requests go to the local sandbox instead of the platform."""
        return self.connection_mode.lower() == "test"


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get gateway settings instance."""
    return settings
