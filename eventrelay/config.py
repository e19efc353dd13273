"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support.  Reads from a .env file and EVENTRELAY_* environment variables.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from eventrelay.core.codec import CodecConfig, NamingConvention


class RelayConfig(BaseSettings):
    """Relay configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export EVENTRELAY_ENVIRONMENT=staging
        export EVENTRELAY_LOG_LEVEL=DEBUG
        export EVENTRELAY_TOPIC_ARN=arn:aws:sns:us-east-1:123456789012:registrations

    Or via .env file::

        EVENTRELAY_SAFETY_MARGIN_SECONDS=3
        EVENTRELAY_MINIMUM_FLOOR_SECONDS=8
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EVENTRELAY_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Broker
    topic_arn: str = ""
    region: str = "us-east-1"

    # Batch deadline
    safety_margin_seconds: float = 5.0
    minimum_floor_seconds: float = 10.0

    # Notification handler
    email_sender: str = "noreply@eventrelay.local"
    product_notification_recipient: str = "catalogue@eventrelay.local"

    # Codec
    codec_naming: NamingConvention = NamingConvention.CAMEL
    codec_verify_on_encode: bool = True
    codec_forbid_extra_fields: bool = False

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    def codec_config(self) -> CodecConfig:
        """Build the codec settings described by this config."""
        return CodecConfig(
            naming=self.codec_naming,
            verify_on_encode=self.codec_verify_on_encode,
            forbid_extra_fields=self.codec_forbid_extra_fields,
        )


# Module-level singleton — import as `from eventrelay.config import config`
config = RelayConfig()
