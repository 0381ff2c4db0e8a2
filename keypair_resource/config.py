import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(levelname)s: %(message)s"


class HandlerSettings(BaseSettings):
    """Runtime settings, read from KEYPAIR_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="KEYPAIR_", extra="ignore")

    log_level: str = "INFO"
    aws_region: str | None = None
    secrets_endpoint_url: str | None = None
    compensate_orphaned_secrets: bool = True
    callback_timeout_seconds: float | None = None


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # The Lambda runtime installs its own handler, so basicConfig is a no-op there
    logging.getLogger().setLevel(level)
