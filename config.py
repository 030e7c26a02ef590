"""
Runtime configuration for the inventory service.

Values come from environment variables (or a .env file) and are read once
per process through get_settings(). Leaving a webhook URL unset is a normal
configuration: that channel runs in log-only mode.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Each field maps to the upper-cased environment variable of the same
    name, e.g. EMAIL_WEBHOOK_URL.
    """

    # ----- Storage -----
    data_dir: Path = Field(
        default=Path(__file__).parent / "data",
        description="Directory holding products.json and notifications.json",
    )

    # ----- Notification webhooks -----
    email_webhook_url: Optional[str] = Field(default=None, description="Endpoint for email alerts")
    sms_webhook_url: Optional[str] = Field(default=None, description="Endpoint for SMS alerts")
    webhook_timeout: float = Field(default=5.0, gt=0, description="Seconds allowed per delivery attempt")

    # ----- Live stream -----
    heartbeat_interval: float = Field(default=20.0, gt=0, description="Seconds between keep-alive frames")
    subscriber_queue_size: int = Field(default=256, ge=1, description="Outbox capacity per stream subscriber")

    # ----- Alerts and history -----
    low_stock_threshold: int = Field(default=5, ge=1)
    alert_items_limit: int = Field(default=50, ge=1)
    notification_history_default: int = Field(default=20, ge=1)
    notification_history_max: int = Field(default=100, ge=1)

    # ----- Server -----
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5500)
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings (cached)."""
    return Settings()
