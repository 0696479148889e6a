"""Configuration settings for the ride analytics engine."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/ride_analytics/config.py
# .parent.parent.parent = project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (RIDE_ANALYTICS_*)."""

    model_config = SettingsConfigDict(
        env_prefix="RIDE_ANALYTICS_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote prediction service (optional)
    remote_api_url: str = "https://api.rustride.io/v1"
    remote_api_key: str = ""
    remote_timeout_seconds: float = 30.0

    # Signal conditioning
    power_filter_max_watts: int = 2000
    power_filter_max_delta: Optional[int] = None

    # Critical power fitting window
    cp_min_duration_secs: int = 120
    cp_max_duration_secs: int = 1200

    # FTP detection
    ftp_change_threshold: float = 0.05
    default_ftp: int = 200

    log_level: str = "INFO"

    @property
    def remote_enabled(self) -> bool:
        """Whether a remote prediction client should be created."""
        return bool(self.remote_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
