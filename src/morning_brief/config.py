# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads all settings from environment variables and .env file.

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # News search API (TheNewsAPI)
    news_api_key: SecretStr | None = None
    news_api_base_url: str = "https://api.thenewsapi.com/v1/news"
    news_api_locale: str = "us"
    news_api_language: str = "en"
    news_api_categories: str = "politics,general,business,world,tech"
    news_api_limit: int = 50
    news_timeout: int = 15
    news_request_delay: float = 0.15  # Seconds between search requests
    news_window_hours: int = 24

    # Pipeline
    max_stories_per_category: int = 6
    backfill_delay: float = 2.0  # Seconds between historical generations

    # AI / Gemini
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    ai_sleep_between_calls: int = 0
    ai_temperature: float = 0.7
    ai_top_p: float = 0.95

    # Text-to-speech: ElevenLabs (primary)
    elevenlabs_api_key: SecretStr | None = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_voice: str = "george"
    elevenlabs_model: str = "flash"
    elevenlabs_timeout: int = 120
    elevenlabs_daily_characters: int = Field(450, gt=0)  # Usage projection for /api/usage

    # Text-to-speech: Amazon Polly (secondary)
    aws_access_key_id: SecretStr | None = None
    aws_secret_access_key: SecretStr | None = None
    aws_region: str = "us-east-1"
    polly_voice_id: str = "Joanna"
    polly_engine: str = "neural"

    # Which provider chain narrates category scripts
    category_audio_provider: Literal["polly", "elevenlabs"] = "polly"

    # Storage
    briefing_store: Literal["file", "database"] = "file"
    data_dir: Path = Path("data")
    audio_dir: Path = Path("public/audio")
    gcs_bucket: str = ""  # Empty disables GCS; audio goes to audio_dir
    retention_days: int = 30
    history_days: int = 14

    # Database (optional - only required for database store, subscribers, push)
    db_host: str = ""
    db_port: int = 5432
    db_name: str = "morningbrief"
    db_user: str = "morningbrief"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10

    @property
    def database_enabled(self) -> bool:
        """Whether a PostgreSQL host is configured."""
        return bool(self.db_host)

    @property
    def database_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Newsletter (Beehiiv)
    beehiiv_api_key: SecretStr | None = None
    beehiiv_publication_id: str = ""
    beehiiv_base_url: str = "https://api.beehiiv.com/v2"
    beehiiv_send_welcome_email: bool = True

    @property
    def beehiiv_enabled(self) -> bool:
        """Whether Beehiiv credentials are configured."""
        return bool(self.beehiiv_api_key and self.beehiiv_publication_id)

    # Web Push (VAPID)
    vapid_public_key: str = ""
    vapid_private_key: SecretStr | None = None
    vapid_email: str = "mailto:hello@morningbrief.app"
    push_ttl: int = 3600

    @property
    def push_enabled(self) -> bool:
        """Whether VAPID keys are configured."""
        return bool(self.vapid_public_key and self.vapid_private_key)

    # Endpoint protection
    cron_secret: SecretStr | None = None
    admin_secret: SecretStr | None = None  # Falls back to cron_secret
    scheduler_audience: str = ""  # OIDC audience for Cloud Scheduler verification

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Web / API
    app_base_url: str = "http://localhost:8000"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    Every external service is optional; features degrade when unset.
    """
    return Settings()
