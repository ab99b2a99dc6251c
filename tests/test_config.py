# ABOUTME: Tests for configuration loading and derived properties.
# ABOUTME: Verifies Pydantic Settings defaults and optional-service toggles.

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from morning_brief.config import Settings


class TestSettings:
    """Tests for Settings configuration class."""

    def test_defaults_without_any_service(self) -> None:
        """Every external service is optional."""
        settings = Settings(_env_file=None)

        assert settings.news_api_key is None
        assert settings.gemini_model == "gemini-2.5-flash"
        assert settings.max_stories_per_category == 6
        assert settings.retention_days == 30
        assert settings.briefing_store == "file"
        assert settings.category_audio_provider == "polly"

    def test_news_api_defaults(self) -> None:
        """News search parameters default to the US English feed."""
        settings = Settings(_env_file=None)

        assert settings.news_api_locale == "us"
        assert settings.news_api_language == "en"
        assert settings.news_api_categories == "politics,general,business,world,tech"
        assert settings.news_api_limit == 50

    def test_settings_secret_values_hidden(self, mock_settings: Settings) -> None:
        """Secret values should not be exposed in string representation."""
        settings_str = str(mock_settings)
        assert "test-news-key" not in settings_str
        assert "test-gemini-key" not in settings_str

    def test_settings_paths_are_path_objects(self, mock_settings: Settings) -> None:
        """Path settings should be Path objects."""
        assert isinstance(mock_settings.data_dir, Path)
        assert isinstance(mock_settings.audio_dir, Path)

    def test_invalid_store_backend_rejected(self) -> None:
        """Only the file and database backends exist."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, briefing_store="redis")

    def test_daily_characters_must_be_positive(self) -> None:
        """The usage projection divides by the daily character estimate."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, elevenlabs_daily_characters=0)


class TestDerivedProperties:
    """Tests for feature toggles derived from credentials."""

    def test_database_disabled_without_host(self, mock_settings: Settings) -> None:
        assert mock_settings.database_enabled is False

    def test_database_url(self) -> None:
        """Database URL uses the asyncpg driver."""
        settings = Settings(
            _env_file=None,
            db_host="db.internal",
            db_port=6543,
            db_name="briefs",
            db_user="app",
            db_password=SecretStr("pw"),
        )

        assert settings.database_enabled is True
        assert settings.database_url == "postgresql+asyncpg://app:pw@db.internal:6543/briefs"

    def test_beehiiv_requires_key_and_publication(self) -> None:
        key_only = Settings(_env_file=None, beehiiv_api_key=SecretStr("k"))
        both = Settings(
            _env_file=None, beehiiv_api_key=SecretStr("k"), beehiiv_publication_id="pub_1"
        )

        assert key_only.beehiiv_enabled is False
        assert both.beehiiv_enabled is True

    def test_push_requires_both_vapid_keys(self) -> None:
        public_only = Settings(_env_file=None, vapid_public_key="pub")
        both = Settings(
            _env_file=None, vapid_public_key="pub", vapid_private_key=SecretStr("priv")
        )

        assert public_only.push_enabled is False
        assert both.push_enabled is True
