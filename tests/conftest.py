# ABOUTME: Pytest fixtures and configuration for Morning Brief tests.
# ABOUTME: Provides mock settings, sample articles and briefings, and fake providers.

from datetime import UTC, date, datetime
from pathlib import Path

import pytest
from pydantic import SecretStr

from morning_brief.config import Settings
from morning_brief.models import (
    Article,
    BriefingMeta,
    CategoryBrief,
    DailyBriefing,
    FullBriefing,
    Story,
)


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create mock settings for testing."""
    return Settings(
        _env_file=None,
        news_api_key=SecretStr("test-news-key"),
        news_api_base_url="https://news.test/v1/news",
        news_request_delay=0,
        gemini_api_key=SecretStr("test-gemini-key"),
        gemini_model="gemini-test",
        ai_sleep_between_calls=0,
        elevenlabs_api_key=None,
        aws_access_key_id=None,
        aws_secret_access_key=None,
        data_dir=tmp_path / "data",
        audio_dir=tmp_path / "audio",
        gcs_bucket="",
        backfill_delay=0,
        db_host="",
        beehiiv_api_key=None,
        beehiiv_publication_id="",
        vapid_public_key="",
        vapid_private_key=None,
        cron_secret=None,
        admin_secret=None,
        scheduler_audience="",
        log_level="DEBUG",
    )


@pytest.fixture
def sample_article() -> Article:
    """Create a sample Article for testing."""
    return Article(
        uuid="a1",
        title="Beijing signals new trade talks with Washington",
        description="China's commerce ministry said talks would resume next month.",
        snippet="Talks are expected to focus on tariffs.",
        url="https://www.reuters.com/world/china/trade-talks",
        source="reuters.com",
        published_at=datetime(2026, 1, 12, 8, 0, tzinfo=UTC),
        category="china",
    )


def make_article(
    n: int,
    *,
    source: str = "example.com",
    category: str = "china",
    hour: int = 8,
    title: str | None = None,
) -> Article:
    """Build a distinct article; ``n`` varies title and URL."""
    return Article(
        uuid=f"uuid-{n}",
        title=title or f"Story number {n} about regional developments today",
        description=f"Description for story {n}.",
        snippet=f"Snippet {n}.",
        url=f"https://{source}/story-{n}",
        source=source,
        published_at=datetime(2026, 1, 12, hour, 0, tzinfo=UTC),
        category=category,
    )


def make_story(n: int, category: str = "china") -> Story:
    return Story(
        id=f"{category}-{n}",
        uuid=f"uuid-{n}",
        title=f"Headline {n}",
        summary=f"Summary of story {n}.",
        category=category,
        category_display="China & Asia",
        source="reuters.com",
        source_url=f"https://reuters.com/story-{n}",
        published_at=datetime(2026, 1, 12, 8, 0, tzinfo=UTC),
    )


def make_briefing(
    briefing_date: date,
    headline: str = "Markets steady as talks resume",
) -> DailyBriefing:
    """Build a small but complete briefing for the given date."""
    stories = [make_story(1), make_story(2)]
    return DailyBriefing(
        date=briefing_date,
        full_briefing=FullBriefing(
            headline=headline,
            script="Good morning. Here is your briefing.",
            audio_url=f"/audio/{briefing_date.isoformat()}-full.mp3",
            duration="0:03",
            story_count=len(stories),
        ),
        category_briefs=[
            CategoryBrief(
                category="china",
                display_name="China & Asia",
                emoji="🇨🇳",
                headline="Trade talks resume",
                script="China script.",
                audio_url="",
                story_count=len(stories),
                estimated_duration="0:01",
                stories=stories,
            )
        ],
        stories=stories,
        meta=BriefingMeta(
            total_stories=len(stories),
            category_counts={"china": 2},
            top_sources=["reuters.com"],
        ),
    )


@pytest.fixture
def sample_briefing() -> DailyBriefing:
    """Create a sample briefing dated 2026-01-12."""
    return make_briefing(date(2026, 1, 12))


class FakeProvider:
    """Speech provider returning canned audio or raising a given error."""

    def __init__(
        self,
        name: str,
        audio: bytes = b"mp3",
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        self.name = name
        self.audio = audio
        self.error = error
        self.configured = configured
        self.calls: list[tuple[str, dict]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def synthesize(self, text: str, **options: object) -> bytes:
        self.calls.append((text, options))
        if self.error is not None:
            raise self.error
        return self.audio
