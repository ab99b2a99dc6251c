# ABOUTME: Pydantic models for briefing data structures.
# ABOUTME: Defines Article, Story, CategoryBrief, and the daily Briefing document.

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class TopicBucket(BaseModel):
    """Fixed subject tag partitioning fetches and briefs."""

    key: str
    display_name: str
    emoji: str
    queries: list[str]


class Article(BaseModel):
    """Raw article returned by the news search API."""

    uuid: str = ""
    title: str = "Untitled"
    description: str = ""
    snippet: str = ""
    url: str
    image_url: str = ""
    source: str = "Unknown"
    published_at: datetime = Field(default_factory=utc_now)
    categories: list[str] = Field(default_factory=list)
    locale: str | None = None
    category: str | None = None

    model_config = {"frozen": True}

    @field_validator("published_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Story(BaseModel):
    """AI-summarized article within a briefing."""

    id: str
    uuid: str = ""
    title: str
    summary: str
    category: str
    category_display: str
    source: str
    source_url: str
    image_url: str = ""
    published_at: datetime


class CategoryBrief(BaseModel):
    """A topic bucket's slice of the daily briefing."""

    category: str
    display_name: str
    emoji: str
    headline: str
    script: str
    audio_url: str = ""
    story_count: int
    estimated_duration: str
    stories: list[Story] = Field(default_factory=list)


class FullBriefing(BaseModel):
    """The complete narrated briefing across all buckets."""

    headline: str
    script: str
    audio_url: str = ""
    duration: str
    story_count: int


class BriefingMeta(BaseModel):
    """Aggregate counts for a briefing."""

    total_stories: int
    category_counts: dict[str, int] = Field(default_factory=dict)
    top_sources: list[str] = Field(default_factory=list)


class DailyBriefing(BaseModel):
    """One briefing per calendar date. Regeneration replaces it wholesale."""

    date: date
    generated_at: datetime = Field(default_factory=utc_now)
    full_briefing: FullBriefing
    category_briefs: list[CategoryBrief] = Field(default_factory=list)
    stories: list[Story] = Field(default_factory=list)
    meta: BriefingMeta


class HistoryEntry(BaseModel):
    """Summary row for the briefing history listing."""

    date: date
    story_count: int
    duration: str
    headline: str
    category_count: int

    @classmethod
    def from_briefing(cls, briefing: DailyBriefing) -> "HistoryEntry":
        return cls(
            date=briefing.date,
            story_count=briefing.full_briefing.story_count,
            duration=briefing.full_briefing.duration,
            headline=briefing.full_briefing.headline,
            category_count=len(briefing.category_briefs),
        )


class BriefingDraft(BaseModel):
    """Summarizer output before audio and persistence."""

    headline: str
    script: str
    estimated_duration: str
    stories: list[Story]
    category_briefs: list[CategoryBrief]

    @property
    def total_stories(self) -> int:
        return len(self.stories)


class PushKeys(BaseModel):
    """Browser-provided encryption keys for a push subscription."""

    p256dh: str
    auth: str


class PushSubscriptionInfo(BaseModel):
    """A browser push endpoint with its keys."""

    endpoint: str
    keys: PushKeys


class PushPayload(BaseModel):
    """Notification content delivered to subscribed browsers."""

    title: str = "🎧 Your Morning Brief is Ready"
    body: str = "Today's geopolitics briefing is waiting for you."
    icon: str = "/icons/icon-192.png"
    badge: str = "/icons/badge-72.png"
    url: str = "/"
    tag: str = "daily-briefing"
