# ABOUTME: SQLAlchemy ORM models for briefing, subscriber, and push persistence.
# ABOUTME: Defines Briefing, Story, Subscriber, PushSubscription tables.

from datetime import UTC, date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Briefing(Base):
    """One daily briefing. The full document lives in ``payload``."""

    __tablename__ = "briefings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    briefing_date: Mapped[date] = mapped_column(
        "date", Date, nullable=False, unique=True, index=True
    )
    headline: Mapped[str] = mapped_column(String(200), nullable=False)
    script: Mapped[str] = mapped_column(Text, nullable=False)
    audio_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    duration: Mapped[str] = mapped_column(String(16), nullable=False)
    story_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    categories: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    sources: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    stories: Mapped[list["Story"]] = relationship(
        "Story",
        back_populates="briefing",
        cascade="all, delete-orphan",
        order_by="Story.position",
    )

    __table_args__ = (Index("ix_briefings_date_desc", briefing_date.desc()),)

    def __repr__(self) -> str:
        return f"<Briefing {self.briefing_date}: {self.headline[:50]}>"


class Story(Base):
    """A summarized story belonging to one briefing, in display order."""

    __tablename__ = "stories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    briefing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("briefings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    story_key: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    source: Mapped[str] = mapped_column(String(200), nullable=False)
    source_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    briefing: Mapped["Briefing"] = relationship("Briefing", back_populates="stories")

    __table_args__ = (UniqueConstraint("briefing_id", "position", name="uq_story_position"),)

    def __repr__(self) -> str:
        return f"<Story {self.story_key}: {self.title[:50]}>"


class Subscriber(Base):
    """A newsletter subscriber mirrored from the email platform."""

    __tablename__ = "subscribers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    subscribed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, nullable=False
    )
    unsubscribed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        status = "active" if self.active else "inactive"
        return f"<Subscriber {self.email} ({status})>"


class PushSubscription(Base):
    """A browser Web Push endpoint and its encryption keys."""

    __tablename__ = "push_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    endpoint: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    p256dh: Mapped[str] = mapped_column(String(255), nullable=False)
    auth: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<PushSubscription {self.endpoint[:60]}>"
