# ABOUTME: Briefing persistence backends: JSON files on disk or PostgreSQL.
# ABOUTME: Both upsert by date; the file backend also sweeps briefings past retention.

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.config import Settings, get_settings
from morning_brief.db.repository import BriefingRepository
from morning_brief.db.session import get_session
from morning_brief.models import DailyBriefing, HistoryEntry
from morning_brief.services.storage import AudioStorage

log = structlog.get_logger()

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def utc_today() -> date:
    return datetime.now(UTC).date()


class BriefingStore:
    """Interface shared by the briefing persistence backends."""

    async def save(self, briefing: DailyBriefing) -> None:
        raise NotImplementedError

    async def get(self, briefing_date: date) -> DailyBriefing | None:
        raise NotImplementedError

    async def list_dates(self) -> list[date]:
        """Dates with a stored briefing, most recent first."""
        raise NotImplementedError

    async def has(self, briefing_date: date) -> bool:
        return await self.get(briefing_date) is not None

    async def history(self, limit: int = 14) -> list[HistoryEntry]:
        """Summaries of the most recent briefings."""
        entries = []
        for briefing_date in (await self.list_dates())[:limit]:
            briefing = await self.get(briefing_date)
            if briefing is not None:
                entries.append(HistoryEntry.from_briefing(briefing))
        return entries


class FileBriefingStore(BriefingStore):
    """Stores one JSON document per date under ``data_dir/briefings``."""

    def __init__(
        self,
        settings: Settings | None = None,
        audio_storage: AudioStorage | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.audio_storage = audio_storage or AudioStorage(self.settings)
        self.briefings_dir.mkdir(parents=True, exist_ok=True)

    @property
    def briefings_dir(self) -> Path:
        return self.settings.data_dir / "briefings"

    def _path(self, briefing_date: date) -> Path:
        return self.briefings_dir / f"{briefing_date.isoformat()}.json"

    async def save(self, briefing: DailyBriefing) -> None:
        path = self._path(briefing.date)
        path.write_text(briefing.model_dump_json(indent=2), encoding="utf-8")
        log.info("briefing_saved", backend="file", date=briefing.date.isoformat(), path=str(path))
        self.cleanup(keep=briefing.date)

    async def get(self, briefing_date: date) -> DailyBriefing | None:
        path = self._path(briefing_date)
        if not path.exists():
            return None
        try:
            return DailyBriefing.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.error("briefing_file_unreadable", path=str(path), error=str(e))
            return None

    async def has(self, briefing_date: date) -> bool:
        return self._path(briefing_date).exists()

    def _stored_dates(self) -> list[date]:
        dates = []
        for path in self.briefings_dir.glob("*.json"):
            try:
                dates.append(date.fromisoformat(path.stem))
            except ValueError:
                log.warning("briefing_file_ignored", path=str(path))
        return dates

    async def list_dates(self) -> list[date]:
        return sorted(self._stored_dates(), reverse=True)

    def cleanup(self, as_of: date | None = None, keep: date | None = None) -> int:
        """Delete briefings and audio older than the retention window.

        Nothing dated on or after ``keep`` is removed, so a backfilled
        briefing older than the window survives its own save.

        Returns:
            Number of briefing documents removed.
        """
        as_of = as_of or utc_today()
        cutoff = as_of - timedelta(days=self.settings.retention_days)
        if keep is not None:
            cutoff = min(cutoff, keep)

        removed = 0
        for stored in self._stored_dates():
            if stored < cutoff:
                self._path(stored).unlink(missing_ok=True)
                removed += 1

        self.audio_storage.delete_before(cutoff)
        if removed:
            log.info("briefing_retention_sweep", removed=removed, cutoff=cutoff.isoformat())
        return removed


def briefing_row(briefing: DailyBriefing) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Split a briefing into the briefings row and its story rows."""
    values = {
        "briefing_date": briefing.date,
        "headline": briefing.full_briefing.headline,
        "script": briefing.full_briefing.script,
        "audio_url": briefing.full_briefing.audio_url or None,
        "duration": briefing.full_briefing.duration,
        "story_count": briefing.full_briefing.story_count,
        "categories": briefing.meta.category_counts,
        "sources": briefing.meta.top_sources,
        "payload": briefing.model_dump(mode="json"),
        "generated_at": briefing.generated_at,
    }
    stories = [
        {
            "story_key": story.id,
            "title": story.title,
            "summary": story.summary,
            "category": story.category,
            "source": story.source,
            "source_url": story.source_url,
            "image_url": story.image_url or None,
            "published_at": story.published_at,
            "position": position,
        }
        for position, story in enumerate(briefing.stories, start=1)
    ]
    return values, stories


class DatabaseBriefingStore(BriefingStore):
    """Stores briefings in PostgreSQL with upsert-by-date."""

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self.session_factory = session_factory

    async def save(self, briefing: DailyBriefing) -> None:
        values, stories = briefing_row(briefing)
        async with self.session_factory() as session:
            briefing_id = await BriefingRepository(session).upsert(values, stories)
        log.info(
            "briefing_saved",
            backend="database",
            id=briefing_id,
            date=briefing.date.isoformat(),
            stories=len(stories),
        )

    async def get(self, briefing_date: date) -> DailyBriefing | None:
        async with self.session_factory() as session:
            row = await BriefingRepository(session).get_by_date(briefing_date)
            if row is None:
                return None
            return DailyBriefing.model_validate(row.payload)

    async def has(self, briefing_date: date) -> bool:
        async with self.session_factory() as session:
            return await BriefingRepository(session).exists(briefing_date)

    async def list_dates(self) -> list[date]:
        async with self.session_factory() as session:
            return await BriefingRepository(session).list_dates()

    async def history(self, limit: int = 14) -> list[HistoryEntry]:
        async with self.session_factory() as session:
            rows = await BriefingRepository(session).list_recent(limit)
            return [
                HistoryEntry.from_briefing(DailyBriefing.model_validate(row.payload))
                for row in rows
            ]


def get_briefing_store(settings: Settings | None = None) -> BriefingStore:
    """Build the store selected by ``briefing_store``."""
    settings = settings or get_settings()
    if settings.briefing_store == "database":
        return DatabaseBriefingStore()
    return FileBriefingStore(settings)
