# ABOUTME: Daily briefing generation pipeline.
# ABOUTME: Fetch, deduplicate, rank, summarize, narrate, and persist one briefing per date.

import asyncio
import time
from datetime import UTC, date, datetime
from functools import partial
from typing import Literal

import structlog
from pydantic import BaseModel

from morning_brief.ai.service import AIService
from morning_brief.config import Settings, get_settings
from morning_brief.models import (
    BriefingDraft,
    BriefingMeta,
    CategoryBrief,
    DailyBriefing,
    FullBriefing,
    Story,
)
from morning_brief.news.fetcher import NewsFetcher
from morning_brief.news.ranking import select_top_stories
from morning_brief.services.briefing_store import BriefingStore, get_briefing_store
from morning_brief.services.storage import AudioStorage, audio_filename
from morning_brief.tts.narrator import Narrator, build_narrators

log = structlog.get_logger()

TOP_SOURCES_LIMIT = 10


class NoArticlesFoundError(Exception):
    """The news search returned nothing usable for the target date."""


class GenerationResult(BaseModel):
    """Outcome of one generation request."""

    status: Literal["generated", "skipped"]
    date: date
    processing_time: float = 0.0
    briefing: DailyBriefing | None = None


def build_meta(stories: list[Story]) -> BriefingMeta:
    """Count stories per bucket and collect the first distinct sources."""
    counts: dict[str, int] = {}
    sources: list[str] = []
    for story in stories:
        counts[story.category] = counts.get(story.category, 0) + 1
        if story.source not in sources:
            sources.append(story.source)
    return BriefingMeta(
        total_stories=len(stories),
        category_counts=counts,
        top_sources=sources[:TOP_SOURCES_LIMIT],
    )


class BriefingGenerator:
    """Runs the full generation pipeline for a single date."""

    def __init__(
        self,
        settings: Settings | None = None,
        store: BriefingStore | None = None,
        fetcher: NewsFetcher | None = None,
        ai_service: AIService | None = None,
        full_narrator: Narrator | None = None,
        category_narrator: Narrator | None = None,
        audio_storage: AudioStorage | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store or get_briefing_store(self.settings)
        self.fetcher = fetcher or NewsFetcher(self.settings)
        self.ai_service = ai_service or AIService(self.settings)
        if full_narrator is None or category_narrator is None:
            default_full, default_category = build_narrators(self.settings)
            full_narrator = full_narrator or default_full
            category_narrator = category_narrator or default_category
        self.full_narrator = full_narrator
        self.category_narrator = category_narrator
        self.audio_storage = audio_storage or AudioStorage(self.settings)

    def close(self) -> None:
        self.fetcher.close()

    def __enter__(self) -> "BriefingGenerator":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    async def generate(
        self,
        target_date: date | None = None,
        *,
        force: bool = False,
        voice: str | None = None,
        model: str | None = None,
    ) -> GenerationResult:
        """Generate and store the briefing for a date.

        Args:
            target_date: Briefing date. Defaults to today (UTC); past dates
                fetch that day's news window.
            force: Regenerate even if a briefing already exists.
            voice: ElevenLabs voice name or ID for the full briefing.
            model: ElevenLabs model name or ID for the full briefing.

        Raises:
            NoArticlesFoundError: If no articles were fetched.
        """
        start = time.monotonic()
        today = datetime.now(UTC).date()
        target_date = target_date or today

        if not force and await self.store.has(target_date):
            log.info("generation_skipped", date=target_date.isoformat(), reason="exists")
            return GenerationResult(status="skipped", date=target_date)

        log.info("generation_start", date=target_date.isoformat(), force=force)
        loop = asyncio.get_running_loop()
        briefing = await loop.run_in_executor(
            None,
            partial(
                self.build_briefing,
                target_date,
                historical=target_date < today,
                voice=voice,
                model=model,
            ),
        )
        await self.store.save(briefing)

        elapsed = round(time.monotonic() - start, 1)
        log.info(
            "generation_complete",
            date=target_date.isoformat(),
            seconds=elapsed,
            stories=briefing.meta.total_stories,
        )
        return GenerationResult(
            status="generated",
            date=target_date,
            processing_time=elapsed,
            briefing=briefing,
        )

    def build_briefing(
        self,
        target_date: date,
        historical: bool = False,
        voice: str | None = None,
        model: str | None = None,
    ) -> DailyBriefing:
        """Run every blocking pipeline step and assemble the briefing.

        Raises:
            NoArticlesFoundError: If no articles were fetched.
        """
        fetched = self.fetcher.fetch_all(target_date if historical else None)
        if not fetched.all:
            raise NoArticlesFoundError("No news articles found")
        log.info(
            "articles_fetched",
            total=len(fetched.all),
            per_category={k: len(v) for k, v in fetched.by_category.items()},
        )

        selected = {
            category: select_top_stories(articles, self.settings.max_stories_per_category)
            for category, articles in fetched.by_category.items()
        }

        draft = self.ai_service.generate_all_briefings(selected, target_date)

        full_audio_url = self._narrate(
            self.full_narrator,
            draft.script,
            audio_filename(target_date, "full"),
            voice=voice,
            model=model,
        )
        category_briefs = [
            self._with_audio(brief, target_date) for brief in draft.category_briefs
        ]

        return self._assemble(target_date, draft, full_audio_url, category_briefs)

    def _narrate(
        self,
        narrator: Narrator,
        script: str,
        filename: str,
        **options: str | None,
    ) -> str:
        audio = narrator.narrate(script, **{k: v for k, v in options.items() if v})
        if not audio:
            log.warning("audio_missing", filename=filename)
            return ""
        return self.audio_storage.save(filename, audio) or ""

    def _with_audio(self, brief: CategoryBrief, target_date: date) -> CategoryBrief:
        url = self._narrate(
            self.category_narrator,
            brief.script,
            audio_filename(target_date, brief.category),
        )
        return brief.model_copy(update={"audio_url": url})

    def _assemble(
        self,
        target_date: date,
        draft: BriefingDraft,
        full_audio_url: str,
        category_briefs: list[CategoryBrief],
    ) -> DailyBriefing:
        return DailyBriefing(
            date=target_date,
            full_briefing=FullBriefing(
                headline=draft.headline,
                script=draft.script,
                audio_url=full_audio_url,
                duration=draft.estimated_duration,
                story_count=draft.total_stories,
            ),
            category_briefs=category_briefs,
            stories=draft.stories,
            meta=build_meta(draft.stories),
        )
