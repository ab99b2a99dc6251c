# ABOUTME: Sequential generation of briefings for a list or range of past dates.
# ABOUTME: Existing dates are skipped; one date failing never stops the rest.

import asyncio
from datetime import date, timedelta
from typing import Literal

import structlog
from pydantic import BaseModel, Field

from morning_brief.pipeline.generator import BriefingGenerator

log = structlog.get_logger()


class BackfillItem(BaseModel):
    date: date
    status: Literal["success", "skipped", "error"]
    message: str | None = None


class BackfillResult(BaseModel):
    items: list[BackfillItem] = Field(default_factory=list)

    def count(self, status: str) -> int:
        return sum(1 for item in self.items if item.status == status)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.items),
            "successful": self.count("success"),
            "skipped": self.count("skipped"),
            "failed": self.count("error"),
        }


def date_range(start: date, end: date) -> list[date]:
    """Inclusive list of dates from start to end.

    Raises:
        ValueError: If end is before start.
    """
    if end < start:
        raise ValueError("end date must not be before start date")
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


async def generate_range(
    generator: BriefingGenerator,
    dates: list[date],
    delay: float | None = None,
) -> BackfillResult:
    """Generate briefings one date at a time.

    Args:
        generator: Pipeline used for each date.
        dates: Dates to generate, in order.
        delay: Pause between generations; defaults to ``backfill_delay``.
    """
    delay = generator.settings.backfill_delay if delay is None else delay
    result = BackfillResult()
    log.info("backfill_start", dates=len(dates))

    for target_date in dates:
        try:
            outcome = await generator.generate(target_date)
        except Exception as e:
            log.exception("backfill_date_failed", date=target_date.isoformat())
            result.items.append(BackfillItem(date=target_date, status="error", message=str(e)))
        else:
            if outcome.status == "skipped":
                result.items.append(
                    BackfillItem(
                        date=target_date, status="skipped", message="Briefing already exists"
                    )
                )
                continue
            headline = outcome.briefing.full_briefing.headline if outcome.briefing else None
            result.items.append(BackfillItem(date=target_date, status="success", message=headline))

        if delay > 0:
            await asyncio.sleep(delay)

    log.info("backfill_complete", **result.summary())
    return result
