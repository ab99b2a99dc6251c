# ABOUTME: Tests for historical backfill over explicit dates and ranges.
# ABOUTME: Verifies per-date outcomes, summary counts, and that errors never abort the run.

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_briefing

from morning_brief.pipeline.backfill import BackfillItem, BackfillResult, date_range, generate_range
from morning_brief.pipeline.generator import GenerationResult, NoArticlesFoundError


def _generator(outcomes: dict) -> MagicMock:
    """Fake generator whose generate() result depends on the date."""

    async def generate(target_date, **_kwargs):
        outcome = outcomes[target_date]
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "skipped":
            return GenerationResult(status="skipped", date=target_date)
        return GenerationResult(
            status="generated", date=target_date, briefing=make_briefing(target_date)
        )

    generator = MagicMock()
    generator.settings.backfill_delay = 0
    generator.generate = AsyncMock(side_effect=generate)
    return generator


class TestDateRange:
    """Tests for inclusive date ranges."""

    def test_inclusive(self) -> None:
        assert date_range(date(2026, 1, 30), date(2026, 2, 2)) == [
            date(2026, 1, 30),
            date(2026, 1, 31),
            date(2026, 2, 1),
            date(2026, 2, 2),
        ]

    def test_single_day(self) -> None:
        assert date_range(date(2026, 1, 1), date(2026, 1, 1)) == [date(2026, 1, 1)]

    def test_reversed_raises(self) -> None:
        with pytest.raises(ValueError):
            date_range(date(2026, 1, 2), date(2026, 1, 1))


class TestGenerateRange:
    """Tests for sequential backfill."""

    async def test_mixed_outcomes(self) -> None:
        d1, d2, d3 = date(2026, 1, 10), date(2026, 1, 11), date(2026, 1, 12)
        generator = _generator(
            {d1: "generated", d2: "skipped", d3: NoArticlesFoundError("No news articles found")}
        )

        result = await generate_range(generator, [d1, d2, d3])

        assert [item.status for item in result.items] == ["success", "skipped", "error"]
        assert result.items[0].message == "Markets steady as talks resume"
        assert result.items[2].message == "No news articles found"
        assert result.summary() == {"total": 3, "successful": 1, "skipped": 1, "failed": 1}

    async def test_error_does_not_abort(self) -> None:
        d1, d2 = date(2026, 1, 10), date(2026, 1, 11)
        generator = _generator({d1: RuntimeError("boom"), d2: "generated"})

        result = await generate_range(generator, [d1, d2])

        assert generator.generate.await_count == 2
        assert result.items[1].status == "success"

    async def test_dates_processed_in_order(self) -> None:
        dates = [date(2026, 1, 12), date(2026, 1, 10)]
        generator = _generator({d: "generated" for d in dates})

        await generate_range(generator, dates)

        assert [c.args[0] for c in generator.generate.await_args_list] == dates

    async def test_empty(self) -> None:
        result = await generate_range(_generator({}), [])

        assert result.summary() == {"total": 0, "successful": 0, "skipped": 0, "failed": 0}


class TestBackfillResult:
    def test_count(self) -> None:
        result = BackfillResult(
            items=[
                BackfillItem(date=date(2026, 1, 1), status="success"),
                BackfillItem(date=date(2026, 1, 2), status="success"),
            ]
        )
        assert result.count("success") == 2
