# ABOUTME: Briefing generation pipeline and the jobs built on it.
# ABOUTME: Exports the generator, historical backfill, and the scheduled daily job.

from morning_brief.pipeline.backfill import BackfillResult, date_range, generate_range
from morning_brief.pipeline.daily import DailyJobResult, run_daily_job
from morning_brief.pipeline.generator import (
    BriefingGenerator,
    GenerationResult,
    NoArticlesFoundError,
)

__all__ = [
    "BackfillResult",
    "BriefingGenerator",
    "DailyJobResult",
    "GenerationResult",
    "NoArticlesFoundError",
    "date_range",
    "generate_range",
    "run_daily_job",
]
