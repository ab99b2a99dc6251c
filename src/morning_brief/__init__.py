# ABOUTME: Main package for the Morning Brief daily news briefing service.
# ABOUTME: Exports settings and the core briefing data models.

from morning_brief.config import get_settings
from morning_brief.models import Article, CategoryBrief, DailyBriefing, Story

__all__ = [
    "get_settings",
    "Article",
    "CategoryBrief",
    "DailyBriefing",
    "Story",
]
