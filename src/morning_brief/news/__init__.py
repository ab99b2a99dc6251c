# ABOUTME: News acquisition package: topic buckets, fetching, dedup and ranking.
# ABOUTME: Exports the fetcher and the pure ranking helpers.

from morning_brief.news.categories import CATEGORIES, categorize_article, get_category
from morning_brief.news.fetcher import FetchResult, NewsFetcher
from morning_brief.news.ranking import deduplicate_articles, rank_articles, select_top_stories

__all__ = [
    "CATEGORIES",
    "FetchResult",
    "NewsFetcher",
    "categorize_article",
    "deduplicate_articles",
    "get_category",
    "rank_articles",
    "select_top_stories",
]
