# ABOUTME: Title-prefix deduplication and premium-source ranking for articles.
# ABOUTME: Both are pure functions returning new lists in a deterministic order.

import re

from morning_brief.models import Article

PREMIUM_SOURCES = (
    "reuters",
    "apnews",
    "bbc",
    "nytimes",
    "wsj",
    "ft",
    "economist",
    "politico",
    "aljazeera",
    "nbcnews",
    "cbsnews",
    "foxnews",
    "cnn",
    "bloomberg",
)

TITLE_KEY_WORDS = 6

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def normalize_title(title: str) -> str:
    """Reduce a title to its first six lowercase alphanumeric words."""
    cleaned = _NON_ALNUM.sub("", title.lower())
    return " ".join(cleaned.split()[:TITLE_KEY_WORDS])


def deduplicate_articles(articles: list[Article]) -> list[Article]:
    """Drop articles whose normalized title was already seen.

    The first article for each key wins; relative order is preserved.
    """
    seen: set[str] = set()
    unique: list[Article] = []
    for article in articles:
        key = normalize_title(article.title)
        if key in seen:
            continue
        seen.add(key)
        unique.append(article)
    return unique


def is_premium_source(source: str) -> bool:
    """Check whether a source name contains a premium allow-list entry."""
    lowered = source.lower()
    return any(name in lowered for name in PREMIUM_SOURCES)


def source_score(article: Article) -> int:
    return 10 if is_premium_source(article.source) else 0


def rank_articles(articles: list[Article]) -> list[Article]:
    """Order articles premium-first, then newest-first.

    Stable: articles with equal score and timestamp keep their input order.
    """
    return sorted(
        articles,
        key=lambda article: (-source_score(article), -article.published_at.timestamp()),
    )


def select_top_stories(articles: list[Article], limit: int) -> list[Article]:
    """Deduplicate, rank, and keep the first ``limit`` articles."""
    return rank_articles(deduplicate_articles(articles))[:limit]
