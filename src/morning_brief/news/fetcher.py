# ABOUTME: News search API client fetching articles for every topic bucket.
# ABOUTME: Uses httpx for requests and BeautifulSoup to clean HTML from snippets.

import time
from datetime import UTC, date, datetime, time as dt_time, timedelta
from typing import Any

import httpx
import structlog
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field, ValidationError

from morning_brief.config import Settings, get_settings
from morning_brief.models import Article, TopicBucket
from morning_brief.news.categories import CATEGORIES, get_category

log = structlog.get_logger()

API_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class FetchResult(BaseModel):
    """Articles grouped per bucket plus the globally unique pool."""

    by_category: dict[str, list[Article]] = Field(default_factory=dict)
    all: list[Article] = Field(default_factory=list)
    requests: int = 0


def fetch_window(
    target_date: date | None = None,
    now: datetime | None = None,
    hours: int = 24,
) -> tuple[str, str | None]:
    """Compute the published_after/published_before bounds for a fetch.

    Without a target date the window is the last ``hours`` hours. For a
    historical date it runs from midnight of the previous day through the
    end of the target date (UTC).
    """
    if target_date is None:
        now = now or datetime.now(UTC)
        return (now - timedelta(hours=hours)).strftime(API_TIMESTAMP_FORMAT), None

    start = datetime.combine(target_date - timedelta(days=1), dt_time.min, tzinfo=UTC)
    end = datetime.combine(target_date, dt_time(23, 59, 59), tzinfo=UTC)
    return start.strftime(API_TIMESTAMP_FORMAT), end.strftime(API_TIMESTAMP_FORMAT)


def clean_text(value: str | None) -> str:
    """Strip HTML tags and entities from API-provided text."""
    if not value:
        return ""
    if "<" not in value and "&" not in value:
        return value.strip()
    return BeautifulSoup(value, "html.parser").get_text(" ", strip=True)


def map_article(raw: dict[str, Any], category: str | None = None) -> Article:
    """Map an API article record onto an Article, applying defaults."""
    data: dict[str, Any] = {
        "uuid": raw.get("uuid") or "",
        "title": clean_text(raw.get("title")) or "Untitled",
        "description": clean_text(raw.get("description")),
        "snippet": clean_text(raw.get("snippet")),
        "url": raw.get("url") or "",
        "image_url": raw.get("image_url") or "",
        "source": raw.get("source") or "Unknown",
        "categories": raw.get("categories") or [],
        "locale": raw.get("locale"),
        "category": category,
    }
    if raw.get("published_at"):
        data["published_at"] = raw["published_at"]
    return Article(**data)


class NewsFetcher:
    """Fetches articles from the news search API, one request per query variant."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.settings.news_api_base_url,
                timeout=self.settings.news_timeout,
                headers={"Accept": "application/json"},
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "NewsFetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _api_key(self) -> str:
        if not self.settings.news_api_key:
            raise ValueError("NEWS_API_KEY is required")
        return self.settings.news_api_key.get_secret_value()

    def _search(
        self,
        query: str,
        published_after: str,
        published_before: str | None,
    ) -> list[dict[str, Any]] | None:
        """Run one search request.

        Returns:
            Raw article records, or None if the request failed.
        """
        params = {
            "api_token": self._api_key(),
            "locale": self.settings.news_api_locale,
            "language": self.settings.news_api_language,
            "categories": self.settings.news_api_categories,
            "published_after": published_after,
            "search": query,
            "sort": "published_at",
            "limit": str(self.settings.news_api_limit),
        }
        if published_before:
            params["published_before"] = published_before

        try:
            response = self.client.get("/top", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            log.error("news_search_failed", query=query, error=str(e))
            return None
        except ValueError as e:
            log.error("news_search_invalid_json", query=query, error=str(e))
            return None

        records = payload.get("data") if isinstance(payload, dict) else None
        return records or []

    def _fetch_bucket(
        self,
        bucket: TopicBucket,
        published_after: str,
        published_before: str | None,
        result: FetchResult,
        seen_global: set[str],
    ) -> list[Article]:
        seen: set[str] = set()
        articles: list[Article] = []

        for query in bucket.queries:
            records = self._search(query, published_after, published_before)
            result.requests += 1

            for raw in records or []:
                url = raw.get("url") or ""
                if url in seen:
                    continue
                seen.add(url)
                try:
                    article = map_article(raw, category=bucket.key)
                except ValidationError as e:
                    log.warning("news_article_skipped", url=url, error=str(e))
                    continue
                articles.append(article)

                if url not in seen_global:
                    seen_global.add(url)
                    result.all.append(article)

            if self.settings.news_request_delay > 0:
                time.sleep(self.settings.news_request_delay)

        log.info("news_bucket_fetched", category=bucket.key, articles=len(articles))
        return articles

    def fetch_all(self, target_date: date | None = None) -> FetchResult:
        """Fetch every bucket for the last day, or for a historical date.

        Args:
            target_date: Fetch the window ending on this date. Defaults to
                the rolling last-24-hours window.

        Returns:
            FetchResult with per-bucket lists and the global unique pool.

        Raises:
            ValueError: If the API key is not configured.
        """
        self._api_key()
        published_after, published_before = fetch_window(
            target_date, hours=self.settings.news_window_hours
        )
        log.info(
            "news_fetch_start",
            buckets=len(CATEGORIES),
            published_after=published_after,
            published_before=published_before,
        )

        result = FetchResult()
        seen_global: set[str] = set()
        for key, bucket in CATEGORIES.items():
            result.by_category[key] = self._fetch_bucket(
                bucket, published_after, published_before, result, seen_global
            )

        log.info("news_fetch_complete", requests=result.requests, unique=len(result.all))
        return result

    def fetch_category(self, key: str) -> list[Article]:
        """Fetch a single bucket for the rolling window.

        Raises:
            ValueError: If the key is unknown or the API key is missing.
        """
        bucket = get_category(key)
        self._api_key()
        published_after, _ = fetch_window(hours=self.settings.news_window_hours)
        return self._fetch_bucket(bucket, published_after, None, FetchResult(), set())
