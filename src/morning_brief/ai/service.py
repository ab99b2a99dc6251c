# ABOUTME: Google Gemini AI service for briefing summaries and scripts.
# ABOUTME: Every call has a deterministic fallback so generation never stops on LLM errors.

import html
import json
import re
from datetime import date
from time import sleep
from typing import Any

import structlog
from google import genai
from google.genai import types

from morning_brief.ai.prompts import (
    CATEGORY_HEADLINE_PROMPT,
    CATEGORY_SCRIPT_PROMPT,
    EDITOR_SYSTEM_PROMPT,
    FULL_HEADLINE_PROMPT,
    FULL_SCRIPT_PROMPT,
    STORY_SUMMARIES_PROMPT,
)
from morning_brief.config import Settings, get_settings
from morning_brief.models import Article, BriefingDraft, CategoryBrief, Story
from morning_brief.news.categories import get_category

log = structlog.get_logger()

CHARS_PER_SECOND = 12

STORY_TITLE_MAX = 80
STORY_SUMMARY_MAX = 300
CATEGORY_HEADLINE_MAX = 50
CATEGORY_SCRIPT_MAX = 1200
CATEGORY_SCRIPT_FALLBACK_MAX = 1000
FULL_HEADLINE_MAX = 60
FULL_SCRIPT_MAX = 4000
FULL_SCRIPT_FALLBACK_MAX = 3500
DEFAULT_FULL_HEADLINE = "Global News Roundup"

_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def estimate_audio_duration(text: str) -> str:
    """Estimate narration length at ~150 words per minute (12 chars/sec).

    Returns:
        Duration formatted as ``m:ss``.
    """
    seconds = int(len(text) / CHARS_PER_SECOND + 0.5)
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}:{remaining:02d}"


def truncate_with_ellipsis(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def clean_headline(text: str, limit: int) -> str:
    return _SURROUNDING_QUOTES.sub("", text.strip())[:limit]


def spoken_date(value: date) -> str:
    """Format a date the way it is read aloud, e.g. 'Monday, January 12'."""
    return f"{value:%A, %B} {value.day}"


class AIService:
    """Service for interacting with Google Gemini AI."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """Lazy-initialized Gemini client."""
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise ValueError("GEMINI_API_KEY is required")
            self._client = genai.Client(
                api_key=self.settings.gemini_api_key.get_secret_value(),
            )
        return self._client

    def _generate(
        self,
        prompt: str,
        max_output_tokens: int,
        response_mime_type: str = "text/plain",
    ) -> str:
        """Generate content using the Gemini model.

        Raises:
            ValueError: If the model returns an empty response.
        """
        model = self.settings.gemini_model
        log.debug("generating_content", model=model, prompt_length=len(prompt))

        config = types.GenerateContentConfig(
            temperature=self.settings.ai_temperature,
            top_p=self.settings.ai_top_p,
            max_output_tokens=max_output_tokens,
            response_mime_type=response_mime_type,
            system_instruction=[types.Part.from_text(text=EDITOR_SYSTEM_PROMPT)],
        )
        contents = [types.Content(role="user", parts=[types.Part.from_text(text=prompt)])]

        result = ""
        for chunk in self.client.models.generate_content_stream(
            model=model,
            contents=contents,
            config=config,
        ):
            if chunk.text:
                result += chunk.text

        if self.settings.ai_sleep_between_calls > 0:
            sleep(self.settings.ai_sleep_between_calls)

        if not result.strip():
            raise ValueError("LLM returned empty response")
        return result.strip()

    def _strip_markdown_fences(self, text: str) -> str:
        """Strip ```json ... ``` fences Gemini likes to wrap JSON in."""
        pattern = r"^```(?:json)?\s*\n?(.*?)\n?```$"
        match = re.match(pattern, text.strip(), re.DOTALL)
        if match:
            return match.group(1).strip()
        return text.strip()

    def _fix_json_trailing_commas(self, text: str) -> str:
        text = re.sub(r",\s*}", "}", text)
        text = re.sub(r",\s*]", "]", text)
        return text

    def _unescape_html_entities(self, data: Any) -> Any:
        if isinstance(data, str):
            return html.unescape(data)
        if isinstance(data, dict):
            return {k: self._unescape_html_entities(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._unescape_html_entities(item) for item in data]
        return data

    def _parse_json_array(self, response: str) -> list[Any]:
        """Extract and parse the JSON array embedded in an LLM response.

        Raises:
            ValueError: If no array is present or it fails to parse.
        """
        cleaned = self._strip_markdown_fences(response)
        match = _JSON_ARRAY.search(cleaned)
        if not match:
            raise ValueError("No JSON array found in response")

        try:
            data = json.loads(self._fix_json_trailing_commas(match.group(0)))
        except json.JSONDecodeError as e:
            log.error("json_parse_failed", error=str(e), response_preview=cleaned[:500])
            raise ValueError(f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise ValueError("Expected a JSON array")
        return self._unescape_html_entities(data)

    def _story_from_article(
        self,
        article: Article,
        category: str,
        position: int,
        title: str,
        summary: str,
    ) -> Story:
        return Story(
            id=f"{category}-{position}",
            uuid=article.uuid,
            title=title,
            summary=summary,
            category=category,
            category_display=get_category(category).display_name,
            source=article.source,
            source_url=article.url,
            image_url=article.image_url,
            published_at=article.published_at,
        )

    def summarize_stories(self, category: str, articles: list[Article]) -> list[Story]:
        """Summarize a bucket's articles in one call.

        Entries missing from the model output fall back to the article's own
        title and description; a failed call falls back for the whole batch.
        """
        articles_text = "\n\n".join(
            f"[{i}] {a.title}\nSource: {a.source}\n{a.description or a.snippet}"
            for i, a in enumerate(articles, start=1)
        )

        try:
            response = self._generate(
                STORY_SUMMARIES_PROMPT.format(articles=articles_text),
                max_output_tokens=2000,
            )
            entries = self._parse_json_array(response)
        except Exception as e:
            log.warning("story_summaries_fallback", category=category, error=str(e))
            return [
                self._story_from_article(
                    article,
                    category,
                    i,
                    title=article.title[:STORY_TITLE_MAX],
                    summary=article.description[:STORY_SUMMARY_MAX] or article.snippet,
                )
                for i, article in enumerate(articles, start=1)
            ]

        by_index = {
            entry.get("index"): entry for entry in entries if isinstance(entry, dict)
        }
        stories = []
        for i, article in enumerate(articles, start=1):
            entry = by_index.get(i, {})
            stories.append(
                self._story_from_article(
                    article,
                    category,
                    i,
                    title=str(entry.get("title") or article.title[:STORY_TITLE_MAX]),
                    summary=str(entry.get("summary") or article.description[:STORY_SUMMARY_MAX]),
                )
            )
        return stories

    def category_headline(self, stories: list[Story], display_name: str) -> str:
        top = "; ".join(s.title for s in stories[:3])
        try:
            response = self._generate(
                CATEGORY_HEADLINE_PROMPT.format(display_name=display_name, stories=top),
                max_output_tokens=60,
            )
            return clean_headline(response, CATEGORY_HEADLINE_MAX)
        except Exception as e:
            log.warning("category_headline_fallback", category=display_name, error=str(e))
            if stories:
                return stories[0].title[:CATEGORY_HEADLINE_MAX]
            return f"{display_name} Update"

    def category_script(self, stories: list[Story], display_name: str) -> str:
        stories_list = "\n".join(f"- {s.title}: {s.summary}" for s in stories)
        try:
            response = self._generate(
                CATEGORY_SCRIPT_PROMPT.format(
                    display_name=display_name,
                    stories=stories_list,
                    story_count=min(len(stories), 4),
                ),
                max_output_tokens=600,
            )
            return truncate_with_ellipsis(response, CATEGORY_SCRIPT_MAX)
        except Exception as e:
            log.warning("category_script_fallback", category=display_name, error=str(e))
            return self._fallback_category_script(stories, display_name)

    def _fallback_category_script(self, stories: list[Story], display_name: str) -> str:
        script = f"Here's your {display_name} update.\n\n"
        for story in stories[:3]:
            script += f"{story.title}. {story.summary}\n\n"
        script += f"That's your {display_name} brief."
        return script[:CATEGORY_SCRIPT_FALLBACK_MAX]

    def build_category_brief(self, category: str, articles: list[Article]) -> CategoryBrief:
        """Summarize one bucket into stories, a headline, and a short script."""
        bucket = get_category(category)
        stories = self.summarize_stories(category, articles)
        headline = self.category_headline(stories, bucket.display_name)
        script = self.category_script(stories, bucket.display_name)

        return CategoryBrief(
            category=category,
            display_name=bucket.display_name,
            emoji=bucket.emoji,
            headline=headline,
            script=script,
            story_count=len(stories),
            estimated_duration=estimate_audio_duration(script),
            stories=stories,
        )

    def full_headline(self, category_briefs: list[CategoryBrief]) -> str:
        headlines = "; ".join(cb.headline for cb in category_briefs)
        try:
            response = self._generate(
                FULL_HEADLINE_PROMPT.format(headlines=headlines),
                max_output_tokens=80,
            )
            return clean_headline(response, FULL_HEADLINE_MAX) or DEFAULT_FULL_HEADLINE
        except Exception as e:
            log.warning("full_headline_fallback", error=str(e))
            if category_briefs:
                return category_briefs[0].headline
            return DEFAULT_FULL_HEADLINE

    def full_script(self, category_briefs: list[CategoryBrief], briefing_date: date) -> str:
        today = spoken_date(briefing_date)
        categories = "\n\n".join(
            f"{cb.emoji} {cb.display_name}:\n"
            + "\n".join(f"- {s.title}" for s in cb.stories[:2])
            for cb in category_briefs
        )
        try:
            response = self._generate(
                FULL_SCRIPT_PROMPT.format(today=today, categories=categories),
                max_output_tokens=2000,
            )
            return truncate_with_ellipsis(response, FULL_SCRIPT_MAX)
        except Exception as e:
            log.warning("full_script_fallback", error=str(e))
            return self._fallback_full_script(category_briefs, today)

    def _fallback_full_script(self, category_briefs: list[CategoryBrief], today: str) -> str:
        script = f"Good morning. It's {today}. Here's your Morning Brief.\n\n"
        for cb in category_briefs:
            script += f"{cb.emoji} {cb.display_name}:\n"
            for story in cb.stories[:2]:
                script += f"{story.title}. {story.summary}\n"
            script += "\n"
        script += f"That's your Morning Brief for {today}. Stay informed."
        return script[:FULL_SCRIPT_FALLBACK_MAX]

    def generate_all_briefings(
        self,
        articles_by_category: dict[str, list[Article]],
        briefing_date: date,
    ) -> BriefingDraft:
        """Build every category brief, then the full headline and script.

        Buckets without articles are skipped.
        """
        category_briefs: list[CategoryBrief] = []
        stories: list[Story] = []

        for category, articles in articles_by_category.items():
            if not articles:
                log.info("category_skipped", category=category, reason="no_articles")
                continue
            log.info("category_brief_start", category=category, articles=len(articles))
            brief = self.build_category_brief(category, articles)
            category_briefs.append(brief)
            stories.extend(brief.stories)

        headline = self.full_headline(category_briefs)
        script = self.full_script(category_briefs, briefing_date)
        log.info(
            "briefing_draft_complete",
            headline=headline,
            script_length=len(script),
            stories=len(stories),
            categories=len(category_briefs),
        )

        return BriefingDraft(
            headline=headline,
            script=script,
            estimated_duration=estimate_audio_duration(script),
            stories=stories,
            category_briefs=category_briefs,
        )
