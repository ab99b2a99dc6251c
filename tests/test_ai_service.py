# ABOUTME: Tests for the Gemini AI service.
# ABOUTME: Mocks _generate to verify JSON parsing, truncation, and every deterministic fallback.

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from conftest import make_article

from morning_brief.ai.service import (
    AIService,
    clean_headline,
    estimate_audio_duration,
    spoken_date,
    truncate_with_ellipsis,
)
from morning_brief.config import Settings


@pytest.fixture
def service(mock_settings: Settings) -> AIService:
    return AIService(mock_settings)


class TestHelpers:
    """Tests for pure text helpers."""

    def test_duration_rounds_to_seconds(self) -> None:
        assert estimate_audio_duration("x" * 120) == "0:10"
        assert estimate_audio_duration("x" * 726) == "1:01"

    def test_duration_empty(self) -> None:
        assert estimate_audio_duration("") == "0:00"

    def test_truncate_with_ellipsis(self) -> None:
        assert truncate_with_ellipsis("abcdefghij", 8) == "abcde..."
        assert truncate_with_ellipsis("short", 8) == "short"

    def test_clean_headline_strips_quotes(self) -> None:
        assert clean_headline('"Markets Rally"\n', 50) == "Markets Rally"

    def test_spoken_date(self) -> None:
        assert spoken_date(date(2026, 1, 12)) == "Monday, January 12"


class TestParsing:
    """Tests for LLM JSON response handling."""

    def test_strips_fences_and_trailing_commas(self, service: AIService) -> None:
        response = '```json\n[{"index": 1, "title": "A", "summary": "B",},]\n```'

        assert service._parse_json_array(response) == [{"index": 1, "title": "A", "summary": "B"}]

    def test_unescapes_entities(self, service: AIService) -> None:
        response = '[{"index": 1, "title": "Tom &amp; Jerry", "summary": "x"}]'

        assert service._parse_json_array(response)[0]["title"] == "Tom & Jerry"

    def test_no_array_raises(self, service: AIService) -> None:
        with pytest.raises(ValueError, match="No JSON array"):
            service._parse_json_array("I cannot help with that.")


class TestClient:
    """Tests for lazy client creation."""

    def test_missing_key_raises(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(update={"gemini_api_key": None})

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            _ = AIService(settings).client

    def test_generate_concatenates_stream(self, service: AIService) -> None:
        chunks = [MagicMock(text="Hello "), MagicMock(text=None), MagicMock(text="world")]
        service._client = MagicMock()
        service._client.models.generate_content_stream.return_value = iter(chunks)

        assert service._generate("prompt", max_output_tokens=10) == "Hello world"

    def test_generate_empty_raises(self, service: AIService) -> None:
        service._client = MagicMock()
        service._client.models.generate_content_stream.return_value = iter([])

        with pytest.raises(ValueError, match="empty"):
            service._generate("prompt", max_output_tokens=10)


class TestSummarizeStories:
    """Tests for per-bucket story summaries."""

    def test_uses_model_output(self, service: AIService) -> None:
        articles = [make_article(1), make_article(2)]
        response = (
            '[{"index": 1, "title": "First", "summary": "One."},'
            ' {"index": 2, "title": "Second", "summary": "Two."}]'
        )

        with patch.object(service, "_generate", return_value=response):
            stories = service.summarize_stories("china", articles)

        assert [s.id for s in stories] == ["china-1", "china-2"]
        assert [s.title for s in stories] == ["First", "Second"]
        assert stories[0].category_display == "China & Asia"
        assert stories[0].source_url == articles[0].url

    def test_missing_entry_falls_back_per_article(self, service: AIService) -> None:
        articles = [make_article(1), make_article(2)]
        response = '[{"index": 1, "title": "First", "summary": "One."}]'

        with patch.object(service, "_generate", return_value=response):
            stories = service.summarize_stories("china", articles)

        assert stories[1].title == articles[1].title[:80]
        assert stories[1].summary == articles[1].description[:300]

    def test_failure_falls_back_for_batch(self, service: AIService) -> None:
        articles = [make_article(1)]

        with patch.object(service, "_generate", side_effect=RuntimeError("quota")):
            stories = service.summarize_stories("china", articles)

        assert len(stories) == 1
        assert stories[0].title == articles[0].title
        assert stories[0].summary == articles[0].description


class TestCategoryBrief:
    """Tests for category headline and script generation."""

    def test_headline_truncated(self, service: AIService) -> None:
        with patch.object(service, "_generate", return_value="H" * 80):
            stories = service.summarize_stories("china", [make_article(1)])
            headline = service.category_headline(stories, "China & Asia")

        assert len(headline) == 50

    def test_headline_fallback_uses_first_story(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            stories = service.summarize_stories("china", [make_article(1)])
            headline = service.category_headline(stories, "China & Asia")

        assert headline == stories[0].title[:50]

    def test_headline_fallback_without_stories(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            assert service.category_headline([], "Technology") == "Technology Update"

    def test_script_truncated_to_limit(self, service: AIService) -> None:
        with patch.object(service, "_generate", return_value="s" * 2000):
            script = service.category_script([], "Technology")

        assert len(script) == 1200
        assert script.endswith("...")

    def test_script_fallback_capped(self, service: AIService) -> None:
        articles = [make_article(i) for i in range(1, 4)]
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            stories = service.summarize_stories("china", articles)
            script = service.category_script(stories, "China & Asia")

        assert script.startswith("Here's your China & Asia update.")
        assert script.endswith("That's your China & Asia brief.")
        assert len(script) <= 1000

    def test_build_category_brief(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            brief = service.build_category_brief("defense", [make_article(1, category="defense")])

        assert brief.display_name == "Defense & Security"
        assert brief.story_count == 1
        assert brief.audio_url == ""
        assert brief.estimated_duration == estimate_audio_duration(brief.script)


class TestGenerateAllBriefings:
    """Tests for the full-day draft."""

    def test_empty_buckets_skipped(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            draft = service.generate_all_briefings(
                {"china": [make_article(1)], "russia": []},
                date(2026, 1, 12),
            )

        assert [cb.category for cb in draft.category_briefs] == ["china"]
        assert draft.total_stories == 1

    def test_full_fallbacks(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            draft = service.generate_all_briefings(
                {"china": [make_article(1)]},
                date(2026, 1, 12),
            )

        assert draft.headline == draft.category_briefs[0].headline
        assert draft.script.startswith("Good morning. It's Monday, January 12.")
        assert len(draft.script) <= 3500

    def test_full_headline_default(self, service: AIService) -> None:
        with patch.object(service, "_generate", side_effect=RuntimeError("down")):
            assert service.full_headline([]) == "Global News Roundup"

    def test_full_script_truncated(self, service: AIService) -> None:
        with patch.object(service, "_generate", return_value="w" * 5000):
            script = service.full_script([], date(2026, 1, 12))

        assert len(script) == 4000
