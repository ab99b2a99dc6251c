# ABOUTME: Tests for topic bucket definitions and keyword categorization.
# ABOUTME: Verifies the fixed bucket set, lookups, and regex fallback assignment.

import pytest
from conftest import make_article

from morning_brief.news.categories import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    categorize_article,
    get_category,
)


class TestCategories:
    """Tests for the fixed topic buckets."""

    def test_bucket_order(self) -> None:
        assert list(CATEGORIES) == [
            "china",
            "russia",
            "middleeast",
            "economy",
            "defense",
            "technology",
        ]

    def test_each_bucket_has_three_queries(self) -> None:
        for bucket in CATEGORIES.values():
            assert len(bucket.queries) == 3

    def test_get_category(self) -> None:
        assert get_category("defense").display_name == "Defense & Security"

    def test_get_unknown_category_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown category: sports"):
            get_category("sports")


class TestCategorizeArticle:
    """Tests for keyword-based categorization."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Beijing responds to new export rules", "china"),
            ("Kremlin rejects ceasefire proposal", "russia"),
            ("Gaza aid convoy reaches Rafah", "middleeast"),
            ("Pentagon expands missile program", "defense"),
            ("Nvidia unveils new semiconductor line", "technology"),
        ],
    )
    def test_keyword_match(self, title: str, expected: str) -> None:
        article = make_article(1, title=title, category=None)
        assert categorize_article(article) == expected

    def test_first_matching_bucket_wins(self) -> None:
        """China keywords are checked before trade keywords."""
        article = make_article(1, title="China trade surplus widens", category=None)
        assert categorize_article(article) == "china"

    def test_no_match_defaults_to_economy(self) -> None:
        article = make_article(1, title="Local bakery wins award", category=None)
        article = article.model_copy(update={"description": "A community story."})
        assert categorize_article(article) == DEFAULT_CATEGORY

    def test_word_boundary_avoids_substring_hits(self) -> None:
        """'said' must not match the 'ai' keyword."""
        article = make_article(1, title="Mayor said the bridge reopens", category=None)
        article = article.model_copy(update={"description": "Nothing else."})
        assert categorize_article(article) == DEFAULT_CATEGORY
