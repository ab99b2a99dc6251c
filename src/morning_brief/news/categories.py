# ABOUTME: Fixed topic buckets with their search query variants.
# ABOUTME: Includes keyword categorization for articles fetched without a bucket.

import re

from morning_brief.models import Article, TopicBucket

CATEGORIES: dict[str, TopicBucket] = {
    "china": TopicBucket(
        key="china",
        display_name="China & Asia",
        emoji="🇨🇳",
        queries=[
            "China | Beijing | Xi Jinping | CCP",
            "Taiwan | South China Sea | Hong Kong",
            "North Korea | Kim Jong | Japan | Asia Pacific",
        ],
    ),
    "russia": TopicBucket(
        key="russia",
        display_name="Russia & Europe",
        emoji="🇷🇺",
        queries=[
            "Russia | Putin | Kremlin | Moscow",
            "Ukraine | Kyiv | Zelensky | war",
            "NATO | EU | Europe | Germany | France",
        ],
    ),
    "middleeast": TopicBucket(
        key="middleeast",
        display_name="Middle East",
        emoji="🇮🇱",
        queries=[
            "Israel | Gaza | Hamas | Netanyahu",
            "Iran | Tehran | Hezbollah | Lebanon",
            "Saudi Arabia | Syria | Yemen | Gulf",
        ],
    ),
    "economy": TopicBucket(
        key="economy",
        display_name="Economy & Trade",
        emoji="💰",
        queries=[
            "tariffs | trade war | sanctions | import",
            "Federal Reserve | interest rates | inflation | dollar",
            "markets | stocks | economy | GDP | recession",
        ],
    ),
    "defense": TopicBucket(
        key="defense",
        display_name="Defense & Security",
        emoji="🛡️",
        queries=[
            "military | Pentagon | defense | troops",
            "nuclear | missiles | weapons | arms",
            "cybersecurity | espionage | intelligence | CIA",
        ],
    ),
    "technology": TopicBucket(
        key="technology",
        display_name="Technology",
        emoji="💻",
        queries=[
            "AI | artificial intelligence | OpenAI | chips",
            "semiconductors | TSMC | Nvidia | tech war",
            "Huawei | TikTok | cyber | data | tech regulation",
        ],
    ),
}

DEFAULT_CATEGORY = "economy"

# Checked in order; first match wins.
_KEYWORD_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("china", re.compile(r"\b(china|beijing|xi jinping|taiwan|hong kong|asia|chinese|ccp)")),
    ("russia", re.compile(r"\b(russia|moscow|putin|kremlin|ukraine|kyiv|nato|europe)")),
    ("middleeast", re.compile(r"\b(iran|israel|gaza|hamas|middle east|saudi|syria|hezbollah)")),
    ("economy", re.compile(r"\b(tariff|trade|sanction|economy|market|fed|inflation|dollar)")),
    ("defense", re.compile(r"\b(military|defense|pentagon|nuclear|missile|weapon|army)")),
    ("technology", re.compile(r"\b(ai|chip|semiconductor|tech|cyber|huawei|tiktok)")),
]


def get_category(key: str) -> TopicBucket:
    """Look up a topic bucket by key.

    Raises:
        ValueError: If the key is not a known bucket.
    """
    try:
        return CATEGORIES[key]
    except KeyError:
        raise ValueError(f"Unknown category: {key}") from None


def categorize_article(article: Article) -> str:
    """Assign a bucket key from title and description keywords."""
    text = f"{article.title} {article.description}".lower()
    for key, pattern in _KEYWORD_PATTERNS:
        if pattern.search(text):
            return key
    return DEFAULT_CATEGORY
