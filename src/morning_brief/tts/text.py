# ABOUTME: Text preparation helpers for speech synthesis.
# ABOUTME: Cleans scripts for TTS engines and escapes text for SSML.

import re
from xml.sax.saxutils import escape

_URL = re.compile(r"https?://\S+")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_DOUBLE_QUOTES = re.compile(r"[“”]")
_SINGLE_QUOTES = re.compile(r"[‘’]")
_WHITESPACE = re.compile(r"\s+")


def format_text_for_tts(text: str) -> str:
    """Remove URLs and markup characters, normalize quotes, collapse whitespace."""
    text = _URL.sub("", text)
    text = _ANGLE_BRACKETS.sub("", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _SINGLE_QUOTES.sub("'", text)
    return _WHITESPACE.sub(" ", text).strip()


def escape_ssml(text: str) -> str:
    """Escape XML special characters, including both quote styles."""
    return escape(text, {'"': "&quot;", "'": "&apos;"})


def news_ssml(text: str) -> str:
    """Wrap text in Polly's newscaster speaking style."""
    return f'<speak><amazon:domain name="news">{escape_ssml(text)}</amazon:domain></speak>'
