# ABOUTME: Text-to-speech package: ElevenLabs primary, Amazon Polly secondary.
# ABOUTME: Exports provider clients, the fallback narrator, and text helpers.

from morning_brief.tts.elevenlabs import ElevenLabsClient
from morning_brief.tts.errors import TTSAuthError, TTSError, TTSNotConfiguredError, TTSQuotaError
from morning_brief.tts.narrator import Narrator, build_narrators
from morning_brief.tts.polly import PollyClient
from morning_brief.tts.text import escape_ssml, format_text_for_tts

__all__ = [
    "ElevenLabsClient",
    "Narrator",
    "PollyClient",
    "TTSAuthError",
    "TTSError",
    "TTSNotConfiguredError",
    "TTSQuotaError",
    "build_narrators",
    "escape_ssml",
    "format_text_for_tts",
]
