# ABOUTME: Narrator trying an ordered chain of TTS providers for each script.
# ABOUTME: A script gets one whole audio file from the first provider that succeeds, or none.

from typing import Protocol

import structlog

from morning_brief.config import Settings, get_settings
from morning_brief.tts.elevenlabs import ElevenLabsClient
from morning_brief.tts.errors import TTSError
from morning_brief.tts.polly import PollyClient
from morning_brief.tts.text import format_text_for_tts

log = structlog.get_logger()


class SpeechProvider(Protocol):
    name: str

    @property
    def is_configured(self) -> bool: ...

    def synthesize(self, text: str, **options: object) -> bytes: ...


class Narrator:
    """Converts scripts to audio using providers in priority order."""

    def __init__(self, providers: list[SpeechProvider]) -> None:
        self.providers = providers

    def narrate(self, text: str, **options: object) -> bytes | None:
        """Synthesize a script with the first provider that succeeds.

        Args:
            text: Script to narrate; cleaned for TTS before sending.
            **options: Provider options such as ``voice`` and ``model``.

        Returns:
            MP3 bytes, or None if every provider failed or is unconfigured.
        """
        cleaned = format_text_for_tts(text)
        if not cleaned:
            return None

        for provider in self.providers:
            if not provider.is_configured:
                log.debug("tts_provider_unconfigured", provider=provider.name)
                continue
            try:
                audio = provider.synthesize(cleaned, **options)
            except TTSError as e:
                log.warning("tts_provider_failed", provider=provider.name, error=str(e))
                continue
            if audio:
                return audio
            log.warning("tts_provider_empty_audio", provider=provider.name)

        log.error("tts_all_providers_failed", providers=[p.name for p in self.providers])
        return None


def build_narrators(settings: Settings | None = None) -> tuple[Narrator, Narrator]:
    """Create the full-briefing and category narrators.

    The full briefing goes ElevenLabs first with Polly as fallback. Category
    briefs use the configured ``category_audio_provider`` alone.
    """
    settings = settings or get_settings()
    elevenlabs = ElevenLabsClient(settings)
    polly = PollyClient(settings)

    full = Narrator([elevenlabs, polly])
    if settings.category_audio_provider == "elevenlabs":
        category = Narrator([elevenlabs, polly])
    else:
        category = Narrator([polly])
    return full, category
