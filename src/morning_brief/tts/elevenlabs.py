# ABOUTME: ElevenLabs text-to-speech client over httpx.
# ABOUTME: Synthesizes MP3 narration and reports character quota usage.

import httpx
import structlog
from pydantic import BaseModel

from morning_brief.config import Settings, get_settings
from morning_brief.tts.errors import TTSAuthError, TTSError, TTSNotConfiguredError, TTSQuotaError

log = structlog.get_logger()

MODELS = {
    "flash": "eleven_flash_v2_5",
    "multilingual": "eleven_multilingual_v2",
    "turbo": "eleven_turbo_v2_5",
}

VOICES = {
    "george": "JBFqnCBsd6RMkjVDRZzb",
    "adam": "pNInz6obpgDQGcFmaJgB",
    "josh": "TxGEqnHWrfWFTfGW9XjX",
    "rachel": "21m00Tcm4TlvDq8ikWAM",
    "bella": "EXAVITQu4vr4xnSDxMaL",
}

DEFAULT_CHARACTER_LIMIT = 30000


class VoiceSettings(BaseModel):
    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.3
    use_speaker_boost: bool = True


class ElevenLabsUsage(BaseModel):
    """Character quota for the current billing period."""

    character_count: int
    character_limit: int

    @property
    def remaining_characters(self) -> int:
        return self.character_limit - self.character_count

    @property
    def percent_used(self) -> int:
        if self.character_limit <= 0:
            return 100
        return round(self.character_count / self.character_limit * 100)


class Voice(BaseModel):
    voice_id: str
    name: str


def resolve_voice(voice: str | None, default: str = "george") -> str:
    """Map a friendly voice name to its ID; unknown values pass through as IDs."""
    voice = voice or default
    return VOICES.get(voice, voice)


def resolve_model(model: str | None, default: str = "flash") -> str:
    """Map a friendly model name to its ID; unknown values pass through as IDs."""
    model = model or default
    return MODELS.get(model, model)


def estimate_credits(text: str, model_id: str) -> int:
    """Flash and turbo models bill half a credit per character."""
    if "flash" in model_id or "turbo" in model_id:
        return -(-len(text) // 2)
    return len(text)


class ElevenLabsClient:
    """Primary narration provider."""

    name = "elevenlabs"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport
        self._client: httpx.Client | None = None

    @property
    def is_configured(self) -> bool:
        return self.settings.elevenlabs_api_key is not None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            if not self.settings.elevenlabs_api_key:
                raise TTSNotConfiguredError("ELEVENLABS_API_KEY is required")
            self._client = httpx.Client(
                base_url=self.settings.elevenlabs_base_url,
                timeout=self.settings.elevenlabs_timeout,
                headers={"xi-api-key": self.settings.elevenlabs_api_key.get_secret_value()},
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ElevenLabsClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        model: str | None = None,
        voice_settings: VoiceSettings | None = None,
    ) -> bytes:
        """Generate MP3 audio for a script.

        Raises:
            TTSNotConfiguredError: If no API key is set.
            TTSAuthError: On HTTP 401.
            TTSQuotaError: On HTTP 429.
            TTSError: On any other failure.
        """
        voice_id = resolve_voice(voice, self.settings.elevenlabs_voice)
        model_id = resolve_model(model, self.settings.elevenlabs_model)
        settings = voice_settings or VoiceSettings()

        log.info(
            "elevenlabs_synthesize",
            chars=len(text),
            estimated_credits=estimate_credits(text, model_id),
            voice_id=voice_id,
            model_id=model_id,
        )

        try:
            response = self.client.post(
                f"/text-to-speech/{voice_id}",
                headers={"Accept": "audio/mpeg"},
                json={
                    "text": text,
                    "model_id": model_id,
                    "voice_settings": settings.model_dump(),
                },
            )
        except httpx.HTTPError as e:
            raise TTSError(f"ElevenLabs request failed: {e}") from e

        if response.status_code == 401:
            raise TTSAuthError("Invalid ElevenLabs API key")
        if response.status_code == 429:
            raise TTSQuotaError("ElevenLabs rate limit or quota exceeded")
        if response.is_error:
            raise TTSError(f"ElevenLabs returned HTTP {response.status_code}")

        log.info("elevenlabs_audio_generated", bytes=len(response.content))
        return response.content

    def get_usage(self) -> ElevenLabsUsage | None:
        """Fetch subscription quota, or None if unavailable."""
        if not self.is_configured:
            return None
        try:
            response = self.client.get("/user/subscription")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("elevenlabs_usage_failed", error=str(e))
            return None

        return ElevenLabsUsage(
            character_count=data.get("character_count") or 0,
            character_limit=data.get("character_limit") or DEFAULT_CHARACTER_LIMIT,
        )

    def list_voices(self) -> list[Voice]:
        """List voices available to the account; empty on failure."""
        if not self.is_configured:
            return []
        try:
            response = self.client.get("/voices")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("elevenlabs_voices_failed", error=str(e))
            return []

        return [
            Voice(voice_id=v["voice_id"], name=v.get("name", ""))
            for v in data.get("voices") or []
            if v.get("voice_id")
        ]
