# ABOUTME: Amazon Polly text-to-speech client via boto3.
# ABOUTME: Secondary narration provider using the neural newscaster style.

from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from morning_brief.config import Settings, get_settings
from morning_brief.tts.errors import TTSError, TTSNotConfiguredError
from morning_brief.tts.text import news_ssml

log = structlog.get_logger()

SAMPLE_RATE = "24000"


class PollyClient:
    """Secondary narration provider."""

    name = "polly"

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client: Any = None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.aws_access_key_id and self.settings.aws_secret_access_key)

    @property
    def client(self) -> Any:
        """Lazy-initialized boto3 Polly client."""
        if self._client is None:
            if not self.is_configured:
                raise TTSNotConfiguredError("AWS credentials are required for Polly")
            self._client = boto3.client(
                "polly",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id.get_secret_value(),
                aws_secret_access_key=self.settings.aws_secret_access_key.get_secret_value(),
            )
        return self._client

    def synthesize(self, text: str, **_options: object) -> bytes:
        """Generate MP3 audio for a script.

        Raises:
            TTSNotConfiguredError: If AWS credentials are missing.
            TTSError: If Polly fails or returns no audio.
        """
        log.info("polly_synthesize", chars=len(text), voice=self.settings.polly_voice_id)
        try:
            response = self.client.synthesize_speech(
                Text=news_ssml(text),
                TextType="ssml",
                OutputFormat="mp3",
                VoiceId=self.settings.polly_voice_id,
                Engine=self.settings.polly_engine,
                SampleRate=SAMPLE_RATE,
            )
            stream = response.get("AudioStream")
            if stream is None:
                raise TTSError("Polly returned no audio stream")
            audio = stream.read()
        except (BotoCoreError, ClientError) as e:
            raise TTSError(f"Polly request failed: {e}") from e

        log.info("polly_audio_generated", bytes=len(audio))
        return audio
