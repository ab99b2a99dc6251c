# ABOUTME: Storage services for narrated audio: GCS bucket with local directory fallback.
# ABOUTME: Audio files are addressed by name, e.g. 2025-01-12-full.mp3.

from datetime import date
from pathlib import Path

import structlog
from google.cloud import storage

from morning_brief.config import Settings, get_settings

log = structlog.get_logger()

AUDIO_PREFIX = "audio/"
AUDIO_CONTENT_TYPE = "audio/mpeg"


def audio_filename(briefing_date: date, part: str) -> str:
    """Name of the audio file for a briefing part ('full' or a bucket key)."""
    return f"{briefing_date.isoformat()}-{part}.mp3"


def audio_file_date(filename: str) -> date | None:
    """Extract the leading ISO date from an audio file name."""
    try:
        return date.fromisoformat(Path(filename).name[:10])
    except ValueError:
        return None


class StorageService:
    """Service for storing and retrieving files from GCS."""

    def __init__(self, bucket_name: str | None = None):
        """Initialize storage service.

        Args:
            bucket_name: GCS bucket name. If None, GCS is disabled.
        """
        self.bucket_name = bucket_name
        self._client: storage.Client | None = None
        self._bucket: storage.Bucket | None = None

        if bucket_name:
            try:
                self._client = storage.Client()
                self._bucket = self._client.bucket(bucket_name)
                log.info("gcs_storage_initialized", bucket=bucket_name)
            except Exception as e:
                log.warning("gcs_storage_init_failed", error=str(e))
                self._client = None
                self._bucket = None

    @property
    def is_enabled(self) -> bool:
        """Check if GCS storage is enabled and working."""
        return self._bucket is not None

    def public_url(self, gcs_path: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket_name}/{gcs_path}"

    def upload_bytes(
        self, content: bytes, gcs_path: str, content_type: str = AUDIO_CONTENT_TYPE
    ) -> str | None:
        """Upload binary content to GCS.

        Returns:
            Public URL if successful, None otherwise.
        """
        if not self.is_enabled:
            return None

        try:
            blob = self._bucket.blob(gcs_path)
            blob.upload_from_string(content, content_type=content_type)
            url = self.public_url(gcs_path)
            log.info("content_uploaded_to_gcs", gcs=gcs_path, bytes=len(content))
            return url
        except Exception as e:
            log.error("gcs_upload_failed", error=str(e), path=gcs_path)
            return None

    def delete_file(self, gcs_path: str) -> bool:
        if not self.is_enabled:
            return False

        try:
            self._bucket.blob(gcs_path).delete()
            return True
        except Exception as e:
            log.error("gcs_delete_failed", error=str(e), path=gcs_path)
            return False

    def list_files(self, prefix: str) -> list[str]:
        """List files in GCS with given prefix."""
        if not self.is_enabled:
            return []

        try:
            blobs = self._client.list_blobs(self.bucket_name, prefix=prefix)
            return [blob.name for blob in blobs]
        except Exception as e:
            log.error("gcs_list_failed", error=str(e), prefix=prefix)
            return []


class AudioStorage:
    """Stores narrated MP3 files and returns the URL they are served from."""

    def __init__(
        self,
        settings: Settings | None = None,
        gcs: StorageService | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.gcs = gcs or StorageService(self.settings.gcs_bucket or None)

    @property
    def audio_dir(self) -> Path:
        return self.settings.audio_dir

    def save(self, filename: str, audio: bytes) -> str | None:
        """Persist an audio file.

        Uses GCS when enabled and falls back to the local audio directory.

        Returns:
            Public URL of the stored file, or None if it could not be stored.
        """
        if self.gcs.is_enabled:
            url = self.gcs.upload_bytes(audio, f"{AUDIO_PREFIX}{filename}")
            if url:
                return url
            log.warning("audio_gcs_fallback_local", filename=filename)

        try:
            self.audio_dir.mkdir(parents=True, exist_ok=True)
            (self.audio_dir / filename).write_bytes(audio)
        except OSError as e:
            log.error("audio_save_failed", filename=filename, error=str(e))
            return None

        log.info("audio_saved", filename=filename, bytes=len(audio))
        return f"/audio/{filename}"

    def delete_before(self, cutoff: date) -> int:
        """Delete dated audio files older than the cutoff.

        Returns:
            Number of files removed.
        """
        removed = 0

        if self.audio_dir.exists():
            for path in self.audio_dir.glob("*.mp3"):
                file_date = audio_file_date(path.name)
                if file_date and file_date < cutoff:
                    path.unlink(missing_ok=True)
                    removed += 1

        for name in self.gcs.list_files(AUDIO_PREFIX):
            file_date = audio_file_date(name)
            if file_date and file_date < cutoff and self.gcs.delete_file(name):
                removed += 1

        if removed:
            log.info("audio_retention_sweep", removed=removed, cutoff=cutoff.isoformat())
        return removed
