# ABOUTME: Tests for audio storage and the file-backed briefing store.
# ABOUTME: Covers GCS fallback, upsert-by-date, date ordering, history, and retention sweeps.

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from conftest import make_briefing

from morning_brief.config import Settings
from morning_brief.services.briefing_store import (
    DatabaseBriefingStore,
    FileBriefingStore,
    briefing_row,
    get_briefing_store,
    utc_today,
)
from morning_brief.services.storage import AudioStorage, audio_file_date, audio_filename


def _local_audio(settings: Settings) -> AudioStorage:
    gcs = MagicMock()
    gcs.is_enabled = False
    gcs.list_files.return_value = []
    return AudioStorage(settings, gcs=gcs)


class TestAudioNames:
    """Tests for dated audio file names."""

    def test_filename(self) -> None:
        assert audio_filename(date(2026, 1, 12), "full") == "2026-01-12-full.mp3"
        assert audio_filename(date(2026, 1, 12), "china") == "2026-01-12-china.mp3"

    def test_file_date(self) -> None:
        assert audio_file_date("audio/2026-01-12-russia.mp3") == date(2026, 1, 12)
        assert audio_file_date("sample.mp3") is None


class TestAudioStorage:
    """Tests for GCS-or-local audio storage."""

    def test_saves_locally_without_gcs(self, mock_settings: Settings) -> None:
        storage = _local_audio(mock_settings)

        url = storage.save("2026-01-12-full.mp3", b"mp3")

        assert url == "/audio/2026-01-12-full.mp3"
        assert (mock_settings.audio_dir / "2026-01-12-full.mp3").read_bytes() == b"mp3"

    def test_uses_gcs_when_enabled(self, mock_settings: Settings) -> None:
        gcs = MagicMock()
        gcs.is_enabled = True
        gcs.upload_bytes.return_value = "https://storage.googleapis.com/b/audio/x.mp3"

        url = AudioStorage(mock_settings, gcs=gcs).save("x.mp3", b"mp3")

        assert url == "https://storage.googleapis.com/b/audio/x.mp3"
        gcs.upload_bytes.assert_called_once_with(b"mp3", "audio/x.mp3")
        assert not (mock_settings.audio_dir / "x.mp3").exists()

    def test_gcs_failure_falls_back_to_local(self, mock_settings: Settings) -> None:
        gcs = MagicMock()
        gcs.is_enabled = True
        gcs.upload_bytes.return_value = None

        url = AudioStorage(mock_settings, gcs=gcs).save("x.mp3", b"mp3")

        assert url == "/audio/x.mp3"

    def test_delete_before(self, mock_settings: Settings) -> None:
        storage = _local_audio(mock_settings)
        storage.save("2026-01-01-full.mp3", b"old")
        storage.save("2026-01-20-full.mp3", b"new")
        storage.save("notes.mp3", b"undated")

        removed = storage.delete_before(date(2026, 1, 10))

        assert removed == 1
        remaining = sorted(p.name for p in mock_settings.audio_dir.iterdir())
        assert remaining == ["2026-01-20-full.mp3", "notes.mp3"]

    def test_delete_before_sweeps_gcs(self, mock_settings: Settings) -> None:
        gcs = MagicMock()
        gcs.list_files.return_value = ["audio/2026-01-01-china.mp3", "audio/2026-01-20-full.mp3"]
        gcs.delete_file.return_value = True

        removed = AudioStorage(mock_settings, gcs=gcs).delete_before(date(2026, 1, 10))

        assert removed == 1
        gcs.delete_file.assert_called_once_with("audio/2026-01-01-china.mp3")


class TestFileBriefingStore:
    """Tests for the JSON-file briefing store."""

    @pytest.fixture
    def store(self, mock_settings: Settings) -> FileBriefingStore:
        return FileBriefingStore(mock_settings, audio_storage=_local_audio(mock_settings))

    async def test_save_and_get(self, store: FileBriefingStore) -> None:
        today = utc_today()
        briefing = make_briefing(today)

        await store.save(briefing)

        assert await store.has(today)
        loaded = await store.get(today)
        assert loaded == briefing

    async def test_backfilled_date_outside_retention_survives_save(
        self, store: FileBriefingStore
    ) -> None:
        old = utc_today() - timedelta(days=40)
        store.audio_storage.save(f"{old.isoformat()}-full.mp3", b"old-audio")

        await store.save(make_briefing(old))

        assert await store.get(old) is not None
        assert await store.list_dates() == [old]
        assert (store.settings.audio_dir / f"{old.isoformat()}-full.mp3").exists()

    async def test_corrupt_file_reads_as_missing(self, store: FileBriefingStore) -> None:
        today = utc_today()
        store._path(today).write_text("{not json")

        assert await store.get(today) is None

    async def test_get_missing(self, store: FileBriefingStore) -> None:
        assert await store.get(utc_today()) is None
        assert await store.has(utc_today()) is False

    async def test_save_twice_keeps_one_document(self, store: FileBriefingStore) -> None:
        today = utc_today()

        await store.save(make_briefing(today, headline="First"))
        await store.save(make_briefing(today, headline="Second"))

        assert await store.list_dates() == [today]
        assert (await store.get(today)).full_briefing.headline == "Second"

    async def test_list_dates_most_recent_first(self, store: FileBriefingStore) -> None:
        today = utc_today()
        dates = [today - timedelta(days=d) for d in (3, 0, 1)]
        for d in dates:
            await store.save(make_briefing(d))

        assert await store.list_dates() == sorted(dates, reverse=True)

    async def test_history_limit_and_fields(self, store: FileBriefingStore) -> None:
        today = utc_today()
        for d in range(5):
            await store.save(make_briefing(today - timedelta(days=d)))

        history = await store.history(limit=3)

        assert [h.date for h in history] == [today - timedelta(days=d) for d in range(3)]
        assert history[0].story_count == 2
        assert history[0].category_count == 1

    async def test_ignores_foreign_files(self, store: FileBriefingStore) -> None:
        (store.briefings_dir / "notes.json").write_text("{}")

        assert await store.list_dates() == []

    def test_cleanup_removes_expired(self, store: FileBriefingStore) -> None:
        as_of = date(2026, 3, 1)
        old = as_of - timedelta(days=31)
        recent = as_of - timedelta(days=5)
        for d in (old, recent):
            store._path(d).write_text(make_briefing(d).model_dump_json())

        removed = store.cleanup(as_of=as_of)

        assert removed == 1
        assert not store._path(old).exists()
        assert store._path(recent).exists()

    def test_cleanup_sweeps_audio(self, store: FileBriefingStore) -> None:
        as_of = date(2026, 3, 1)
        store.audio_storage.save("2026-01-01-full.mp3", b"old")

        store.cleanup(as_of=as_of)

        assert not (store.settings.audio_dir / "2026-01-01-full.mp3").exists()


class TestBriefingRow:
    """Tests for splitting a briefing into database rows."""

    def test_row_values(self, sample_briefing) -> None:
        values, stories = briefing_row(sample_briefing)

        assert values["briefing_date"] == sample_briefing.date
        assert values["headline"] == sample_briefing.full_briefing.headline
        assert values["categories"] == {"china": 2}
        assert values["payload"]["date"] == "2026-01-12"
        assert [s["position"] for s in stories] == [1, 2]
        assert stories[0]["story_key"] == "china-1"

    def test_empty_audio_stored_as_null(self, sample_briefing) -> None:
        briefing = sample_briefing.model_copy(
            update={
                "full_briefing": sample_briefing.full_briefing.model_copy(
                    update={"audio_url": ""}
                )
            }
        )

        values, _ = briefing_row(briefing)

        assert values["audio_url"] is None


class TestGetBriefingStore:
    """Tests for backend selection."""

    def test_file_backend(self, mock_settings: Settings) -> None:
        assert isinstance(get_briefing_store(mock_settings), FileBriefingStore)

    def test_database_backend(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(update={"briefing_store": "database"})
        assert isinstance(get_briefing_store(settings), DatabaseBriefingStore)
