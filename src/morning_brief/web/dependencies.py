# ABOUTME: FastAPI dependency injection for settings, stores, and services.
# ABOUTME: Database-backed dependencies resolve to None when no database is configured.

from collections.abc import AsyncGenerator, Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.config import Settings, get_settings
from morning_brief.db.repository import PushSubscriptionRepository, SubscriberRepository
from morning_brief.db.session import get_session
from morning_brief.pipeline.generator import BriefingGenerator
from morning_brief.services.beehiiv import BeehiivClient
from morning_brief.services.briefing_store import BriefingStore, get_briefing_store
from morning_brief.services.push_service import PushService
from morning_brief.services.subscriber_service import SubscriberService
from morning_brief.tts.elevenlabs import ElevenLabsClient
from morning_brief.tts.polly import PollyClient

SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_optional_session(
    settings: SettingsDep,
) -> AsyncGenerator[AsyncSession | None]:
    """Database session with commit/rollback, or None without a database."""
    if not settings.database_enabled:
        yield None
        return
    async with get_session() as session:
        yield session


OptionalSession = Annotated[AsyncSession | None, Depends(get_optional_session)]


def get_store(settings: SettingsDep) -> BriefingStore:
    """Get the configured briefing store."""
    return get_briefing_store(settings)


BriefingStoreDep = Annotated[BriefingStore, Depends(get_store)]


def get_generator(
    settings: SettingsDep,
    store: BriefingStoreDep,
) -> Generator[BriefingGenerator]:
    """Get a briefing generator, closed after the request."""
    with BriefingGenerator(settings, store=store) as generator:
        yield generator


GeneratorDep = Annotated[BriefingGenerator, Depends(get_generator)]


def get_push_service(settings: SettingsDep) -> PushService:
    return PushService(settings)


PushSvc = Annotated[PushService, Depends(get_push_service)]


async def get_push_repository(
    session: OptionalSession,
) -> AsyncGenerator[PushSubscriptionRepository | None]:
    """Get push subscription repository, or None without a database."""
    yield PushSubscriptionRepository(session) if session is not None else None


PushRepo = Annotated[PushSubscriptionRepository | None, Depends(get_push_repository)]


def get_beehiiv_client(settings: SettingsDep) -> BeehiivClient:
    return BeehiivClient(settings)


BeehiivDep = Annotated[BeehiivClient, Depends(get_beehiiv_client)]


async def get_subscriber_service(
    beehiiv: BeehiivDep,
    session: OptionalSession,
) -> AsyncGenerator[SubscriberService]:
    """Get subscriber service, mirroring to the database when available."""
    repo = SubscriberRepository(session) if session is not None else None
    yield SubscriberService(beehiiv, repo)


SubscriberSvc = Annotated[SubscriberService, Depends(get_subscriber_service)]


def get_elevenlabs_client(settings: SettingsDep) -> Generator[ElevenLabsClient]:
    with ElevenLabsClient(settings) as client:
        yield client


ElevenLabsDep = Annotated[ElevenLabsClient, Depends(get_elevenlabs_client)]


def get_polly_client(settings: SettingsDep) -> PollyClient:
    return PollyClient(settings)


PollyDep = Annotated[PollyClient, Depends(get_polly_client)]
