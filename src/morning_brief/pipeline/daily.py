# ABOUTME: Scheduled daily job: generate today's briefing, then notify push subscribers.
# ABOUTME: Does nothing if today's briefing already exists.

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.db.repository import PushSubscriptionRepository
from morning_brief.db.session import get_session
from morning_brief.models import PushKeys, PushSubscriptionInfo
from morning_brief.pipeline.generator import BriefingGenerator, GenerationResult
from morning_brief.services.push_service import PushResult, PushService, daily_briefing_payload

log = structlog.get_logger()

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class DailyJobResult(BaseModel):
    skipped: bool
    message: str
    generation: GenerationResult | None = None
    push: PushResult | None = None


async def notify_subscribers(
    push_service: PushService,
    headline: str | None,
    session_factory: SessionFactory = get_session,
) -> PushResult:
    """Send the daily notification to every stored subscription.

    Subscriptions reported expired are deleted.
    """
    async with session_factory() as session:
        repo = PushSubscriptionRepository(session)
        rows = await repo.list_all()
        subscriptions = [
            PushSubscriptionInfo(
                endpoint=row.endpoint, keys=PushKeys(p256dh=row.p256dh, auth=row.auth)
            )
            for row in rows
        ]
        if not subscriptions:
            log.info("push_no_subscriptions")
            return PushResult()

        result = await push_service.send_to_all(subscriptions, daily_briefing_payload(headline))
        removed = await repo.delete_many(result.expired)
        if removed:
            log.info("push_expired_removed", removed=removed)
        return result


async def run_daily_job(
    generator: BriefingGenerator,
    push_service: PushService | None = None,
    session_factory: SessionFactory = get_session,
) -> DailyJobResult:
    """Generate today's briefing unless it exists, then send push notifications.

    Raises:
        NoArticlesFoundError: If generation found no articles.
    """
    generation = await generator.generate()
    if generation.status == "skipped":
        return DailyJobResult(skipped=True, message="Briefing already generated today")

    push_result = None
    push_service = push_service or PushService(generator.settings)
    if push_service.is_configured and generator.settings.database_enabled:
        headline = generation.briefing.full_briefing.headline if generation.briefing else None
        push_result = await notify_subscribers(push_service, headline, session_factory)

    return DailyJobResult(
        skipped=False,
        message="Daily briefing generated",
        generation=generation,
        push=push_result,
    )
