# ABOUTME: Repository classes for database access patterns.
# ABOUTME: Provides BriefingRepository, SubscriberRepository, PushSubscriptionRepository.

from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.db.models import Briefing, PushSubscription, Story, Subscriber


class BriefingRepository:
    """Repository for Briefing persistence, keyed by calendar date."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, values: dict[str, Any], stories: list[dict[str, Any]]) -> int:
        """Insert or replace the briefing for ``values["briefing_date"]``.

        The briefing's stories are replaced wholesale.

        Returns:
            The briefing row ID.
        """
        stmt = pg_insert(Briefing).values(**values)
        updates = {key: stmt.excluded[key] for key in values if key != "briefing_date"}
        updates["updated_at"] = datetime.now(UTC)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Briefing.briefing_date],
            set_=updates,
        ).returning(Briefing.id)

        result = await self.session.execute(stmt)
        briefing_id = result.scalar_one()

        await self.session.execute(delete(Story).where(Story.briefing_id == briefing_id))
        self.session.add_all(Story(briefing_id=briefing_id, **story) for story in stories)
        await self.session.flush()
        return briefing_id

    async def get_by_date(self, briefing_date: date) -> Briefing | None:
        result = await self.session.execute(
            select(Briefing).where(Briefing.briefing_date == briefing_date)
        )
        return result.scalar_one_or_none()

    async def exists(self, briefing_date: date) -> bool:
        result = await self.session.execute(
            select(func.count(Briefing.id)).where(Briefing.briefing_date == briefing_date)
        )
        return result.scalar_one() > 0

    async def list_dates(self, limit: int | None = None) -> list[date]:
        """List briefing dates, most recent first."""
        query = select(Briefing.briefing_date).order_by(Briefing.briefing_date.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_recent(self, limit: int = 14) -> Sequence[Briefing]:
        """List recent briefings ordered by date descending."""
        result = await self.session.execute(
            select(Briefing).order_by(Briefing.briefing_date.desc()).limit(limit)
        )
        return result.scalars().all()


class SubscriberRepository:
    """Repository for newsletter Subscriber rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, email: str) -> None:
        """Insert a subscriber, or reactivate an existing one."""
        stmt = pg_insert(Subscriber).values(email=email, active=True)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Subscriber.email],
            set_={"active": True, "unsubscribed_at": None},
        )
        await self.session.execute(stmt)
        await self.session.flush()


class PushSubscriptionRepository:
    """Repository for Web Push subscriptions, keyed by endpoint."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(self, endpoint: str, p256dh: str, auth: str) -> None:
        stmt = pg_insert(PushSubscription).values(endpoint=endpoint, p256dh=p256dh, auth=auth)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PushSubscription.endpoint],
            set_={"p256dh": p256dh, "auth": auth},
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def list_all(self) -> Sequence[PushSubscription]:
        result = await self.session.execute(
            select(PushSubscription).order_by(PushSubscription.created_at)
        )
        return result.scalars().all()

    async def delete_by_endpoint(self, endpoint: str) -> bool:
        """Delete a subscription. Returns True if a row was removed."""
        result = await self.session.execute(
            delete(PushSubscription).where(PushSubscription.endpoint == endpoint)
        )
        return result.rowcount > 0

    async def delete_many(self, endpoints: list[str]) -> int:
        if not endpoints:
            return 0
        result = await self.session.execute(
            delete(PushSubscription).where(PushSubscription.endpoint.in_(endpoints))
        )
        return result.rowcount
