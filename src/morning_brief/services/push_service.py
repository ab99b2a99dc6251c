# ABOUTME: Web Push delivery using pywebpush and VAPID keys.
# ABOUTME: Fans a notification out to every subscription and reports expired endpoints.

import asyncio
import json
from functools import partial
from typing import Literal

import structlog
from pydantic import BaseModel, Field
from pywebpush import WebPushException, webpush

from morning_brief.config import Settings, get_settings
from morning_brief.models import PushPayload, PushSubscriptionInfo

log = structlog.get_logger()

EXPIRED_STATUS_CODES = (404, 410)

PushStatus = Literal["sent", "expired", "failed"]


class PushResult(BaseModel):
    """Counts from one fan-out. ``expired`` lists endpoints to remove."""

    sent: int = 0
    failed: int = 0
    expired: list[str] = Field(default_factory=list)


def daily_briefing_payload(headline: str | None = None) -> PushPayload:
    """Notification announcing a new daily briefing."""
    if headline:
        return PushPayload(body=headline)
    return PushPayload()


class PushService:
    """Sends Web Push notifications signed with the configured VAPID keys."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def is_configured(self) -> bool:
        return self.settings.push_enabled

    @property
    def public_key(self) -> str | None:
        return self.settings.vapid_public_key or None

    def send(self, subscription: PushSubscriptionInfo, payload: PushPayload) -> PushStatus:
        """Deliver one notification.

        Returns:
            "sent", "expired" for HTTP 404/410, or "failed" for anything else.
        """
        if not self.is_configured:
            log.warning("push_not_configured")
            return "failed"

        try:
            webpush(
                subscription_info=subscription.model_dump(),
                data=json.dumps(payload.model_dump()),
                vapid_private_key=self.settings.vapid_private_key.get_secret_value(),
                vapid_claims={"sub": self.settings.vapid_email},
                ttl=self.settings.push_ttl,
                headers={"Urgency": "normal"},
            )
        except WebPushException as e:
            status = e.response.status_code if e.response is not None else None
            if status in EXPIRED_STATUS_CODES:
                log.info("push_subscription_expired", endpoint=subscription.endpoint[:50])
                return "expired"
            log.error("push_send_failed", endpoint=subscription.endpoint[:50], error=str(e))
            return "failed"

        log.debug("push_sent", endpoint=subscription.endpoint[:50])
        return "sent"

    async def send_to_all(
        self,
        subscriptions: list[PushSubscriptionInfo],
        payload: PushPayload,
    ) -> PushResult:
        """Send to every subscription concurrently and wait for all of them.

        Individual failures are counted, never retried.
        """
        result = PushResult()
        if not self.is_configured or not subscriptions:
            return result

        log.info("push_fanout_start", subscriptions=len(subscriptions))
        loop = asyncio.get_running_loop()
        outcomes = await asyncio.gather(
            *(
                loop.run_in_executor(None, partial(self.send, subscription, payload))
                for subscription in subscriptions
            ),
            return_exceptions=True,
        )

        for subscription, outcome in zip(subscriptions, outcomes, strict=True):
            if outcome == "sent":
                result.sent += 1
            elif outcome == "expired":
                result.expired.append(subscription.endpoint)
            else:
                if isinstance(outcome, BaseException):
                    log.error("push_send_error", error=str(outcome))
                result.failed += 1

        log.info(
            "push_fanout_complete",
            sent=result.sent,
            failed=result.failed,
            expired=len(result.expired),
        )
        return result
