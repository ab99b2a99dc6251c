# ABOUTME: Service for newsletter signups across Beehiiv and the local subscriber table.
# ABOUTME: Validates and normalizes emails, then reconciles both backends into one outcome.

import re
from typing import Literal

import structlog
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from morning_brief.db.repository import SubscriberRepository
from morning_brief.services.beehiiv import BeehiivClient

log = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str | None) -> str:
    """Validate an email address and return its normalized form.

    Raises:
        ValueError: If the address is empty, lacks "@", or has no domain segment.
    """
    if not email or "@" not in email:
        raise ValueError("Valid email required")
    if not EMAIL_PATTERN.match(email.strip()):
        raise ValueError("Invalid email format")
    return normalize_email(email)


class SubscribeOutcome(BaseModel):
    """Result of a signup attempt."""

    status: Literal["subscribed", "already_subscribed", "logged", "failed"]
    message: str
    note: str | None = None

    @property
    def success(self) -> bool:
        return self.status != "failed"


class SubscriberService:
    """Service for managing newsletter subscriptions."""

    def __init__(
        self,
        beehiiv: BeehiivClient,
        repo: SubscriberRepository | None = None,
    ) -> None:
        self.beehiiv = beehiiv
        self.repo = repo

    async def subscribe(self, email: str | None) -> SubscribeOutcome:
        """Subscribe an email to the newsletter.

        Beehiiv is authoritative when configured; the local table is a
        best-effort mirror.

        Raises:
            ValueError: If the email is invalid.
        """
        email = validate_email(email)

        beehiiv_error = ""
        beehiiv_ok = False
        if self.beehiiv.is_configured:
            result = await self.beehiiv.add_subscriber(email)
            beehiiv_ok = result.success
            if not beehiiv_ok:
                beehiiv_error = result.error or "Beehiiv error"
        else:
            log.info("beehiiv_not_configured", email=email)

        stored = False
        if self.repo is not None:
            try:
                await self.repo.upsert(email)
                stored = True
            except SQLAlchemyError as e:
                log.error("subscriber_store_failed", email=email, error=str(e))

        if not self.beehiiv.is_configured and self.repo is None:
            log.info("subscriber_logged_only", email=email)
            return SubscribeOutcome(
                status="logged",
                message="Thanks for subscribing!",
                note="Email logged (services not configured)",
            )

        if self.beehiiv.is_configured and not beehiiv_ok:
            lowered = beehiiv_error.lower()
            if "already" in lowered or "exists" in lowered:
                log.info("already_subscribed", email=email)
                return SubscribeOutcome(
                    status="already_subscribed", message="You're already subscribed!"
                )
            log.error("subscribe_failed", email=email, error=beehiiv_error)
            return SubscribeOutcome(
                status="failed", message="Failed to subscribe. Please try again."
            )

        log.info("subscriber_created", email=email, beehiiv=beehiiv_ok, stored=stored)
        return SubscribeOutcome(
            status="subscribed",
            message="Thanks for subscribing! Check your email for confirmation.",
        )

