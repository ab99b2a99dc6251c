# ABOUTME: Beehiiv newsletter platform client over async httpx.
# ABOUTME: Adds subscribers, looks them up, updates status, and reads publication stats.

from typing import Any, Literal

import httpx
import structlog
from pydantic import BaseModel

from morning_brief.config import Settings, get_settings

log = structlog.get_logger()

UTM_SOURCE = "morning_brief_app"
UTM_MEDIUM = "website"
UTM_CAMPAIGN = "newsletter_signup"


class BeehiivResult(BaseModel):
    """Outcome of a Beehiiv call; failures carry the platform's message."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


class PublicationStats(BaseModel):
    total_subscribers: int = 0
    active_subscribers: int = 0


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    errors = data.get("errors") if isinstance(data, dict) else None
    if errors and isinstance(errors, list) and errors[0].get("message"):
        return errors[0]["message"]
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return default


class BeehiivClient:
    """Client for the Beehiiv v2 subscriptions API."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return self.settings.beehiiv_enabled

    def _client(self) -> httpx.AsyncClient:
        if not self.settings.beehiiv_api_key:
            raise ValueError("BEEHIIV_API_KEY is required")
        return httpx.AsyncClient(
            base_url=self.settings.beehiiv_base_url,
            headers={
                "Authorization": f"Bearer {self.settings.beehiiv_api_key.get_secret_value()}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self.transport,
        )

    def _path(self, suffix: str = "") -> str:
        return f"/publications/{self.settings.beehiiv_publication_id}{suffix}"

    def _not_configured(self) -> BeehiivResult | None:
        if not self.settings.beehiiv_publication_id:
            return BeehiivResult(success=False, error="BEEHIIV_PUBLICATION_ID not configured")
        if not self.settings.beehiiv_api_key:
            return BeehiivResult(success=False, error="BEEHIIV_API_KEY not configured")
        return None

    async def add_subscriber(
        self,
        email: str,
        send_welcome_email: bool | None = None,
        reactivate_existing: bool = True,
    ) -> BeehiivResult:
        """Subscribe an email to the publication."""
        if missing := self._not_configured():
            return missing

        email = email.strip().lower()
        body = {
            "email": email,
            "reactivate_existing": reactivate_existing,
            "send_welcome_email": (
                self.settings.beehiiv_send_welcome_email
                if send_welcome_email is None
                else send_welcome_email
            ),
            "utm_source": UTM_SOURCE,
            "utm_medium": UTM_MEDIUM,
            "utm_campaign": UTM_CAMPAIGN,
        }

        try:
            async with self._client() as client:
                response = await client.post(self._path("/subscriptions"), json=body)
        except httpx.HTTPError as e:
            log.error("beehiiv_network_error", error=str(e))
            return BeehiivResult(success=False, error=str(e) or "Network error")

        if response.is_error:
            message = _error_message(response, "Failed to subscribe")
            log.error("beehiiv_subscribe_failed", status=response.status_code, error=message)
            return BeehiivResult(success=False, error=message)

        log.info("beehiiv_subscriber_added", email=email)
        return BeehiivResult(success=True, data=response.json().get("data"))

    async def get_subscriber(self, email: str) -> BeehiivResult:
        """Look up a subscriber; ``data`` is None when not subscribed."""
        if missing := self._not_configured():
            return missing

        try:
            async with self._client() as client:
                response = await client.get(
                    self._path("/subscriptions"), params={"email": email}
                )
        except httpx.HTTPError as e:
            log.error("beehiiv_lookup_failed", error=str(e))
            return BeehiivResult(success=False, error=str(e) or "Network error")

        if response.status_code == 404:
            return BeehiivResult(success=True)
        if response.is_error:
            return BeehiivResult(success=False, error=f"API error: {response.status_code}")

        records = response.json().get("data") or []
        return BeehiivResult(success=True, data=records[0] if records else None)

    async def update_subscriber_status(
        self, subscriber_id: str, status: Literal["active", "inactive"]
    ) -> BeehiivResult:
        if missing := self._not_configured():
            return missing

        try:
            async with self._client() as client:
                response = await client.patch(
                    self._path(f"/subscriptions/{subscriber_id}"), json={"status": status}
                )
        except httpx.HTTPError as e:
            log.error("beehiiv_update_failed", error=str(e))
            return BeehiivResult(success=False, error=str(e) or "Network error")

        if response.is_error:
            return BeehiivResult(success=False, error=f"API error: {response.status_code}")

        log.info("beehiiv_status_updated", subscriber_id=subscriber_id, status=status)
        return BeehiivResult(success=True)

    async def get_publication_stats(self) -> PublicationStats | None:
        """Subscriber counts for the publication, or None on failure."""
        if self._not_configured():
            return None

        try:
            async with self._client() as client:
                response = await client.get(self._path())
            response.raise_for_status()
            data = response.json().get("data") or {}
        except (httpx.HTTPError, ValueError) as e:
            log.error("beehiiv_stats_failed", error=str(e))
            return None

        return PublicationStats(
            total_subscribers=data.get("total_subscriptions") or 0,
            active_subscribers=data.get("active_subscriptions") or 0,
        )
