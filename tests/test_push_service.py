# ABOUTME: Tests for Web Push delivery and fan-out.
# ABOUTME: Patches pywebpush.webpush to simulate delivered, expired, and failed sends.

import json
from unittest.mock import MagicMock, patch

import pytest
from pydantic import SecretStr
from pywebpush import WebPushException

from morning_brief.config import Settings
from morning_brief.models import PushKeys, PushPayload, PushSubscriptionInfo
from morning_brief.services.push_service import PushService, daily_briefing_payload


@pytest.fixture
def push_settings(mock_settings: Settings) -> Settings:
    return mock_settings.model_copy(
        update={"vapid_public_key": "BPublic", "vapid_private_key": SecretStr("private")}
    )


def _subscription(n: int) -> PushSubscriptionInfo:
    return PushSubscriptionInfo(
        endpoint=f"https://push.example.com/{n}",
        keys=PushKeys(p256dh=f"key{n}", auth=f"auth{n}"),
    )


def _push_error(status: int) -> WebPushException:
    return WebPushException("Push failed", response=MagicMock(status_code=status))


class TestPayload:
    """Tests for the daily notification payload."""

    def test_default_payload(self) -> None:
        payload = daily_briefing_payload()

        assert payload.title == "🎧 Your Morning Brief is Ready"
        assert payload.tag == "daily-briefing"
        assert payload.url == "/"

    def test_headline_becomes_body(self) -> None:
        assert daily_briefing_payload("Talks stall").body == "Talks stall"


class TestPushService:
    """Tests for single sends."""

    def test_not_configured(self, mock_settings: Settings) -> None:
        service = PushService(mock_settings)

        assert service.is_configured is False
        assert service.public_key is None
        assert service.send(_subscription(1), PushPayload()) == "failed"

    def test_send_success(self, push_settings: Settings) -> None:
        with patch("morning_brief.services.push_service.webpush") as webpush:
            status = PushService(push_settings).send(_subscription(1), PushPayload(body="Hi"))

        assert status == "sent"
        kwargs = webpush.call_args.kwargs
        assert kwargs["subscription_info"]["endpoint"] == "https://push.example.com/1"
        assert kwargs["subscription_info"]["keys"] == {"p256dh": "key1", "auth": "auth1"}
        assert json.loads(kwargs["data"])["body"] == "Hi"
        assert kwargs["vapid_private_key"] == "private"
        assert kwargs["ttl"] == 3600
        assert kwargs["headers"] == {"Urgency": "normal"}

    @pytest.mark.parametrize("status_code", [404, 410])
    def test_gone_is_expired(self, push_settings: Settings, status_code: int) -> None:
        with patch(
            "morning_brief.services.push_service.webpush",
            side_effect=_push_error(status_code),
        ):
            status = PushService(push_settings).send(_subscription(1), PushPayload())

        assert status == "expired"

    def test_other_error_is_failed(self, push_settings: Settings) -> None:
        with patch(
            "morning_brief.services.push_service.webpush", side_effect=_push_error(500)
        ):
            status = PushService(push_settings).send(_subscription(1), PushPayload())

        assert status == "failed"


class TestSendToAll:
    """Tests for concurrent fan-out."""

    async def test_counts_outcomes(self, push_settings: Settings) -> None:
        def fake_webpush(subscription_info, **_kwargs):
            if subscription_info["endpoint"].endswith("/2"):
                raise _push_error(410)
            if subscription_info["endpoint"].endswith("/3"):
                raise _push_error(500)

        subscriptions = [_subscription(n) for n in (1, 2, 3, 4)]
        with patch("morning_brief.services.push_service.webpush", side_effect=fake_webpush):
            result = await PushService(push_settings).send_to_all(subscriptions, PushPayload())

        assert result.sent == 2
        assert result.failed == 1
        assert result.expired == ["https://push.example.com/2"]

    async def test_empty_subscriptions(self, push_settings: Settings) -> None:
        result = await PushService(push_settings).send_to_all([], PushPayload())

        assert (result.sent, result.failed, result.expired) == (0, 0, [])

    async def test_not_configured_sends_nothing(self, mock_settings: Settings) -> None:
        with patch("morning_brief.services.push_service.webpush") as webpush:
            result = await PushService(mock_settings).send_to_all(
                [_subscription(1)], PushPayload()
            )

        assert result.sent == 0
        webpush.assert_not_called()
