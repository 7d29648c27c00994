"""
Tests for web push delivery. pywebpush.webpush is patched; nothing leaves
the process.
"""
import json
from unittest.mock import MagicMock, patch

import pytest
from pywebpush import WebPushException

from app.core.exceptions import ConfigurationError, PushDeliveryError
from app.services.push_notifications import (
    DEFAULT_ICON,
    PUSH_DISABLED,
    PushMessage,
    PushSubscription,
    WebPushClient,
    get_vapid_public_key,
    init_push_client,
)
from tests.fixtures.social_fixtures import make_settings

SUBSCRIPTION = PushSubscription(
    endpoint="https://push.example.com/send/abc123",
    keys={"p256dh": "BPublicKey", "auth": "authSecret"},
)


def make_client() -> WebPushClient:
    return WebPushClient(public_key="pub", private_key="priv", subject="mailto:ops@example.com")


class TestPushMessage:

    def test_payload_defaults(self):
        payload = json.loads(PushMessage(title="New lead", body="Someone is interested").to_payload())

        assert payload == {
            "title": "New lead",
            "body": "Someone is interested",
            "icon": DEFAULT_ICON,
            "badge": DEFAULT_ICON,
            "data": None,
            "tag": None,
            "requireInteraction": False,
        }

    def test_payload_keeps_custom_fields(self):
        message = PushMessage(
            title="Tier updated",
            body="You are now Elite",
            icon="/icons/tier.png",
            data={"url": "/dashboard/creator/profile"},
            require_interaction=True,
        )

        payload = json.loads(message.to_payload())

        assert payload["icon"] == "/icons/tier.png"
        assert payload["badge"] == DEFAULT_ICON
        assert payload["data"] == {"url": "/dashboard/creator/profile"}
        assert payload["requireInteraction"] is True


class TestInitPushClient:

    def test_disabled_without_keys(self):
        client = init_push_client(make_settings(VAPID_PUBLIC_KEY="", VAPID_PRIVATE_KEY=""))

        assert client is PUSH_DISABLED
        assert client.enabled is False

    def test_disabled_with_only_public_key(self):
        assert init_push_client(make_settings(VAPID_PUBLIC_KEY="pub", VAPID_PRIVATE_KEY="")) is PUSH_DISABLED

    def test_enabled_with_keys(self):
        client = init_push_client(make_settings(
            VAPID_PUBLIC_KEY="pub",
            VAPID_PRIVATE_KEY="priv",
            VAPID_SUBJECT="mailto:ops@example.com",
        ))

        assert isinstance(client, WebPushClient)
        assert client.enabled is True
        assert client.vapid_claims == {"sub": "mailto:ops@example.com"}

    def test_public_key(self):
        assert get_vapid_public_key(make_settings(VAPID_PUBLIC_KEY="pub")) == "pub"

    def test_public_key_missing(self):
        with pytest.raises(ConfigurationError):
            get_vapid_public_key(make_settings(VAPID_PUBLIC_KEY=""))


@pytest.mark.asyncio
class TestWebPushClient:

    async def test_send(self):
        message = PushMessage(title="New lead", body="Someone is interested")

        with patch("app.services.push_notifications.webpush") as webpush:
            delivered = await make_client().send(SUBSCRIPTION, message)

        assert delivered is True
        kwargs = webpush.call_args.kwargs
        assert kwargs["subscription_info"] == {
            "endpoint": "https://push.example.com/send/abc123",
            "keys": {"p256dh": "BPublicKey", "auth": "authSecret"},
        }
        assert json.loads(kwargs["data"])["title"] == "New lead"
        assert kwargs["vapid_private_key"] == "priv"
        assert kwargs["vapid_claims"] == {"sub": "mailto:ops@example.com"}

    @pytest.mark.parametrize("status, expired", [(410, True), (404, True), (500, False)])
    async def test_rejected(self, status, expired):
        response = MagicMock(status_code=status)
        error = WebPushException("Push failed", response=response)

        with patch("app.services.push_notifications.webpush", side_effect=error):
            with pytest.raises(PushDeliveryError) as exc_info:
                await make_client().send(SUBSCRIPTION, PushMessage(title="t", body="b"))

        assert exc_info.value.status_code == status
        assert exc_info.value.subscription_expired is expired

    async def test_rejected_without_response(self):
        with patch("app.services.push_notifications.webpush", side_effect=WebPushException("offline")):
            with pytest.raises(PushDeliveryError) as exc_info:
                await make_client().send(SUBSCRIPTION, PushMessage(title="t", body="b"))

        assert exc_info.value.status_code is None
        assert exc_info.value.subscription_expired is False

    async def test_disabled_client_sends_nothing(self):
        with patch("app.services.push_notifications.webpush") as webpush:
            delivered = await PUSH_DISABLED.send(SUBSCRIPTION, PushMessage(title="t", body="b"))

        assert delivered is False
        webpush.assert_not_called()
