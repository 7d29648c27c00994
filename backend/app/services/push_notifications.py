"""
Web push delivery.

``init_push_client`` runs once at startup and returns either a configured
WebPushClient or PUSH_DISABLED when the VAPID keys are missing. The result
lives on ``app.state.push_client``; callers receive it explicitly.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel
from pywebpush import WebPushException, webpush

from app.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, PushDeliveryError

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/icons/icon-192x192.png"


class PushSubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscription(BaseModel):
    """Browser push subscription as returned by PushManager.subscribe()."""
    endpoint: str
    keys: PushSubscriptionKeys


class PushMessage(BaseModel):
    """Notification shown by the service worker."""
    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    tag: Optional[str] = None
    require_interaction: bool = False

    def to_payload(self) -> str:
        """JSON body the service worker expects (camelCase keys)."""
        return json.dumps({
            "title": self.title,
            "body": self.body,
            "icon": self.icon or DEFAULT_ICON,
            "badge": self.badge or DEFAULT_ICON,
            "data": self.data,
            "tag": self.tag,
            "requireInteraction": self.require_interaction,
        })


class WebPushClient:
    """Sends notifications through pywebpush with the configured VAPID keys."""

    enabled = True

    def __init__(self, public_key: str, private_key: str, subject: str):
        self.public_key = public_key
        self.private_key = private_key
        self.vapid_claims = {"sub": subject}

    async def send(self, subscription: PushSubscription, message: PushMessage) -> bool:
        """
        Deliver one notification. Returns True once the push service accepted it.

        Raises PushDeliveryError when the push service rejects the request;
        check ``subscription_expired`` to decide whether to drop the subscription.
        """
        try:
            # pywebpush is blocking (requests); keep it off the event loop
            await asyncio.to_thread(
                webpush,
                subscription_info=subscription.model_dump(),
                data=message.to_payload(),
                vapid_private_key=self.private_key,
                vapid_claims=dict(self.vapid_claims),
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Push delivery failed: status={status_code} | {e}")
            raise PushDeliveryError(f"Push delivery failed: {e}", status_code=status_code)

        logger.info(f"Push delivered: title='{message.title}' endpoint={subscription.endpoint[:60]}")
        return True


class DisabledPushClient:
    """Stand-in used when VAPID keys are not configured. Sends nothing."""

    enabled = False

    async def send(self, subscription: PushSubscription, message: PushMessage) -> bool:
        logger.debug(f"Push disabled, dropping notification '{message.title}'")
        return False


PUSH_DISABLED = DisabledPushClient()

PushClient = Union[WebPushClient, DisabledPushClient]


def init_push_client(settings: Optional[Settings] = None) -> PushClient:
    settings = settings or get_settings()
    if not settings.vapid_public_key or not settings.vapid_private_key:
        logger.warning("VAPID keys not configured. Push notifications are disabled.")
        return PUSH_DISABLED

    logger.info(f"Push notifications enabled (subject={settings.vapid_subject})")
    return WebPushClient(
        public_key=settings.vapid_public_key,
        private_key=settings.vapid_private_key,
        subject=settings.vapid_subject,
    )


def get_vapid_public_key(settings: Optional[Settings] = None) -> str:
    """Public key browsers need to subscribe."""
    settings = settings or get_settings()
    if not settings.vapid_public_key:
        raise ConfigurationError("VAPID_PUBLIC_KEY is not configured")
    return settings.vapid_public_key
