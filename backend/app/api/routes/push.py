from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from app.api.routes.cron import require_cron_secret
from app.core.exceptions import ConfigurationError, PushDeliveryError
from app.services.push_notifications import PushMessage, PushSubscription, get_vapid_public_key

router = APIRouter(prefix="/push", tags=["push"])


class VapidKeyResponse(BaseModel):
    public_key: str


class SendPushRequest(BaseModel):
    """Request body for sending a push to one subscription."""
    subscription: PushSubscription
    message: PushMessage


class SendPushResponse(BaseModel):
    delivered: bool
    enabled: bool


@router.get("/vapid-public-key", response_model=VapidKeyResponse)
async def vapid_public_key():
    """Key the browser needs for PushManager.subscribe()."""
    try:
        return VapidKeyResponse(public_key=get_vapid_public_key())
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e.message))


@router.post("/send", response_model=SendPushResponse, dependencies=[Depends(require_cron_secret)])
async def send_push(body: SendPushRequest, request: Request):
    """Send a notification through the client configured at startup. Server-side callers only."""
    push_client = request.app.state.push_client
    try:
        delivered = await push_client.send(body.subscription, body.message)
    except PushDeliveryError as e:
        status_code = 410 if e.subscription_expired else 502
        raise HTTPException(status_code=status_code, detail=str(e.message))
    return SendPushResponse(delivered=delivered, enabled=push_client.enabled)
