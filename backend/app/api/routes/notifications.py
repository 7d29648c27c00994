from fastapi import APIRouter

from app.schemas.notification import NotificationRouteDecision, ResolveRouteRequest
from app.services.notification_routing import resolve_notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/resolve", response_model=NotificationRouteDecision)
async def resolve_route(request: ResolveRouteRequest):
    """Where clicking a notification should take this viewer. Nulls mean "just mark as read"."""
    return resolve_notification(request.notification, request.role)
