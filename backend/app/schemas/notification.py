from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class ViewerRole(str, Enum):
    """Role of the user looking at a notification."""
    CREATOR = "creator"
    DEVELOPER = "developer"
    BUYER = "buyer"
    ADMIN = "admin"
    ANONYMOUS = "anonymous"


class Notification(BaseModel):
    """An already-fetched notification.

    ``data`` carries optional identifiers such as property_id, promotion_id,
    inspection_id, transaction_id, handover_id, contract_id or bid_id.
    """
    type: str
    data: Optional[Dict[str, Any]] = None


class NotificationRouteDecision(BaseModel):
    """Where a notification click should navigate. Both None means mark-as-read only."""
    route: Optional[str] = None
    action_label: Optional[str] = None


class ResolveRouteRequest(BaseModel):
    """Request body for POST /notifications/resolve."""
    notification: Notification
    role: Optional[str] = Field(default=None, description="creator, developer, buyer, admin or empty")
