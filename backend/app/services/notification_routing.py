"""
Notification click routing.

Maps (notification type, notification data, viewer role) to a dashboard
route and an action label. Each role has its own ordered rule table and
the first rule whose types and required keys match decides the route.
A None route means "mark as read, do not navigate".

Creators are never sent to public /property pages: the creator table has
no such template and the property fallback only applies to anonymous
viewers.
"""
import logging
from dataclasses import dataclass
from string import Formatter
from typing import Any, Dict, List, Optional, Tuple, Union

from app.schemas.notification import Notification, NotificationRouteDecision, ViewerRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteRule:
    """One row of a role's routing table."""
    types: Tuple[str, ...]
    routes: Tuple[str, ...] = ()  # first template with every placeholder present wins
    requires: Tuple[str, ...] = ()

    def matches(self, notification_type: str, data: Dict[str, Any]) -> bool:
        if notification_type not in self.types:
            return False
        return all(_is_present(data.get(key)) for key in self.requires)

    def render(self, data: Dict[str, Any]) -> Optional[str]:
        for template in self.routes:
            fields = _placeholders(template)
            if all(_is_present(data.get(field)) for field in fields):
                return template.format(**{field: data[field] for field in fields})
        return None


CREATOR_RULES: List[RouteRule] = [
    RouteRule(
        ("new_lead", "lead_created"),
        ("/dashboard/creator/my-promotions/{promotion_id}", "/dashboard/creator/analytics"),
    ),
    RouteRule(
        ("payout_processed", "commission_earned", "commission_paid", "withdrawal_processed"),
        ("/dashboard/creator/wallet/transactions/{transaction_id}", "/dashboard/creator/wallet/transactions"),
    ),
    RouteRule(
        ("property_assigned",),
        ("/dashboard/creator/my-promotions/{promotion_id}",),
        requires=("promotion_id",),
    ),
    RouteRule(
        ("promotion_paused", "promotion_resumed"),
        ("/dashboard/creator/my-promotions/{promotion_id}", "/dashboard/creator/analytics"),
    ),
    RouteRule(("tier_updated", "tier_upgraded"), ("/dashboard/creator/profile",)),
    # Read-only
    RouteRule(("system", "system_announcement")),
]

DEVELOPER_RULES: List[RouteRule] = [
    RouteRule(
        ("handover_documents_signed", "handover_completed"),
        ("/dashboard/developer/handover/{handover_id}", "/dashboard/developer/handover"),
    ),
    RouteRule(
        ("property_verified",),
        ("/dashboard/developer/contracts/{contract_id}", "/dashboard/developer/properties/{property_id}"),
        requires=("property_id",),
    ),
    RouteRule(("new_lead", "lead_created"), ("/dashboard/developer/leads",)),
    RouteRule(
        ("new_bid",),
        (
            "/dashboard/developer/properties/{property_id}/bids/{bid_id}",
            "/dashboard/developer/properties/{property_id}",
        ),
        requires=("property_id",),
    ),
    RouteRule(
        ("inspection_booked", "inspection_rescheduled_by_buyer", "inspection_cancelled"),
        ("/dashboard/developer/inspections/{inspection_id}", "/dashboard/developer/inspections"),
    ),
    RouteRule(
        ("inspection_paid",),
        ("/dashboard/developer/inspections/{inspection_id}",),
        requires=("inspection_id",),
    ),
    RouteRule(
        ("contract_executed",),
        ("/dashboard/developer/contracts/{contract_id}",),
        requires=("contract_id",),
    ),
    RouteRule(
        ("property_bought",),
        ("/dashboard/developer/wallet?transaction={transaction_id}",),
        requires=("transaction_id",),
    ),
    RouteRule(("deposit_cash", "payout_processed"), ("/dashboard/developer/wallet",)),
]

BUYER_RULES: List[RouteRule] = [
    RouteRule(
        (
            "inspection_booked",
            "inspection_confirmed",
            "inspection_rescheduled",
            "inspection_cancelled",
            "inspection_completed",
            "inspection_paid",
        ),
        ("/dashboard/buyer/inspections/{inspection_id}", "/dashboard/buyer/inspections"),
    ),
    RouteRule(("property_verified",), ("/property/{property_id}",), requires=("property_id",)),
    RouteRule(
        ("handover_documents_uploaded",),
        ("/dashboard/buyer/handover/{handover_id}/documents", "/dashboard/buyer/handover"),
    ),
    RouteRule(
        ("handover_scheduled", "handover_completed"),
        ("/dashboard/buyer/handover/{handover_id}", "/dashboard/buyer/handover"),
    ),
    RouteRule(("payment_confirmed", "deposit_cash"), ("/dashboard/buyer/wallet",)),
]

ROUTE_RULES: Dict[ViewerRole, List[RouteRule]] = {
    ViewerRole.CREATOR: CREATOR_RULES,
    ViewerRole.DEVELOPER: DEVELOPER_RULES,
    ViewerRole.BUYER: BUYER_RULES,
}

# Labels depend on the notification type only
ACTION_LABELS: Dict[ViewerRole, Dict[str, str]] = {
    ViewerRole.CREATOR: {
        "new_lead": "View Analytics",
        "lead_created": "View Analytics",
        "payout_processed": "View Wallet",
        "commission_earned": "View Wallet",
        "commission_paid": "View Wallet",
        "withdrawal_processed": "View Transaction",
        "tier_updated": "View Profile",
        "tier_upgraded": "View Profile",
    },
    ViewerRole.DEVELOPER: {
        "property_verified": "View Contract",
        "new_bid": "View Bid",
        "inspection_booked": "View Inspection",
        "inspection_rescheduled_by_buyer": "View Inspection",
        "inspection_cancelled": "View Inspection",
        "inspection_paid": "View Inspection",
        "property_bought": "See Transaction",
        "deposit_cash": "See Transaction",
        "payout_processed": "See Transaction",
    },
    ViewerRole.BUYER: {
        "inspection_booked": "View Inspection",
        "inspection_confirmed": "View Inspection",
        "inspection_rescheduled": "View Inspection",
        "inspection_cancelled": "View Inspection",
        "inspection_completed": "View Inspection",
        "inspection_paid": "View Inspection",
        "payment_confirmed": "View Transaction",
        "handover_documents_uploaded": "View Documents",
        "handover_scheduled": "View Handover",
        "handover_completed": "View Handover",
    },
}

# Anyone who is not signed in may open public listing pages
ANONYMOUS_PROPERTY_ROUTE = "/property/{property_id}"


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


def _placeholders(template: str) -> List[str]:
    return [field for _, field, _, _ in Formatter().parse(template) if field]


def parse_role(role: Union[ViewerRole, str, None]) -> Optional[ViewerRole]:
    """
    Normalize a role string. Missing or empty means anonymous; anything we
    don't recognize returns None.
    """
    if isinstance(role, ViewerRole):
        return role
    if not role:
        return ViewerRole.ANONYMOUS
    try:
        return ViewerRole(str(role).strip().lower())
    except ValueError:
        return None


def resolve_notification_route(
    notification: Notification,
    role: Union[ViewerRole, str, None] = None,
) -> Optional[str]:
    """Route to open when the notification is clicked, or None."""
    data = notification.data
    if not data:
        return None

    viewer = parse_role(role)
    if viewer is None or viewer == ViewerRole.ADMIN:
        return None

    for rule in ROUTE_RULES.get(viewer, []):
        if rule.matches(notification.type, data):
            return rule.render(data)

    if viewer == ViewerRole.ANONYMOUS and _is_present(data.get("property_id")):
        return ANONYMOUS_PROPERTY_ROUTE.format(property_id=data["property_id"])
    return None


def get_notification_action_label(
    notification: Notification,
    role: Union[ViewerRole, str, None] = None,
) -> Optional[str]:
    viewer = parse_role(role)
    if viewer is None:
        return None
    return ACTION_LABELS.get(viewer, {}).get(notification.type)


def resolve_notification(
    notification: Notification,
    role: Union[ViewerRole, str, None] = None,
) -> NotificationRouteDecision:
    """Route and label together. A label without a route is dropped."""
    route = resolve_notification_route(notification, role)
    label = get_notification_action_label(notification, role) if route else None
    logger.debug(f"Notification '{notification.type}' for role={role!r} -> route={route} label={label}")
    return NotificationRouteDecision(route=route, action_label=label)
