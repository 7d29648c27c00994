# Business logic services
from app.services.social_analytics_client import SocialAnalyticsClient
from app.services.social_profile_service import SocialProfileService
from app.services.tier_calculator import calculate_tier, classify_tier, get_tier_benefits, get_tier_display_info
from app.services.notification_routing import resolve_notification, resolve_notification_route, get_notification_action_label
from app.services.push_notifications import init_push_client, get_vapid_public_key, PUSH_DISABLED

__all__ = [
    "SocialAnalyticsClient",
    "SocialProfileService",
    "calculate_tier",
    "classify_tier",
    "get_tier_benefits",
    "get_tier_display_info",
    "resolve_notification",
    "resolve_notification_route",
    "get_notification_action_label",
    "init_push_client",
    "get_vapid_public_key",
    "PUSH_DISABLED",
]
