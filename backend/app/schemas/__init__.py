# Pydantic schemas
from app.schemas.tier import TierResult, TierDecisionTrace, TierDisplayInfo, TierBenefitsResponse
from app.schemas.social import (
    Platform,
    PlatformMetrics,
    SocialMetrics,
    PlatformAnalytics,
    AudienceDemographics,
    ProfileFetchResult,
    SocialLinks,
    CreatorVerificationResult,
)
from app.schemas.notification import ViewerRole, Notification, NotificationRouteDecision

__all__ = [
    "TierResult",
    "TierDecisionTrace",
    "TierDisplayInfo",
    "TierBenefitsResponse",
    "Platform",
    "PlatformMetrics",
    "SocialMetrics",
    "PlatformAnalytics",
    "AudienceDemographics",
    "ProfileFetchResult",
    "SocialLinks",
    "CreatorVerificationResult",
    "ViewerRole",
    "Notification",
    "NotificationRouteDecision",
]
