import logging
from typing import Dict, List, Optional

from app.core.exceptions import (
    InvalidIdentifierError,
    MalformedProfileError,
    PlatformMismatchError,
    ProfileNotFoundError,
    SocialAnalyticsAPIError,
    UnsupportedPlatformError,
)
from app.schemas.social import (
    CreatorVerificationResult,
    Platform,
    PlatformAnalytics,
    ProfileFetchResult,
    SocialLinks,
    SocialMetrics,
)
from app.services.social_analytics_client import SocialAnalyticsClient
from app.services.social_normalizer import PLATFORM_LABELS
from app.services.tier_calculator import calculate_tier

logger = logging.getLogger(__name__)

# Expected lookup outcomes and the error_kind tag they map to
EXPECTED_FAILURES = (
    (ProfileNotFoundError, "not_found"),
    (PlatformMismatchError, "platform_mismatch"),
    (UnsupportedPlatformError, "unsupported_platform"),
    (InvalidIdentifierError, "invalid_identifier"),
)


class SocialProfileService:
    """
    Service layer over SocialAnalyticsClient.

    Lookups that simply did not find a usable profile come back as tagged
    ProfileFetchResult failures. Infrastructure problems (missing API key,
    provider errors, malformed payloads) are raised.
    """

    def __init__(self, client: Optional[SocialAnalyticsClient] = None):
        self.client = client or SocialAnalyticsClient()

    async def fetch_platform_profile(self, identifier: str, platform: Platform) -> ProfileFetchResult:
        platform = Platform(platform)
        try:
            analytics = await self.client.fetch_profile(identifier, platform)
        except (ProfileNotFoundError, PlatformMismatchError, UnsupportedPlatformError, InvalidIdentifierError) as e:
            error_kind = next(kind for exc_type, kind in EXPECTED_FAILURES if isinstance(e, exc_type))
            logger.info(f"Profile lookup for {platform.value} '{identifier}' failed: {error_kind}")
            return ProfileFetchResult(
                success=False,
                platform=platform,
                error=e.message,
                error_kind=error_kind,
            )

        return ProfileFetchResult(success=True, platform=platform, data=analytics)

    async def verify_creator(self, links: SocialLinks) -> CreatorVerificationResult:
        """
        Verify every submitted profile and compute the aggregated tier.

        Platforms are fetched one after another; each failure is collected as
        a user-facing string and the others still go ahead.
        """
        analytics: Dict[str, PlatformAnalytics] = {}
        errors: List[str] = []

        for platform in (Platform.INSTAGRAM, Platform.TIKTOK, Platform.TWITTER):
            identifier = getattr(links, platform.value)
            if not identifier:
                continue

            try:
                result = await self.fetch_platform_profile(identifier, platform)
            except (SocialAnalyticsAPIError, MalformedProfileError) as e:
                # One broken provider response should not sink the other platforms
                logger.error(f"Verification of {platform.value} profile aborted: {e.message}")
                errors.append(f"{PLATFORM_LABELS[platform]}: {e.message}")
                continue

            if result.success and result.data is not None:
                analytics[platform.value] = result.data
            else:
                errors.append(f"{PLATFORM_LABELS[platform]}: {result.error}")

        if not analytics:
            logger.warning(f"Creator verification failed on every platform: {errors}")
            return CreatorVerificationResult(success=False, errors=errors)

        metrics = SocialMetrics(**{
            name: data.to_platform_metrics() for name, data in analytics.items()
        })
        tier_result = calculate_tier(metrics)

        return CreatorVerificationResult(
            success=True,
            analytics=analytics,
            errors=errors,
            tier_result=tier_result,
        )
