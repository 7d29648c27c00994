import re
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Pattern

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    CreatorNotFoundError,
    InvalidIdentifierError,
    ProfileVerificationError,
    UnsupportedPlatformError,
)
from app.models import SocialAccount, User
from app.schemas.social import Platform, PlatformAnalytics, VerifySocialAccountResponse
from app.services.compute_tiers import metrics_from_accounts, record_tier_result
from app.services.social_normalizer import PLATFORM_LABELS
from app.services.social_profile_service import SocialProfileService
from app.services.tier_calculator import calculate_tier

logger = logging.getLogger(__name__)

# Profile URLs we accept per platform; the captured group is the handle
PROFILE_URL_PATTERNS: Dict[Platform, Pattern] = {
    Platform.INSTAGRAM: re.compile(r"instagram\.com/([^/?]+)", re.IGNORECASE),
    Platform.TIKTOK: re.compile(r"tiktok\.com/@?([^/?]+)", re.IGNORECASE),
    Platform.TWITTER: re.compile(r"(?:twitter\.com|x\.com)/([^/?]+)", re.IGNORECASE),
}

# Values an existing row may carry for the same platform
STORED_PLATFORM_NAMES: Dict[Platform, tuple] = {
    Platform.TWITTER: ("twitter", "x"),
}


def validate_profile_url(platform: Platform, url: str) -> str:
    """Check a submitted profile URL and return the handle it points at."""
    platform = Platform(platform)
    pattern = PROFILE_URL_PATTERNS.get(platform)
    if pattern is None:
        raise UnsupportedPlatformError(platform.value)

    match = pattern.search(url or "")
    if not match:
        raise InvalidIdentifierError(
            f"Invalid {PLATFORM_LABELS[platform]} URL format. Please provide a full URL."
        )
    return match.group(1).lstrip("@")


async def upsert_social_account(
    session: AsyncSession,
    creator_id: uuid.UUID,
    analytics: PlatformAnalytics,
) -> SocialAccount:
    """Insert or refresh the creator's row for this platform with fresh figures."""
    platform = analytics.platform
    names = STORED_PLATFORM_NAMES.get(platform, (platform.value,))

    account = (await session.execute(
        select(SocialAccount).where(
            SocialAccount.user_id == creator_id,
            SocialAccount.platform.in_(names),
        )
    )).scalars().first()

    if account is None:
        account = SocialAccount(user_id=creator_id)
        session.add(account)

    account.platform = platform.value
    account.handle = analytics.username
    account.followers = analytics.followers
    account.following = analytics.following
    account.posts = analytics.posts
    account.engagement_rate = analytics.engagement_rate
    account.quality_score = analytics.quality_score
    account.verified_at = datetime.now(timezone.utc)
    return account


async def verify_social_account(
    session: AsyncSession,
    creator_id: uuid.UUID,
    platform: Platform,
    url: str,
    profile_service: Optional[SocialProfileService] = None,
) -> VerifySocialAccountResponse:
    """
    Verify one social profile for a creator and recompute their tier.

    The tier always aggregates every verified account the creator has, with
    the freshly fetched platform taking precedence over its stored row.
    """
    platform = Platform(platform)
    validate_profile_url(platform, url)

    creator = await session.get(User, creator_id)
    if creator is None or creator.role != "creator":
        raise CreatorNotFoundError(f"Creator {creator_id} not found")

    profile_service = profile_service or SocialProfileService()
    result = await profile_service.fetch_platform_profile(url, platform)
    if not result.success or result.data is None:
        logger.info(f"Verification of {platform.value} for creator {creator_id} failed: {result.error_kind}")
        raise ProfileVerificationError(result.error or "Verification failed", result.error_kind)

    analytics = result.data
    await upsert_social_account(session, creator_id, analytics)

    verified_accounts = (await session.execute(
        select(SocialAccount).where(
            SocialAccount.user_id == creator_id,
            SocialAccount.verified_at.is_not(None),
        )
    )).scalars().all()

    metrics = metrics_from_accounts(
        verified_accounts,
        overrides={platform: analytics.to_platform_metrics()},
    )
    tier_result = calculate_tier(metrics)

    record_tier_result(session, creator, tier_result, metrics)
    await session.commit()

    logger.info(
        f"Creator {creator_id} verified {platform.value} '{analytics.username}': "
        f"{len(metrics.platforms())} platform(s), {metrics.total_followers:,} followers -> {tier_result.tier_name}"
    )

    return VerifySocialAccountResponse(
        creator_id=str(creator_id),
        platform=platform,
        analytics=analytics,
        tier_result=tier_result,
    )
