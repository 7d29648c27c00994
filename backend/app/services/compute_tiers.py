"""compute_tiers.py: Recompute every creator's tier from stored social figures.

For each user with role "creator":
  1. collect their verified social_accounts rows (one per platform)
  2. run the tier calculator on the combined figures
  3. write users.tier (NULL when disqualified) and append a
     creator_analytics_history row (tier 0 when disqualified)

Creators without a verified account are skipped. One creator failing is
logged and counted; the run carries on with the next one.

Usage
-----
    cd backend && python -m app.services.compute_tiers

Safe to re-run: the stored figures don't change between runs, so neither
do the tiers. Each run appends one history row per evaluated creator.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BaseAppException
from app.models import CreatorAnalyticsHistory, SocialAccount, User
from app.schemas.social import Platform, PlatformMetrics, SocialMetrics
from app.schemas.tier import TierResult
from app.services.tier_calculator import calculate_tier

logger = logging.getLogger(__name__)

# Older rows store Twitter as "x"
PLATFORM_ALIASES: Dict[str, Platform] = {"x": Platform.TWITTER}


def parse_platform(value: Optional[str]) -> Optional[Platform]:
    """Map a stored platform string onto Platform, or None when unknown."""
    if not value:
        return None
    key = value.strip().lower()
    if key in PLATFORM_ALIASES:
        return PLATFORM_ALIASES[key]
    try:
        return Platform(key)
    except ValueError:
        return None


def metrics_from_accounts(
    accounts: Iterable[Any],
    overrides: Optional[Dict[Platform, PlatformMetrics]] = None,
) -> SocialMetrics:
    """
    Build SocialMetrics from social_accounts rows.

    Only verified rows count. When a platform appears twice the most recently
    verified row wins. ``overrides`` replaces stored figures for a platform
    (used right after a fresh verification).
    """
    latest: Dict[Platform, Any] = {}
    for account in accounts:
        platform = parse_platform(account.platform)
        if platform is None or account.verified_at is None:
            continue
        current = latest.get(platform)
        if current is None or account.verified_at > current.verified_at:
            latest[platform] = account

    entries: Dict[str, PlatformMetrics] = {
        platform.value: PlatformMetrics(
            followers=max(0, account.followers or 0),
            following=account.following or None,
            posts_or_tweets=account.posts or None,
            engagement_rate=account.engagement_rate or None,
        )
        for platform, account in latest.items()
    }
    for platform, metrics in (overrides or {}).items():
        entries[Platform(platform).value] = metrics

    return SocialMetrics(**entries)


def build_analytics_snapshot(result: TierResult, metrics: SocialMetrics) -> Dict[str, Any]:
    """JSON document stored in creator_analytics_history.analytics_data."""
    return {
        "total_followers": result.total_followers,
        "engagement_rate": result.engagement_rate,
        "quality_score": result.quality_score,
        "branch": result.trace.branch,
        "reason": result.reason,
        "platforms": {
            platform.value: entry.model_dump() for platform, entry in metrics.platforms()
        },
    }


def record_tier_result(
    session: AsyncSession,
    creator: User,
    result: TierResult,
    metrics: SocialMetrics,
) -> CreatorAnalyticsHistory:
    """Stage the tier update and its history row. The caller commits.

    users.tier stays NULL for a disqualified creator while the history row
    records 0, since that column is NOT NULL.
    """
    creator.tier = result.tier
    creator.updated_at = datetime.now(timezone.utc)

    history = CreatorAnalyticsHistory(
        creator_id=creator.id,
        tier=result.tier or 0,
        analytics_data=build_analytics_snapshot(result, metrics),
    )
    session.add(history)
    return history


async def recompute_creator_tiers(session: AsyncSession) -> Dict[str, int]:
    """Recompute all creator tiers. Returns {updated, failed, skipped, total}."""
    creators = (await session.execute(
        select(User).where(User.role == "creator")
    )).scalars().all()

    summary = {"updated": 0, "failed": 0, "skipped": 0, "total": len(creators)}
    if not creators:
        logger.info("Tier recomputation: no creators found")
        return summary

    accounts = (await session.execute(
        select(SocialAccount).where(
            SocialAccount.user_id.in_([creator.id for creator in creators]),
            SocialAccount.verified_at.is_not(None),
        )
    )).scalars().all()

    accounts_by_user: Dict[Any, list] = {}
    for account in accounts:
        accounts_by_user.setdefault(account.user_id, []).append(account)

    for creator in creators:
        creator_id = creator.id
        creator_accounts = accounts_by_user.get(creator_id, [])
        try:
            metrics = metrics_from_accounts(creator_accounts)
            if not metrics.platforms():
                summary["skipped"] += 1
                continue

            result = calculate_tier(metrics)
            # Savepoint per creator: a failed write only undoes that creator
            async with session.begin_nested():
                record_tier_result(session, creator, result, metrics)
            summary["updated"] += 1
        except (BaseAppException, ValueError, SQLAlchemyError) as e:
            summary["failed"] += 1
            logger.error(f"Failed to update tier for creator {creator_id}: {type(e).__name__}: {e}")

    await session.commit()

    logger.info(
        f"Tier recomputation finished: updated={summary['updated']} failed={summary['failed']} "
        f"skipped={summary['skipped']} total={summary['total']}"
    )
    return summary


async def compute_tiers() -> Dict[str, int]:
    from app.core.database import get_engine, get_session_maker

    print("Recomputing creator tiers…")
    async with get_session_maker()() as session:
        summary = await recompute_creator_tiers(session)

    await get_engine().dispose()
    print(
        f"Done: {summary['updated']} updated, {summary['failed']} failed, "
        f"{summary['skipped']} skipped ({summary['total']} creators)"
    )
    return summary


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(compute_tiers())
