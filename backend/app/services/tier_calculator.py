"""tier_calculator.py: Classify creators into commission tiers.

Followers are SUMMED across every connected platform, then an aggregate
engagement rate and quality score are estimated and the totals are run
through an ordered rule table (first match wins).

Tier cascade
------------
  mega              ≥ 100M followers                      → Tier 1, no checks
  major_relaxed     ≥ 10M and (ER ≥ 2 or Q ≥ 70)           → Tier 1
  standard          ≥ 100K and ER ≥ 3 and Q ≥ 85           → Tier 1
  mid_relaxed       100K–1M and (ER ≥ 2.5 or Q ≥ 75)       → Tier 1
  large_relaxed     ≥ 1M and (ER ≥ 2 or Q ≥ 70)            → Tier 1
  tier2_fallback    ≥ 100K                                 → Tier 2
  tier2             50K–100K and ER ≥ 2 and Q ≥ 70         → Tier 2
  tier3_fallback    50K–100K                               → Tier 3
  tier3             10K–50K and ER ≥ 1.5 and Q ≥ 60        → Tier 3
  tier4_fallback    10K–50K                                → Tier 4
  tier4             5K–10K and ER ≥ 1 and Q ≥ 50           → Tier 4
  disqualified      5K–10K                                 → no tier

Rule order matters at the 100K and 1M boundaries; do not reorder.

Everything here is pure: same metrics in, same TierResult out.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.schemas.social import Platform, PlatformMetrics, SocialMetrics
from app.schemas.tier import TierDecisionTrace, TierDisplayInfo, TierResult

logger = logging.getLogger(__name__)

MIN_TOTAL_FOLLOWERS = 5_000

DEFAULT_ENGAGEMENT_RATE = 3.0
MIN_ENGAGEMENT_RATE = 1.0
FALLBACK_ENGAGEMENT_RATE = 2.0

DEFAULT_QUALITY_SCORE = 70
MIN_QUALITY_SCORE = 50
BASE_QUALITY_FLOOR = 55

TIER_NAMES: Dict[Optional[int], str] = {
    1: "Elite - Tier 1",
    2: "Premium - Tier 2",
    3: "Advanced - Tier 3",
    4: "Growing - Tier 4",
    None: "Disqualified",
}

# Commission paid to the creator, in percent of the sale
COMMISSION_RATES: Dict[int, float] = {1: 3.0, 2: 2.5, 3: 2.0, 4: 1.5}

# (min_followers, default engagement %); first threshold reached wins.
# Post/follower ratios collapse towards zero for very large accounts, so big
# accounts get a size-based floor instead of an estimate.
DEFAULT_ENGAGEMENT_BY_SIZE: Dict[Platform, List[Tuple[int, float]]] = {
    Platform.TWITTER: [(10_000_000, 3.5), (1_000_000, 3.0), (100_000, 2.5)],
    Platform.INSTAGRAM: [(100_000_000, 3.5), (10_000_000, 3.0), (1_000_000, 2.5), (100_000, 2.0)],
    Platform.FACEBOOK: [(1_000_000, 3.0), (0, 2.0)],
    Platform.TIKTOK: [(1_000_000, 3.5), (0, 2.5)],
}

# (min_followers, base quality score). Kept exactly as tuned, including the
# dips at 1M (Twitter/Instagram) which look odd but are intentional.
QUALITY_BASE_BY_SIZE: Dict[Platform, List[Tuple[int, int]]] = {
    Platform.TWITTER: [
        (100_000_000, 95), (10_000_000, 90), (1_000_000, 85), (100_000, 90),
        (50_000, 85), (10_000, 75), (5_000, 65),
    ],
    Platform.INSTAGRAM: [
        (100_000_000, 95), (10_000_000, 90), (1_000_000, 85), (100_000, 80),
        (50_000, 85), (10_000, 75), (5_000, 65),
    ],
    Platform.FACEBOOK: [
        (1_000_000, 90), (100_000, 85), (10_000, 75), (5_000, 65),
    ],
    Platform.TIKTOK: [
        (10_000_000, 95), (1_000_000, 90), (100_000, 85), (50_000, 85),
        (10_000, 75), (5_000, 65),
    ],
}

# Post/tweet count above which an account earns the activity bonus. Only
# these platforms get the follow-ratio and activity bonuses; Facebook and
# TikTok keep the bare size score.
POST_BONUS_THRESHOLD: Dict[Platform, int] = {Platform.TWITTER: 100, Platform.INSTAGRAM: 50}


@dataclass(frozen=True)
class TierRule:
    """One row of the tier cascade."""
    branch: str
    tier: Optional[int]
    min_followers: int
    max_followers: Optional[int] = None  # exclusive
    min_engagement: Optional[float] = None
    min_quality: Optional[float] = None
    either: bool = False  # engagement OR quality instead of AND
    reason: Optional[str] = None

    def matches(self, followers: int, engagement_rate: float, quality_score: float) -> bool:
        if followers < self.min_followers:
            return False
        if self.max_followers is not None and followers >= self.max_followers:
            return False

        checks = []
        if self.min_engagement is not None:
            checks.append(engagement_rate >= self.min_engagement)
        if self.min_quality is not None:
            checks.append(quality_score >= self.min_quality)
        if not checks:
            return True
        return any(checks) if self.either else all(checks)


TIER_RULES: List[TierRule] = [
    TierRule("mega", 1, 100_000_000),
    TierRule("major_relaxed", 1, 10_000_000, min_engagement=2.0, min_quality=70, either=True),
    TierRule("standard", 1, 100_000, min_engagement=3.0, min_quality=85),
    TierRule("mid_relaxed", 1, 100_000, 1_000_000, min_engagement=2.5, min_quality=75, either=True),
    TierRule(
        "large_relaxed", 1, 1_000_000, min_engagement=2.0, min_quality=70, either=True,
        reason="1M+ followers qualify for Tier 1 with relaxed engagement requirements",
    ),
    TierRule(
        "tier2_fallback", 2, 100_000,
        reason="Followers sufficient for Tier 1, but engagement or quality below threshold",
    ),
    TierRule("tier2", 2, 50_000, 100_000, min_engagement=2.0, min_quality=70),
    TierRule(
        "tier3_fallback", 3, 50_000, 100_000,
        reason="Followers sufficient for Tier 2, but engagement or quality below threshold",
    ),
    TierRule("tier3", 3, 10_000, 50_000, min_engagement=1.5, min_quality=60),
    TierRule(
        "tier4_fallback", 4, 10_000, 50_000,
        reason="Followers sufficient for Tier 3, but engagement or quality below threshold",
    ),
    TierRule("tier4", 4, 5_000, 10_000, min_engagement=1.0, min_quality=50),
    TierRule(
        "disqualified", None, 5_000, 10_000,
        reason="Followers sufficient but engagement or quality below minimum requirements",
    ),
]

BELOW_MINIMUM_RULE = TierRule(
    "below_minimum", None, 0, MIN_TOTAL_FOLLOWERS,
    reason="Total followers below minimum requirement of 5,000",
)
UNRESOLVED_RULE = TierRule("unresolved", None, 0, reason="Unable to determine tier")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _default_engagement(platform: Platform, metrics: PlatformMetrics) -> float:
    """Estimate engagement for a platform that reported none (followers > 0)."""
    for min_followers, rate in DEFAULT_ENGAGEMENT_BY_SIZE[platform]:
        if metrics.followers >= min_followers:
            return rate

    # Small accounts: estimate from activity relative to audience
    if metrics.posts_or_tweets:
        estimated = min(metrics.posts_or_tweets / metrics.followers * 50, 5.0)
        if estimated > 0.1:
            return estimated
    return FALLBACK_ENGAGEMENT_RATE


def calculate_engagement_rate(metrics: SocialMetrics) -> Tuple[float, Dict[str, float], bool, bool]:
    """
    Average engagement across platforms.

    Returns (rate, per-platform rates, defaulted, floored).
    """
    rates: Dict[str, float] = {}
    for platform, entry in metrics.platforms():
        if entry.engagement_rate is not None and entry.engagement_rate > 0:
            rates[platform.value] = entry.engagement_rate
        elif entry.followers > 0:
            rates[platform.value] = _default_engagement(platform, entry)

    if not rates:
        return DEFAULT_ENGAGEMENT_RATE, rates, True, False

    average = sum(rates.values()) / len(rates)
    if average < MIN_ENGAGEMENT_RATE:
        return MIN_ENGAGEMENT_RATE, rates, False, True
    return average, rates, False, False


def _platform_quality(platform: Platform, metrics: PlatformMetrics) -> int:
    score = BASE_QUALITY_FLOOR
    for min_followers, base in QUALITY_BASE_BY_SIZE[platform]:
        if metrics.followers >= min_followers:
            score = base
            break

    threshold = POST_BONUS_THRESHOLD.get(platform)
    if threshold is None:
        return score

    if metrics.following:
        ratio = metrics.followers / metrics.following
        if ratio > 2:
            score += 10
        elif ratio > 1:
            score += 5

    if metrics.posts_or_tweets and metrics.posts_or_tweets > threshold:
        score += 5

    return min(score, 100)


def calculate_quality_score(metrics: SocialMetrics) -> Tuple[int, Dict[str, int], bool]:
    """
    Average per-platform quality. Returns (score, per-platform scores, defaulted).
    """
    scores: Dict[str, int] = {}
    for platform, entry in metrics.platforms():
        if entry.followers > 0:
            scores[platform.value] = _platform_quality(platform, entry)

    if not scores:
        return DEFAULT_QUALITY_SCORE, scores, True

    average = sum(scores.values()) / len(scores)
    return _round_half_up(max(MIN_QUALITY_SCORE, average)), scores, False


def match_tier_rule(total_followers: int, engagement_rate: float, quality_score: float) -> TierRule:
    """Walk the cascade top-down and return the first matching rule."""
    if total_followers < MIN_TOTAL_FOLLOWERS:
        return BELOW_MINIMUM_RULE
    for rule in TIER_RULES:
        if rule.matches(total_followers, engagement_rate, quality_score):
            return rule
    return UNRESOLVED_RULE


def _build_result(
    rule: TierRule,
    total_followers: int,
    engagement_rate: float,
    quality_score: int,
    trace: TierDecisionTrace,
) -> TierResult:
    return TierResult(
        tier=rule.tier,
        tier_name=TIER_NAMES[rule.tier],
        total_followers=total_followers,
        engagement_rate=engagement_rate,
        quality_score=quality_score,
        meets_requirements=rule.tier is not None,
        reason=rule.reason,
        commission_rate=COMMISSION_RATES.get(rule.tier, 0.0),
        trace=trace,
    )


def classify_tier(total_followers: int, engagement_rate: float, quality_score: int) -> TierResult:
    """Classify already-aggregated totals (no per-platform estimation)."""
    rule = match_tier_rule(total_followers, engagement_rate, quality_score)
    return _build_result(
        rule, total_followers, engagement_rate, quality_score,
        TierDecisionTrace(branch=rule.branch),
    )


def calculate_tier(metrics: SocialMetrics) -> TierResult:
    """
    Calculate a creator's tier from AGGREGATED followers across all platforms.

    Disqualification is a normal outcome (tier=None with a reason), never an error.
    """
    total_followers = metrics.total_followers

    if total_followers < MIN_TOTAL_FOLLOWERS:
        logger.info(
            f"Tier calculation: total_followers={total_followers:,} below "
            f"{MIN_TOTAL_FOLLOWERS:,} minimum -> disqualified"
        )
        return _build_result(
            BELOW_MINIMUM_RULE, total_followers, 0.0, 0,
            TierDecisionTrace(branch=BELOW_MINIMUM_RULE.branch),
        )

    engagement_rate, engagement_rates, engagement_defaulted, engagement_floored = \
        calculate_engagement_rate(metrics)
    quality_score, quality_scores, quality_defaulted = calculate_quality_score(metrics)

    rule = match_tier_rule(total_followers, engagement_rate, quality_score)

    logger.info(
        f"Tier calculation: total_followers={total_followers:,} | "
        f"engagement={engagement_rate:.2f}% | quality={quality_score} | "
        f"branch={rule.branch} -> {TIER_NAMES[rule.tier]}"
    )
    if rule is UNRESOLVED_RULE:
        logger.warning(f"No tier rule matched for {total_followers:,} followers")

    trace = TierDecisionTrace(
        branch=rule.branch,
        engagement_rates=engagement_rates,
        quality_scores=quality_scores,
        engagement_defaulted=engagement_defaulted,
        engagement_floored=engagement_floored,
        quality_defaulted=quality_defaulted,
    )
    return _build_result(rule, total_followers, engagement_rate, quality_score, trace)


TIER_BENEFITS: Dict[int, List[str]] = {
    1: [
        "Highest commission rate (3%)",
        "VIP support",
        "Featured promotions",
        "Exclusive partnerships",
        "Premium analytics dashboard",
    ],
    2: [
        "Enhanced commission rate (2.5%)",
        "Priority support",
        "Advanced analytics",
        "Featured listings",
        "Dedicated account manager",
    ],
    3: [
        "Standard commission rate (2%)",
        "Standard support",
        "Basic analytics",
        "Regular promotions",
    ],
    4: [
        "Basic commission rate (1.5%)",
        "Email support",
        "Entry-level analytics",
        "Promotional opportunities",
    ],
}

TIER_DISPLAY: Dict[Optional[int], TierDisplayInfo] = {
    1: TierDisplayInfo(name=TIER_NAMES[1], icon="💎", color="purple"),
    2: TierDisplayInfo(name=TIER_NAMES[2], icon="🥇", color="yellow"),
    3: TierDisplayInfo(name=TIER_NAMES[3], icon="🥈", color="blue"),
    4: TierDisplayInfo(name=TIER_NAMES[4], icon="🥉", color="green"),
    None: TierDisplayInfo(name=TIER_NAMES[None], icon="❌", color="gray"),
}


def get_tier_benefits(tier: Optional[int]) -> List[str]:
    """Benefits shown to a creator for their tier."""
    if tier is None:
        return ["Does not meet minimum requirements for creator program"]
    return list(TIER_BENEFITS[tier])


def get_tier_display_info(tier: Optional[int]) -> TierDisplayInfo:
    return TIER_DISPLAY[tier]
