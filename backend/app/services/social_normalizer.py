"""
Normalization of third-party social analytics payloads.

The providers we query do not agree on field names (and change them without
notice), so every semantic value is looked up through an ordered list of
dotted paths. The first path yielding a finite number wins. New provider
quirks should be handled by adding paths to FIELD_PATHS, not by new code.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.core.exceptions import MalformedProfileError
from app.schemas.social import AudienceDemographics, GenderRatio, Platform, PlatformAnalytics

logger = logging.getLogger(__name__)

PLATFORM_LABELS: Dict[Platform, str] = {
    Platform.INSTAGRAM: "Instagram",
    Platform.TWITTER: "Twitter",
    Platform.TIKTOK: "TikTok",
    Platform.FACEBOOK: "Facebook",
}

# Social type codes the community endpoint reports for each platform
ACCEPTED_SOCIAL_TYPES: Dict[Platform, Tuple[str, ...]] = {
    Platform.INSTAGRAM: ("INST", "IG"),
    Platform.TWITTER: ("TW", "TWITTER"),
    Platform.TIKTOK: ("TT", "TIKTOK"),
    Platform.FACEBOOK: ("FB",),
}

SOCIAL_TYPE_NAMES: Dict[str, str] = {
    "INST": "Instagram",
    "IG": "Instagram",
    "TW": "Twitter",
    "TWITTER": "Twitter",
    "TT": "TikTok",
    "TIKTOK": "TikTok",
    "FB": "Facebook",
    "YT": "YouTube",
}

# Ordered lookup paths per semantic field
FIELD_PATHS: Dict[str, Tuple[str, ...]] = {
    "followers": (
        "usersCount",
        "followers",
        "followers_count",
        "follower_count",
        "followerCount",
        "user.followers",
        "user.followers_count",
        "user.follower_count",
        "edge_followed_by.count",
        "user.edge_followed_by.count",
        "stats.followerCount",
    ),
    "following": (
        "following",
        "following_count",
        "followingCount",
        "user.following",
        "user.following_count",
        "edge_follow.count",
        "user.edge_follow.count",
        "stats.followingCount",
    ),
    "posts": (
        "posts",
        "posts_count",
        "mediaCount",
        "media_count",
        "user.media_count",
        "edge_owner_to_timeline_media.count",
        "user.edge_owner_to_timeline_media.count",
        "tweets",
        "tweet_count",
        "statuses_count",
        "videos",
        "videoCount",
        "stats.videoCount",
    ),
    "avg_likes": (
        "avgLikes",
        "avg_likes",
        "average_likes",
        "avg_likes_per_post",
        "avgInteractions",
    ),
    "avg_comments": (
        "avgComments",
        "avg_comments",
        "average_comments",
        "avg_comments_per_post",
    ),
    "avg_views": ("avgViews", "avg_views"),
    "hearts": ("hearts", "heartCount", "stats.heartCount"),
    "engagement_rate": ("avgER", "engagement_rate", "engagementRate", "engagement"),
    "fake_follower_percent": (
        "pctFakeFollowers",
        "fake_followers_percent",
        "fakeFollowerPercent",
        "fake_followers",
    ),
    "quality_score": ("qualityScore", "quality_score", "quality"),
}

USERNAME_PATHS: Tuple[str, ...] = (
    "screenName",
    "username",
    "user.username",
    "uniqueId",
    "user.uniqueId",
    "name",
)


def get_by_path(document: Any, path: str) -> Any:
    """Resolve a dotted path ("user.followers_count") against nested dicts."""
    value = document
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    return value


def to_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None. Booleans are not numbers here."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return float(value) if math.isfinite(value) else None
        except OverflowError:
            # JSON integers can exceed the float range
            return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def pick_first_number(document: Any, paths: Sequence[str]) -> Optional[float]:
    for path in paths:
        parsed = to_number(get_by_path(document, path))
        if parsed is not None:
            return parsed
    return None


def pick_first_string(document: Any, paths: Sequence[str]) -> Optional[str]:
    for path in paths:
        value = get_by_path(document, path)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def unwrap_payload(payload: Any) -> Dict[str, Any]:
    """Providers wrap the profile in "data" or "result" (or not at all)."""
    if not isinstance(payload, dict):
        return {}
    for key in ("data", "result"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    return payload


def detect_social_type(payload: Any) -> Optional[str]:
    """Social type code embedded in a community payload (e.g. "INST", "TW")."""
    root = unwrap_payload(payload)
    social_type = root.get("socialType")
    if isinstance(social_type, str) and social_type:
        return social_type.upper()
    cid = root.get("cid")
    if isinstance(cid, str) and ":" in cid:
        return cid.split(":", 1)[0].upper()
    return None


def is_expected_social_type(social_type: Optional[str], platform: Platform) -> bool:
    """An absent social type is accepted; a present one must belong to the platform."""
    if not social_type:
        return True
    return social_type.upper() in ACCEPTED_SOCIAL_TYPES[platform]


def derive_engagement_rate(avg_likes: float, avg_comments: float, followers: float) -> float:
    """(avg likes + avg comments) / followers * 100, clamped at 0, 2 decimals."""
    if followers <= 0:
        return 0.0
    rate = (avg_likes + avg_comments) / followers * 100
    return round(max(0.0, rate), 2)


def derive_quality_score(followers: float, fake_follower_percent: float) -> int:
    """
    Fallback quality score: log-scaled follower term (capped at 50 points)
    plus a fake-follower penalty term, clamped to [0, 100].
    """
    follower_term = min(50.0, math.log10(max(1.0, followers)) * 10)
    fake_term = 100 - fake_follower_percent * 2
    score = min(100.0, max(0.0, follower_term + fake_term))
    return int(math.floor(score + 0.5))


def _first_dict(*candidates: Any) -> Dict[str, Any]:
    for candidate in candidates:
        if isinstance(candidate, dict) and candidate:
            return candidate
    return {}


def _extract_audience(root: Dict[str, Any]) -> AudienceDemographics:
    audience = _first_dict(
        root.get("audience"),
        root.get("audience_demographics"),
        root.get("audienceDemographics"),
    )

    age_groups = _first_dict(
        audience.get("age_groups"),
        audience.get("ageGroups"),
        root.get("ages"),
        root.get("ageGroups"),
    )

    gender_ratio = _first_dict(audience.get("gender_ratio"), audience.get("genderRatio"))
    if gender_ratio:
        male = to_number(gender_ratio.get("male"))
        female = to_number(gender_ratio.get("female"))
    else:
        # Community endpoint: membersGendersAges.summary = {"m": 48.1, "f": 51.9}
        summary = _first_dict(get_by_path(root, "membersGendersAges.summary"))
        male = to_number(summary.get("m"))
        female = to_number(summary.get("f"))

    top_countries: List[Any] = []
    for candidate in (
        audience.get("top_countries"),
        audience.get("topCountries"),
        root.get("countries"),
        root.get("membersCountries"),
    ):
        if isinstance(candidate, list):
            top_countries = candidate
            break

    return AudienceDemographics(
        age_groups=age_groups,
        gender_ratio=GenderRatio(male=male or 0.0, female=female or 0.0),
        top_countries=top_countries,
    )


def normalize_profile(payload: Any, platform: Platform, username: str) -> PlatformAnalytics:
    """
    Map a raw provider payload onto PlatformAnalytics.

    Raises MalformedProfileError when the follower count is absent: zero
    followers and "field missing" must not be conflated.
    """
    root = unwrap_payload(payload)

    followers = pick_first_number(root, FIELD_PATHS["followers"])
    if followers is None:
        received_keys = sorted(payload.keys()) if isinstance(payload, dict) else []
        raise MalformedProfileError(
            "Invalid API response: missing follower data. "
            f"Top-level keys: {', '.join(received_keys) or 'none'}",
            received_keys=received_keys,
        )
    followers = max(0.0, followers)

    def number(field: str) -> float:
        return max(0.0, pick_first_number(root, FIELD_PATHS[field]) or 0.0)

    avg_likes = number("avg_likes")
    avg_comments = number("avg_comments")
    fake_follower_percent = number("fake_follower_percent")

    engagement_rate = pick_first_number(root, FIELD_PATHS["engagement_rate"])
    if engagement_rate is None:
        engagement_rate = derive_engagement_rate(avg_likes, avg_comments, followers)
    else:
        engagement_rate = round(max(0.0, engagement_rate), 2)

    quality_score = pick_first_number(root, FIELD_PATHS["quality_score"])
    if not quality_score:
        quality_score = derive_quality_score(followers, fake_follower_percent) if followers > 0 else 0
    quality_score = int(math.floor(min(100.0, max(0.0, quality_score)) + 0.5))

    analytics = PlatformAnalytics(
        platform=platform,
        username=pick_first_string(root, USERNAME_PATHS) or username,
        followers=int(followers),
        following=int(number("following")),
        posts=int(number("posts")),
        engagement_rate=engagement_rate,
        avg_likes=avg_likes,
        avg_comments=avg_comments,
        avg_views=number("avg_views"),
        hearts=int(number("hearts")),
        fake_follower_percent=fake_follower_percent,
        quality_score=quality_score,
        audience=_extract_audience(root),
    )

    if 0 < analytics.followers < 1000 and analytics.engagement_rate > 10:
        logger.warning(
            f"Suspicious {PLATFORM_LABELS[platform]} data for '{analytics.username}': "
            f"followers={analytics.followers} engagement={analytics.engagement_rate}%"
        )

    return analytics
