from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Tuple

from app.schemas.tier import TierResult


class Platform(str, Enum):
    """Social platforms a creator can connect."""
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"


class PlatformMetrics(BaseModel):
    """Per-platform snapshot consumed by the tier calculator."""
    followers: int = Field(ge=0)
    following: Optional[int] = Field(default=None, ge=0)
    posts_or_tweets: Optional[int] = Field(
        default=None,
        ge=0,
        description="Posts for Instagram, tweets for Twitter, videos for TikTok"
    )
    engagement_rate: Optional[float] = Field(
        default=None,
        ge=0,
        description="Percentage (3.5 means 3.5%), may exceed 100"
    )


class SocialMetrics(BaseModel):
    """A creator's metrics across all connected platforms (one entry per platform)."""
    twitter: Optional[PlatformMetrics] = None
    instagram: Optional[PlatformMetrics] = None
    facebook: Optional[PlatformMetrics] = None
    tiktok: Optional[PlatformMetrics] = None

    def platforms(self) -> List[Tuple[Platform, PlatformMetrics]]:
        """Connected platforms in a fixed order (twitter, instagram, facebook, tiktok)."""
        entries = []
        for platform in Platform:
            metrics = getattr(self, platform.value)
            if metrics is not None:
                entries.append((platform, metrics))
        return entries

    @property
    def total_followers(self) -> int:
        return sum(metrics.followers for _, metrics in self.platforms())


class GenderRatio(BaseModel):
    """Audience gender split in percent."""
    male: float = 0.0
    female: float = 0.0


class AudienceDemographics(BaseModel):
    """Audience demographics as reported by the provider (all optional)."""
    age_groups: Dict[str, Any] = Field(default_factory=dict)
    gender_ratio: GenderRatio = Field(default_factory=GenderRatio)
    top_countries: List[Any] = Field(default_factory=list)


class PlatformAnalytics(BaseModel):
    """Normalized profile analytics for one platform."""
    platform: Platform
    username: str = ""
    followers: int = 0
    following: int = 0
    posts: int = 0
    engagement_rate: float = 0.0
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    avg_views: float = 0.0
    hearts: int = 0
    fake_follower_percent: float = 0.0
    quality_score: int = 0
    audience: AudienceDemographics = Field(default_factory=AudienceDemographics)

    def to_platform_metrics(self) -> PlatformMetrics:
        """Project the analytics onto the tier calculator's input shape."""
        return PlatformMetrics(
            followers=self.followers,
            following=self.following or None,
            posts_or_tweets=self.posts or None,
            engagement_rate=self.engagement_rate or None,
        )


class ProfileFetchResult(BaseModel):
    """Tagged outcome of a profile lookup: either data or a diagnostic message."""
    success: bool
    platform: Platform
    data: Optional[PlatformAnalytics] = None
    error: Optional[str] = None
    # not_found | platform_mismatch | unsupported_platform | invalid_identifier
    error_kind: Optional[str] = None


class SocialLinks(BaseModel):
    """Profile URLs or handles a creator submitted, keyed by platform."""
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    twitter: Optional[str] = None


class CreatorVerificationResult(BaseModel):
    """Result of verifying every submitted social profile for a creator."""
    success: bool
    analytics: Dict[str, PlatformAnalytics] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    tier_result: Optional[TierResult] = None


class VerifySocialAccountRequest(BaseModel):
    """Request body for verifying a single social account."""
    platform: Platform
    url: str = Field(..., min_length=1)


class VerifySocialAccountResponse(BaseModel):
    """Fresh analytics for the verified platform plus the recomputed tier."""
    creator_id: str
    platform: Platform
    analytics: PlatformAnalytics
    tier_result: TierResult
