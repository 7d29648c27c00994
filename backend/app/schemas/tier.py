from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, List, Literal


class TierDecisionTrace(BaseModel):
    """How a tier was reached, so the classification can be explained."""
    model_config = ConfigDict(frozen=True)

    branch: str
    engagement_rates: Dict[str, float] = Field(default_factory=dict)
    quality_scores: Dict[str, int] = Field(default_factory=dict)
    engagement_defaulted: bool = False  # no platform data, flat default used
    engagement_floored: bool = False  # average raised to the 1% minimum
    quality_defaulted: bool = False


class TierResult(BaseModel):
    """Creator tier classification. Recomputed from scratch on every evaluation."""
    model_config = ConfigDict(frozen=True)

    tier: Optional[Literal[1, 2, 3, 4]] = None  # None = disqualified
    tier_name: str
    total_followers: int
    engagement_rate: float
    quality_score: int
    meets_requirements: bool
    reason: Optional[str] = None
    commission_rate: float = 0.0
    trace: TierDecisionTrace


class TierDisplayInfo(BaseModel):
    """Presentation hints for a tier badge."""
    name: str
    icon: str
    color: str


class TierBenefitsResponse(BaseModel):
    """Response for GET /tiers/{tier}/benefits."""
    tier: Optional[int] = None
    commission_rate: float
    display: TierDisplayInfo
    benefits: List[str]
