from fastapi import APIRouter, HTTPException

from app.schemas.social import SocialMetrics
from app.schemas.tier import TierResult, TierBenefitsResponse
from app.services.tier_calculator import (
    COMMISSION_RATES,
    calculate_tier,
    get_tier_benefits,
    get_tier_display_info,
)

router = APIRouter(prefix="/tiers", tags=["tiers"])


@router.post("/calculate", response_model=TierResult)
async def calculate(metrics: SocialMetrics):
    """
    Classify a creator from per-platform figures.

    Followers are summed across platforms. A creator who doesn't qualify
    gets ``tier: null`` with a reason, not an error.
    """
    return calculate_tier(metrics)


@router.get("/{tier}/benefits", response_model=TierBenefitsResponse)
async def tier_benefits(tier: int):
    """Benefits and badge for a tier (1-4). Use 0 for disqualified."""
    if tier < 0 or tier > 4:
        raise HTTPException(status_code=404, detail=f"Unknown tier {tier}")

    key = tier or None
    return TierBenefitsResponse(
        tier=key,
        commission_rate=COMMISSION_RATES.get(key, 0.0),
        display=get_tier_display_info(key),
        benefits=get_tier_benefits(key),
    )
