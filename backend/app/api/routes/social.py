from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from app.core.exceptions import ConfigurationError, MalformedProfileError, SocialAnalyticsAPIError
from app.schemas.social import Platform, ProfileFetchResult
from app.services.social_profile_service import SocialProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/social", tags=["social"])


def get_profile_service() -> SocialProfileService:
    return SocialProfileService()


@router.get("/{platform}/profile", response_model=ProfileFetchResult)
async def get_platform_profile(
    platform: Platform,
    identifier: str = Query(..., min_length=1, description="Handle or profile URL"),
    service: SocialProfileService = Depends(get_profile_service),
):
    """
    Look up a public profile and return normalized analytics.

    A profile that can't be found (or belongs to another platform) is a
    normal ``success: false`` result. Provider failures return 502.
    """
    try:
        return await service.fetch_platform_profile(identifier, platform)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e.message))
    except SocialAnalyticsAPIError as e:
        logger.error(f"Profile lookup for {platform.value} failed upstream: {e.message}")
        raise HTTPException(status_code=502, detail=f"Social analytics provider error: {e.message}")
    except MalformedProfileError as e:
        raise HTTPException(status_code=502, detail=str(e.message))
