from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
import logging

from app.core.database import get_db
from app.core.exceptions import (
    ConfigurationError,
    CreatorNotFoundError,
    InvalidIdentifierError,
    MalformedProfileError,
    ProfileVerificationError,
    SocialAnalyticsAPIError,
    UnsupportedPlatformError,
)
from app.schemas.social import VerifySocialAccountRequest, VerifySocialAccountResponse
from app.services.social_account_service import verify_social_account
from app.services.social_profile_service import SocialProfileService
from app.api.routes.social import get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/creators", tags=["creators"])


@router.post("/{creator_id}/social-accounts/verify", response_model=VerifySocialAccountResponse)
async def verify_creator_social_account(
    creator_id: UUID,
    request: VerifySocialAccountRequest,
    db: AsyncSession = Depends(get_db),
    service: SocialProfileService = Depends(get_profile_service),
):
    """
    Verify one social profile and recompute the creator's tier.

    The tier is calculated from every verified account the creator has, so
    connecting a second platform can move them up a tier.
    """
    try:
        return await verify_social_account(
            db, creator_id, request.platform, request.url, profile_service=service
        )
    except (InvalidIdentifierError, UnsupportedPlatformError, ProfileVerificationError) as e:
        raise HTTPException(status_code=400, detail=str(e.message))
    except CreatorNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e.message))
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e.message))
    except (SocialAnalyticsAPIError, MalformedProfileError) as e:
        logger.error(f"Verification for creator {creator_id} failed upstream: {e.message}")
        raise HTTPException(status_code=502, detail=f"Social analytics provider error: {e.message}")
