from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from typing import Optional
import hmac
import logging

from app.config import get_settings
from app.core.database import get_db
from app.services.compute_tiers import recompute_creator_tiers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


class TierJobSummary(BaseModel):
    """Response for the tier recomputation job."""
    success: bool = True
    updated: int
    failed: int
    skipped: int
    total: int


def require_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """Only server-side callers holding CRON_SECRET (scheduler, push sender) get through."""
    secret = get_settings().cron_secret
    expected = f"Bearer {secret}"
    if not secret or not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/update-creator-tiers", response_model=TierJobSummary, dependencies=[Depends(require_cron_secret)])
async def update_creator_tiers(db: AsyncSession = Depends(get_db)):
    """Recompute every creator's tier from their stored social figures."""
    summary = await recompute_creator_tiers(db)
    return TierJobSummary(**summary)
