from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
import logging

from app.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check - verifies database connectivity.
    """
    from app.core.database import get_session_maker

    try:
        session_maker = get_session_maker()
        async with session_maker() as db:
            await db.execute(text("SELECT 1"))
            db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        db_status = f"error: {str(e)}"
        logger.exception("Database connection error")

    push_client = getattr(request.app.state, "push_client", None)
    ready = db_status == "connected"

    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "database": db_status,
            "push_notifications": bool(push_client and push_client.enabled),
            "debug": get_settings().debug,
        },
    )
