# API route modules
from app.api.routes.health import router as health_router
from app.api.routes.tiers import router as tiers_router
from app.api.routes.social import router as social_router
from app.api.routes.creators import router as creators_router
from app.api.routes.cron import router as cron_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.push import router as push_router

__all__ = [
    "health_router",
    "tiers_router",
    "social_router",
    "creators_router",
    "cron_router",
    "notifications_router",
    "push_router",
]
