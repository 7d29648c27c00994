import logging
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def setup_logging():
    """Configure logging to show tier decisions and provider lookups in the terminal."""
    # Create a custom formatter for clean output
    formatter = logging.Formatter(
        fmt="%(message)s",  # Clean output for our formatted logs
        datefmt="%H:%M:%S"
    )

    # Console handler for stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # Configure the app logger (covers all app.* modules)
    app_logger = logging.getLogger("app")
    app_logger.setLevel(logging.INFO)
    app_logger.handlers = []  # Clear any existing handlers
    app_logger.addHandler(console_handler)
    app_logger.propagate = False  # Don't propagate to root logger

    # Also log uvicorn access at INFO level (optional)
    uvicorn_logger = logging.getLogger("uvicorn.access")
    uvicorn_logger.setLevel(logging.INFO)


# Initialize logging on module load
setup_logging()


def create_app(init_database: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    # Import here to avoid circular imports and module-level execution issues
    from app.config import get_settings
    from app.core.database import dispose_engine, init_db
    from app.services.push_notifications import init_push_client
    from app.api.routes import (
        health_router,
        tiers_router,
        social_router,
        creators_router,
        cron_router,
        notifications_router,
        push_router,
    )

    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables and set up the push client once per process; release the pool on shutdown."""
        if init_database:
            await init_db()
        app.state.push_client = init_push_client(settings)
        yield
        if init_database:
            await dispose_engine()

    app = FastAPI(
        title="Reach Creator Engine",
        description="""
        Creator qualification and notification routing for the Reach
        property marketplace.

        ## Features
        - Social profile lookup and normalization (Instagram, Twitter, TikTok)
        - Cross-platform creator tier classification and commission rates
        - Scheduled tier recomputation for every creator
        - Role-aware notification click routing
        """,
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers - all under /api prefix
    app.include_router(health_router, prefix="/api")
    app.include_router(tiers_router, prefix="/api")
    app.include_router(social_router, prefix="/api")
    app.include_router(creators_router, prefix="/api")
    app.include_router(cron_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(push_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
