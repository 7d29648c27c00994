"""
Pytest fixtures for backend testing.

Provides settings, service instances with a mocked provider, and an API
test client that never touches a real database.
"""
import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import Settings
from app.services.social_analytics_client import SocialAnalyticsClient
from tests.fixtures.social_fixtures import make_settings


# ============================================================
# Settings Fixtures
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """Settings with a dummy RapidAPI key."""
    return make_settings()


@pytest.fixture
def analytics_client(settings: Settings) -> SocialAnalyticsClient:
    """SocialAnalyticsClient wired to the dummy settings."""
    return SocialAnalyticsClient(settings=settings)


# ============================================================
# API Fixtures
# ============================================================

@pytest.fixture
def api_client(monkeypatch) -> Iterator[TestClient]:
    """
    TestClient for the app without table creation.

    Route tests override ``get_db`` / ``get_profile_service`` themselves.
    """
    from app.config import get_settings

    monkeypatch.setenv("CRON_SECRET", "cron-test-secret")
    monkeypatch.delenv("VAPID_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("VAPID_PRIVATE_KEY", raising=False)
    get_settings.cache_clear()

    from app.main import create_app

    app = create_app(init_database=False)
    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
