# Database models
from app.models.user import User
from app.models.social_account import SocialAccount
from app.models.creator_analytics import CreatorAnalyticsHistory

__all__ = [
    "User",
    "SocialAccount",
    "CreatorAnalyticsHistory",
]
