from sqlalchemy import Column, String, Integer, BigInteger, Float, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.core.database import Base


class SocialAccount(Base):
    """A creator's connected social profile with the last verified figures."""

    __tablename__ = "social_accounts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    platform = Column(String(50), nullable=False)  # instagram, tiktok, twitter ("x" on older rows)
    handle = Column(String(255), nullable=True)

    # Figures from the last successful verification
    followers = Column(BigInteger, nullable=True)
    following = Column(Integer, nullable=True)
    posts = Column(Integer, nullable=True)
    engagement_rate = Column(Float, nullable=True)  # percent, e.g. 3.45
    quality_score = Column(Integer, nullable=True)

    verified_at = Column(DateTime(timezone=True), nullable=True)  # NULL = never verified

    user = relationship("User", back_populates="social_accounts")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_social_accounts_user_platform", "user_id", "platform", unique=True),
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "platform": self.platform,
            "handle": self.handle,
            "followers": self.followers,
            "following": self.following,
            "posts": self.posts,
            "engagement_rate": self.engagement_rate,
            "quality_score": self.quality_score,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
        }
