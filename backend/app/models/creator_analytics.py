from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
import uuid

from app.core.database import Base


class CreatorAnalyticsHistory(Base):
    """Append-only log of tier evaluations, one row per recomputation."""

    __tablename__ = "creator_analytics_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # 0 = disqualified, 1-4 = tier
    tier = Column(Integer, nullable=False)

    # Structure: {"total_followers": N, "engagement_rate": F, "quality_score": N,
    #             "branch": "...", "platforms": {"instagram": {...}}}
    analytics_data = Column(JSONB, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("tier >= 0 AND tier <= 4", name="creator_analytics_history_tier_check"),
        Index("idx_analytics_history_creator", "creator_id"),
        Index("idx_analytics_history_date", "created_at"),
        Index("idx_analytics_history_tier", "tier"),
    )
