from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.core.database import Base


class User(Base):
    """Platform user. Only the fields the tier engine reads and writes are mapped."""

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=True)  # developer, creator, buyer, admin

    # Creator tier: 1-4, NULL when not (or no longer) qualified
    tier = Column(Integer, nullable=True)

    social_accounts = relationship("SocialAccount", back_populates="user", cascade="all, delete-orphan")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("tier IS NULL OR (tier >= 0 AND tier <= 4)", name="users_tier_check"),
        Index("idx_users_role", "role"),
    )
