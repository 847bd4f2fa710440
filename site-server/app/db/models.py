"""SQLAlchemy ORM models."""
from sqlalchemy import Column, DateTime, Index, Integer, String

from app.infrastructure.database.base import Base


class RateLimitHit(Base):
    """One accepted contact submission counted against a requester key."""

    __tablename__ = "contact_rate_limit_hits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_contact_rate_limit_hits_key_created_at", "key", "created_at"),)
