"""Rolling-window counters for rate limited actions."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, String

from trolleyseal.models.base import Base


class RateLimitHit(Base):
    """One accepted request for an identifier/action pair."""

    __tablename__ = "rate_limit_hits"

    id = Column(Integer, primary_key=True, index=True)
    identifier = Column(String(255), nullable=False)
    action = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_rate_limit_hits_lookup", "identifier", "action", "created_at"),
    )


__all__ = ["RateLimitHit"]
