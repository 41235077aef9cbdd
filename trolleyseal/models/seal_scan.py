"""SQLAlchemy model for a single applied seal."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from trolleyseal.models.base import Base


class SealScan(Base):
    __tablename__ = "seal_scans"

    id = Column(Integer, primary_key=True, index=True)
    flight_id = Column(
        Integer,
        ForeignKey("flights.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    equipment_type = Column(String(32), nullable=False)
    seal_number = Column(String(64), nullable=False)
    created_by = Column(
        Integer,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    scanned_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default="NOW()",
    )

    __table_args__ = (
        Index("ix_seal_scans_flight_scanned", "flight_id", "scanned_at"),
    )

    flight = relationship("Flight", back_populates="seal_scans")


__all__ = ["SealScan"]
