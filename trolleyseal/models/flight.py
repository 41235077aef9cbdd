"""SQLAlchemy model for a flight's ground-handling record."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from trolleyseal.models.base import Base


class FlightStatus(str, Enum):
    """Lifecycle states of a flight checklist."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    PRINTED = "printed"
    DELETED = "deleted"


class Flight(Base):
    __tablename__ = "flights"

    id = Column(Integer, primary_key=True, index=True)
    flight_number = Column(String(16), nullable=False, index=True)
    destination = Column(String(120), nullable=False, default="TBD")
    departure_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        SqlEnum(
            FlightStatus,
            name="flight_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=FlightStatus.PENDING,
    )
    created_by = Column(
        Integer,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    hi_lift_1_number = Column(String(32), nullable=True)
    hi_lift_1_front_seal = Column(String(64), nullable=True)
    hi_lift_1_rear_seal = Column(String(64), nullable=True)
    hi_lift_2_number = Column(String(32), nullable=True)
    hi_lift_2_front_seal = Column(String(64), nullable=True)
    hi_lift_2_rear_seal = Column(String(64), nullable=True)
    padlock_total = Column(Integer, nullable=True)
    driver_name = Column(String(120), nullable=True)
    driver_id = Column(String(50), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default="NOW()",
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default="NOW()",
        onupdate=datetime.utcnow,
    )

    seal_scans = relationship(
        "SealScan",
        back_populates="flight",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["Flight", "FlightStatus"]
