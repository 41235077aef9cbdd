"""Plain records passed between repositories, stores and the report assembler."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from trolleyseal.equipment import EquipmentKind
from trolleyseal.models.flight import FlightStatus


class SealScanRecord(BaseModel):
    """One persisted seal scan"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    flight_id: int
    equipment_type: EquipmentKind
    seal_number: str
    scanned_at: datetime
    created_by: Optional[int] = None


class HiLift(BaseModel):
    """A hi-lift truck with its two door seals"""

    model_config = ConfigDict(frozen=True)

    number: Optional[str] = None
    front_seal: Optional[str] = None
    rear_seal: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not (self.number or self.front_seal or self.rear_seal)


class FlightRecord(BaseModel):
    """One flight checklist as stored"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    flight_number: str
    destination: str
    departure_time: datetime
    status: FlightStatus = FlightStatus.PENDING
    created_by: Optional[int] = None
    created_at: datetime
    hi_lift_1_number: Optional[str] = None
    hi_lift_1_front_seal: Optional[str] = None
    hi_lift_1_rear_seal: Optional[str] = None
    hi_lift_2_number: Optional[str] = None
    hi_lift_2_front_seal: Optional[str] = None
    hi_lift_2_rear_seal: Optional[str] = None
    padlock_total: Optional[int] = None
    driver_name: Optional[str] = None
    driver_id: Optional[str] = None

    @property
    def hi_lifts(self) -> tuple[HiLift, HiLift]:
        return (
            HiLift(
                number=self.hi_lift_1_number,
                front_seal=self.hi_lift_1_front_seal,
                rear_seal=self.hi_lift_1_rear_seal,
            ),
            HiLift(
                number=self.hi_lift_2_number,
                front_seal=self.hi_lift_2_front_seal,
                rear_seal=self.hi_lift_2_rear_seal,
            ),
        )


class AuxiliaryUpdate(BaseModel):
    """Partial update of the optional hi-lift, padlock and driver fields.

    Only fields explicitly set by the caller are written; ``None`` clears a
    field, leaving it out keeps the stored value.
    """

    model_config = ConfigDict(extra="forbid")

    hi_lift_1_number: Optional[str] = Field(None, max_length=32)
    hi_lift_1_front_seal: Optional[str] = Field(None, max_length=64)
    hi_lift_1_rear_seal: Optional[str] = Field(None, max_length=64)
    hi_lift_2_number: Optional[str] = Field(None, max_length=32)
    hi_lift_2_front_seal: Optional[str] = Field(None, max_length=64)
    hi_lift_2_rear_seal: Optional[str] = Field(None, max_length=64)
    padlock_total: Optional[int] = Field(None, ge=0)
    driver_name: Optional[str] = Field(None, max_length=120)
    driver_id: Optional[str] = Field(None, max_length=50)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


__all__ = ["AuxiliaryUpdate", "FlightRecord", "HiLift", "SealScanRecord"]
