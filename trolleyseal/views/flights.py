"""Pydantic schemas for flights."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from trolleyseal.domain import AuxiliaryUpdate
from trolleyseal.models.flight import FlightStatus


class FlightCreateRequest(BaseModel):
    """Payload to open a new flight checklist."""

    flightNumber: str = Field(
        ...,
        min_length=1,
        max_length=16,
        validation_alias=AliasChoices("flightNumber", "flight_number"),
    )
    destination: Optional[str] = Field(None, max_length=120)
    departureTime: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("departureTime", "departure_time"),
    )
    status: FlightStatus = FlightStatus.PENDING

    class Config:
        populate_by_name = True


def _aux_field(camel: str, snake: str, **constraints):
    return Field(None, validation_alias=AliasChoices(camel, snake), **constraints)


class FlightAuxiliaryRequest(BaseModel):
    """Partial update of hi-lift, padlock and driver details.

    Omitted fields keep their stored value; ``null`` clears one.
    """

    model_config = ConfigDict(extra="forbid")

    hi_lift_1_number: Optional[str] = _aux_field("hiLift1Number", "hi_lift_1_number", max_length=32)
    hi_lift_1_front_seal: Optional[str] = _aux_field(
        "hiLift1FrontSeal", "hi_lift_1_front_seal", max_length=64
    )
    hi_lift_1_rear_seal: Optional[str] = _aux_field(
        "hiLift1RearSeal", "hi_lift_1_rear_seal", max_length=64
    )
    hi_lift_2_number: Optional[str] = _aux_field("hiLift2Number", "hi_lift_2_number", max_length=32)
    hi_lift_2_front_seal: Optional[str] = _aux_field(
        "hiLift2FrontSeal", "hi_lift_2_front_seal", max_length=64
    )
    hi_lift_2_rear_seal: Optional[str] = _aux_field(
        "hiLift2RearSeal", "hi_lift_2_rear_seal", max_length=64
    )
    padlock_total: Optional[int] = _aux_field("padlockTotal", "padlock_total", ge=0)
    driver_name: Optional[str] = _aux_field("driverName", "driver_name", max_length=120)
    driver_id: Optional[str] = _aux_field("driverId", "driver_id", max_length=50)

    def to_update(self) -> AuxiliaryUpdate:
        return AuxiliaryUpdate(**self.model_dump(exclude_unset=True))


class HiLiftResponse(BaseModel):
    number: Optional[str] = None
    frontSeal: Optional[str] = None
    rearSeal: Optional[str] = None


class FlightResponse(BaseModel):
    id: int
    flightNumber: str
    destination: str
    departureTime: datetime
    status: FlightStatus
    createdBy: Optional[int] = None
    createdByName: Optional[str] = None
    createdAt: datetime
    hiLifts: list[HiLiftResponse] = Field(default_factory=list)
    padlockTotal: Optional[int] = None
    driverName: Optional[str] = None
    driverId: Optional[str] = None
    sealCount: Optional[int] = None


class SealCountsResponse(BaseModel):
    counts: dict[int, int]


__all__ = [
    "FlightAuxiliaryRequest",
    "FlightCreateRequest",
    "FlightResponse",
    "HiLiftResponse",
    "SealCountsResponse",
]
