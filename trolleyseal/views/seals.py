"""Pydantic schemas for seal scans."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from trolleyseal.equipment import EquipmentKind


class SealScanCreateRequest(BaseModel):
    equipmentType: EquipmentKind = Field(
        ...,
        validation_alias=AliasChoices("equipmentType", "equipment_type"),
    )
    sealNumber: str = Field(
        ...,
        max_length=64,
        validation_alias=AliasChoices("sealNumber", "seal_number"),
    )

    class Config:
        populate_by_name = True


class SealScanResponse(BaseModel):
    id: int
    flightId: int
    equipmentType: EquipmentKind
    sealNumber: str
    scannedAt: datetime
    createdBy: Optional[int] = None


class SealScanListResponse(BaseModel):
    flightId: int
    equipmentType: Optional[EquipmentKind] = None
    total: int
    scans: list[SealScanResponse]


class EquipmentResponse(BaseModel):
    id: EquipmentKind
    name: str
    description: str
    sealCount: int


__all__ = [
    "EquipmentResponse",
    "SealScanCreateRequest",
    "SealScanListResponse",
    "SealScanResponse",
]
