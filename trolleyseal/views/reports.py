"""Pydantic schemas for the printable report document."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from trolleyseal.equipment import EquipmentKind


class ReportGroupResponse(BaseModel):
    equipmentType: EquipmentKind
    label: str
    scanCount: int
    displayCount: int
    lines: list[str]


class ReportRowResponse(BaseModel):
    kind: str
    serial: Optional[int] = None
    count: Optional[int] = None
    label: str = ""
    seals: str = ""
    remarks: str = ""


class HiLiftLineResponse(BaseModel):
    label: str
    number: str
    seals: str


class TrailerRowResponse(BaseModel):
    label: str
    value: str


class ReportResponse(BaseModel):
    flightId: int
    flightNumber: str
    destination: str
    generatedAt: datetime
    preparedBy: Optional[str] = None
    hiLifts: list[HiLiftLineResponse]
    groups: list[ReportGroupResponse]
    rows: list[ReportRowResponse]
    trailer: list[TrailerRowResponse]
    targetRows: int
    overflow: bool


__all__ = [
    "HiLiftLineResponse",
    "ReportGroupResponse",
    "ReportResponse",
    "ReportRowResponse",
    "TrailerRowResponse",
]
