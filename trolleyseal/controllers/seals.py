"""Endpoints for recording and removing seal scans."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from trolleyseal.controllers.dependencies import (
    CurrentUserDep,
    FeedDep,
    FlightStoreDep,
    SealScanRepositoryDep,
)
from trolleyseal.domain import SealScanRecord
from trolleyseal.equipment import EquipmentKind, catalog
from trolleyseal.services.seal_scans import SealScanStore
from trolleyseal.views import (
    EquipmentResponse,
    SealScanCreateRequest,
    SealScanListResponse,
    SealScanResponse,
)

router = APIRouter(tags=["seals"])


def serialize_scan(scan: SealScanRecord) -> SealScanResponse:
    return SealScanResponse(
        id=scan.id,
        flightId=scan.flight_id,
        equipmentType=scan.equipment_type,
        sealNumber=scan.seal_number,
        scannedAt=scan.scanned_at,
        createdBy=scan.created_by,
    )


@router.get("/equipment", response_model=list[EquipmentResponse])
async def list_equipment() -> list[EquipmentResponse]:
    """Return the sealable equipment kinds in catalog order."""

    return [
        EquipmentResponse(
            id=spec.kind,
            name=spec.name,
            description=spec.description,
            sealCount=spec.required_seals,
        )
        for spec in catalog()
    ]


@router.get("/flights/{flight_id}/seals", response_model=SealScanListResponse)
async def list_seals(
    flight_id: int,
    current_user: CurrentUserDep,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
    equipment: Optional[EquipmentKind] = Query(None),
) -> SealScanListResponse:
    """Return a flight's scans in the order they were recorded."""

    await flights.get(flight_id)
    store = SealScanStore(repository, feed, flight_id, equipment)
    scans = await store.load_all()
    return SealScanListResponse(
        flightId=flight_id,
        equipmentType=equipment,
        total=len(scans),
        scans=[serialize_scan(scan) for scan in scans],
    )


@router.post(
    "/flights/{flight_id}/seals",
    response_model=SealScanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={204: {"description": "Blank seal number, nothing recorded"}},
)
async def add_seal(
    flight_id: int,
    payload: SealScanCreateRequest,
    current_user: CurrentUserDep,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
):
    """Record a seal; a blank seal number is ignored."""

    if not payload.sealNumber.strip():
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    await flights.get(flight_id)
    store = SealScanStore(repository, feed, flight_id)
    scan = await store.add(payload.equipmentType, payload.sealNumber, current_user.id)
    if scan is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return serialize_scan(scan)


@router.delete(
    "/flights/{flight_id}/seals/{seal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_seal(
    flight_id: int,
    seal_id: int,
    current_user: CurrentUserDep,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
) -> Response:
    """Delete a seal; deleting one that is already gone succeeds."""

    await flights.get(flight_id)
    store = SealScanStore(repository, feed, flight_id)
    await store.remove(seal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
