"""Endpoints for the flight dashboard and flight lifecycle."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from trolleyseal.controllers.dependencies import CurrentUserDep, FlightStoreDep
from trolleyseal.domain import FlightRecord
from trolleyseal.views import (
    FlightAuxiliaryRequest,
    FlightCreateRequest,
    FlightResponse,
    HiLiftResponse,
    SealCountsResponse,
)

router = APIRouter(prefix="/flights", tags=["flights"])


def serialize_flight(
    flight: FlightRecord,
    creator_name: Optional[str] = None,
    seal_count: Optional[int] = None,
) -> FlightResponse:
    return FlightResponse(
        id=flight.id,
        flightNumber=flight.flight_number,
        destination=flight.destination,
        departureTime=flight.departure_time,
        status=flight.status,
        createdBy=flight.created_by,
        createdByName=creator_name,
        createdAt=flight.created_at,
        hiLifts=[
            HiLiftResponse(
                number=hi_lift.number,
                frontSeal=hi_lift.front_seal,
                rearSeal=hi_lift.rear_seal,
            )
            for hi_lift in flight.hi_lifts
        ],
        padlockTotal=flight.padlock_total,
        driverName=flight.driver_name,
        driverId=flight.driver_id,
        sealCount=seal_count,
    )


@router.get("/", response_model=list[FlightResponse])
async def list_flights(
    current_user: CurrentUserDep,
    store: FlightStoreDep,
    window_hours: Optional[int] = Query(None, alias="windowHours", ge=1, le=168),
) -> list[FlightResponse]:
    """Return active flights created inside the recency window, newest first."""

    views = await store.list_active(window_hours)
    counts = await store.seal_counts()
    return [
        serialize_flight(view.flight, view.creator_name, counts.get(view.flight.id, 0))
        for view in views
    ]


@router.get("/seal-counts", response_model=SealCountsResponse)
async def seal_counts(
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> SealCountsResponse:
    """Total seal scans per flight, for dashboard badges."""

    return SealCountsResponse(counts=await store.seal_counts())


@router.post(
    "/",
    response_model=FlightResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_flight(
    payload: FlightCreateRequest,
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> FlightResponse:
    flight = await store.create(
        payload.flightNumber,
        current_user.id,
        destination=payload.destination,
        departure_time=payload.departureTime,
        status=payload.status,
    )
    return serialize_flight(flight, current_user.username or current_user.email, 0)


@router.get("/{flight_id}", response_model=FlightResponse)
async def get_flight(
    flight_id: int,
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> FlightResponse:
    flight = await store.get(flight_id)
    return serialize_flight(flight, await store.creator_name(flight))


@router.patch("/{flight_id}/auxiliary", response_model=FlightResponse)
async def update_auxiliary(
    flight_id: int,
    payload: FlightAuxiliaryRequest,
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> FlightResponse:
    """Partially update hi-lift, padlock and driver details."""

    flight = await store.update_auxiliary(flight_id, payload.to_update())
    return serialize_flight(flight)


@router.post("/{flight_id}/archive", response_model=FlightResponse)
async def archive_flight(
    flight_id: int,
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> FlightResponse:
    """Soft-delete a flight; repeating the call is harmless."""

    flight = await store.archive(flight_id)
    return serialize_flight(flight)


@router.post("/{flight_id}/printed", status_code=status.HTTP_202_ACCEPTED)
async def mark_printed(
    flight_id: int,
    current_user: CurrentUserDep,
    store: FlightStoreDep,
) -> dict[str, bool]:
    """Print-dialog-closed signal from the client; never fails the caller."""

    return {"printed": await store.mark_printed(flight_id)}
