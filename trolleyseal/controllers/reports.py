"""Endpoints serving the printable seal report."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from trolleyseal.controllers.dependencies import (
    CurrentUserDep,
    FeedDep,
    FlightStoreDep,
    SealScanRepositoryDep,
)
from trolleyseal.services.report import Report, ReportConfig, assemble_report, render_report_text
from trolleyseal.services.seal_scans import SealScanStore
from trolleyseal.views import (
    HiLiftLineResponse,
    ReportGroupResponse,
    ReportResponse,
    ReportRowResponse,
    TrailerRowResponse,
)

router = APIRouter(prefix="/flights", tags=["reports"])


async def _build_report(
    flight_id: int,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
) -> Report:
    flight = await flights.get(flight_id)
    scans = await SealScanStore(repository, feed, flight_id).load_all()
    return assemble_report(
        flight,
        scans,
        ReportConfig.from_settings(),
        prepared_by=await flights.creator_name(flight),
    )


def serialize_report(report: Report) -> ReportResponse:
    return ReportResponse(
        flightId=report.flight_id,
        flightNumber=report.flight_number,
        destination=report.destination,
        generatedAt=report.generated_at,
        preparedBy=report.prepared_by,
        hiLifts=[
            HiLiftLineResponse(label=line.label, number=line.number, seals=line.seals)
            for line in report.hi_lifts
        ],
        groups=[
            ReportGroupResponse(
                equipmentType=group.kind,
                label=group.label,
                scanCount=group.scan_count,
                displayCount=group.display_count,
                lines=list(group.lines),
            )
            for group in report.groups
        ],
        rows=[
            ReportRowResponse(
                kind=row.kind,
                serial=row.serial,
                count=row.count,
                label=row.label,
                seals=row.seals,
                remarks=row.remarks,
            )
            for row in report.rows
        ],
        trailer=[
            TrailerRowResponse(label=row.label, value=row.value)
            for row in report.trailer
        ],
        targetRows=report.config.target_rows,
        overflow=report.overflow,
    )


@router.get("/{flight_id}/report", response_model=ReportResponse)
async def get_report(
    flight_id: int,
    current_user: CurrentUserDep,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
) -> ReportResponse:
    """Return the report document model for client-side rendering."""

    return serialize_report(await _build_report(flight_id, flights, repository, feed))


@router.get("/{flight_id}/report.txt", response_class=PlainTextResponse)
async def get_report_text(
    flight_id: int,
    current_user: CurrentUserDep,
    flights: FlightStoreDep,
    repository: SealScanRepositoryDep,
    feed: FeedDep,
) -> str:
    """Return the report as a fixed-width printable page."""

    report = await _build_report(flight_id, flights, repository, feed)
    return render_report_text(report)
