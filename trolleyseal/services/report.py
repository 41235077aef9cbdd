"""Assembly of the printable seal report.

The assembler is pure: it takes a flight record and its seal scans and lays
them out as a fixed-row table. Real rows are never dropped; when they exceed
the target row count the table simply grows past one page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Literal, Optional, Sequence

from trolleyseal.config.settings import settings
from trolleyseal.domain import FlightRecord, SealScanRecord
from trolleyseal.equipment import EquipmentKind, catalog_position, spec_for

SEPARATOR = ", "

RowKind = Literal["data", "separator", "padding"]
GroupOrder = Literal["first-seen", "catalog"]


@dataclass(frozen=True)
class ReportConfig:
    line_width: int = 50
    target_rows: int = 25
    group_order: GroupOrder = "first-seen"

    @classmethod
    def from_settings(cls) -> "ReportConfig":
        return cls(
            line_width=settings.report.line_width,
            target_rows=settings.report.target_rows,
            group_order=settings.report.group_order,
        )


@dataclass(frozen=True)
class ReportGroup:
    kind: EquipmentKind
    label: str
    scan_count: int
    display_count: int
    seal_numbers: tuple[str, ...]
    lines: tuple[str, ...]


@dataclass(frozen=True)
class ReportRow:
    kind: RowKind = "padding"
    serial: Optional[int] = None
    count: Optional[int] = None
    label: str = ""
    seals: str = ""
    remarks: str = ""

    @property
    def is_blank(self) -> bool:
        return self.kind != "data"


@dataclass(frozen=True)
class HiLiftLine:
    label: str
    number: str = ""
    front_seal: str = ""
    rear_seal: str = ""

    @property
    def seals(self) -> str:
        if not (self.front_seal or self.rear_seal):
            return ""
        return f"Rear Seal: {self.rear_seal}, Front Seal: {self.front_seal}"


@dataclass(frozen=True)
class TrailerRow:
    label: str
    value: str = ""


@dataclass(frozen=True)
class Report:
    flight_id: int
    flight_number: str
    destination: str
    generated_at: datetime
    prepared_by: Optional[str]
    hi_lifts: tuple[HiLiftLine, ...]
    groups: tuple[ReportGroup, ...]
    rows: tuple[ReportRow, ...]
    trailer: tuple[TrailerRow, ...]
    config: ReportConfig = field(default_factory=ReportConfig)

    @property
    def data_rows(self) -> tuple[ReportRow, ...]:
        return tuple(row for row in self.rows if row.kind == "data")

    @property
    def overflow(self) -> bool:
        return len(self.rows) > self.config.target_rows


def display_count(kind: EquipmentKind, scan_count: int) -> int:
    """Units represented by ``scan_count`` seals.

    A full-size trolley has two doors, so its seals are halved (truncating an
    odd count); every other kind reports one unit per seal.
    """

    if kind is EquipmentKind.FULL_TROLLEY:
        return scan_count // 2
    return scan_count


def wrap_seal_numbers(numbers: Sequence[str], width: int) -> list[str]:
    """Join seal numbers with ``", "`` into lines no wider than ``width``.

    Tokens are never split; a token longer than ``width`` gets a line of its own.
    """

    lines: list[str] = []
    current: list[str] = []
    current_length = 0
    for number in numbers:
        extra = len(number) if not current else len(SEPARATOR) + len(number)
        if current and current_length + extra > width:
            lines.append(SEPARATOR.join(current))
            current = [number]
            current_length = len(number)
        else:
            current.append(number)
            current_length += extra
    if current or not lines:
        lines.append(SEPARATOR.join(current))
    return lines


def group_scans(
    scans: Iterable[SealScanRecord],
    order: GroupOrder = "first-seen",
) -> list[tuple[EquipmentKind, list[SealScanRecord]]]:
    grouped: dict[EquipmentKind, list[SealScanRecord]] = {}
    for scan in sorted(scans, key=lambda item: (item.scanned_at, item.id)):
        grouped.setdefault(scan.equipment_type, []).append(scan)

    groups = list(grouped.items())
    if order == "catalog":
        groups.sort(key=lambda item: catalog_position(item[0]))
    return groups


def _build_group(
    kind: EquipmentKind, scans: Sequence[SealScanRecord], width: int
) -> ReportGroup:
    numbers = tuple(scan.seal_number for scan in scans)
    return ReportGroup(
        kind=kind,
        label=spec_for(kind).report_label,
        scan_count=len(numbers),
        display_count=display_count(kind, len(numbers)),
        seal_numbers=numbers,
        lines=tuple(wrap_seal_numbers(numbers, width)),
    )


def _hi_lift_lines(flight: FlightRecord) -> tuple[HiLiftLine, ...]:
    return tuple(
        HiLiftLine(
            label=f"Hi-Lift {index}",
            number=hi_lift.number or "",
            front_seal=hi_lift.front_seal or "",
            rear_seal=hi_lift.rear_seal or "",
        )
        for index, hi_lift in enumerate(flight.hi_lifts, start=1)
    )


def _trailer(flight: FlightRecord) -> tuple[TrailerRow, ...]:
    padlocks = "" if flight.padlock_total is None else str(flight.padlock_total)
    driver_parts = [part for part in (flight.driver_name, flight.driver_id) if part]
    driver = " / ".join(driver_parts)
    return (
        TrailerRow(label="Total no. of padlocks", value=padlocks),
        TrailerRow(label="Driver name / ID (acknowledgement)", value=driver),
    )


def assemble_report(
    flight: FlightRecord,
    scans: Iterable[SealScanRecord],
    config: Optional[ReportConfig] = None,
    *,
    prepared_by: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Report:
    config = config or ReportConfig()
    groups = [
        _build_group(kind, group_scans_, config.line_width)
        for kind, group_scans_ in group_scans(scans, config.group_order)
    ]

    rows: list[ReportRow] = []
    for serial, group in enumerate(groups, start=1):
        for index, line in enumerate(group.lines):
            first = index == 0
            rows.append(
                ReportRow(
                    kind="data",
                    serial=serial if first else None,
                    count=group.display_count if first else None,
                    label=group.label if first else "",
                    seals=line,
                )
            )
        rows.append(ReportRow(kind="separator"))

    while len(rows) < config.target_rows:
        rows.append(ReportRow(kind="padding"))

    return Report(
        flight_id=flight.id,
        flight_number=flight.flight_number,
        destination=flight.destination,
        generated_at=generated_at or datetime.now(timezone.utc),
        prepared_by=prepared_by,
        hi_lifts=_hi_lift_lines(flight),
        groups=tuple(groups),
        rows=tuple(rows),
        trailer=_trailer(flight),
        config=config,
    )


def render_report_text(report: Report) -> str:
    """Render the report as a fixed-width plain text page."""

    seal_width = max(report.config.line_width, len("Seal / Sticker No."))
    seal_width = max([seal_width] + [len(row.seals) for row in report.rows])
    columns = (4, 26, seal_width, 10)

    def line(*cells: str) -> str:
        padded = [cell.ljust(width) for cell, width in zip(cells, columns)]
        return "| " + " | ".join(padded) + " |"

    rule = "+" + "+".join("-" * (width + 2) for width in columns) + "+"
    out = [
        "TROLLEY SEAL REPORT",
        f"Flight No.: {report.flight_number}",
        f"Destination: {report.destination}",
        f"Date: {report.generated_at:%d/%m/%Y}",
        f"Prepared by: {report.prepared_by or ''}",
        "",
    ]
    for hi_lift in report.hi_lifts:
        out.append(f"{hi_lift.label}: {hi_lift.number}  {hi_lift.seals}".rstrip())
    out.extend(["", rule, line("S/n", "Cart No.", "Seal / Sticker No.", "Remarks"), rule])

    for row in report.rows:
        serial = "" if row.serial is None else str(row.serial)
        cart = "" if row.count is None else f"{row.count} {row.label}"
        out.append(line(serial, cart, row.seals, row.remarks))
    out.append(rule)

    for trailer in report.trailer:
        out.append(f"{trailer.label}: {trailer.value}".rstrip())
    return "\n".join(out) + "\n"


__all__ = [
    "HiLiftLine",
    "Report",
    "ReportConfig",
    "ReportGroup",
    "ReportRow",
    "TrailerRow",
    "assemble_report",
    "display_count",
    "group_scans",
    "render_report_text",
    "wrap_seal_numbers",
]
