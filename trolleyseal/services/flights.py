"""Flight aggregate: listing, seal counts, status and auxiliary updates."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Sequence, Union

from trolleyseal.config.settings import settings
from trolleyseal.domain import AuxiliaryUpdate, FlightRecord
from trolleyseal.errors import (
    InvalidFormat,
    NotFound,
    RemoteUnavailable,
    SealServiceError,
    ValidationFailed,
)
from trolleyseal.models.flight import FlightStatus
from trolleyseal.repositories.interfaces import (
    FlightRepositoryInterface,
    ProfileRepositoryInterface,
    SealScanRepositoryInterface,
)
from trolleyseal.services.change_feed import (
    ChangeFeed,
    Subscription,
    SubscriptionHandle,
    get_change_feed,
    notify,
)
from trolleyseal.services.remote import read_remote, write_remote
from trolleyseal.telemetry import increment_report_printed

logger = logging.getLogger(__name__)

FLIGHT_NUMBER_PATTERN = re.compile(r"^[A-Z]{2}\d{2,}$")
_FLIGHT_NUMBER_MAX_LENGTH = 16
DEFAULT_DESTINATION = "TBD"
DEFAULT_DEPARTURE_OFFSET = timedelta(hours=2)
DASHBOARD_TABLES = ("flights", "seal_scans")


@dataclass(frozen=True)
class FlightView:
    """A flight together with its creator's resolved display name."""

    flight: FlightRecord
    creator_name: Optional[str] = None


DashboardHandler = Callable[
    [Sequence[FlightView], dict[int, int]], Union[None, Awaitable[None]]
]


def normalize_flight_number(raw: str, prefix: Optional[str] = None) -> str:
    """Upper-case and validate a flight number such as ``TR123``.

    ``prefix`` restricts the carrier code; an empty prefix accepts any
    two-letter code.
    """

    candidate = (raw or "").strip().upper()
    if len(candidate) > _FLIGHT_NUMBER_MAX_LENGTH or not FLIGHT_NUMBER_PATTERN.fullmatch(
        candidate
    ):
        raise InvalidFormat(
            "Flight number must be a two-letter carrier code followed by digits"
        )
    carrier = (prefix if prefix is not None else settings.flight_number_prefix).upper()
    if carrier and not candidate.startswith(carrier):
        raise InvalidFormat(f"Flight number must start with {carrier}")
    return candidate


class FlightStore:
    """Operations over the flight aggregate backed by the remote store."""

    def __init__(
        self,
        flights: FlightRepositoryInterface,
        profiles: ProfileRepositoryInterface,
        scans: SealScanRepositoryInterface,
        *,
        timeout: Optional[float] = None,
        flight_number_prefix: Optional[str] = None,
        feed: Optional[ChangeFeed] = None,
    ) -> None:
        self.flights = flights
        self.feed = feed or get_change_feed()
        self.profiles = profiles
        self.scans = scans
        self._timeout = timeout
        self._prefix = flight_number_prefix

    async def list_active(
        self,
        window_hours: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> list[FlightView]:
        """Return non-archived flights created inside the window, newest first."""

        hours = window_hours or settings.active_window_hours
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(hours=hours)
        flights = await read_remote(
            self.flights.list_since(cutoff),
            description="load flights",
            timeout=self._timeout,
        )
        flights = [flight for flight in flights if flight.status != FlightStatus.DELETED]
        flights.sort(key=lambda flight: flight.created_at, reverse=True)

        creator_ids = {flight.created_by for flight in flights if flight.created_by is not None}
        names = {}
        if creator_ids:
            names = await read_remote(
                self.profiles.display_names(creator_ids),
                description="resolve creator names",
                timeout=self._timeout,
            )
        return [FlightView(flight, names.get(flight.created_by)) for flight in flights]

    async def seal_counts(self) -> dict[int, int]:
        return await read_remote(
            self.scans.count_by_flight(),
            description="count seals",
            timeout=self._timeout,
        )

    async def get(self, flight_id: int) -> FlightRecord:
        flight = await read_remote(
            self.flights.get(flight_id),
            description="load flight",
            timeout=self._timeout,
        )
        if flight is None:
            raise NotFound("Flight not found")
        return flight

    async def creator_name(self, flight: FlightRecord) -> Optional[str]:
        if flight.created_by is None:
            return None
        names = await read_remote(
            self.profiles.display_names([flight.created_by]),
            description="resolve creator name",
            timeout=self._timeout,
        )
        return names.get(flight.created_by)

    async def create(
        self,
        flight_number: str,
        acting_user: Optional[int],
        destination: Optional[str] = None,
        departure_time: Optional[datetime] = None,
        status: FlightStatus = FlightStatus.PENDING,
    ) -> FlightRecord:
        number = normalize_flight_number(flight_number, self._prefix)
        if acting_user is None:
            raise ValidationFailed("Sign in before creating flights")

        departure = departure_time or (
            datetime.now(timezone.utc) + DEFAULT_DEPARTURE_OFFSET
        )
        flight = await write_remote(
            self.flights.insert(
                number,
                (destination or "").strip() or DEFAULT_DESTINATION,
                departure,
                status,
                acting_user,
            ),
            description="create flight",
            timeout=self._timeout,
        )
        logger.info("Flight %s (%s) created by user %s", flight.flight_number, flight.id, acting_user)
        return flight

    async def archive(self, flight_id: int) -> FlightRecord:
        """Soft-delete a flight; archiving twice is a no-op."""

        flight = await self.get(flight_id)
        if flight.status == FlightStatus.DELETED:
            return flight
        return await self._write_status(flight_id, FlightStatus.DELETED, "archive flight")

    async def update_auxiliary(
        self, flight_id: int, update: AuxiliaryUpdate
    ) -> FlightRecord:
        changes = update.changes()
        if not changes:
            return await self.get(flight_id)
        flight = await write_remote(
            self.flights.update_fields(flight_id, changes),
            description="update flight details",
            timeout=self._timeout,
        )
        if flight is None:
            raise NotFound("Flight not found")
        return flight

    async def mark_printed(self, flight_id: int) -> bool:
        """Record a completed print; failures are logged and reported as False."""

        try:
            flight = await self.get(flight_id)
            if flight.status == FlightStatus.PRINTED:
                return True
            if flight.status == FlightStatus.DELETED:
                logger.info("Flight %s is archived; not marking as printed", flight_id)
                return False
            await self._write_status(flight_id, FlightStatus.PRINTED, "mark flight printed")
        except SealServiceError as exc:
            logger.warning("Could not mark flight %s as printed: %s", flight_id, exc)
            return False

        increment_report_printed()
        return True

    def subscribe(
        self,
        on_change: Optional[DashboardHandler] = None,
        window_hours: Optional[int] = None,
    ) -> SubscriptionHandle:
        """Re-fetch the dashboard on any flight or seal change, for every flight.

        ``on_change`` receives the active flights and the seal counts. Must be
        called from a running event loop.
        """

        subscription = self.feed.subscribe(DASHBOARD_TABLES)
        task = asyncio.get_running_loop().create_task(
            self._follow(subscription, on_change, window_hours)
        )
        return SubscriptionHandle(subscription, task)

    async def _follow(
        self,
        subscription: Subscription,
        on_change: Optional[DashboardHandler],
        window_hours: Optional[int],
    ) -> None:
        async for _event in subscription:
            try:
                views = await self.list_active(window_hours)
                counts = await self.seal_counts()
            except RemoteUnavailable:
                logger.warning("Dashboard refresh after change failed; keeping previous view")
                continue
            await notify(on_change, views, counts)

    async def _write_status(
        self, flight_id: int, status: FlightStatus, description: str
    ) -> FlightRecord:
        flight = await write_remote(
            self.flights.set_status(flight_id, status),
            description=description,
            timeout=self._timeout,
        )
        if flight is None:
            raise NotFound("Flight not found")
        logger.info("Flight %s status set to %s", flight_id, status.value)
        return flight


__all__ = [
    "DEFAULT_DESTINATION",
    "FLIGHT_NUMBER_PATTERN",
    "FlightStore",
    "FlightView",
    "normalize_flight_number",
]
