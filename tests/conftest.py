"""Shared fixtures: in-memory repositories and an API client wired to them."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from trolleyseal.domain import FlightRecord, SealScanRecord  # noqa: E402
from trolleyseal.models.flight import FlightStatus  # noqa: E402
from trolleyseal.repositories.interfaces import (  # noqa: E402
    FlightRepositoryInterface,
    ProfileRepositoryInterface,
    RateLimitRepositoryInterface,
    SealScanRepositoryInterface,
)
from trolleyseal.services.change_feed import ChangeEvent, ChangeFeed  # noqa: E402
from trolleyseal.services.flights import FlightStore  # noqa: E402


class StoreDown(OSError):
    """Simulated connectivity failure."""


class FakeSealScanRepository(SealScanRepositoryInterface):
    def __init__(self, feed: ChangeFeed) -> None:
        self.feed = feed
        self.rows: list[SealScanRecord] = []
        self.calls: list[str] = []
        self.fail_reads = False
        self.fail_writes = False
        self._next_id = 1

    async def list_for_flight(self, flight_id, kind=None):
        self.calls.append("list")
        if self.fail_reads:
            raise StoreDown("store unreachable")
        rows = [
            row
            for row in self.rows
            if row.flight_id == flight_id and (kind is None or row.equipment_type == kind)
        ]
        return sorted(rows, key=lambda row: (row.scanned_at, row.id))

    async def insert(self, flight_id, kind, seal_number, created_by, scanned_at):
        self.calls.append("insert")
        if self.fail_writes:
            raise StoreDown("store unreachable")
        record = SealScanRecord(
            id=self._next_id,
            flight_id=flight_id,
            equipment_type=kind,
            seal_number=seal_number,
            created_by=created_by,
            scanned_at=scanned_at,
        )
        self._next_id += 1
        self.rows.append(record)
        self.feed.publish(ChangeEvent("seal_scans", "insert", flight_id))
        return record

    async def delete(self, flight_id, seal_id):
        self.calls.append("delete")
        if self.fail_writes:
            raise StoreDown("store unreachable")
        for row in self.rows:
            if row.id == seal_id and row.flight_id == flight_id:
                self.rows.remove(row)
                self.feed.publish(ChangeEvent("seal_scans", "delete", row.flight_id))
                return True
        return False

    async def count_by_flight(self):
        self.calls.append("count")
        if self.fail_reads:
            raise StoreDown("store unreachable")
        counts: dict[int, int] = {}
        for row in self.rows:
            counts[row.flight_id] = counts.get(row.flight_id, 0) + 1
        return counts


class FakeFlightRepository(FlightRepositoryInterface):
    def __init__(self, feed: ChangeFeed) -> None:
        self.feed = feed
        self.rows: dict[int, FlightRecord] = {}
        self.writes = 0
        self.fail_writes = False
        self._next_id = 1

    def seed(
        self,
        flight_number: str = "TR123",
        *,
        created_by: Optional[int] = 1,
        created_at: Optional[datetime] = None,
        status: FlightStatus = FlightStatus.PENDING,
        **fields,
    ) -> FlightRecord:
        now = datetime.now(timezone.utc)
        record = FlightRecord(
            id=self._next_id,
            flight_number=flight_number,
            destination=fields.pop("destination", "TBD"),
            departure_time=now + timedelta(hours=2),
            status=status,
            created_by=created_by,
            created_at=created_at or now,
            **fields,
        )
        self.rows[record.id] = record
        self._next_id += 1
        return record

    async def get(self, flight_id):
        return self.rows.get(flight_id)

    async def list_since(self, cutoff):
        rows = [
            row
            for row in self.rows.values()
            if row.created_at >= cutoff and row.status != FlightStatus.DELETED
        ]
        return sorted(rows, key=lambda row: row.created_at, reverse=True)

    async def insert(self, flight_number, destination, departure_time, status, created_by):
        if self.fail_writes:
            raise StoreDown("store unreachable")
        self.writes += 1
        record = self.seed(
            flight_number,
            created_by=created_by,
            status=status,
            destination=destination,
        )
        self.rows[record.id] = record.model_copy(update={"departure_time": departure_time})
        self.feed.publish(ChangeEvent("flights", "insert", record.id))
        return self.rows[record.id]

    async def update_fields(self, flight_id, fields):
        if self.fail_writes:
            raise StoreDown("store unreachable")
        self.writes += 1
        current = self.rows.get(flight_id)
        if current is None:
            return None
        updated = current.model_copy(update=fields)
        self.rows[flight_id] = updated
        self.feed.publish(ChangeEvent("flights", "update", flight_id))
        return updated


class FakeProfileRepository(ProfileRepositoryInterface):
    def __init__(self, names: Optional[dict[int, str]] = None) -> None:
        self.names = names or {1: "alice", 2: "bob"}
        self.lookups: list[set[int]] = []

    async def display_names(self, profile_ids):
        ids = set(profile_ids)
        self.lookups.append(ids)
        return {profile_id: self.names[profile_id] for profile_id in ids if profile_id in self.names}


class FakeRateLimitRepository(RateLimitRepositoryInterface):
    def __init__(self) -> None:
        self.hits: list[tuple[str, str, datetime]] = []

    async def oldest_since(self, identifier, action, cutoff):
        matching = self._matching(identifier, action, cutoff)
        return min(matching) if matching else None

    async def record_if_below(self, identifier, action, at, cutoff, limit):
        used = len(self._matching(identifier, action, cutoff))
        if used < limit:
            self.hits.append((identifier, action, at))
        return used

    def _matching(self, identifier, action, cutoff):
        return [
            at
            for hit_identifier, hit_action, at in self.hits
            if hit_identifier == identifier and hit_action == action and at >= cutoff
        ]


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def scan_repo(feed: ChangeFeed) -> FakeSealScanRepository:
    return FakeSealScanRepository(feed)


@pytest.fixture
def flight_repo(feed: ChangeFeed) -> FakeFlightRepository:
    return FakeFlightRepository(feed)


@pytest.fixture
def profile_repo() -> FakeProfileRepository:
    return FakeProfileRepository()


@pytest.fixture
def rate_limit_repo() -> FakeRateLimitRepository:
    return FakeRateLimitRepository()


@pytest.fixture
def flight_store(flight_repo, profile_repo, scan_repo, feed) -> FlightStore:
    return FlightStore(
        flight_repo, profile_repo, scan_repo, flight_number_prefix="TR", feed=feed
    )


@pytest.fixture
def current_user() -> SimpleNamespace:
    return SimpleNamespace(
        id=1,
        email="alice@example.com",
        username="alice",
        staff_number="S-100",
    )
