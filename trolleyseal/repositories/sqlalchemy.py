"""SQLAlchemy implementations of the repository contracts.

Each write commits before publishing a change event, so subscribers never
refresh ahead of the data they were notified about.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trolleyseal.domain import FlightRecord, SealScanRecord
from trolleyseal.equipment import EquipmentKind
from trolleyseal.models.flight import Flight, FlightStatus
from trolleyseal.models.profile import Profile
from trolleyseal.models.rate_limit import RateLimitHit
from trolleyseal.models.seal_scan import SealScan
from trolleyseal.repositories.interfaces import (
    FlightRepositoryInterface,
    ProfileRepositoryInterface,
    RateLimitRepositoryInterface,
    SealScanRepositoryInterface,
)
from trolleyseal.services.change_feed import ChangeEvent, ChangeFeed


class SQLAlchemySealScanRepository(SealScanRepositoryInterface):
    """SQLAlchemy implementation of the seal scan repository"""

    def __init__(self, session: AsyncSession, feed: ChangeFeed):
        self.session = session
        self.feed = feed

    async def list_for_flight(
        self, flight_id: int, kind: Optional[EquipmentKind] = None
    ) -> List[SealScanRecord]:
        query = select(SealScan).where(SealScan.flight_id == flight_id)
        if kind is not None:
            query = query.where(SealScan.equipment_type == kind.value)
        result = await self.session.execute(
            query.order_by(SealScan.scanned_at.asc(), SealScan.id.asc())
        )
        return [SealScanRecord.model_validate(row) for row in result.scalars().all()]

    async def insert(
        self,
        flight_id: int,
        kind: EquipmentKind,
        seal_number: str,
        created_by: int,
        scanned_at: datetime,
    ) -> SealScanRecord:
        db_scan = SealScan(
            flight_id=flight_id,
            equipment_type=kind.value,
            seal_number=seal_number,
            created_by=created_by,
            scanned_at=scanned_at,
        )
        self.session.add(db_scan)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(db_scan)
        self.feed.publish(ChangeEvent("seal_scans", "insert", flight_id))
        return SealScanRecord.model_validate(db_scan)

    async def delete(self, flight_id: int, seal_id: int) -> bool:
        result = await self.session.execute(
            delete(SealScan).where(
                SealScan.id == seal_id,
                SealScan.flight_id == flight_id,
            )
        )
        if result.rowcount == 0:
            await self.session.rollback()
            return False

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        self.feed.publish(ChangeEvent("seal_scans", "delete", flight_id))
        return True

    async def count_by_flight(self) -> Dict[int, int]:
        result = await self.session.execute(
            select(SealScan.flight_id, func.count(SealScan.id)).group_by(
                SealScan.flight_id
            )
        )
        return {flight_id: count for flight_id, count in result.all()}


class SQLAlchemyFlightRepository(FlightRepositoryInterface):
    """SQLAlchemy implementation of the flight repository"""

    def __init__(self, session: AsyncSession, feed: ChangeFeed):
        self.session = session
        self.feed = feed

    async def get(self, flight_id: int) -> Optional[FlightRecord]:
        db_flight = await self.session.get(Flight, flight_id)
        return FlightRecord.model_validate(db_flight) if db_flight else None

    async def list_since(self, cutoff: datetime) -> List[FlightRecord]:
        result = await self.session.execute(
            select(Flight)
            .where(
                Flight.created_at >= cutoff,
                Flight.status != FlightStatus.DELETED,
            )
            .order_by(Flight.created_at.desc(), Flight.id.desc())
        )
        return [FlightRecord.model_validate(row) for row in result.scalars().all()]

    async def insert(
        self,
        flight_number: str,
        destination: str,
        departure_time: datetime,
        status: FlightStatus,
        created_by: int,
    ) -> FlightRecord:
        db_flight = Flight(
            flight_number=flight_number,
            destination=destination,
            departure_time=departure_time,
            status=status,
            created_by=created_by,
        )
        self.session.add(db_flight)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(db_flight)
        self.feed.publish(ChangeEvent("flights", "insert", db_flight.id))
        return FlightRecord.model_validate(db_flight)

    async def update_fields(self, flight_id: int, fields: dict) -> Optional[FlightRecord]:
        db_flight = await self.session.get(Flight, flight_id)
        if db_flight is None:
            return None

        for name, value in fields.items():
            setattr(db_flight, name, value)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(db_flight)
        self.feed.publish(ChangeEvent("flights", "update", flight_id))
        return FlightRecord.model_validate(db_flight)


class SQLAlchemyProfileRepository(ProfileRepositoryInterface):
    """Profile lookups resolved in a single query"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def display_names(self, profile_ids: Iterable[int]) -> Dict[int, str]:
        ids = sorted({profile_id for profile_id in profile_ids if profile_id is not None})
        if not ids:
            return {}
        result = await self.session.execute(
            select(Profile.id, Profile.username, Profile.email).where(
                Profile.id.in_(ids)
            )
        )
        return {
            profile_id: username or email
            for profile_id, username, email in result.all()
        }


class SQLAlchemyRateLimitRepository(RateLimitRepositoryInterface):
    """Rolling-window counters stored one row per accepted request"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def oldest_since(
        self, identifier: str, action: str, cutoff: datetime
    ) -> Optional[datetime]:
        result = await self.session.execute(
            select(func.min(RateLimitHit.created_at)).where(
                RateLimitHit.identifier == identifier,
                RateLimitHit.action == action,
                RateLimitHit.created_at >= cutoff,
            )
        )
        return result.scalar_one_or_none()

    async def record_if_below(
        self, identifier: str, action: str, at: datetime, cutoff: datetime, limit: int
    ) -> int:
        try:
            # held until commit, so concurrent checks for one identifier queue up
            await self.session.execute(
                select(func.pg_advisory_xact_lock(func.hashtext(f"{action}:{identifier}")))
            )
            result = await self.session.execute(
                select(func.count(RateLimitHit.id)).where(
                    RateLimitHit.identifier == identifier,
                    RateLimitHit.action == action,
                    RateLimitHit.created_at >= cutoff,
                )
            )
            used = result.scalar_one()
            if used < limit:
                self.session.add(
                    RateLimitHit(identifier=identifier, action=action, created_at=at)
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return used


__all__ = [
    "SQLAlchemyFlightRepository",
    "SQLAlchemyProfileRepository",
    "SQLAlchemyRateLimitRepository",
    "SQLAlchemySealScanRepository",
]
