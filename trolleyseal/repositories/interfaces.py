from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from trolleyseal.domain import FlightRecord, SealScanRecord
from trolleyseal.equipment import EquipmentKind
from trolleyseal.models.flight import FlightStatus


class SealScanRepositoryInterface(ABC):
    """Persistence contract for seal scans"""

    @abstractmethod
    async def list_for_flight(
        self, flight_id: int, kind: Optional[EquipmentKind] = None
    ) -> List[SealScanRecord]:
        ...

    @abstractmethod
    async def insert(
        self,
        flight_id: int,
        kind: EquipmentKind,
        seal_number: str,
        created_by: int,
        scanned_at: datetime,
    ) -> SealScanRecord:
        ...

    @abstractmethod
    async def delete(self, flight_id: int, seal_id: int) -> bool:
        """Delete one of the flight's seals; False when it does not exist there."""

    @abstractmethod
    async def count_by_flight(self) -> Dict[int, int]:
        ...


class FlightRepositoryInterface(ABC):
    """Persistence contract for flights"""

    @abstractmethod
    async def get(self, flight_id: int) -> Optional[FlightRecord]:
        ...

    @abstractmethod
    async def list_since(self, cutoff: datetime) -> List[FlightRecord]:
        ...

    @abstractmethod
    async def insert(
        self,
        flight_number: str,
        destination: str,
        departure_time: datetime,
        status: FlightStatus,
        created_by: int,
    ) -> FlightRecord:
        ...

    @abstractmethod
    async def update_fields(self, flight_id: int, fields: dict) -> Optional[FlightRecord]:
        ...

    async def set_status(
        self, flight_id: int, status: FlightStatus
    ) -> Optional[FlightRecord]:
        return await self.update_fields(flight_id, {"status": status})


class ProfileRepositoryInterface(ABC):
    """Lookup contract for staff profiles"""

    @abstractmethod
    async def display_names(self, profile_ids: Iterable[int]) -> Dict[int, str]:
        ...


class RateLimitRepositoryInterface(ABC):
    """Persistence contract for rolling-window request counters"""

    @abstractmethod
    async def oldest_since(
        self, identifier: str, action: str, cutoff: datetime
    ) -> Optional[datetime]:
        ...

    @abstractmethod
    async def record_if_below(
        self, identifier: str, action: str, at: datetime, cutoff: datetime, limit: int
    ) -> int:
        """Atomically count hits since ``cutoff`` and record one more when
        the count is below ``limit``. Returns the count before recording."""
