"""Locally cached, remotely persisted list of seal scans for one flight."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence, Union

from trolleyseal.domain import SealScanRecord
from trolleyseal.equipment import EquipmentKind, kind_of
from trolleyseal.errors import RemoteUnavailable, ValidationFailed
from trolleyseal.repositories.interfaces import SealScanRepositoryInterface
from trolleyseal.services.change_feed import (
    ChangeFeed,
    Subscription,
    SubscriptionHandle,
    notify,
)
from trolleyseal.services.remote import read_remote, write_remote
from trolleyseal.telemetry import increment_seal_added, increment_seal_removed

logger = logging.getLogger(__name__)

ChangeHandler = Callable[
    [Sequence[SealScanRecord]], Union[None, Awaitable[None]]
]


class SealScanStore:
    """Cache of a flight's seal scans, optionally narrowed to one equipment kind.

    The cache only ever holds server-confirmed state: additions are appended
    after the insert succeeds and a failed removal is rolled back.
    """

    def __init__(
        self,
        repository: SealScanRepositoryInterface,
        feed: ChangeFeed,
        flight_id: int,
        kind: Optional[EquipmentKind] = None,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.repository = repository
        self.feed = feed
        self.flight_id = flight_id
        self.kind = kind_of(kind) if kind is not None else None
        self._timeout = timeout
        self._scans: list[SealScanRecord] = []
        self._pending: set[tuple[EquipmentKind, str]] = set()

    @property
    def scans(self) -> tuple[SealScanRecord, ...]:
        return tuple(self._scans)

    async def load_all(self) -> list[SealScanRecord]:
        """Replace the cache with a fresh snapshot ordered by scan time."""

        scans = await read_remote(
            self.repository.list_for_flight(self.flight_id, self.kind),
            description="load seal scans",
            timeout=self._timeout,
        )
        self._scans = list(scans)
        return list(self._scans)

    async def add(
        self,
        kind: EquipmentKind | str,
        seal_number: str,
        acting_user: Optional[int],
    ) -> Optional[SealScanRecord]:
        """Persist a new seal; blank input is ignored without a remote call."""

        token = (seal_number or "").strip()
        if not token:
            return None
        if acting_user is None:
            raise ValidationFailed("Sign in before recording seals")

        kind = kind_of(kind)
        if self.kind is not None and kind is not self.kind:
            raise ValidationFailed(
                f"This list only accepts {self.kind.value} seals"
            )

        key = (kind, token)
        if key in self._pending:
            logger.debug("Ignoring duplicate submit of seal %s", token)
            return None

        self._pending.add(key)
        try:
            record = await write_remote(
                self.repository.insert(
                    self.flight_id,
                    kind,
                    token,
                    acting_user,
                    datetime.now(timezone.utc),
                ),
                description="save seal",
                timeout=self._timeout,
            )
        finally:
            self._pending.discard(key)

        self._scans.append(record)
        increment_seal_added(kind.value)
        logger.info(
            "Seal %s recorded for flight %s (%s) by user %s",
            record.seal_number,
            self.flight_id,
            kind.value,
            acting_user,
        )
        return record

    async def remove(self, seal_id: int) -> None:
        """Drop a seal locally, then delete it remotely; restore it on failure."""

        position = next(
            (index for index, scan in enumerate(self._scans) if scan.id == seal_id),
            None,
        )
        removed = self._scans.pop(position) if position is not None else None

        try:
            deleted = await write_remote(
                self.repository.delete(self.flight_id, seal_id),
                description="remove seal",
                timeout=self._timeout,
            )
        except Exception:
            if removed is not None:
                self._scans.insert(position, removed)
            raise

        if not deleted:
            logger.info("Seal %s already absent; treating removal as done", seal_id)
            return
        increment_seal_removed()

    def subscribe(self, on_change: Optional[ChangeHandler] = None) -> SubscriptionHandle:
        """Re-fetch on every remote change to this flight's scans.

        Must be called from a running event loop.
        """

        subscription = self.feed.subscribe("seal_scans", self.flight_id)
        task = asyncio.get_running_loop().create_task(
            self._follow(subscription, on_change)
        )
        return SubscriptionHandle(subscription, task)

    async def _follow(
        self,
        subscription: Subscription,
        on_change: Optional[ChangeHandler],
    ) -> None:
        async for _event in subscription:
            try:
                scans = await self.load_all()
            except RemoteUnavailable:
                logger.warning(
                    "Refresh after change failed for flight %s; keeping cached scans",
                    self.flight_id,
                )
                continue

            await notify(on_change, scans)


__all__ = ["SealScanStore"]
