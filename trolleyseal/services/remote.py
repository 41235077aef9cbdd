"""Bounded remote calls with failures translated into the error taxonomy."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from trolleyseal.config.settings import settings
from trolleyseal.errors import PersistFailed, RemoteUnavailable
from trolleyseal.telemetry import increment_remote_failure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_connectivity_error(exc: BaseException) -> bool:
    if isinstance(exc, (asyncio.TimeoutError, OSError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


async def read_remote(
    awaitable: Awaitable[T],
    *,
    description: str,
    timeout: Optional[float] = None,
) -> T:
    """Await a read; any store failure becomes ``RemoteUnavailable``."""

    try:
        return await asyncio.wait_for(
            awaitable, timeout or settings.remote_timeout_seconds
        )
    except (asyncio.TimeoutError, OSError, SQLAlchemyError) as exc:
        logger.warning("Remote read failed (%s): %r", description, exc)
        increment_remote_failure("read")
        raise RemoteUnavailable(f"Unable to {description}") from exc


async def write_remote(
    awaitable: Awaitable[T],
    *,
    description: str,
    timeout: Optional[float] = None,
) -> T:
    """Await a write; any store failure becomes ``PersistFailed``."""

    try:
        return await asyncio.wait_for(
            awaitable, timeout or settings.remote_timeout_seconds
        )
    except (asyncio.TimeoutError, OSError, SQLAlchemyError) as exc:
        reason = "store unreachable" if _is_connectivity_error(exc) else "rejected"
        logger.warning("Remote write failed (%s, %s): %r", description, reason, exc)
        increment_remote_failure("write")
        raise PersistFailed(f"Unable to {description}") from exc


__all__ = ["read_remote", "write_remote"]
