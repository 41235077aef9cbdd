"""WebSocket streams of change notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from trolleyseal.services.change_feed import Subscription, get_change_feed
from trolleyseal.services.flights import DASHBOARD_TABLES
from trolleyseal.utils import AuthenticationError, bearer_token, decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

_WATCHED_TABLES = {"seal_scans", "flights"}


async def _close_on_disconnect(websocket: WebSocket, subscription: Subscription) -> None:
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except (WebSocketDisconnect, RuntimeError):
        pass
    finally:
        subscription.close()


async def _authorised(websocket: WebSocket, token: Optional[str]) -> bool:
    token = token or bearer_token(websocket.headers.get("authorization"))
    try:
        if token is None:
            raise AuthenticationError("Missing access token")
        decode_access_token(token)
    except AuthenticationError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return False
    return True


async def _stream(
    websocket: WebSocket,
    tables: Iterable[str],
    flight_id: Optional[int] = None,
) -> None:
    """Forward matching change events until the client goes away."""

    subscription = get_change_feed().subscribe(tables, flight_id)
    watcher = None
    try:
        await websocket.accept()
        watcher = asyncio.create_task(_close_on_disconnect(websocket, subscription))
        async for event in subscription:
            await websocket.send_json(
                {
                    "table": event.table,
                    "flightId": event.flight_id,
                    "action": event.action,
                    "occurredAt": event.occurred_at.isoformat(),
                }
            )
    except (WebSocketDisconnect, RuntimeError):
        logger.debug("Change stream (flight=%s) closed by client", flight_id)
    finally:
        subscription.close()
        if watcher is not None:
            watcher.cancel()


@router.websocket("/flights/changes")
async def dashboard_changes(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
) -> None:
    """Push flight and seal invalidations for every flight, for the dashboard."""

    if await _authorised(websocket, token):
        await _stream(websocket, DASHBOARD_TABLES)


@router.websocket("/flights/{flight_id}/changes")
async def flight_changes(
    websocket: WebSocket,
    flight_id: int,
    token: Optional[str] = Query(None),
    table: str = Query("seal_scans"),
) -> None:
    """Push an invalidation message whenever the flight's data changes."""

    if not await _authorised(websocket, token):
        return
    if table not in _WATCHED_TABLES:
        await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
        return
    await _stream(websocket, (table,), flight_id)
