"""ASGI middleware feeding request and change-stream metrics."""

from __future__ import annotations

import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from trolleyseal.telemetry import CHANGE_STREAMS, observe_request


def _route_label(scope: Scope) -> str:
    """Prefer the matched route template so flight ids do not explode label sets."""

    route = scope.get("route")
    return getattr(route, "path", None) or scope.get("path", "unknown")


class TelemetryMiddleware:
    """Time HTTP requests and count open WebSocket change streams."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "websocket":
            await self._track_stream(scope, receive, send)
            return
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            observe_request(
                scope.get("method", "UNKNOWN"),
                _route_label(scope),
                status_code,
                time.perf_counter() - started,
            )

    async def _track_stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        accepted = False

        async def send_wrapper(message: Message) -> None:
            nonlocal accepted
            if message["type"] == "websocket.accept" and not accepted:
                accepted = True
                CHANGE_STREAMS.inc()
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if accepted:
                CHANGE_STREAMS.dec()
