"""One structured log line per request, optionally persisted for audit."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from trolleyseal.config.settings import settings
from trolleyseal.utils import AuthenticationError, bearer_token, decode_access_token

logger = logging.getLogger("trolleyseal.middleware.structured")

_COLOURS = {2: "\u001b[32m", 3: "\u001b[36m", 4: "\u001b[33m", 5: "\u001b[31m"}
_RESET = "\u001b[0m"


@dataclass
class RequestLine:
    method: str
    path: str
    client_ip: Optional[str]
    user_id: Optional[int]
    started: float = field(default_factory=time.perf_counter)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    route: Optional[str] = None
    flight_id: Optional[int] = None
    status_code: int = 500
    duration_ms: float = 0.0

    def finish(self, request: Request, status_code: int) -> None:
        self.status_code = status_code
        self.duration_ms = round((time.perf_counter() - self.started) * 1000, 2)
        self.route = getattr(request.scope.get("route"), "path", None)
        raw_flight = request.scope.get("path_params", {}).get("flight_id")
        self.flight_id = raw_flight if isinstance(raw_flight, int) else None

    def render(self) -> str:
        fields = (
            ("method", self.method),
            ("path", self.path),
            ("status", self.status_code),
            ("duration_ms", self.duration_ms),
            ("flight", self.flight_id),
            ("user", self.user_id),
            ("client", self.client_ip),
        )
        text = " ".join(f"{name}={'-' if value is None else value}" for name, value in fields)
        colour = _COLOURS.get(self.status_code // 100, "")
        return f"{colour}{text}{_RESET}" if colour else text


def _token_user(request: Request) -> Optional[int]:
    token = bearer_token(request.headers.get("authorization"))
    if token is None:
        return None
    try:
        return decode_access_token(token).user_id
    except AuthenticationError:
        return None


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status, timing, flight and user for every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        line = RequestLine(
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
            user_id=_token_user(request),
        )
        try:
            response = await call_next(request)
        except Exception:
            line.finish(request, 500)
            logger.exception(line.render())
            raise

        line.finish(request, response.status_code)
        logger.info(line.render())
        if settings.persist_request_logs:
            await self._persist(line)
        return response

    @staticmethod
    async def _persist(line: RequestLine) -> None:
        from trolleyseal.database import session_scope
        from trolleyseal.models.log import RequestLog

        async with session_scope() as session:
            session.add(
                RequestLog(
                    timestamp=line.timestamp.replace(tzinfo=None),
                    method=line.method,
                    route=line.route or line.path,
                    status_code=line.status_code,
                    duration_ms=int(line.duration_ms),
                    client_ip=line.client_ip,
                    user_id=line.user_id,
                    flight_id=line.flight_id,
                )
            )
            try:
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                logger.exception("Failed to persist request log entry")
