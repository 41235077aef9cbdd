"""Persisted request audit rows."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RequestLog(Base):
    """One handled HTTP request, kept when ``PERSIST_REQUEST_LOGS`` is on."""

    __tablename__ = "request_logs"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, default=_utcnow, index=True)
    method = Column(String(10), nullable=False)
    route = Column(String(255), nullable=False)
    status_code = Column(Integer, nullable=False)
    duration_ms = Column(Integer, nullable=True)
    client_ip = Column(String(64), nullable=True)
    user_id = Column(Integer, nullable=True, index=True)
    flight_id = Column(Integer, nullable=True, index=True)


__all__ = ["RequestLog"]
