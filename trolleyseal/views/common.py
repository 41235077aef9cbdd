"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
    retryAfter: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    connected: bool
