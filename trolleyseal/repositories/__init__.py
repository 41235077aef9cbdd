"""Repository contracts and their SQLAlchemy implementations."""

from .interfaces import (
    FlightRepositoryInterface,
    ProfileRepositoryInterface,
    RateLimitRepositoryInterface,
    SealScanRepositoryInterface,
)
from .sqlalchemy import (
    SQLAlchemyFlightRepository,
    SQLAlchemyProfileRepository,
    SQLAlchemyRateLimitRepository,
    SQLAlchemySealScanRepository,
)

__all__ = [
    "FlightRepositoryInterface",
    "ProfileRepositoryInterface",
    "RateLimitRepositoryInterface",
    "SealScanRepositoryInterface",
    "SQLAlchemyFlightRepository",
    "SQLAlchemyProfileRepository",
    "SQLAlchemyRateLimitRepository",
    "SQLAlchemySealScanRepository",
]
