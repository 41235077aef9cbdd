"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .flight import Flight, FlightStatus  # noqa: F401
from .log import RequestLog  # noqa: F401
from .profile import Profile  # noqa: F401
from .rate_limit import RateLimitHit  # noqa: F401
from .seal_scan import SealScan  # noqa: F401

__all__ = [
    "Base",
    "Flight",
    "FlightStatus",
    "Profile",
    "RateLimitHit",
    "RequestLog",
    "SealScan",
]
