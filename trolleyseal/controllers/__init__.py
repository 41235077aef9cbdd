"""FastAPI routers acting as controllers in the MVC architecture."""

from . import account_requests, auth, flights, profiles, realtime, reports, seals

__all__ = [
    "account_requests",
    "auth",
    "flights",
    "profiles",
    "realtime",
    "reports",
    "seals",
]
