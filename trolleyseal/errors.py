"""Error taxonomy shared by the stores, services and controllers.

Every remote failure is converted into one of these before it leaves a store,
so controllers never see raw transport or driver exceptions.
"""

from __future__ import annotations


class SealServiceError(Exception):
    """Base class for recoverable, user-action scoped failures."""

    code = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(SealServiceError):
    """Input rejected locally before any remote call."""

    code = "validation_failed"
    status_code = 422


class InvalidFormat(ValidationFailed):
    """A flight number or similar identifier does not follow its convention."""

    code = "invalid_format"


class RemoteUnavailable(SealServiceError):
    """The backing store could not be reached or timed out."""

    code = "remote_unavailable"
    status_code = 503


class PersistFailed(SealServiceError):
    """The store rejected or failed to apply a write."""

    code = "persist_failed"
    status_code = 502


class NotFound(SealServiceError):
    """The referenced record no longer exists."""

    code = "not_found"
    status_code = 404


class RateLimited(SealServiceError):
    """Too many requests for one identifier inside the rolling window."""

    code = "rate_limited"
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


__all__ = [
    "SealServiceError",
    "ValidationFailed",
    "InvalidFormat",
    "RemoteUnavailable",
    "PersistFailed",
    "NotFound",
    "RateLimited",
]
