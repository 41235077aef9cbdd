"""Account-request notifications sent to the administrator."""

from __future__ import annotations

import html
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from trolleyseal.config.settings import settings
from trolleyseal.errors import RateLimited
from trolleyseal.repositories.interfaces import RateLimitRepositoryInterface
from trolleyseal.services.email import send_email
from trolleyseal.services.remote import read_remote, write_remote
from trolleyseal.views.account_requests import AccountRequest

logger = logging.getLogger(__name__)

ACCOUNT_REQUEST_ACTION = "account-request"
ACCOUNT_REQUEST_SUBJECT = "New Login Account Request"


class RateLimiter:
    """Allow ``limit`` requests per identifier inside a rolling window."""

    def __init__(
        self,
        repository: RateLimitRepositoryInterface,
        *,
        action: str = ACCOUNT_REQUEST_ACTION,
        limit: Optional[int] = None,
        window: Optional[timedelta] = None,
    ) -> None:
        self.repository = repository
        self.action = action
        self.limit = limit or settings.account_request_limit
        self.window = window or timedelta(minutes=settings.account_request_window_minutes)

    async def hit(self, identifier: str, *, now: Optional[datetime] = None) -> int:
        """Count one request, returning how many remain in the window."""

        key = identifier.strip().lower()
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.window
        used = await write_remote(
            self.repository.record_if_below(key, self.action, now, cutoff, self.limit),
            description="record request",
        )
        if used >= self.limit:
            oldest = await read_remote(
                self.repository.oldest_since(key, self.action, cutoff),
                description="check request rate",
            )
            retry_after = self._retry_after(oldest, now)
            logger.warning(
                "Rate limit reached for %s (%s); retry in %ss", key, self.action, retry_after
            )
            raise RateLimited(
                "Too many requests. Please try again later.",
                retry_after=retry_after,
            )
        return self.limit - used - 1

    def _retry_after(self, oldest: Optional[datetime], now: datetime) -> int:
        if oldest is None:
            return int(self.window.total_seconds())
        if oldest.tzinfo is None:
            oldest = oldest.replace(tzinfo=timezone.utc)
        remaining = (oldest + self.window - now).total_seconds()
        return max(1, math.ceil(remaining))


def compose_account_request_email(request: AccountRequest) -> str:
    """Build the administrator notification with every field HTML-escaped."""

    username = html.escape(request.username)
    email = html.escape(str(request.email))
    staff_number = html.escape(request.staff_number)
    return f"""
<div style="background-color: #f9fafb; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto; background-color: white; padding: 30px;">
    <h2>New Login Account Request</h2>
    <p>A new user has requested login access to the Trolley Seal Management System.</p>
    <h3>User Details:</h3>
    <table style="width: 100%; border-collapse: collapse;">
      <tr><td><strong>Username:</strong></td><td>{username}</td></tr>
      <tr><td><strong>Email:</strong></td><td>{email}</td></tr>
      <tr><td><strong>Staff Number:</strong></td><td>{staff_number}</td></tr>
    </table>
    <p>Please create an account for this user in the system.</p>
  </div>
</div>
""".strip()


async def submit_account_request(
    request: AccountRequest,
    limiter: RateLimiter,
) -> dict:
    """Rate-limit by email, then relay the request to the administrator."""

    await limiter.hit(str(request.email))
    logger.info("Account request received from %s", request.email)
    return await send_email(
        recipient=settings.mail.admin_recipient,
        subject=ACCOUNT_REQUEST_SUBJECT,
        html=compose_account_request_email(request),
    )


__all__ = [
    "ACCOUNT_REQUEST_ACTION",
    "RateLimiter",
    "compose_account_request_email",
    "submit_account_request",
]
