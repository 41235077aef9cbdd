"""Utility helpers for sending transactional emails through the provider API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from trolleyseal.config.settings import settings

logger = logging.getLogger(__name__)


class EmailServiceError(RuntimeError):
    """Raised when the email service cannot deliver a message."""


async def send_email(
    *,
    recipient: str,
    subject: str,
    html: str,
    client: Optional[httpx.AsyncClient] = None,
) -> dict:
    """Send an HTML email with the configured provider and return its reply."""

    mail_settings = settings.mail
    if not mail_settings.is_configured():
        raise EmailServiceError("Email provider settings are not configured.")

    payload = {
        "from": mail_settings.sender,
        "to": [recipient],
        "subject": subject,
        "html": html,
    }
    headers = {
        "Authorization": f"Bearer {mail_settings.api_key.get_secret_value()}",
        "Content-Type": "application/json",
    }

    async def _post(http: httpx.AsyncClient) -> httpx.Response:
        response = await http.post(
            mail_settings.api_url,
            json=payload,
            headers=headers,
            timeout=mail_settings.timeout_seconds,
        )
        response.raise_for_status()
        return response

    try:
        if client is not None:
            response = await _post(client)
        else:
            async with httpx.AsyncClient() as http:
                response = await _post(http)
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Email provider rejected message: %s %s",
            exc.response.status_code,
            exc.response.text[:200],
        )
        raise EmailServiceError("Failed to send email.") from exc
    except httpx.RequestError as exc:
        logger.error("Email provider unreachable: %r", exc)
        raise EmailServiceError("Failed to send email.") from exc

    try:
        return response.json()
    except ValueError:
        return {}


__all__ = ["EmailServiceError", "send_email"]
