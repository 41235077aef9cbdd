"""Public endpoint for prospective users asking for a login."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from trolleyseal.controllers.dependencies import RateLimiterDep
from trolleyseal.errors import RateLimited
from trolleyseal.services.account_requests import submit_account_request
from trolleyseal.services.email import EmailServiceError
from trolleyseal.telemetry import increment_account_request
from trolleyseal.views import AccountRequest, AccountRequestResponse

router = APIRouter(prefix="/account-requests", tags=["account-requests"])


@router.post("/", response_model=AccountRequestResponse)
async def request_account(
    payload: AccountRequest,
    limiter: RateLimiterDep,
) -> AccountRequestResponse:
    """Forward an account request to the administrator by email."""

    try:
        await submit_account_request(payload, limiter)
    except RateLimited:
        increment_account_request("rate_limited")
        raise
    except EmailServiceError as exc:
        increment_account_request("email_failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Unable to send your request right now. Please try again later.",
        ) from exc
    increment_account_request("sent")
    return AccountRequestResponse()
