"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trolleyseal.database import get_session
from trolleyseal.models.profile import Profile
from trolleyseal.repositories import (
    SQLAlchemyFlightRepository,
    SQLAlchemyProfileRepository,
    SQLAlchemyRateLimitRepository,
    SQLAlchemySealScanRepository,
)
from trolleyseal.repositories.interfaces import SealScanRepositoryInterface
from trolleyseal.services.account_requests import RateLimiter
from trolleyseal.services.change_feed import ChangeFeed, get_change_feed
from trolleyseal.services.flights import FlightStore
from trolleyseal.utils import AuthenticationError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
SessionDep = Annotated[AsyncSession, Depends(get_session)]
FeedDep = Annotated[ChangeFeed, Depends(get_change_feed)]


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> Profile:
    """Resolve and validate the profile referenced by the bearer token."""

    try:
        user_id = decode_access_token(token).user_id
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from None

    result = await session.execute(select(Profile).where(Profile.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


CurrentUserDep = Annotated[Profile, Depends(get_current_user)]


def get_seal_scan_repository(
    session: SessionDep, feed: FeedDep
) -> SealScanRepositoryInterface:
    return SQLAlchemySealScanRepository(session, feed)


SealScanRepositoryDep = Annotated[
    SealScanRepositoryInterface, Depends(get_seal_scan_repository)
]


def get_flight_store(
    session: SessionDep,
    feed: FeedDep,
    scans: SealScanRepositoryDep,
) -> FlightStore:
    return FlightStore(
        SQLAlchemyFlightRepository(session, feed),
        SQLAlchemyProfileRepository(session),
        scans,
        feed=feed,
    )


FlightStoreDep = Annotated[FlightStore, Depends(get_flight_store)]


def get_rate_limiter(session: SessionDep) -> RateLimiter:
    return RateLimiter(SQLAlchemyRateLimitRepository(session))


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


__all__ = [
    "CurrentUserDep",
    "FeedDep",
    "FlightStoreDep",
    "RateLimiterDep",
    "SealScanRepositoryDep",
    "SessionDep",
    "get_current_user",
    "get_flight_store",
    "get_rate_limiter",
    "get_seal_scan_repository",
    "oauth2_scheme",
]
