"""Login endpoint issuing bearer tokens to ground staff."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from trolleyseal.config.settings import settings
from trolleyseal.controllers.dependencies import SessionDep
from trolleyseal.models.profile import Profile
from trolleyseal.telemetry import increment_login
from trolleyseal.utils import create_access_token, hash_password, needs_rehash, verify_password
from trolleyseal.views import LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    session: SessionDep,
) -> TokenResponse:
    """Validate credentials and issue a JWT access token."""

    result = await session.execute(
        select(Profile).where(Profile.email == str(payload.email).lower())
    )
    profile = result.scalar_one_or_none()
    if profile is None or not verify_password(payload.password, profile.password_hash):
        logger.info("Rejected login for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if needs_rehash(profile.password_hash):
        profile.password_hash = hash_password(payload.password)
        await session.commit()

    name = profile.username or profile.email
    increment_login()
    return TokenResponse(
        access_token=create_access_token(
            str(profile.id), name=name, staff_number=profile.staff_number
        ),
        expires_in=settings.security.access_token_expires_minutes * 60,
        user_id=profile.id,
        name=name,
    )
