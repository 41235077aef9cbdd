"""Endpoints for the signed-in user's profile."""

from __future__ import annotations

from fastapi import APIRouter

from trolleyseal.controllers.dependencies import CurrentUserDep, SessionDep
from trolleyseal.views import ProfileResponse, ProfileUpdateRequest

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUserDep) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.patch("/", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    session: SessionDep,
) -> ProfileResponse:
    """Change the display name shown on reports and dashboards."""

    current_user.username = payload.username
    await session.commit()
    await session.refresh(current_user)
    return ProfileResponse.model_validate(current_user)
