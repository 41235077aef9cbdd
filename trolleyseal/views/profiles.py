"""Pydantic schemas for the signed-in user's profile."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class ProfileResponse(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    staffNumber: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("staffNumber", "staff_number"),
        serialization_alias="staffNumber",
    )

    class Config:
        populate_by_name = True
        from_attributes = True


class ProfileUpdateRequest(BaseModel):
    username: str = Field(..., max_length=100)

    @field_validator("username")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username cannot be empty")
        return value


__all__ = ["ProfileResponse", "ProfileUpdateRequest"]
