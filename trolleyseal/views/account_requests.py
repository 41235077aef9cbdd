"""Pydantic schemas for account requests."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

MAX_EMAIL_LENGTH = 255


class AccountRequest(BaseModel):
    """Details a prospective user submits to ask for a login."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[A-Za-z0-9 ._-]+$",
    )
    email: EmailStr
    staff_number: str = Field(
        ...,
        min_length=1,
        max_length=50,
        pattern=r"^[A-Za-z0-9-]+$",
        validation_alias=AliasChoices("staffNumber", "staff_number"),
        serialization_alias="staffNumber",
    )

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def _email_length(cls, value: str) -> str:
        if len(value) > MAX_EMAIL_LENGTH:
            raise ValueError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
        return value


class AccountRequestResponse(BaseModel):
    status: str = "sent"
    message: str = "Your request has been sent to the administrator."


__all__ = ["AccountRequest", "AccountRequestResponse"]
