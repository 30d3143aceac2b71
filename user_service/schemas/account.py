"""Account schemas."""

from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def check_password(value: str) -> str:
    if "\x00" in value:
        raise ValueError("must not contain NUL characters")
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return value


Password = Annotated[str, Field(min_length=1, max_length=100), AfterValidator(check_password)]


class RegisterAccountRequest(BaseModel):
    """Account registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    # email-validator caps addresses at 254 characters
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    password: Password

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone_is_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class LoginAccountRequest(BaseModel):
    """Account login request."""

    email: EmailStr
    password: Password


class AccountResponse(BaseModel):
    """Public projection of an account. Credentials are never part of it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    phone: str | None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class AccountProfileResponse(AccountResponse):
    """Account projection plus the identity of the caller."""

    authenticated_as: UUID


class TokenResponse(BaseModel):
    """Login response carrying the freshly issued token."""

    token: str
