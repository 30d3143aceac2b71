"""Pydantic schemas for API requests and responses."""

from user_service.schemas.account import (
    AccountProfileResponse,
    AccountResponse,
    LoginAccountRequest,
    RegisterAccountRequest,
    TokenResponse,
)
from user_service.schemas.envelope import ErrorEnvelope, ErrorInfo, SuccessEnvelope

__all__ = [
    "RegisterAccountRequest",
    "LoginAccountRequest",
    "AccountResponse",
    "AccountProfileResponse",
    "TokenResponse",
    "SuccessEnvelope",
    "ErrorEnvelope",
    "ErrorInfo",
]
