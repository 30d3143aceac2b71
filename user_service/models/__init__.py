"""SQLAlchemy models."""

from user_service.models.account import Account

__all__ = [
    "Account",
]
