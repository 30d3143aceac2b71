"""FastAPI dependencies for authentication and services."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from user_service.config import Settings
from user_service.database import get_db
from user_service.errors import NotFound, Unauthorized
from user_service.services.account_service import AccountService
from user_service.services.account_store import AccountStore
from user_service.services.security import PasswordHasher
from user_service.services.validation import Validator

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_account_store() -> AccountStore:
    return AccountStore()


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[AccountStore, Depends(get_account_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    settings: Annotated[Settings, Depends(get_settings_from_app)],
) -> AccountService:
    """Get account service with dependencies."""
    return AccountService(
        db,
        store,
        hasher,
        Validator(),
        timeout_seconds=settings.request_timeout_seconds,
    )


def get_current_account_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> UUID:
    """Resolve the bearer token to the id of the account that owns it."""
    if credentials is None:
        logger.warning(f"Missing or malformed authorization header on {request.url.path}")
        raise Unauthorized("Missing authorization header")

    token = credentials.credentials
    try:
        account = store.find_by_token(db, token)
    except NotFound:
        logger.warning(f"Invalid token {token[:8]}... on {request.url.path}")
        raise Unauthorized("Invalid token") from None

    request.state.account_id = account.id
    logger.debug(f"Authenticated account {account.id}")
    return account.id
