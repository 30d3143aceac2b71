"""Account registration, login and lookup."""

import logging
import uuid
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from user_service.database import Deadline, transaction
from user_service.errors import AppError, InternalError, InvalidCredentials, NotFound
from user_service.models.account import Account
from user_service.models.mixins import utc_now
from user_service.schemas.account import (
    AccountResponse,
    LoginAccountRequest,
    RegisterAccountRequest,
    TokenResponse,
)
from user_service.services.account_store import AccountStore
from user_service.services.security import PasswordHasher, generate_token
from user_service.services.validation import Validator

logger = logging.getLogger(__name__)

Payload = Mapping[str, Any] | RegisterAccountRequest | LoginAccountRequest


class AccountService:
    """Service for account-related operations.

    Each mutating operation runs in its own transaction: validation happens
    first, nothing is visible until commit, and any failure rolls back.
    """

    def __init__(
        self,
        db: Session,
        store: AccountStore,
        hasher: PasswordHasher,
        validator: Validator | None = None,
        timeout_seconds: float = 30.0,
    ):
        self.db = db
        self.store = store
        self.hasher = hasher
        self.validator = validator or Validator()
        self.timeout_seconds = timeout_seconds

    def register(self, payload: Payload) -> AccountResponse:
        """Create an account and return its public projection."""
        deadline = Deadline(self.timeout_seconds)
        try:
            with transaction(self.db, deadline):
                request = self.validator.validate(RegisterAccountRequest, payload)

                try:
                    password_hash = self.hasher.hash(request.password)
                except (ValueError, TypeError) as e:
                    raise InternalError("Failed to hash password") from e

                now = utc_now()
                account = Account(
                    id=uuid.uuid4(),
                    name=request.name,
                    email=request.email,
                    phone=request.phone,
                    password_hash=password_hash,
                    created_at=now,
                    updated_at=now,
                )
                self.store.create(self.db, account)
                response = AccountResponse.model_validate(account)
        except AppError as e:
            self._log_failure("register", e)
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to create account: {e}", exc_info=True)
            raise InternalError("Failed to create account") from e

        logger.info(f"Registered account {response.id}")
        return response

    def login(self, payload: Payload) -> TokenResponse:
        """Check credentials and issue a new token, replacing the old one."""
        deadline = Deadline(self.timeout_seconds)
        try:
            with transaction(self.db, deadline):
                request = self.validator.validate(LoginAccountRequest, payload)

                try:
                    account = self.store.find_by_email(self.db, request.email)
                except NotFound:
                    self.hasher.dummy_verify()
                    raise InvalidCredentials() from None

                try:
                    matches = self.hasher.verify(request.password, account.password_hash)
                except (ValueError, TypeError) as e:
                    # Same answer as a wrong password, or the email would leak
                    logger.warning(f"Password check errored for account {account.id}: {e}")
                    matches = False
                if not matches:
                    raise InvalidCredentials()

                account.token = generate_token()
                account = self.store.update(self.db, account)
                account_id, token = account.id, account.token
        except AppError as e:
            self._log_failure("login", e)
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to log in: {e}", exc_info=True)
            raise InternalError("Failed to log in") from e

        logger.info(f"Issued new token for account {account_id}")
        return TokenResponse(token=token)

    def get_account(self, account_id: UUID) -> AccountResponse:
        """Look up an account by id."""
        try:
            account = self.store.find_by_id(self.db, account_id)
            return AccountResponse.model_validate(account)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load account {account_id}: {e}", exc_info=True)
            raise InternalError("Failed to load account") from e

    def _log_failure(self, operation: str, error: AppError) -> None:
        if isinstance(error, InternalError):
            logger.error(f"{operation} failed: {error.detail}", exc_info=error)
        else:
            logger.warning(f"{operation} rejected: {error.code} {error.message}")
