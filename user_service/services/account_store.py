"""Data access for the users table.

Every method works inside the session handed in by the caller; the store never
commits or rolls back on its own.
"""

import logging
import re
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from user_service.errors import Conflict, DuplicateEmail, DuplicatePhone, NotFound
from user_service.models.account import Account

logger = logging.getLogger(__name__)

# Matches SQLite ("UNIQUE constraint failed: users.email") and PostgreSQL
# ('... constraint "ix_users_email"', "Key (email)=(...)") wording.
UNIQUE_VIOLATIONS = [
    (re.compile(r"users\.email\b|users_email|\(email\)="), DuplicateEmail),
    (re.compile(r"users\.phone\b|users_phone|\(phone\)="), DuplicatePhone),
]


def unique_violation_error(error: IntegrityError) -> Conflict:
    """Pick the error for the column a unique violation was reported on."""
    message = str(error.orig)
    for pattern, error_cls in UNIQUE_VIOLATIONS:
        if pattern.search(message):
            return error_cls()
    return Conflict()


class AccountStore:
    """CRUD access to accounts."""

    def create(self, db: Session, account: Account) -> Account:
        """Insert a new account. Email and phone must not be taken."""
        if self._email_taken(db, account.email):
            raise DuplicateEmail()
        if account.phone and self._phone_taken(db, account.phone):
            raise DuplicatePhone()

        db.add(account)
        try:
            db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same email or phone
            logger.warning(f"Unique constraint violated while inserting account: {e.orig}")
            raise unique_violation_error(e) from e
        return account

    def find_by_email(self, db: Session, email: str) -> Account:
        account = db.query(Account).filter(Account.email == email).first()
        if account is None:
            raise NotFound("Account not found")
        return account

    def find_by_token(self, db: Session, token: str) -> Account:
        account = db.query(Account).filter(Account.token == token).first()
        if account is None:
            raise NotFound("Account not found")
        return account

    def find_by_id(self, db: Session, account_id: UUID) -> Account:
        account = db.get(Account, account_id)
        if account is None:
            raise NotFound("Account not found")
        return account

    def update(self, db: Session, account: Account) -> Account:
        """Persist every column of a previously loaded account."""
        merged = db.merge(account)
        db.flush()
        return merged

    def _email_taken(self, db: Session, email: str) -> bool:
        return db.query(Account.id).filter(Account.email == email).first() is not None

    def _phone_taken(self, db: Session, phone: str) -> bool:
        return db.query(Account.id).filter(Account.phone == phone).first() is not None
