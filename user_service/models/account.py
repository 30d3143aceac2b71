"""Account model."""

import uuid

from sqlalchemy import Column, String, Uuid

from user_service.database import Base
from user_service.models.mixins import TimestampMixin


class Account(Base, TimestampMixin):
    """Registered user: identity plus credentials."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), unique=True, nullable=True)
    password_hash = Column(String(100), nullable=False)
    token = Column(String(255), unique=True, nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r}>"
