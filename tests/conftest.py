"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

from user_service.config import Settings
from user_service.database import Base, build_engine, build_session_factory, get_db, init_db
from user_service.main import create_app
from user_service.services.account_store import AccountStore
from user_service.services.security import PasswordHasher


class AuthHeaders(dict):
    """Dict subclass that also stores the account id and email."""

    def __init__(self, *args, account_id: str | None = None, email: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.account_id = account_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL") + "_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = build_session_factory(engine)

TEST_PASSWORD = "securePassword123!"  # noqa: S105


@pytest.fixture(scope="session")
def settings():
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        environment="test",
        bcrypt_rounds=4,
        log_json=False,
        auto_migrate=False,
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    init_db(engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def hasher(settings):
    return PasswordHasher(settings.bcrypt_rounds)


@pytest.fixture
def store():
    return AccountStore()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture(scope="function")
def client(app, db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def registered_user(client):
    """Register a user and return the response data plus the password used."""
    payload = {
        "name": "Test User",
        "email": "test@example.com",
        "phone": "+15550100",
        "password": TEST_PASSWORD,
    }
    response = client.post("/api/v1/users", json=payload)
    assert response.status_code == 201
    return {**response.json()["data"], "password": TEST_PASSWORD}


@pytest.fixture
def auth_headers(client, registered_user):
    """Log the registered user in and return auth headers with account info."""
    response = client.post(
        "/api/v1/users/login",
        json={"email": registered_user["email"], "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"},
        account_id=registered_user["id"],
        email=registered_user["email"],
    )
