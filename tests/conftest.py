"""Pytest configuration and fixtures."""

import os

# Use test database - PostgreSQL when TEST_DATABASE_URL is set, SQLite locally.
# Must be set before the application modules read their settings.
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from user_records.api.dependencies import get_user_store  # noqa: E402
from user_records.database import Base, build_engine, build_session_factory  # noqa: E402
from user_records.main import app  # noqa: E402
from user_records.store import UserStore  # noqa: E402

engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = build_session_factory(engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    from user_records import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Provide a database session for each test and clean up afterwards."""
    session = TestingSessionLocal()

    yield session

    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def store():
    """User store bound to the test database."""
    return UserStore(TestingSessionLocal)


@pytest.fixture(scope="function")
def client(store):
    """Create a test client with the store dependency overridden."""
    app.dependency_overrides[get_user_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(client):
    """Factory that creates a user through the API and returns its payload."""

    def _create(name="Test User", age=30, email="test@example.com", address="1 Main St"):
        payload = {"name": name, "age": age, "email": email}
        if address is not None:
            payload["address"] = address
        response = client.post("/api/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
