"""
Test configuration and fixtures for the UX-ray API.

DATABASE_URL is pointed at a throwaway sqlite file before anything under
uxray is imported, so the app's engines never touch a real database.
"""

import os
import tempfile
from typing import Generator

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["ENVIRONMENT"] = "local"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from uxray.features.auth.utils.security import get_current_user_id  # noqa: E402
from uxray.platform.db.init_db import init_db  # noqa: E402

MOCK_USER_ID = "019ac5fd-93bf-7368-9f64-7726995a6a04"


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from uxray.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as test_client:
        yield test_client


# Dependency Override function
def override_get_current_user_id():
    """Mock dependency that always returns a fixed caller id."""
    return MOCK_USER_ID


@pytest.fixture
def auth_client(client, test_app):
    """Client with the get_current_user_id dependency overridden for authenticated tests."""
    test_app.dependency_overrides[get_current_user_id] = override_get_current_user_id

    yield client

    test_app.dependency_overrides.pop(get_current_user_id, None)


@pytest.fixture
def sync_session():
    """Isolated in-memory database for repository and orchestrator tests."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
