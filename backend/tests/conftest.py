"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.helpers import get_client_factory, get_session_service, get_vault
from database import Base, get_db
from integrations.up_client import UpClient
from main import app
from services.session_service import SessionService
from services.token_vault import TokenVault
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    TEST_ENCRYPTION_KEY,
    TEST_SESSION_SECRET,
    user,
    user_with_token,
)
from tests.fixtures.mocks import BASE_URL, MockUpApi


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def vault() -> TokenVault:
    return TokenVault(TEST_ENCRYPTION_KEY)


@pytest.fixture
def session_service() -> SessionService:
    return SessionService(TEST_SESSION_SECRET)


@pytest.fixture
def mock_up_api() -> MockUpApi:
    return MockUpApi()


@pytest.fixture
def auth_headers(session_service, user) -> dict:
    """Authorization header for the ``user`` fixture."""
    return {"Authorization": f"Bearer {session_service.create_token(user.id)}"}


@pytest.fixture(name="client")
def client_fixture(db, vault, session_service, mock_up_api):
    """Create a test client wired to the test database and mock Up API."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_client_factory():
        def factory(token: str) -> UpClient:
            return UpClient(token, base_url=BASE_URL, transport=mock_up_api.transport())

        return factory

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_vault] = lambda: vault
    app.dependency_overrides[get_session_service] = lambda: session_service
    app.dependency_overrides[get_client_factory] = override_get_client_factory
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
