"""
Global pytest configuration and fixtures.
"""

import os
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("FIRESTORE_PROJECT_ID", "test-project")

import pytest
from fastapi.testclient import TestClient

from fintrack.config import Settings
from fintrack.infrastructure import SessionStore, TransactionStore, UserStore
from fintrack.main import create_app
from fintrack.models.auth import AuthenticatedSession, Session, User
from fintrack.services.authorization import AuthorizationGate
from fintrack.services.identity import GitHubIdentityProvider

from factories.user_factory import AdminUserFactory, SessionFactory, UserFactory
from memory_store import InMemoryFirestore


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: HTTP tests through the application stack")


@pytest.fixture
def test_settings() -> Settings:
    """Test settings configuration."""
    return Settings(
        app_name="fintrack-api-test",
        version="1.0.0-test",
        debug=True,
        environment="testing",
        
        # Sessions
        session_cookie_name="session_token",
        session_max_age_days=30,
        
        # Database
        firestore_project_id="test-project",
        storage_timeout_seconds=1.0,
        
        # API
        api_prefix="/api",
        cors_origins="http://localhost:3000",
        base_url="http://testserver",
        frontend_url="/dashboard",
        
        # GitHub
        github_client_id="test-client-id",
        github_client_secret="test-client-secret",
        
        log_level="DEBUG"
    )


@pytest.fixture
def firestore(test_settings) -> InMemoryFirestore:
    """Empty in-memory document store."""
    return InMemoryFirestore(test_settings)


@pytest.fixture
def user_store(firestore) -> UserStore:
    return UserStore(firestore)


@pytest.fixture
def session_store(firestore) -> SessionStore:
    return SessionStore(firestore)


@pytest.fixture
def transaction_store(firestore) -> TransactionStore:
    return TransactionStore(firestore)


@pytest.fixture
def gate() -> AuthorizationGate:
    return AuthorizationGate()


@pytest.fixture
def mock_identity_provider() -> MagicMock:
    """Identity provider double; tests set ``exchange_code.return_value``."""
    provider = MagicMock(spec=GitHubIdentityProvider)
    provider.authorize_url.side_effect = lambda state: f"https://github.com/login/oauth/authorize?state={state}"
    provider.exchange_code = AsyncMock()
    provider.aclose = AsyncMock()
    return provider


@pytest.fixture
def app(test_settings, firestore, mock_identity_provider):
    """FastAPI app wired to the in-memory store."""
    return create_app(
        settings=test_settings,
        firestore=firestore,
        identity_provider=mock_identity_provider
    )


@pytest.fixture
def client(app) -> TestClient:
    """Synchronous test client."""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def make_user(user_store) -> Callable:
    """Persist a user built by the factory."""
    async def _make(admin: bool = False, **kwargs) -> User:
        factory = AdminUserFactory if admin else UserFactory
        return await user_store.create(factory(**kwargs))
    return _make


@pytest.fixture
def make_session(session_store) -> Callable:
    """Persist a session for ``user``."""
    async def _make(user: User, **kwargs) -> Session:
        return await session_store.create(SessionFactory(user_id=user.id, **kwargs))
    return _make


@pytest.fixture
def as_session() -> Callable:
    """Wrap a user in an already-resolved session for service-level tests."""
    def _wrap(user: User) -> AuthenticatedSession:
        return AuthenticatedSession(user=user, session=SessionFactory(user_id=user.id))
    return _wrap
