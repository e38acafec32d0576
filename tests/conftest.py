"""
Pytest configuration and fixtures.
Provides test database, client, and common test utilities.
"""

import os

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DISABLE_BOOTSTRAP_USERS"] = "true"
os.environ["COOKIE_SECURE"] = "false"
os.environ["RATE_LIMIT_BACKEND"] = "memory"

from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from realty.core.config import settings  # noqa: E402
from realty.core.rate_limit import InMemoryRateLimitStore, RateLimiter, get_rate_limiter  # noqa: E402
from realty.core.security import create_session_token  # noqa: E402
from realty.db.session import get_session  # noqa: E402
from realty.main import app  # noqa: E402
from realty.models.user import User, UserRole  # noqa: E402
from realty.schemas.user import UserCreate  # noqa: E402
from realty.services.activity_service import ActivityLogger, get_activity_logger  # noqa: E402
from realty.services.user_service import UserService  # noqa: E402

AGENT_PASSWORD = "agentpassword123"
WRITER_PASSWORD = "writerpassword123"
ADMIN_PASSWORD = "adminpassword123"


@pytest.fixture(name="engine")
def engine_fixture() -> Generator[Engine, None, None]:
    """
    Create a test database engine.
    Uses an in-memory SQLite database for fast tests.
    """
    from realty.models import activity, blog_post, listing, user  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine: Engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(name="activity_logger")
def activity_logger_fixture(engine: Engine) -> ActivityLogger:
    """Activity logger writing to the test database."""
    return ActivityLogger(session_factory=lambda: Session(engine))


@pytest.fixture(name="rate_limiter")
def rate_limiter_fixture() -> RateLimiter:
    """A fresh limiter per test so counts never leak between tests."""
    return RateLimiter(InMemoryRateLimitStore())


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    activity_logger: ActivityLogger,
    rate_limiter: RateLimiter,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    Redirects are not followed so tests can assert on them.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_activity_logger] = lambda: activity_logger
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _create_user(session: Session, email: str, name: str, password: str, role: UserRole) -> User:
    return UserService.create(session, UserCreate(email=email, name=name, password=password), role=role)


@pytest.fixture(name="agent_user")
def agent_user_fixture(session: Session) -> User:
    return _create_user(session, "agent@example.com", "Alice Agent", AGENT_PASSWORD, UserRole.AGENT)


@pytest.fixture(name="writer_user")
def writer_user_fixture(session: Session) -> User:
    return _create_user(session, "writer@example.com", "Wes Writer", WRITER_PASSWORD, UserRole.WRITER)


@pytest.fixture(name="admin_user")
def admin_user_fixture(session: Session) -> User:
    return _create_user(session, "admin@example.com", "Ada Admin", ADMIN_PASSWORD, UserRole.ADMIN)


def token_for(user: User, **overrides: Any) -> str:
    """Session token for ``user``; keyword overrides go to create_session_token."""
    return create_session_token(user.id, user.role, email=user.email, name=user.name, **overrides)


def raw_token(claims: dict[str, Any]) -> str:
    """Sign arbitrary claims, bypassing role normalization."""
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture(name="sign_in")
def sign_in_fixture(client: TestClient) -> Callable[..., TestClient]:
    """
    Put a session cookie for ``user`` on the test client.

    Usage: ``sign_in(agent_user)`` or ``sign_in(agent_user, last_activity=...)``.
    """

    def _sign_in(user: User, **overrides: Any) -> TestClient:
        client.cookies.set(settings.SESSION_COOKIE_NAME, token_for(user, **overrides))
        return client

    return _sign_in


@pytest.fixture(name="make_token")
def make_token_fixture() -> Callable[..., str]:
    return token_for


@pytest.fixture(name="make_raw_token")
def make_raw_token_fixture() -> Callable[[dict[str, Any]], str]:
    return raw_token
