"""
Test configuration and fixtures.

Provides:
- Isolated in-memory SQLite database per test (schema from the models)
- A service container with a mocked outbound HTTP transport
- HTTPX AsyncClient against the app built from that container
- Local users with API tokens
"""
import os
from dataclasses import dataclass, field
from typing import AsyncGenerator, Callable, Generator

# Settings() is built at import time and requires a database URL
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from campra.boot.container import ServiceContainer, build_container
from campra.core.config import Settings
from campra.db.base import Base
from campra.db.models import User
from campra.db.session import create_db_engine
from campra.main import create_app
from campra.utils.ids import generate_token


# =============================================================================
# Outbound HTTP
# =============================================================================

@dataclass
class MockHttp:
    """Routes outbound requests by URL (query string ignored)."""

    routes: dict[str, Callable[[httpx.Request], httpx.Response]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url).split("?", 1)[0])
        if route is None:
            return httpx.Response(404, json={"error": "not mocked"})
        return route(request)


@pytest.fixture(scope="function")
def mock_http() -> MockHttp:
    return MockHttp()


# =============================================================================
# Configuration & Database
# =============================================================================

@pytest.fixture(scope="function")
def settings(tmp_path) -> Settings:
    return Settings(
        ENV="test",
        DATABASE_URL="sqlite://",
        URL="https://campra.test",
        HTTP_MAX_ATTEMPTS=1,
        LOCAL_STORAGE_DIR=str(tmp_path / "files"),
        WORKER_POLL_INTERVAL=0.01,
        RELEASE_URL="https://releases.example.com/meta/release.json",
        IFFY_DEFAULT_API_URL="https://iffy.example.com/api/v1/ingest",
    )


@pytest.fixture(scope="function")
def db_engine(settings: Settings):
    """Fresh in-memory database with the full model schema."""
    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def container(settings: Settings, db_engine, mock_http: MockHttp) -> Generator[ServiceContainer, None, None]:
    container = build_container(
        settings,
        engine=db_engine,
        http_transport=httpx.MockTransport(mock_http.handler),
        worker_id="test",
    )
    yield container
    container.close()


@pytest.fixture(scope="function")
def db(container: ServiceContainer) -> Generator[Session, None, None]:
    """
    Session on the test database.

    Requests and the job queue open their own sessions on the same
    connection, so commit before calling them and expire before re-reading.
    """
    session = container.session_factory()
    yield session
    session.close()


# =============================================================================
# Users
# =============================================================================

@dataclass
class TestAuth:
    """A local user and the headers that authenticate as them."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def make_user(db: Session, username: str, **flags) -> TestAuth:
    token = generate_token()
    user = User(
        username=username,
        username_lower=username.lower(),
        token=token,
        **flags,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return TestAuth(user=user, token=token)


@pytest.fixture(scope="function")
def test_auth(db: Session) -> TestAuth:
    """Plain local user."""
    return make_user(db, "alice")


@pytest.fixture(scope="function")
def moderator_auth(db: Session) -> TestAuth:
    return make_user(db, "mod", is_moderator=True)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(container: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against an app built from the test container."""
    async with AsyncClient(
        transport=ASGITransport(app=create_app(container)),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture(scope="function")
def user_factory(db: Session) -> Callable[..., TestAuth]:
    """Create additional local users: user_factory("bob", is_teacher=True)."""
    def _make(username: str, **flags) -> TestAuth:
        return make_user(db, username, **flags)

    return _make
