"""Global test configuration and fixtures for the AI Dreams API."""

from collections.abc import AsyncGenerator
from typing import Callable
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from asgi_lifespan import LifespanManager
from fakeredis import FakeAsyncRedis, FakeServer
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from aidreams.database.models import Base
from aidreams.modules.user.tokens import issue_access_token

from tests.factories import CommunityApiKeyFactory, CoverFactory

TEST_JWT_SECRET = "test-jwt-secret-key-for-testing-only"
TEST_BASE_URL = "http://test-aidreams-api"


@pytest.fixture
def api_key_factory():
    return CommunityApiKeyFactory


@pytest.fixture
def cover_factory():
    return CoverFactory


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Pin auth settings and keep real provider keys out of tests."""
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("STABLE_DIFFUSION_API_KEY", raising=False)


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Fresh SQLite database per test, with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'aidreams-test.db'}",
        echo=False,
        # concurrent writers wait on the file lock instead of failing
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session_factory):
    """FastAPI application bound to the per-test database."""
    from aidreams.main import app

    async with LifespanManager(app):
        app.state.session_factory = session_factory
        app.state.redis = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
        yield app
    app.dependency_overrides.clear()


@pytest.fixture
def test_user_id() -> UUID:
    return uuid4()


@pytest.fixture
def token_factory() -> Callable[[UUID], str]:
    def create_token(user_id: UUID, email: str = "dreamer@example.com") -> str:
        return issue_access_token(user_id, email)

    return create_token


@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client without credentials."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url=TEST_BASE_URL
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def authorized_client(
    app: FastAPI, test_user_id: UUID, token_factory
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as test_user_id."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=TEST_BASE_URL,
        headers={"Authorization": f"Bearer {token_factory(test_user_id)}"},
    ) as ac:
        yield ac


@pytest.fixture
def client_factory(app: FastAPI, token_factory):
    """Factory for HTTP clients acting as other users."""

    def create_client_for_user(user_id: UUID) -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url=TEST_BASE_URL,
            headers={"Authorization": f"Bearer {token_factory(user_id)}"},
        )

    return create_client_for_user
