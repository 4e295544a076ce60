"""
Shared fixtures: an in-memory SQLite database per test, a controllable clock
for token expiry, and an in-process HTTP client bound to the app.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.jwt import TokenConfig, TokenService
from config.settings import Settings
from database.models import Base
from main import create_app

TEST_SECRET = "test-signing-secret"


class FakeClock:
    """Callable clock whose time only moves when a test advances it."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(TokenConfig(secret=TEST_SECRET), clock=clock)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def make_app(session_factory, token_service):
    """Build an app from test settings plus *overrides*, on the test database."""

    def _make(**overrides):
        fields = {"jwt_secret": TEST_SECRET, "bcrypt_rounds": 4, **overrides}
        app = create_app(Settings(**fields), token_service=token_service)
        # Share the per-test in-memory database instead of the app's own engine.
        app.state.session_factory = session_factory
        return app

    return _make


@pytest_asyncio.fixture
async def client(make_app):
    async with _client(make_app()) as c:
        yield c


@pytest_asyncio.fixture
async def strict_client(make_app):
    """Client for an app that enforces task ownership on update/delete."""
    async with _client(make_app(enforce_task_ownership=True)) as c:
        yield c
