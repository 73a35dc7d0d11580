"""
Test infrastructure for the Post API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed in CI.
- StaticPool makes every session share the one in-memory connection;
  a second connection would see an empty database.
- The app's get_db dependency is overridden so every request uses the
  test session factory.
- Tables are created before and dropped after each test.
- Bearer tokens are minted with PyJWT against the configured secret,
  standing in for the external auth service.
"""
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.database import Base, get_db, make_engine
from app.main import app
from app.repositories.post_repository import PostRepository
from app.services.post_service import PostService

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = make_engine(TEST_DATABASE_URL, poolclass=StaticPool)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


def make_token(subject, *, expires_in: timedelta = timedelta(hours=1), secret: str | None = None) -> str:
    payload = {
        "sub": str(subject),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(
        payload,
        secret or settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for tests that drive the repository or service directly."""
    async with async_session_test() as session:
        yield session


@pytest.fixture
def post_service(db_session: AsyncSession) -> PostService:
    return PostService(PostRepository(db_session))


@pytest.fixture
def auth_headers():
    """Factory: ``auth_headers(user_id)`` -> Authorization header dict."""
    def _headers(user_id: uuid.UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
