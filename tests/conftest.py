import os
import sys
import tempfile
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

sys.path.append(str(Path(__file__).parents[1] / "src"))

ENV_TEST_PATH = Path(__file__).parents[1] / ".env.test"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key, value)


_load_env_file(ENV_TEST_PATH)

# Settings are read at import time, so defaults must be in place first.
_DB_DIR = tempfile.mkdtemp(prefix="spendwise-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DB_DIR}/app.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-spendwise-tests")
os.environ.setdefault("SEED_DEFAULT_CATEGORIES", "false")

from spendwise.core.security import create_access_token  # noqa: E402
from spendwise.db.session import get_db  # noqa: E402
from spendwise.main import app  # noqa: E402
from spendwise.models.base import BaseModel  # noqa: E402
from spendwise.models.category import Category  # noqa: E402
from spendwise.models.user import User  # noqa: E402
from spendwise.services.category import CategoryService  # noqa: E402

# File-backed SQLite so separate sessions get separate connections.
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{_DB_DIR}/test.db",
)

_connect_args = {"timeout": 5} if TEST_DATABASE_URL.startswith("sqlite") else {}
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, connect_args=_connect_args)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def setup_database():
    """Create tables for tests that need the database, and drop them after.

    Not autouse so pure unit tests run without touching a database.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)

    await test_engine.dispose()


@pytest.fixture
async def db_session(setup_database):
    """Provide test database session with fresh connection per test."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def session_factory(setup_database):
    """Factory for extra sessions (concurrent writers)."""
    return TestSessionLocal


async def _create_user(db: AsyncSession, subject: str, email: str, name: str) -> User:
    user = User(subject=subject, email=email, display_name=name, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Primary user (wallet owner in most tests)."""
    return await _create_user(db_session, "idp|alice", "alice@example.com", "Alice")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Second user, used as invitee / member."""
    return await _create_user(db_session, "idp|bob", "bob@example.com", "Bob")


@pytest.fixture
async def third_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "idp|carol", "carol@example.com", "Carol")


def make_auth_headers(user: User) -> dict:
    token = create_access_token(subject=user.subject, email=user.email, display_name=user.display_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(test_user: User) -> dict:
    """Provide authentication headers with valid JWT token."""
    return make_auth_headers(test_user)


@pytest.fixture
async def other_auth_headers(other_user: User) -> dict:
    return make_auth_headers(other_user)


@pytest.fixture
async def categories(db_session: AsyncSession) -> dict[str, Category]:
    """Seeded default categories keyed by name."""
    service = CategoryService(db_session)
    await service.seed_default_categories()
    return {c.name: c for c in await service.category_repo.get_visible(user_id=None)}


@pytest.fixture
async def client(db_session: AsyncSession):
    """Provide test client with database override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
