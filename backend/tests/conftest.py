"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test database

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route and repository tests
"""

import os

# Settings are read at import time by the router; never point tests at a real DB
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from cmasapp.db.base import Base  # noqa: E402
from cmasapp.infrastructure.database import get_db  # noqa: E402
from cmasapp.models.user import User  # noqa: E402
from cmasapp.main import app  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
async def seed_users(test_db):
    """Insert Mark and Lucius directly into the test DB."""
    users = [
        User(first_name="Mark", last_name="Avrelly", email="ma@gmail.com", age=15, active=True),
        User(first_name="Lucius", last_name="Verus", email="lv@gmail.com", age=18, active=True),
    ]
    test_db.add_all(users)
    await test_db.commit()
    for user in users:
        await test_db.refresh(user)
    return users
