"""Service test fixtures — async DB sessions, seeded rooms, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - file_session_factory gives a file-backed database whose sessions use
      separate connections (needed for real write contention)
    - db_manager replaced by one bound to the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the unique-key behaviour
      the projection relies on is identical to PostgreSQL
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from roomstate.db.base import Base
from roomstate.infrastructure.database import DatabaseSessionManager
from roomstate.models.profile import UserProfile
import roomstate.infrastructure.database as db_module
import roomstate.models  # noqa: F401

from tests.services.room_fixtures import ALICE, ROOM_ID, add_join_rules


async def _create_engine(url: str):
    engine = create_async_engine(url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
async def test_engine():
    engine = await _create_engine("sqlite+aiosqlite:///:memory:")
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
async def file_session_factory(tmp_path):
    """Sessions over a file database, one connection per session."""
    engine = await _create_engine(f"sqlite+aiosqlite:///{tmp_path / 'roomstate.db'}")
    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    await engine.dispose()


@pytest.fixture
async def public_room(test_db):
    await add_join_rules(test_db, ROOM_ID, "public")
    return ROOM_ID


@pytest.fixture
async def invite_room(test_db):
    await add_join_rules(test_db, ROOM_ID, "invite")
    return ROOM_ID


@pytest.fixture
async def alice_profile(test_db):
    profile = UserProfile(
        user_id=ALICE, displayname="Alice", avatar_url="mxc://test.example.org/alice",
    )
    test_db.add(profile)
    await test_db.commit()
    return profile


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with db_manager bound to the test engine."""
    from roomstate.main import app

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager
