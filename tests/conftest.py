from __future__ import annotations

from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from orgguard.core.database.engine import build_engine, build_session_factory, init_db
from orgguard.features.organizations.models import OrganizationMember
from orgguard.features.permissions.catalog import default_catalog, ensure_seeded


ORG_A = "01ORGA0000000000000000000A"
ORG_B = "01ORGB0000000000000000000B"


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncEngine:
    # One SQLite file per test keeps catalog and log tables isolated.
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'orgguard.db'}")
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_db(db: AsyncSession) -> AsyncSession:
    await ensure_seeded(db, default_catalog())
    return db


@pytest.fixture
def add_member(db: AsyncSession) -> Callable[[str, str, str], Awaitable[None]]:
    # Memberships are owned by organization management; tests insert them directly.
    async def _add(user_id: str, organization_id: str, role: str) -> None:
        db.add(OrganizationMember(user_id=user_id, organization_id=organization_id, role=role))
        await db.commit()

    return _add
