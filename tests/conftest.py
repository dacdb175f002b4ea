"""Shared test fixtures for the allocation API test suite."""

import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import Base
from app.models.assets import Asset

import app.models  # noqa: F401  register all models so Base.metadata is populated


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """File-backed SQLite database, fresh per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


# ── Sample data fixtures ──────────────────────────────────────────────────

# SQLite gives UUID columns numeric affinity; all-digit hex would be stored as an int
SAMPLE_ISSUER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
OTHER_ISSUER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b2")
SAMPLE_ASSET_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")


@pytest.fixture
async def sample_asset(db: AsyncSession) -> Asset:
    """Asset with a 1000 token supply owned by the sample issuer."""
    asset = Asset(
        id=SAMPLE_ASSET_ID,
        issuer_id=SAMPLE_ISSUER_ID,
        name="Marina Tower",
        token_symbol="MTWR",
        token_supply=1000,
    )
    db.add(asset)
    await db.commit()
    return asset


@pytest.fixture
async def unsupplied_asset(db: AsyncSession) -> Asset:
    """Asset whose token supply has not been defined yet."""
    asset = Asset(
        issuer_id=SAMPLE_ISSUER_ID,
        name="Harbour Lofts",
        token_supply=0,
    )
    db.add(asset)
    await db.commit()
    return asset
