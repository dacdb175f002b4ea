"""Tests for the allocation category store."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assets import AllocationCategory, Asset
from app.models.enums import VestingType
from app.modules.allocation_category.repository import AllocationCategoryRepository
from tests.conftest import OTHER_ISSUER_ID, SAMPLE_ASSET_ID, SAMPLE_ISSUER_ID

pytestmark = pytest.mark.anyio


def _category(name: str, tokens: int, issuer_id=SAMPLE_ISSUER_ID) -> AllocationCategory:
    return AllocationCategory(
        asset_id=SAMPLE_ASSET_ID,
        issuer_id=issuer_id,
        category=name,
        tokens=tokens,
        percentage=tokens / 10,
        vesting_type=VestingType.NO_VESTING,
    )


async def test_count_is_scoped_to_issuer(db: AsyncSession, sample_asset: Asset) -> None:
    repo = AllocationCategoryRepository(db)
    await repo.insert(_category("Founders", 600))
    await repo.insert(_category("Public", 400))
    await repo.insert(_category("Stray", 1, issuer_id=OTHER_ISSUER_ID))

    assert await repo.count_by_asset(SAMPLE_ASSET_ID, SAMPLE_ISSUER_ID) == 2
    assert await repo.count_by_asset(SAMPLE_ASSET_ID, OTHER_ISSUER_ID) == 1


async def test_update_many_writes_given_rows(db: AsyncSession, sample_asset: Asset) -> None:
    repo = AllocationCategoryRepository(db)
    founders = await repo.insert(_category("Founders", 600))
    public = await repo.insert(_category("Public", 400))
    await db.commit()

    founders.tokens, public.tokens = 500, 500
    await repo.update_many([founders, public])
    await db.commit()

    listed = await repo.list_by_asset(SAMPLE_ASSET_ID, SAMPLE_ISSUER_ID)
    assert {c.category: c.tokens for c in listed} == {"Founders": 500, "Public": 500}
    assert all(c.version == 2 for c in listed)


async def test_update_many_with_no_rows_is_noop(db: AsyncSession, sample_asset: Asset) -> None:
    repo = AllocationCategoryRepository(db)
    await repo.update_many([])

    assert await repo.count_by_asset(SAMPLE_ASSET_ID, SAMPLE_ISSUER_ID) == 0
