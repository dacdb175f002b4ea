"""Allocation category store.

All methods run on the caller's session, so every read and write made during
one orchestrator call shares a single transaction.
"""

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.tenant import issuer_filter
from app.models.assets import AllocationCategory, Asset


class AllocationCategoryRepository:
    """Repository for assets' allocation categories."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_asset(
        self,
        asset_id: uuid.UUID,
        issuer_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Asset | None:
        """Fetch an issuer's asset; ``for_update`` row-locks it until commit."""
        stmt = select(Asset).where(Asset.id == asset_id, Asset.is_deleted.is_(False))
        stmt = issuer_filter(stmt, issuer_id, Asset)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get_owned(
        self, allocation_id: uuid.UUID, issuer_id: uuid.UUID
    ) -> AllocationCategory | None:
        stmt = select(AllocationCategory).where(AllocationCategory.id == allocation_id)
        stmt = issuer_filter(stmt, issuer_id, AllocationCategory)
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def list_by_asset(
        self,
        asset_id: uuid.UUID,
        issuer_id: uuid.UUID,
        *,
        exclude_id: uuid.UUID | None = None,
        order_by_percentage: bool = False,
    ) -> list[AllocationCategory]:
        stmt = select(AllocationCategory).where(AllocationCategory.asset_id == asset_id)
        stmt = issuer_filter(stmt, issuer_id, AllocationCategory)
        if exclude_id is not None:
            stmt = stmt.where(AllocationCategory.id != exclude_id)
        if order_by_percentage:
            stmt = stmt.order_by(AllocationCategory.percentage.desc(), AllocationCategory.id)
        else:
            stmt = stmt.order_by(AllocationCategory.tokens.desc(), AllocationCategory.id)
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def count_by_asset(self, asset_id: uuid.UUID, issuer_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(AllocationCategory)
            .where(AllocationCategory.asset_id == asset_id)
        )
        stmt = issuer_filter(stmt, issuer_id, AllocationCategory)
        return int((await self.session.execute(stmt)).scalar_one())

    async def insert(self, record: AllocationCategory) -> AllocationCategory:
        self.session.add(record)
        await self.session.flush()
        return record

    async def update_many(self, records: Sequence[AllocationCategory]) -> None:
        """Write ``records`` (rescaled siblings) to the current transaction."""
        if not records:
            return
        self.session.add_all(records)
        await self.session.flush()

    async def update(self, record: AllocationCategory, patch: dict[str, Any]) -> AllocationCategory:
        for field, value in patch.items():
            setattr(record, field, value)
        await self.session.flush()
        return record

    async def delete(self, record: AllocationCategory) -> None:
        await self.session.delete(record)
        await self.session.flush()
