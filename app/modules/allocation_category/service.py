"""Allocation category service: transactional redistribution of an asset's supply.

Each mutating call reads a snapshot of the asset's categories, runs the pure
redistribution in memory and writes every affected row on the caller's
session. Nothing is committed here: the request-scoped session commits when the
handler returns and rolls back on any exception, so a failure part-way through
leaves no partially rescaled categories behind.
"""

import uuid
from collections.abc import Callable, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.assets import AllocationCategory, Asset
from app.modules.allocation_category import guard, redistribution
from app.modules.allocation_category.locks import asset_lock
from app.modules.allocation_category.repository import AllocationCategoryRepository
from app.modules.allocation_category.schemas import (
    AllocationCategoryCreate,
    AllocationCategoryResponse,
    AllocationCategoryUpdate,
    AllocationStatsResponse,
    AllocationValidationStats,
    DeleteAllocationResponse,
)

logger = structlog.get_logger()

_VESTING_FIELDS = ("vesting_type", "vesting_start_date", "vesting_end_date", "cliff_period")


def _snapshot(categories: Sequence[AllocationCategory]) -> list[tuple[uuid.UUID, int]]:
    return [(c.id, c.tokens) for c in categories]


def _plan(compute: Callable[[], dict[uuid.UUID, int]]) -> dict[uuid.UUID, int]:
    try:
        return compute()
    except redistribution.InfeasibleRedistribution as exc:
        raise BadRequestError(str(exc)) from exc


def _apply_plan(
    categories: Sequence[AllocationCategory],
    plan: dict[uuid.UUID, int],
    total_supply: int,
) -> list[AllocationCategory]:
    """Write planned token counts onto loaded rows; returns the rows that changed."""
    changed: list[AllocationCategory] = []
    for category in categories:
        if category.id not in plan:
            continue
        category.tokens = plan[category.id]
        category.percentage = redistribution.compute_percentage(category.tokens, total_supply)
        changed.append(category)
    return changed


def _validation_stats(
    categories: Sequence[AllocationCategory], total_supply: int
) -> AllocationValidationStats:
    total_tokens = sum(c.tokens for c in categories)
    remaining_tokens = total_supply - total_tokens
    return AllocationValidationStats(
        total_percentage=redistribution.compute_percentage(total_tokens, total_supply),
        total_tokens=total_tokens,
        remaining_percentage=redistribution.compute_percentage(remaining_tokens, total_supply),
        remaining_tokens=remaining_tokens,
        is_valid=remaining_tokens == 0,
    )


def _by_percentage(categories: Sequence[AllocationCategory]) -> list[AllocationCategory]:
    return sorted(categories, key=lambda c: (-c.percentage, str(c.id)))


async def _locked_asset(
    repo: AllocationCategoryRepository, asset_id: uuid.UUID, issuer_id: uuid.UUID
) -> Asset | None:
    return await repo.get_asset(asset_id, issuer_id, for_update=True)


async def create_allocation_category(
    db: AsyncSession,
    asset_id: uuid.UUID,
    issuer_id: uuid.UUID,
    body: AllocationCategoryCreate,
) -> AllocationCategoryResponse:
    """Create a category and rescale the asset's existing categories around it."""
    repo = AllocationCategoryRepository(db)

    async with asset_lock(asset_id):
        asset = guard.require_owned_asset(await _locked_asset(repo, asset_id, issuer_id))
        total_supply = guard.require_token_supply(asset, creating=True)
        requested = guard.require_positive_tokens(body.tokens)
        guard.require_within_supply(requested, total_supply)
        guard.validate_vesting(
            body.vesting_type,
            body.vesting_start_date,
            body.vesting_end_date,
            body.cliff_period,
        )

        existing = await repo.list_by_asset(asset_id, issuer_id)
        plan = _plan(
            lambda: redistribution.redistribute_for_insert(
                total_supply, _snapshot(existing), requested
            )
        )

        try:
            rescaled = _apply_plan(existing, plan, total_supply)
            await repo.update_many(rescaled)

            allocation = AllocationCategory(
                **body.model_dump(),
                asset_id=asset_id,
                issuer_id=issuer_id,
                percentage=redistribution.compute_percentage(requested, total_supply),
            )
            await repo.insert(allocation)
        except StaleDataError as exc:
            raise ConflictError(
                "Allocation categories changed during the update, please retry"
            ) from exc

    logger.info(
        "allocation_category.created",
        asset_id=str(asset_id),
        allocation_id=str(allocation.id),
        tokens=requested,
        rescaled_siblings=len(rescaled),
    )
    return AllocationCategoryResponse.model_validate(allocation)


async def list_allocations_by_asset(
    db: AsyncSession,
    asset_id: uuid.UUID,
    issuer_id: uuid.UUID,
) -> list[AllocationCategoryResponse]:
    """All categories of an asset, largest percentage first."""
    repo = AllocationCategoryRepository(db)
    if await repo.get_asset(asset_id, issuer_id) is None:
        raise NotFoundError("Asset not found")

    categories = await repo.list_by_asset(asset_id, issuer_id, order_by_percentage=True)
    if not categories:
        raise NotFoundError("No allocation categories found for this asset")
    return [AllocationCategoryResponse.model_validate(c) for c in _by_percentage(categories)]


async def update_allocation_category(
    db: AsyncSession,
    allocation_id: uuid.UUID,
    issuer_id: uuid.UUID,
    body: AllocationCategoryUpdate,
) -> AllocationCategoryResponse:
    """Merge the provided fields; a token change rebalances the siblings first."""
    repo = AllocationCategoryRepository(db)
    allocation = await repo.get_owned(allocation_id, issuer_id)
    if allocation is None:
        raise NotFoundError("Allocation category not found")

    changes = body.changes()
    asset_id = allocation.asset_id

    async with asset_lock(asset_id):
        asset = await _locked_asset(repo, asset_id, issuer_id)
        # Re-read under the lock; another request may have rescaled or removed it
        allocation = await repo.get_owned(allocation_id, issuer_id)
        if allocation is None:
            raise NotFoundError("Allocation category not found")

        if any(field in changes for field in _VESTING_FIELDS):
            guard.validate_vesting(
                changes.get("vesting_type", allocation.vesting_type),
                changes.get("vesting_start_date", allocation.vesting_start_date),
                changes.get("vesting_end_date", allocation.vesting_end_date),
                changes.get("cliff_period", allocation.cliff_period),
            )

        rescaled: list[AllocationCategory] = []
        try:
            if "tokens" in changes:
                total_supply = guard.require_token_supply(guard.require_owned_asset(asset))
                new_tokens = guard.require_positive_tokens(changes["tokens"])
                guard.require_within_supply(new_tokens, total_supply)

                if new_tokens != allocation.tokens:
                    siblings = await repo.list_by_asset(
                        asset_id, issuer_id, exclude_id=allocation.id
                    )
                    current_tokens = allocation.tokens
                    plan = _plan(
                        lambda: redistribution.redistribute_for_update(
                            total_supply, _snapshot(siblings), current_tokens, new_tokens
                        )
                    )
                    rescaled = _apply_plan(siblings, plan, total_supply)
                    await repo.update_many(rescaled)

                changes["percentage"] = redistribution.compute_percentage(
                    new_tokens, total_supply
                )

            await repo.update(allocation, changes)
        except StaleDataError as exc:
            raise ConflictError(
                "Allocation categories changed during the update, please retry"
            ) from exc

    logger.info(
        "allocation_category.updated",
        asset_id=str(asset_id),
        allocation_id=str(allocation_id),
        fields=sorted(changes),
        rescaled_siblings=len(rescaled),
    )
    return AllocationCategoryResponse.model_validate(allocation)


async def delete_allocation_category(
    db: AsyncSession,
    allocation_id: uuid.UUID,
    issuer_id: uuid.UUID,
) -> DeleteAllocationResponse:
    """Delete a category without redistributing its tokens.

    The freed tokens stay unassigned until a follow-up update; the returned
    stats report them as ``remaining_tokens`` with ``is_valid=False``.
    """
    repo = AllocationCategoryRepository(db)
    allocation = await repo.get_owned(allocation_id, issuer_id)
    if allocation is None:
        raise NotFoundError("Allocation category not found")

    asset_id = allocation.asset_id

    async with asset_lock(asset_id):
        asset = await _locked_asset(repo, asset_id, issuer_id)
        allocation = await repo.get_owned(allocation_id, issuer_id)
        if allocation is None:
            raise NotFoundError("Allocation category not found")

        guard.require_not_last_category(await repo.count_by_asset(asset_id, issuer_id))
        total_supply = guard.require_token_supply(guard.require_owned_asset(asset))

        deleted = AllocationCategoryResponse.model_validate(allocation)
        try:
            await repo.delete(allocation)
        except StaleDataError as exc:
            raise ConflictError(
                "Allocation categories changed during the update, please retry"
            ) from exc

        remaining = await repo.list_by_asset(asset_id, issuer_id)
        stats = _validation_stats(remaining, total_supply)

    logger.info(
        "allocation_category.deleted",
        asset_id=str(asset_id),
        allocation_id=str(allocation_id),
        freed_tokens=deleted.tokens,
        remaining_tokens=stats.remaining_tokens,
    )
    return DeleteAllocationResponse(deleted_allocation=deleted, stats=stats)


async def get_allocation_stats(
    db: AsyncSession,
    asset_id: uuid.UUID,
    issuer_id: uuid.UUID,
) -> AllocationStatsResponse:
    """Totals against the asset's supply plus the categories by percentage."""
    repo = AllocationCategoryRepository(db)
    asset = guard.require_owned_asset(await repo.get_asset(asset_id, issuer_id))
    total_supply = guard.require_token_supply(asset)

    categories = await repo.list_by_asset(asset_id, issuer_id, order_by_percentage=True)
    stats = _validation_stats(categories, total_supply)
    return AllocationStatsResponse(
        **stats.model_dump(),
        categories=[
            AllocationCategoryResponse.model_validate(c) for c in _by_percentage(categories)
        ],
    )
