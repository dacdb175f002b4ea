"""Allocation category API router."""

import uuid

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_issuer
from app.core.database import get_db
from app.modules.allocation_category import service
from app.modules.allocation_category.schemas import (
    AllocationCategoryCreate,
    AllocationCategoryResponse,
    AllocationCategoryUpdate,
    AllocationStatsResponse,
    DataResponse,
    DeleteAllocationResponse,
)
from app.schemas.auth import CurrentIssuer

logger = structlog.get_logger()

router = APIRouter(prefix="/allocation-categories", tags=["allocation-categories"])


@router.post(
    "",
    response_model=DataResponse[AllocationCategoryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_allocation_category(
    body: AllocationCategoryCreate,
    asset_id: uuid.UUID = Query(...),
    current_issuer: CurrentIssuer = Depends(get_current_issuer),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[AllocationCategoryResponse]:
    """Create a category, rescaling the asset's other categories to make room."""
    result = await service.create_allocation_category(
        db, asset_id, current_issuer.issuer_id, body
    )
    await db.commit()
    return DataResponse(data=result, message="Allocation category created successfully")


@router.get("/asset", response_model=DataResponse[list[AllocationCategoryResponse]])
async def list_allocations_by_asset(
    asset_id: uuid.UUID = Query(...),
    current_issuer: CurrentIssuer = Depends(get_current_issuer),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[list[AllocationCategoryResponse]]:
    """List an asset's categories, largest share first."""
    result = await service.list_allocations_by_asset(db, asset_id, current_issuer.issuer_id)
    return DataResponse(data=result, message="Allocations retrieved successfully")


@router.get("/stats", response_model=DataResponse[AllocationStatsResponse])
async def get_allocation_stats(
    asset_id: uuid.UUID = Query(...),
    current_issuer: CurrentIssuer = Depends(get_current_issuer),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[AllocationStatsResponse]:
    """Allocated vs. remaining tokens for an asset."""
    result = await service.get_allocation_stats(db, asset_id, current_issuer.issuer_id)
    return DataResponse(data=result, message="Allocation statistics retrieved successfully")


@router.put("/{allocation_id}", response_model=DataResponse[AllocationCategoryResponse])
async def update_allocation_category(
    allocation_id: uuid.UUID,
    body: AllocationCategoryUpdate,
    current_issuer: CurrentIssuer = Depends(get_current_issuer),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[AllocationCategoryResponse]:
    """Update a category; changing `tokens` rebalances its siblings."""
    result = await service.update_allocation_category(
        db, allocation_id, current_issuer.issuer_id, body
    )
    await db.commit()
    return DataResponse(data=result, message="Allocation category updated successfully")


@router.delete("/{allocation_id}", response_model=DataResponse[DeleteAllocationResponse])
async def delete_allocation_category(
    allocation_id: uuid.UUID,
    current_issuer: CurrentIssuer = Depends(get_current_issuer),
    db: AsyncSession = Depends(get_db),
) -> DataResponse[DeleteAllocationResponse]:
    """Delete a category. Its tokens are not handed back to the others."""
    result = await service.delete_allocation_category(
        db, allocation_id, current_issuer.issuer_id
    )
    await db.commit()
    logger.info(
        "allocation_category.delete.committed",
        allocation_id=str(allocation_id),
        is_valid=result.stats.is_valid,
    )
    return DataResponse(data=result, message="Allocation category deleted successfully")
