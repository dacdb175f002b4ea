"""Allocation category schemas: request bodies, responses and stats."""

import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.enums import VestingType

T = TypeVar("T")

# Fields that may be omitted from an update but never cleared to null
_NON_NULLABLE_FIELDS = ("category", "tokens", "vesting_type", "is_active")


class AllocationCategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(min_length=1, max_length=100)
    # Range is enforced by the service so the error names the token amount
    tokens: int
    vesting_type: VestingType
    vesting_start_date: datetime | None = None
    vesting_end_date: datetime | None = None
    cliff_period: int | None = Field(default=None, ge=0)  # days
    description: str | None = None
    is_active: bool = True


class AllocationCategoryUpdate(BaseModel):
    """Partial update: only fields present in the request body are merged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    category: str | None = Field(default=None, min_length=1, max_length=100)
    tokens: int | None = None
    vesting_type: VestingType | None = None
    vesting_start_date: datetime | None = None
    vesting_end_date: datetime | None = None
    cliff_period: int | None = Field(default=None, ge=0)
    description: str | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> "AllocationCategoryUpdate":
        for name in _NON_NULLABLE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AllocationCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    asset_id: uuid.UUID
    issuer_id: uuid.UUID
    category: str
    tokens: int
    percentage: float
    vesting_type: VestingType
    vesting_start_date: datetime | None
    vesting_end_date: datetime | None
    cliff_period: int | None
    vesting_duration_days: int | None  # computed
    description: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AllocationValidationStats(BaseModel):
    total_percentage: float
    total_tokens: int
    remaining_percentage: float
    remaining_tokens: int
    is_valid: bool  # remaining_tokens == 0


class AllocationStatsResponse(AllocationValidationStats):
    categories: list[AllocationCategoryResponse]


class DeleteAllocationResponse(BaseModel):
    deleted_allocation: AllocationCategoryResponse
    stats: AllocationValidationStats


class DataResponse(BaseModel, Generic[T]):
    """`{data, message}` envelope used by every allocation endpoint."""

    data: T
    message: str
