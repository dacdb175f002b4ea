"""Precondition checks run before any allocation state is mutated.

Ownership failures are reported as NotFound so that callers cannot discover
assets or categories belonging to other issuers.
"""

import math
from datetime import datetime

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.assets import Asset
from app.models.base import as_utc
from app.models.enums import VestingType


def require_owned_asset(asset: Asset | None) -> Asset:
    if asset is None:
        raise NotFoundError("Asset not found or does not belong to this issuer")
    return asset


def require_token_supply(asset: Asset, *, creating: bool = False) -> int:
    """Return the asset's total supply, which must be a positive integer."""
    supply = asset.token_supply
    if not isinstance(supply, int) or isinstance(supply, bool) or supply <= 0:
        if creating:
            raise BadRequestError(
                "Asset token supply must be defined before creating allocation categories"
            )
        raise BadRequestError("Asset token supply not found")
    return supply


def require_positive_tokens(tokens: int | None) -> int:
    if tokens is None or tokens <= 0:
        raise BadRequestError("Token amount must be greater than 0")
    return tokens


def require_within_supply(tokens: int, total_supply: int) -> None:
    if tokens > total_supply:
        raise BadRequestError(
            f"Token amount ({tokens}) cannot exceed the asset token supply ({total_supply})"
        )


def require_not_last_category(category_count: int) -> None:
    if category_count <= 1:
        raise BadRequestError(
            "Cannot delete the last allocation category. "
            "Asset must have at least one allocation."
        )


def validate_vesting(
    vesting_type: VestingType,
    start: datetime | None,
    end: datetime | None,
    cliff_period: int | None,
) -> None:
    """Check the vesting fields that ``vesting_type`` makes mandatory."""
    if start is not None and end is not None and as_utc(end) <= as_utc(start):
        raise BadRequestError("Vesting end date must be after start date")

    if vesting_type == VestingType.NO_VESTING:
        return

    if start is None:
        raise BadRequestError("Vesting start date is required for linear and cliff vesting")
    if end is None:
        raise BadRequestError("Vesting end date is required for linear and cliff vesting")

    if vesting_type == VestingType.CLIFF_VESTING:
        if not cliff_period:
            raise BadRequestError("Cliff period is required for cliff vesting")
        total_days = math.ceil((as_utc(end) - as_utc(start)).total_seconds() / 86_400)
        if cliff_period >= total_days:
            raise BadRequestError("Cliff period must be less than total vesting duration")
