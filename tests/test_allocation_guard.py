"""Tests for allocation precondition checks."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.assets import Asset
from app.models.enums import VestingType
from app.modules.allocation_category import guard

START = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _asset(token_supply: int | None) -> Asset:
    return Asset(issuer_id=uuid.uuid4(), name="Test Asset", token_supply=token_supply)


class TestAssetChecks:
    def test_missing_asset_is_not_found(self) -> None:
        with pytest.raises(NotFoundError, match="does not belong to this issuer"):
            guard.require_owned_asset(None)

    def test_owned_asset_passes_through(self) -> None:
        asset = _asset(1000)
        assert guard.require_owned_asset(asset) is asset

    @pytest.mark.parametrize("supply", [None, 0, -5])
    def test_undefined_supply_blocks_creation(self, supply: int | None) -> None:
        with pytest.raises(BadRequestError, match="token supply must be defined"):
            guard.require_token_supply(_asset(supply), creating=True)

    @pytest.mark.parametrize("supply", [None, 0])
    def test_undefined_supply_on_existing_categories(self, supply: int | None) -> None:
        with pytest.raises(BadRequestError, match="^Asset token supply not found$"):
            guard.require_token_supply(_asset(supply))

    def test_defined_supply_is_returned(self) -> None:
        assert guard.require_token_supply(_asset(1000)) == 1000


class TestTokenChecks:
    @pytest.mark.parametrize("tokens", [None, 0, -1])
    def test_non_positive_tokens_rejected(self, tokens: int | None) -> None:
        with pytest.raises(BadRequestError, match="Token amount must be greater than 0"):
            guard.require_positive_tokens(tokens)

    def test_amount_above_supply_rejected(self) -> None:
        with pytest.raises(BadRequestError, match="cannot exceed"):
            guard.require_within_supply(1001, 1000)

    def test_amount_equal_to_supply_allowed(self) -> None:
        guard.require_within_supply(1000, 1000)

    def test_last_category_cannot_be_deleted(self) -> None:
        with pytest.raises(BadRequestError, match="Cannot delete the last allocation category"):
            guard.require_not_last_category(1)

    def test_deleting_one_of_several_allowed(self) -> None:
        guard.require_not_last_category(2)


class TestVesting:
    def test_no_vesting_needs_no_dates(self) -> None:
        guard.validate_vesting(VestingType.NO_VESTING, None, None, None)

    def test_no_vesting_still_rejects_inverted_dates(self) -> None:
        with pytest.raises(BadRequestError, match="end date must be after start date"):
            guard.validate_vesting(VestingType.NO_VESTING, START, START - timedelta(days=1), None)

    def test_linear_requires_start_date(self) -> None:
        with pytest.raises(BadRequestError, match="start date is required"):
            guard.validate_vesting(VestingType.LINEAR_VESTING, None, START, None)

    def test_linear_requires_end_date(self) -> None:
        with pytest.raises(BadRequestError, match="end date is required"):
            guard.validate_vesting(VestingType.LINEAR_VESTING, START, None, None)

    def test_end_must_be_strictly_after_start(self) -> None:
        with pytest.raises(BadRequestError, match="end date must be after start date"):
            guard.validate_vesting(VestingType.LINEAR_VESTING, START, START, None)

    def test_linear_with_dates_passes(self) -> None:
        guard.validate_vesting(VestingType.LINEAR_VESTING, START, START + timedelta(days=365), None)

    def test_cliff_requires_period(self) -> None:
        with pytest.raises(BadRequestError, match="Cliff period is required"):
            guard.validate_vesting(
                VestingType.CLIFF_VESTING, START, START + timedelta(days=365), None
            )

    def test_cliff_must_be_shorter_than_duration(self) -> None:
        with pytest.raises(BadRequestError, match="less than total vesting duration"):
            guard.validate_vesting(
                VestingType.CLIFF_VESTING, START, START + timedelta(days=90), 90
            )

    def test_cliff_inside_duration_passes(self) -> None:
        guard.validate_vesting(VestingType.CLIFF_VESTING, START, START + timedelta(days=90), 89)

    def test_naive_and_aware_dates_compare(self) -> None:
        naive_start = datetime(2026, 1, 1)
        guard.validate_vesting(
            VestingType.LINEAR_VESTING, naive_start, START + timedelta(days=30), None
        )
