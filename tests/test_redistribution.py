"""Tests for the pure token redistribution functions."""

import random

import pytest

from app.modules.allocation_category.redistribution import (
    InfeasibleRedistribution,
    compute_percentage,
    redistribute_for_insert,
    redistribute_for_update,
    redistribution_order,
)


class TestComputePercentage:
    def test_exact_share(self) -> None:
        assert compute_percentage(200, 1000) == 20.0

    def test_rounds_to_eight_places(self) -> None:
        assert compute_percentage(1, 3) == 33.33333333
        assert compute_percentage(2, 3) == 66.66666667

    def test_half_rounds_away_from_zero(self) -> None:
        # 1 / 2e10 * 100 == 0.000000005 exactly
        assert compute_percentage(1, 20_000_000_000) == 0.00000001
        assert compute_percentage(-1, 20_000_000_000) == -0.00000001

    def test_zero_supply_is_zero_percent(self) -> None:
        assert compute_percentage(10, 0) == 0.0


class TestRedistributionOrder:
    def test_largest_first_ties_by_id(self) -> None:
        snapshot = [("b", 10), ("c", 50), ("a", 10)]
        assert redistribution_order(snapshot) == [("c", 50), ("a", 10), ("b", 10)]


class TestRedistributeForInsert:
    def test_no_existing_categories(self) -> None:
        assert redistribute_for_insert(1000, [], 200) == {}

    def test_single_sibling_scales_into_remaining_pool(self) -> None:
        # Founders(200) makes room for Public(300): ratio 700/200 = 3.5
        assert redistribute_for_insert(1000, [("founders", 200)], 300) == {"founders": 700}

    def test_positive_discrepancy_goes_to_largest_first(self) -> None:
        # 100 tokens into thirds: floor gives 33 each, one token left over
        plan = redistribute_for_insert(200, [("a", 50), ("b", 50), ("c", 50)], 100)
        assert plan == {"a": 34, "b": 33, "c": 33}
        assert sum(plan.values()) == 100

    def test_floor_keeps_every_category_at_one_token(self) -> None:
        plan = redistribute_for_insert(1000, [("big", 990), ("tiny", 10)], 900)
        assert plan["tiny"] >= 1
        assert sum(plan.values()) == 100

    def test_negative_discrepancy_taken_from_categories_above_floor(self) -> None:
        # Ratio 3/1000 floors the small ones to 0, clamped to 1 each
        plan = redistribute_for_insert(
            1000, [("a", 997), ("b", 1), ("c", 1), ("d", 1)], 996
        )
        assert plan == {"a": 1, "b": 1, "c": 1, "d": 1}

    def test_pool_smaller_than_category_count_is_infeasible(self) -> None:
        with pytest.raises(InfeasibleRedistribution):
            redistribute_for_insert(10, [("a", 4), ("b", 3), ("c", 3)], 8)

    def test_siblings_without_tokens_are_infeasible(self) -> None:
        with pytest.raises(InfeasibleRedistribution):
            redistribute_for_insert(10, [("a", 0), ("b", 0)], 5)

    def test_rejects_non_positive_amount(self) -> None:
        with pytest.raises(ValueError):
            redistribute_for_insert(1000, [("a", 1000)], 0)

    @pytest.mark.parametrize("seed", range(25))
    def test_sum_always_matches_supply(self, seed: int) -> None:
        rng = random.Random(seed)
        supply = rng.randint(50, 1_000_000)
        count = rng.randint(1, 12)
        weights = [rng.randint(1, 1000) for _ in range(count)]
        existing = [(f"cat-{i}", max(1, supply * w // sum(weights))) for i, w in enumerate(weights)]
        new_amount = rng.randint(1, supply - count)

        plan = redistribute_for_insert(supply, existing, new_amount)

        assert sum(plan.values()) + new_amount == supply
        assert min(plan.values()) >= 1


class TestRedistributeForUpdate:
    def test_unchanged_amount_is_noop(self) -> None:
        assert redistribute_for_update(1000, [("a", 700)], 300, 300) == {}

    def test_increase_shrinks_others(self) -> None:
        # Public 300 -> 500 with Founders(700) as the only sibling
        assert redistribute_for_update(1000, [("founders", 700)], 300, 500) == {"founders": 500}

    def test_increase_settles_rounding(self) -> None:
        plan = redistribute_for_update(1000, [("a", 450), ("b", 300), ("c", 150)], 100, 101)
        assert sum(plan.values()) == 899
        assert plan == {"a": 450, "b": 300, "c": 149}

    def test_decrease_distributes_freed_tokens_proportionally(self) -> None:
        plan = redistribute_for_update(1000, [("a", 600), ("b", 200)], 200, 100)
        assert plan == {"a": 675, "b": 225}

    def test_decrease_leftover_goes_one_token_at_a_time(self) -> None:
        plan = redistribute_for_update(100, [("a", 30), ("b", 30), ("c", 30)], 10, 8)
        assert plan == {"a": 31, "b": 31, "c": 30}

    def test_decrease_with_empty_siblings_spreads_evenly(self) -> None:
        plan = redistribute_for_update(100, [("a", 0), ("b", 0)], 100, 97)
        assert plan == {"a": 2, "b": 1}

    def test_no_siblings_is_noop(self) -> None:
        assert redistribute_for_update(1000, [], 1000, 400) == {}

    def test_increase_to_full_supply_with_siblings_is_infeasible(self) -> None:
        with pytest.raises(InfeasibleRedistribution):
            redistribute_for_update(1000, [("a", 500)], 500, 1000)

    @pytest.mark.parametrize("seed", range(25))
    def test_sum_always_matches_supply(self, seed: int) -> None:
        rng = random.Random(1000 + seed)
        supply = rng.randint(100, 500_000)
        count = rng.randint(2, 10)
        cuts = sorted(rng.sample(range(1, supply), count - 1))
        amounts = [b - a for a, b in zip([0, *cuts], [*cuts, supply])]
        target, others = amounts[0], [(f"cat-{i}", t) for i, t in enumerate(amounts[1:])]
        new_amount = rng.randint(1, supply - len(others))

        plan = redistribute_for_update(supply, others, target, new_amount)

        if new_amount == target:
            assert plan == {}
        else:
            assert sum(plan.values()) + new_amount == supply
            assert min(plan.values()) >= 1
