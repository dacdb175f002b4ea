"""Pure deterministic token redistribution. No DB, no I/O.

Every function takes a snapshot of sibling allocations as ``(category_id, tokens)``
pairs and returns the new token count for each sibling. Ratios are exact
fractions, so the only rounding is the ``floor`` on each scaled amount and the
one-token discrepancy correction that follows it.
"""

import math
from collections.abc import Hashable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

CategoryId = Hashable
Snapshot = Sequence[tuple[CategoryId, int]]

MIN_TOKENS_PER_CATEGORY = 1

_PERCENT_QUANTUM = Decimal("0.00000001")  # 8 decimal places


class InfeasibleRedistribution(ValueError):
    """The siblings cannot absorb the requested change without breaking the floor."""


def compute_percentage(tokens: int, total_supply: int) -> float:
    """tokens / total_supply * 100, rounded half away from zero to 8 dp."""
    if total_supply <= 0:
        return 0.0
    value = Decimal(tokens) * 100 / Decimal(total_supply)
    return float(value.quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_UP))


def redistribution_order(snapshot: Snapshot) -> list[tuple[CategoryId, int]]:
    """Largest allocation first; ties broken by category id."""
    return sorted(snapshot, key=lambda item: (-item[1], str(item[0])))


def _settle_discrepancy(amounts: list[int], discrepancy: int) -> None:
    """Nudge amounts one token at a time until they absorb ``discrepancy``."""
    if not amounts:
        return

    while discrepancy < 0:
        progressed = False
        for index, amount in enumerate(amounts):
            if discrepancy == 0:
                break
            if amount > MIN_TOKENS_PER_CATEGORY:
                amounts[index] -= 1
                discrepancy += 1
                progressed = True
        if not progressed:
            raise InfeasibleRedistribution(
                "Every remaining category is already at the 1 token minimum"
            )

    index = 0
    while discrepancy > 0:
        amounts[index % len(amounts)] += 1
        discrepancy -= 1
        index += 1


def _scale_to_pool(snapshot: Snapshot, pool: int) -> dict[CategoryId, int]:
    ordered = redistribution_order(snapshot)
    if not ordered:
        return {}

    if pool < MIN_TOKENS_PER_CATEGORY * len(ordered):
        raise InfeasibleRedistribution(
            f"Only {max(pool, 0)} tokens would remain for {len(ordered)} other "
            f"categories; each must keep at least {MIN_TOKENS_PER_CATEGORY} token"
        )

    current_total = sum(tokens for _, tokens in ordered)
    if current_total <= 0:
        raise InfeasibleRedistribution(
            "Other categories hold no tokens, so there is no proportion to rescale by"
        )

    ratio = Fraction(pool, current_total)
    amounts = [
        max(MIN_TOKENS_PER_CATEGORY, math.floor(tokens * ratio)) for _, tokens in ordered
    ]
    _settle_discrepancy(amounts, pool - sum(amounts))

    return {category_id: amount for (category_id, _), amount in zip(ordered, amounts)}


def redistribute_for_insert(
    total_supply: int,
    existing: Snapshot,
    new_token_amount: int,
) -> dict[CategoryId, int]:
    """Carve ``new_token_amount`` out of the supply for a new category.

    Existing categories are rescaled into ``total_supply - new_token_amount``,
    each keeping at least one token. Returns the new amount per existing id;
    empty when there are no existing categories.
    """
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    if new_token_amount <= 0:
        raise ValueError("new_token_amount must be positive")
    if not existing:
        return {}

    return _scale_to_pool(existing, total_supply - new_token_amount)


def redistribute_for_update(
    total_supply: int,
    others: Snapshot,
    current_amount: int,
    new_amount: int,
) -> dict[CategoryId, int]:
    """Rebalance ``others`` after one category moves from current to new amount.

    Growth of the target shrinks the others into ``total_supply - new_amount``.
    Shrinkage hands the freed tokens back to the others in proportion to their
    current holdings, leftovers one token at a time.
    """
    if total_supply <= 0:
        raise ValueError("total_supply must be positive")
    if new_amount <= 0:
        raise ValueError("new_amount must be positive")

    token_difference = new_amount - current_amount
    if token_difference == 0 or not others:
        return {}

    if token_difference > 0:
        return _scale_to_pool(others, total_supply - new_amount)

    ordered = redistribution_order(others)
    additional_tokens = -token_difference
    current_total = sum(tokens for _, tokens in ordered)

    if current_total > 0:
        additions = [
            math.floor(Fraction(tokens * additional_tokens, current_total))
            for _, tokens in ordered
        ]
    else:
        additions = [0] * len(ordered)
    _settle_discrepancy(additions, additional_tokens - sum(additions))

    return {
        category_id: tokens + addition
        for (category_id, tokens), addition in zip(ordered, additions)
    }
