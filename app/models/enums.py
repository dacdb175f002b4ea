"""PostgreSQL native enums for all domain models."""

import enum


# ── Allocation categories ────────────────────────────────────────────────────


class VestingType(str, enum.Enum):
    NO_VESTING = "NO_VESTING"
    LINEAR_VESTING = "LINEAR_VESTING"
    CLIFF_VESTING = "CLIFF_VESTING"
