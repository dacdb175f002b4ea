"""SQLAlchemy models package: import all models so Base.metadata is populated."""

from app.models.assets import AllocationCategory, Asset
from app.models.base import BaseModel, SoftDeleteMixin
from app.models.enums import VestingType

__all__ = [
    "AllocationCategory",
    "Asset",
    "BaseModel",
    "SoftDeleteMixin",
    "VestingType",
]
