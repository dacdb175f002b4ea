"""Asset models: Asset (token pool owner) and AllocationCategory."""

import math
import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, SoftDeleteMixin, as_utc
from app.models.enums import VestingType


class Asset(BaseModel, SoftDeleteMixin):
    """Tokenized asset. Owned by the asset-management module; read-only here."""

    __tablename__ = "assets"
    __table_args__ = (
        Index("ix_assets_issuer_id", "issuer_id"),
    )

    issuer_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    token_symbol: Mapped[str | None] = mapped_column(String(20))
    # 0 / NULL means the token supply has not been defined yet
    token_supply: Mapped[int | None] = mapped_column(BigInteger, default=0)

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, name={self.name!r}, token_supply={self.token_supply})>"


class AllocationCategory(BaseModel):
    """One named slice of an asset's token supply."""

    __tablename__ = "allocation_categories"
    __table_args__ = (
        Index("ix_allocation_categories_asset_id", "asset_id"),
        Index("ix_allocation_categories_issuer_id_asset_id", "issuer_id", "asset_id"),
        CheckConstraint("tokens >= 0", name="ck_allocation_categories_tokens_non_negative"),
    )

    asset_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    )
    issuer_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    tokens: Mapped[int] = mapped_column(BigInteger, nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    vesting_type: Mapped[VestingType] = mapped_column(nullable=False)
    vesting_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    vesting_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cliff_period: Mapped[int | None] = mapped_column(Integer)  # days
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(
        default=True, server_default="true", nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def vesting_duration_days(self) -> int | None:
        if self.vesting_start_date is None or self.vesting_end_date is None:
            return None
        seconds = (as_utc(self.vesting_end_date) - as_utc(self.vesting_start_date)).total_seconds()
        return math.ceil(seconds / 86_400)

    def __repr__(self) -> str:
        return (
            f"<AllocationCategory(id={self.id}, category={self.category!r}, "
            f"tokens={self.tokens})>"
        )
