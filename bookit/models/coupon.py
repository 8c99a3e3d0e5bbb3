"""Coupon model: discount codes with usage limits."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookit.database import Base, StorageKeyMixin, TimestampMixin


class CouponType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(StorageKeyMixin, TimestampMixin, Base):
    """A percentage or fixed-amount discount redeemable a limited number of times."""

    __tablename__ = "coupons"

    id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_amount: Mapped[int] = mapped_column(Integer, default=0)
    valid_from: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    valid_to: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (UniqueConstraint("tenant_id", "id", name="uq_coupons_tenant_id"),)

    def is_valid(self, now: datetime) -> bool:
        """Return True while the coupon has redemptions left and ``now`` is inside its window."""
        if self.max_amount is not None and (self.used_amount or 0) >= self.max_amount:
            return False
        if self.valid_from is not None and self.valid_from > now:
            return False
        if self.valid_to is not None and self.valid_to < now:
            return False
        return True

    def __repr__(self) -> str:
        return f"<Coupon(id={self.id!r}, type={self.type!r}, used={self.used_amount}/{self.max_amount})>"
