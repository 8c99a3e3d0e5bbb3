"""Pydantic v2 schemas for coupons."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CouponSnapshot(BaseModel):
    """Coupon state recorded on a booking, without storage keys."""

    id: str
    tenant_id: str
    description: str | None = None
    type: str
    discount: Decimal
    max_amount: int | None = None
    used_amount: int = 0
    valid_from: datetime | None = None
    valid_to: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
