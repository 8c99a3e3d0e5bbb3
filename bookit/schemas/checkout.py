"""Pydantic v2 request/response schemas for checkout endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bookit.timeutils import to_local_naive

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _TimeWindow(BaseModel):
    time_begin: datetime | None = None
    time_end: datetime | None = None

    @field_validator("time_begin", "time_end")
    @classmethod
    def _to_wall_clock(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)

    @model_validator(mode="after")
    def check_times(self):
        """If both times are provided, validate time_end > time_begin."""
        if self.time_begin is not None and self.time_end is not None and self.time_end <= self.time_begin:
            raise ValueError("time_end must be after time_begin")
        return self


class BookableItemRequest(BaseModel):
    """One requested line of a bundle."""

    bookable_id: str = Field(..., min_length=1)
    amount: int = Field(1, ge=1)


class ItemValidationRequest(_TimeWindow):
    """Price preview for a single item; nothing is persisted."""

    bookable_id: str = Field(..., min_length=1)
    amount: int = Field(1, ge=1)
    coupon_code: str | None = None


class CheckoutRequest(_TimeWindow):
    """Schema for checking out a bundle of bookable items."""

    bookable_items: list[BookableItemRequest] = Field(default_factory=list)
    coupon_code: str | None = None
    name: str | None = None
    company: str | None = None
    street: str | None = None
    zip_code: str | None = None
    location: str | None = None
    mail: str | None = None
    phone: str | None = None
    comment: str | None = None


class ManualBookingRequest(CheckoutRequest):
    """Administrative booking. Supplied flags override the derived ones."""

    is_committed: bool | None = None
    is_payed: bool | None = None
    is_rejected: bool | None = None
    payment_method: str | None = None
    price_eur: Decimal | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ItemPriceResponse(BaseModel):
    regular_price_eur: Decimal
    regular_gross_price_eur: Decimal
    user_price_eur: Decimal
    user_gross_price_eur: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingItemResponse(BaseModel):
    bookable_id: str
    amount: int
    bookable_used: dict
    regular_price_eur: Decimal
    regular_gross_price_eur: Decimal
    user_price_eur: Decimal
    user_gross_price_eur: Decimal

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Booking returned from checkout, simulated or stored."""

    id: str
    tenant_id: str
    assigned_user_id: str | None = None
    time_begin: datetime | None = None
    time_end: datetime | None = None
    time_created: datetime
    bookable_items: list[BookingItemResponse]
    coupon_code: str | None = None
    name: str | None = None
    company: str | None = None
    street: str | None = None
    zip_code: str | None = None
    location: str | None = None
    mail: str | None = None
    phone: str | None = None
    comment: str | None = None
    price_eur: Decimal
    vat_included_eur: Decimal
    is_committed: bool
    is_payed: bool
    is_rejected: bool
    payment_method: str | None = None
    hooks: list
    locker_info: list
    attachment_status: list
    coupon_used: dict | None = None

    model_config = ConfigDict(from_attributes=True)
