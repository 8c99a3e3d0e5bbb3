"""Pydantic v2 schemas for bookables and their opening hours."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_CLOCK_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"

# ---------------------------------------------------------------------------
# Opening hours, as stored in Bookable.opening_hours / special_opening_hours
# ---------------------------------------------------------------------------


class OpeningHours(BaseModel):
    """A weekly recurring window. Weekdays count from 0 = Sunday to 6 = Saturday."""

    weekdays: list[int] = Field(default_factory=list)
    start_time: str = Field(..., pattern=_CLOCK_PATTERN)
    end_time: str = Field(..., pattern=_CLOCK_PATTERN)


class SpecialOpeningHours(BaseModel):
    """Hours for one calendar date; ``start_time == end_time`` means closed all day."""

    date: date
    start_time: str = Field(..., pattern=_CLOCK_PATTERN)
    end_time: str = Field(..., pattern=_CLOCK_PATTERN)

    @property
    def is_closed(self) -> bool:
        return self.start_time == self.end_time


class OpeningWindow(BaseModel):
    start_time: str
    end_time: str


class RelatedOpeningHoursResponse(BaseModel):
    """Combined calendar of a bookable and every ancestor it inherits hours from."""

    regular_opening_hours: dict[int, OpeningWindow]
    special_opening_hours: list[SpecialOpeningHours]


# ---------------------------------------------------------------------------
# Snapshot frozen into booking items
# ---------------------------------------------------------------------------


class BookableSnapshot(BaseModel):
    """The bookable as it was at checkout time, without storage keys."""

    id: str
    tenant_id: str
    type: str
    title: str
    description: str | None = None
    owner_user_id: str | None = None
    event_id: str | None = None
    amount: int | None = None
    auto_commit_booking: bool = False
    is_bookable: bool = False
    is_public: bool = False
    is_schedule_related: bool = False
    is_time_period_related: bool = False
    is_opening_hours_related: bool = False
    is_special_opening_hours_related: bool = False
    is_long_range: bool = False
    opening_hours: list = Field(default_factory=list)
    special_opening_hours: list = Field(default_factory=list)
    min_booking_duration: float | None = None
    max_booking_duration: float | None = None
    price_eur: Decimal | None = None
    price_category: str | None = None
    price_value_added_tax: Decimal | None = None
    related_bookable_ids: list = Field(default_factory=list)
    attachments: list = Field(default_factory=list)
    required_fields: list = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
