"""Bookable model: rooms, resources, tickets and event locations."""

import enum
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Float, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bookit.database import Base, StorageKeyMixin, TimestampMixin


class BookableType(str, enum.Enum):
    EVENT_LOCATION = "event-location"
    ROOM = "room"
    RESOURCE = "resource"
    TICKET = "ticket"


class PriceCategory(str, enum.Enum):
    PER_ITEM = "per-item"
    PER_HOUR = "per-hour"
    PER_DAY = "per-day"


class Bookable(StorageKeyMixin, TimestampMixin, Base):
    """A capacity-limited resource that can be reserved.

    ``related_bookable_ids`` links a bookable to the bookables that share its
    capacity: following the list forward yields children, searching the
    tenant for lists containing a bookable yields its parents.
    """

    __tablename__ = "bookables"

    id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), default=BookableType.RESOURCE.value)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Capacity, None = unlimited
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    auto_commit_booking: Mapped[bool] = mapped_column(Boolean, default=False)
    is_bookable: Mapped[bool] = mapped_column(Boolean, default=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)

    # Time constraints
    is_schedule_related: Mapped[bool] = mapped_column(Boolean, default=False)
    is_time_period_related: Mapped[bool] = mapped_column(Boolean, default=False)
    is_opening_hours_related: Mapped[bool] = mapped_column(Boolean, default=False)
    is_special_opening_hours_related: Mapped[bool] = mapped_column(Boolean, default=False)
    is_long_range: Mapped[bool] = mapped_column(Boolean, default=False)
    time_periods: Mapped[list] = mapped_column(JSON, default=list)
    opening_hours: Mapped[list] = mapped_column(JSON, default=list)
    special_opening_hours: Mapped[list] = mapped_column(JSON, default=list)
    min_booking_duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # hours
    max_booking_duration: Mapped[float | None] = mapped_column(Float, nullable=True)  # hours

    # Pricing
    price_eur: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_category: Mapped[str] = mapped_column(String(20), default=PriceCategory.PER_ITEM.value)
    price_value_added_tax: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)  # percent

    # Hierarchy and access control
    related_bookable_ids: Mapped[list] = mapped_column(JSON, default=list)
    permitted_users: Mapped[list] = mapped_column(JSON, default=list)
    permitted_roles: Mapped[list] = mapped_column(JSON, default=list)
    free_booking_users: Mapped[list] = mapped_column(JSON, default=list)
    free_booking_roles: Mapped[list] = mapped_column(JSON, default=list)

    attachments: Mapped[list] = mapped_column(JSON, default=list)
    locker_details: Mapped[dict] = mapped_column(JSON, default=dict)
    required_fields: Mapped[list] = mapped_column(JSON, default=list)

    __table_args__ = (
        UniqueConstraint("tenant_id", "id", name="uq_bookables_tenant_id"),
        Index("ix_bookables_event", "tenant_id", "event_id"),
    )

    @property
    def is_time_bound(self) -> bool:
        """Whether capacity is sliced by time window rather than counted."""
        return bool(self.is_schedule_related or self.is_time_period_related or self.is_long_range)

    @property
    def is_ticket(self) -> bool:
        return self.type == BookableType.TICKET.value

    def __repr__(self) -> str:
        return f"<Bookable(id={self.id!r}, tenant={self.tenant_id!r}, type={self.type!r})>"
