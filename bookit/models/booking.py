"""Booking model: a reservation of one or more bookable items."""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookit.database import Base, StorageKeyMixin
from bookit.timeutils import local_now


class BookingHookType(str, enum.Enum):
    """Side-channel events external collaborators act upon."""

    REJECT = "REJECT"
    CANCEL = "CANCEL"


class Booking(StorageKeyMixin, Base):
    """A reservation of one or more bookables for one time window."""

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(64), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    assigned_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    time_begin: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    time_end: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    time_created: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    coupon_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mail: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    vat_included_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))

    # Status flags, flipped later by payment and workflow collaborators
    is_committed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_payed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_rejected: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)

    hooks: Mapped[list] = mapped_column(JSON, default=list)
    locker_info: Mapped[list] = mapped_column(JSON, default=list)
    attachment_status: Mapped[list] = mapped_column(JSON, default=list)
    coupon_used: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    bookable_items: Mapped[list["BookingItem"]] = relationship(
        back_populates="booking",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "id", name="uq_bookings_tenant_id"),
        Index("ix_bookings_time_begin", "time_begin"),
    )

    def add_hook(self, hook_type: BookingHookType, payload: dict | None = None) -> dict:
        """Append a hook; existing hooks are never modified."""
        hook = {
            "id": uuid.uuid4().hex,
            "type": BookingHookType(hook_type).value,
            "payload": payload or {},
            "time_created": local_now().isoformat(),
        }
        # Reassign so the JSON column registers the change
        self.hooks = [*(self.hooks or []), hook]
        return hook

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id!r}, tenant={self.tenant_id!r}, "
            f"committed={self.is_committed}, payed={self.is_payed}, rejected={self.is_rejected})>"
        )


class BookingItem(StorageKeyMixin, Base):
    """One line of a booking; prices are line totals for ``amount`` units."""

    __tablename__ = "booking_items"

    booking_pk: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.pk", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bookable_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    bookable_used: Mapped[dict] = mapped_column(JSON, default=dict)

    regular_price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    regular_gross_price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    user_price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    user_gross_price_eur: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))

    booking: Mapped["Booking"] = relationship(back_populates="bookable_items")

    def __repr__(self) -> str:
        return f"<BookingItem(bookable_id={self.bookable_id!r}, amount={self.amount})>"
