"""Resource repository: async data access for the checkout engine.

All lookups are tenant scoped. Missing rows come back as ``None`` and the
caller decides whether that is an error. SQLAlchemy exceptions are left to
propagate.
"""

import logging

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookit.models.bookable import Bookable, BookableType
from bookit.models.booking import Booking, BookingItem
from bookit.models.coupon import Coupon
from bookit.models.event import Event
from bookit.models.tenant import Tenant

logger = logging.getLogger(__name__)


class ResourceRepository:
    """Bookables, bookings, coupons, events and tenants of one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -- bookables ----------------------------------------------------------

    async def get_bookable(self, bookable_id: str, tenant_id: str) -> Bookable | None:
        result = await self.db.execute(
            select(Bookable).where(Bookable.id == bookable_id, Bookable.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_bookables(self, tenant_id: str) -> list[Bookable]:
        result = await self.db.execute(select(Bookable).where(Bookable.tenant_id == tenant_id))
        return list(result.scalars().all())

    async def get_event_tickets(self, event_id: str, tenant_id: str) -> list[Bookable]:
        result = await self.db.execute(
            select(Bookable).where(
                Bookable.tenant_id == tenant_id,
                Bookable.event_id == event_id,
                Bookable.type == BookableType.TICKET.value,
            )
        )
        return list(result.scalars().all())

    # -- bookings -----------------------------------------------------------

    async def find_bookings_by_bookable(self, tenant_id: str, bookable_id: str) -> list[Booking]:
        """Every booking of the tenant with at least one item referencing ``bookable_id``."""
        result = await self.db.execute(
            select(Booking).where(
                Booking.tenant_id == tenant_id,
                Booking.bookable_items.any(BookingItem.bookable_id == bookable_id),
            )
        )
        return list(result.scalars().all())

    async def find_bookings_by_bookables(self, tenant_id: str, bookable_ids: list[str]) -> list[Booking]:
        if not bookable_ids:
            return []
        result = await self.db.execute(
            select(Booking).where(
                Booking.tenant_id == tenant_id,
                Booking.bookable_items.any(BookingItem.bookable_id.in_(bookable_ids)),
            )
        )
        return list(result.scalars().all())

    async def get_booking(self, booking_id: str, tenant_id: str) -> Booking | None:
        result = await self.db.execute(
            select(Booking).where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def booking_exists(self, booking_id: str, tenant_id: str) -> bool:
        result = await self.db.execute(
            select(exists().where(Booking.id == booking_id, Booking.tenant_id == tenant_id))
        )
        return bool(result.scalar())

    async def store_booking(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        logger.debug("Stored booking %s for tenant %s", booking.id, booking.tenant_id)
        return booking

    # -- coupons ------------------------------------------------------------

    async def get_coupon(self, coupon_id: str, tenant_id: str) -> Coupon | None:
        result = await self.db.execute(
            select(Coupon).where(Coupon.id == coupon_id, Coupon.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def store_coupon(self, coupon: Coupon) -> Coupon:
        self.db.add(coupon)
        await self.db.flush()
        await self.db.refresh(coupon)
        return coupon

    # -- events and tenants -------------------------------------------------

    async def get_event(self, event_id: str, tenant_id: str) -> Event | None:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id, Event.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_tenant_config(self, tenant_id: str) -> Tenant | None:
        result = await self.db.execute(select(Tenant).where(Tenant.id == tenant_id))
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        await self.db.commit()
