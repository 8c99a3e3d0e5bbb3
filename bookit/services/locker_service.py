"""Locker assignment for bookables with physical locker units."""

import logging
from datetime import datetime

from bookit.checkout.errors import LockerUnavailableError
from bookit.checkout.overlap import OverlapEngine
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository

logger = logging.getLogger(__name__)


class LockerService:
    """Picks free locker units for a booking window.

    A unit is free when its locker system is active for the tenant and no
    overlapping booking already holds it. Units already handed out to
    earlier items of the same checkout are passed in as ``claimed``.
    """

    def __init__(self, repository: ResourceRepository) -> None:
        self.repository = repository
        self.overlap = OverlapEngine(repository)

    async def get_available_locker(
        self,
        bookable: Bookable,
        tenant_id: str,
        time_begin: datetime | None,
        time_end: datetime | None,
        amount: int,
        claimed: list[dict] | None = None,
    ) -> list[dict]:
        details = bookable.locker_details or {}
        if not details.get("active"):
            return []

        tenant = await self.repository.get_tenant_config(tenant_id)
        active_systems = set(tenant.active_locker_systems or []) if tenant is not None else set()
        if not active_systems:
            return []

        concurrent = await self.overlap.overlapping_bookings(bookable, tenant_id, time_begin, time_end)
        occupied = {
            (unit.get("id"), unit.get("locker_system"))
            for booking in concurrent
            for unit in booking.locker_info or []
        }
        occupied.update((unit.get("id"), unit.get("locker_system")) for unit in claimed or [])

        available = [
            unit
            for unit in details.get("units", [])
            if unit.get("locker_system") in active_systems
            and (unit.get("id"), unit.get("locker_system")) not in occupied
        ]

        if len(available) < amount:
            raise LockerUnavailableError(
                f"Not enough lockers available for {bookable.title}: "
                f"{len(available)} free, {amount} requested."
            )

        units = [{**unit, "bookable_id": bookable.id} for unit in available[:amount]]
        logger.info(
            "Assigned locker units %s of bookable %s (tenant %s)",
            [u.get("id") for u in units],
            bookable.id,
            tenant_id,
        )
        return units
