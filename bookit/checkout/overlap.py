"""Temporal overlap of bookings on one bookable."""

from datetime import datetime

from bookit.checkout.errors import TimeWindowRequiredError
from bookit.models.bookable import Bookable
from bookit.models.booking import Booking
from bookit.repositories.resources import ResourceRepository


def ranges_overlap(begin_a: datetime, end_a: datetime, begin_b: datetime, end_b: datetime) -> bool:
    """Half-open overlap: ``[10:00, 11:00)`` and ``[11:00, 12:00)`` do not overlap."""
    return begin_a < end_b and begin_b < end_a


class OverlapEngine:
    def __init__(self, repository: ResourceRepository) -> None:
        self.repository = repository

    async def overlapping_bookings(
        self,
        bookable: Bookable,
        tenant_id: str,
        time_begin: datetime | None,
        time_end: datetime | None,
        exclude_booking_id: str | None = None,
        time_bound: bool | None = None,
    ) -> list[Booking]:
        """Return the non-rejected bookings competing with a request for ``bookable``.

        For bookables that are not time bound every non-rejected booking
        referencing the bookable competes, so capacity works as a plain
        counter. ``time_bound`` overrides the bookable's own flag when the
        request is for a related bookable with different time semantics.
        """
        bookings = await self.repository.find_bookings_by_bookable(tenant_id, bookable.id)
        active = [b for b in bookings if not b.is_rejected and b.id != exclude_booking_id]

        if time_bound is None:
            time_bound = bookable.is_time_bound
        if not time_bound:
            return active

        if time_begin is None or time_end is None:
            raise TimeWindowRequiredError(
                f"Bookable {bookable.title} is time related, a booking time window is required."
            )

        return [
            b
            for b in active
            if b.time_begin is not None
            and b.time_end is not None
            and ranges_overlap(b.time_begin, b.time_end, time_begin, time_end)
        ]
