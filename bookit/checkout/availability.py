"""Capacity checks for a bookable, its ancestors, its descendants and its event."""

import logging
from datetime import datetime

from bookit.checkout.errors import (
    CapacityExceededError,
    ChildBookedError,
    EventSoldOutError,
    NotFoundError,
    ParentUnavailableError,
)
from bookit.checkout.hierarchy import HierarchyResolver
from bookit.checkout.overlap import OverlapEngine
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository

logger = logging.getLogger(__name__)


class CapacityChecker:
    """Answers "may N more units be booked for this window?".

    ``pending`` holds amounts claimed by earlier items of the same bundle,
    keyed by bookable id. They count as booked so that a bundle cannot
    overbook a resource by listing it twice.

    ``time_bound`` is taken from the bookable being booked and applies to
    every ancestor and descendant counted on its behalf.
    """

    def __init__(
        self,
        repository: ResourceRepository,
        resolver: HierarchyResolver,
        time_begin: datetime | None,
        time_end: datetime | None,
        pending: dict[str, int] | None = None,
        time_bound: bool | None = None,
    ) -> None:
        self.repository = repository
        self.resolver = resolver
        self.overlap = OverlapEngine(repository)
        self.time_begin = time_begin
        self.time_end = time_end
        self.pending = pending if pending is not None else {}
        self.time_bound = time_bound

    async def booked_amount(self, bookable: Bookable) -> int:
        bookings = await self.overlap.overlapping_bookings(
            bookable, bookable.tenant_id, self.time_begin, self.time_end, time_bound=self.time_bound
        )
        booked = sum(
            item.amount
            for booking in bookings
            for item in booking.bookable_items
            if item.bookable_id == bookable.id
        )
        return booked + self.pending.get(bookable.id, 0)

    async def check_availability(self, bookable: Bookable, amount: int) -> None:
        if bookable.amount is None:
            return

        booked = await self.booked_amount(bookable)
        if booked + amount > bookable.amount:
            remaining = max(0, bookable.amount - booked)
            raise CapacityExceededError(f"{bookable.title} is only available {remaining} more time(s).")

    async def check_parent_availability(self, bookable: Bookable, amount: int) -> None:
        """Every ancestor with a capacity must still have room.

        Tickets share the seat pool of their ancestor with all sibling
        tickets, so the ancestor's own bookings plus everything booked below
        it plus the new amount must fit. Other bookables only need the
        ancestor itself not to be fully booked.
        """
        for parent in self.resolver.ancestors(bookable.id):
            if parent.amount is None:
                continue

            parent_booked = await self.booked_amount(parent)
            if bookable.is_ticket:
                below = 0
                for child in self.resolver.descendants(parent.id):
                    below += await self.booked_amount(child)
                is_available = parent_booked + below + amount <= parent.amount
            else:
                is_available = parent_booked < parent.amount

            if not is_available:
                raise ParentUnavailableError(f"Parent object {parent.title} is not available.")

    async def check_child_bookings(self, bookable: Bookable) -> None:
        """Booking a bookable excludes any overlapping booking of its descendants."""
        for child in self.resolver.descendants(bookable.id):
            if await self.booked_amount(child) > 0:
                raise ChildBookedError(
                    f"Dependent object {child.title} is already booked for the selected period."
                )

    async def check_event_seats(self, bookable: Bookable, amount: int) -> None:
        if not (bookable.is_ticket and bookable.event_id):
            return

        event = await self.repository.get_event(bookable.event_id, bookable.tenant_id)
        if event is None:
            raise NotFoundError("Event", bookable.event_id)
        if not event.max_attendees:
            return

        tickets = await self.repository.get_event_tickets(event.id, bookable.tenant_id)
        ticket_ids = {t.id for t in tickets} | {bookable.id}
        bookings = await self.repository.find_bookings_by_bookables(bookable.tenant_id, sorted(ticket_ids))

        booked = sum(
            item.amount
            for booking in bookings
            if not booking.is_rejected
            for item in booking.bookable_items
            if item.bookable_id in ticket_ids
        )
        booked += sum(self.pending.get(ticket_id, 0) for ticket_id in ticket_ids)

        if booked + amount > event.max_attendees:
            logger.info(
                "Event %s sold out: %s booked, %s requested, %s max",
                event.id,
                booked,
                amount,
                event.max_attendees,
            )
            raise EventSoldOutError(f"The event {event.name} does not have enough free seats.")
