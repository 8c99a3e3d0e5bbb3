"""Tests for temporal overlap of bookings."""

from datetime import datetime

import pytest

from bookit.checkout.errors import TimeWindowRequiredError
from bookit.checkout.overlap import OverlapEngine, ranges_overlap
from bookit.repositories.resources import ResourceRepository


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 1, 1, hour, minute)


class TestRangesOverlap:
    def test_touching_windows_do_not_overlap(self):
        assert not ranges_overlap(_at(10), _at(11), _at(11), _at(12))
        assert not ranges_overlap(_at(11), _at(12), _at(10), _at(11))

    def test_partial_overlap(self):
        assert ranges_overlap(_at(10), _at(12), _at(11), _at(13))

    def test_containment(self):
        assert ranges_overlap(_at(9), _at(17), _at(10), _at(11))
        assert ranges_overlap(_at(10), _at(11), _at(9), _at(17))

    def test_disjoint(self):
        assert not ranges_overlap(_at(8), _at(9), _at(10), _at(11))


class TestOverlappingBookings:
    async def test_returns_only_overlapping(self, db_session, make_bookable, make_booking):
        room = await make_bookable("room", is_schedule_related=True)
        await make_booking({"room": 1}, _at(9), _at(10), id="EARLY")
        await make_booking({"room": 1}, _at(10, 30), _at(11, 30), id="HIT")
        await make_booking({"room": 1}, _at(11), _at(12), id="LATE")

        found = await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(
            room, "tenant-a", _at(10), _at(11)
        )

        assert [b.id for b in found] == ["HIT"]

    async def test_rejected_bookings_never_count(self, db_session, make_bookable, make_booking):
        room = await make_bookable("room", is_schedule_related=True)
        await make_booking({"room": 1}, _at(10), _at(11), is_rejected=True)

        found = await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(
            room, "tenant-a", _at(10), _at(11)
        )

        assert found == []

    async def test_other_bookables_ignored(self, db_session, make_bookable, make_booking):
        room = await make_bookable("room", is_schedule_related=True)
        await make_bookable("desk", is_schedule_related=True)
        await make_booking({"desk": 1}, _at(10), _at(11))

        found = await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(
            room, "tenant-a", _at(10), _at(11)
        )

        assert found == []

    async def test_untimed_bookable_counts_every_booking(self, db_session, make_bookable, make_booking):
        shirt = await make_bookable("shirt", amount=10)
        await make_booking({"shirt": 2})
        await make_booking({"shirt": 3})

        found = await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(
            shirt, "tenant-a", None, None
        )

        assert len(found) == 2

    async def test_timed_bookable_requires_window(self, db_session, make_bookable):
        room = await make_bookable("room", is_schedule_related=True)

        with pytest.raises(TimeWindowRequiredError):
            await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(room, "tenant-a", None, None)

    async def test_excluded_booking(self, db_session, make_bookable, make_booking):
        room = await make_bookable("room", is_schedule_related=True)
        await make_booking({"room": 1}, _at(10), _at(11), id="SELF")

        found = await OverlapEngine(ResourceRepository(db_session)).overlapping_bookings(
            room, "tenant-a", _at(10), _at(11), exclude_booking_id="SELF"
        )

        assert found == []

    async def test_time_bound_override(self, db_session, make_bookable, make_booking):
        hall = await make_bookable("hall", amount=1)
        room = await make_bookable("room", is_schedule_related=True)
        await make_booking({"hall": 1, "room": 1}, _at(8), _at(9))
        engine = OverlapEngine(ResourceRepository(db_session))

        assert await engine.overlapping_bookings(hall, "tenant-a", _at(10), _at(11), time_bound=True) == []
        assert len(await engine.overlapping_bookings(room, "tenant-a", None, None, time_bound=False)) == 1
