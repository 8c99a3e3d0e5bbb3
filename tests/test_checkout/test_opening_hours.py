"""Tests for opening-hours validation and the merged calendar."""

from datetime import date, datetime

import pytest

from bookit.checkout.errors import NotFoundError, TimeWindowRequiredError
from bookit.checkout.opening_hours import (
    day_segments,
    has_conflict,
    merge_opening_hours,
    related_opening_hours,
    weekday_number,
)
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository

# 2030-01-01 is a Tuesday
TUESDAY = date(2030, 1, 1)
SATURDAY = date(2030, 1, 5)

WORKDAYS = [{"weekdays": [1, 2, 3, 4, 5], "start_time": "08:00", "end_time": "18:00"}]


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


def _bookable(**overrides) -> Bookable:
    values = {
        "id": "room",
        "tenant_id": "tenant-a",
        "title": "Room",
        "is_opening_hours_related": True,
        "opening_hours": WORKDAYS,
        "special_opening_hours": [],
    }
    values.update(overrides)
    return Bookable(**values)


class TestHelpers:
    def test_weekday_numbers_start_on_sunday(self):
        assert weekday_number(date(2029, 12, 30)) == 0
        assert weekday_number(TUESDAY) == 2
        assert weekday_number(SATURDAY) == 6

    def test_midnight_end_belongs_to_previous_day(self):
        segments = list(day_segments(_at(TUESDAY, 22), datetime(2030, 1, 2)))
        assert segments == [(TUESDAY, 22 * 60, 24 * 60)]

    def test_window_split_per_day(self):
        segments = list(day_segments(_at(TUESDAY, 20), _at(date(2030, 1, 2), 6)))
        assert segments == [(TUESDAY, 20 * 60, 24 * 60), (date(2030, 1, 2), 0, 6 * 60)]


class TestRegularHours:
    def test_inside_hours(self):
        assert not has_conflict(_bookable(), _at(TUESDAY, 9), _at(TUESDAY, 10))

    def test_closed_weekday(self):
        assert has_conflict(_bookable(), _at(SATURDAY, 10), _at(SATURDAY, 11))

    def test_running_past_closing(self):
        assert has_conflict(_bookable(), _at(TUESDAY, 17), _at(TUESDAY, 19))

    def test_exact_opening_window(self):
        assert not has_conflict(_bookable(), _at(TUESDAY, 8), _at(TUESDAY, 18))

    def test_any_matching_entry_suffices(self):
        hours = [
            {"weekdays": [2], "start_time": "08:00", "end_time": "12:00"},
            {"weekdays": [2], "start_time": "13:00", "end_time": "18:00"},
        ]
        bookable = _bookable(opening_hours=hours)
        assert not has_conflict(bookable, _at(TUESDAY, 14), _at(TUESDAY, 15))
        assert has_conflict(bookable, _at(TUESDAY, 11), _at(TUESDAY, 14))

    def test_overnight_needs_both_days_open(self):
        around_the_clock = [{"weekdays": [1, 2, 3, 4, 5], "start_time": "00:00", "end_time": "24:00"}]
        assert not has_conflict(
            _bookable(opening_hours=around_the_clock), _at(TUESDAY, 20), _at(date(2030, 1, 2), 6)
        )
        assert has_conflict(_bookable(), _at(TUESDAY, 20), _at(date(2030, 1, 2), 6))

    def test_until_midnight(self):
        tuesday_only = [{"weekdays": [2], "start_time": "18:00", "end_time": "24:00"}]
        assert not has_conflict(_bookable(opening_hours=tuesday_only), _at(TUESDAY, 22), datetime(2030, 1, 2))


class TestSpecialHours:
    def test_closed_date(self):
        bookable = _bookable(
            is_special_opening_hours_related=True,
            special_opening_hours=[{"date": "2030-01-01", "start_time": "00:00", "end_time": "00:00"}],
        )
        assert has_conflict(bookable, _at(TUESDAY, 9), _at(TUESDAY, 10))

    def test_shortened_date(self):
        bookable = _bookable(
            is_opening_hours_related=False,
            is_special_opening_hours_related=True,
            special_opening_hours=[{"date": "2030-01-01", "start_time": "10:00", "end_time": "14:00"}],
        )
        assert has_conflict(bookable, _at(TUESDAY, 9), _at(TUESDAY, 10, 30))
        assert not has_conflict(bookable, _at(TUESDAY, 11), _at(TUESDAY, 12))

    def test_other_dates_unaffected(self):
        bookable = _bookable(
            is_special_opening_hours_related=True,
            special_opening_hours=[{"date": "2030-01-02", "start_time": "00:00", "end_time": "00:00"}],
        )
        assert not has_conflict(bookable, _at(TUESDAY, 9), _at(TUESDAY, 10))


class TestExemptions:
    def test_long_range_is_exempt(self):
        assert not has_conflict(_bookable(is_long_range=True), _at(SATURDAY, 10), _at(SATURDAY, 11))

    def test_unflagged_bookable_is_always_open(self):
        assert not has_conflict(_bookable(is_opening_hours_related=False), _at(SATURDAY, 10), _at(SATURDAY, 11))

    def test_window_required(self):
        with pytest.raises(TimeWindowRequiredError):
            has_conflict(_bookable(), None, None)


class TestMergeOpeningHours:
    def test_latest_start_and_earliest_end(self):
        building = _bookable(id="building")
        room = _bookable(opening_hours=[{"weekdays": [2, 6], "start_time": "09:00", "end_time": "20:00"}])

        merged = merge_opening_hours([room, building])

        assert merged.regular_opening_hours[2].start_time == "09:00"
        assert merged.regular_opening_hours[2].end_time == "18:00"
        assert merged.regular_opening_hours[6].start_time == "09:00"
        assert merged.regular_opening_hours[1].end_time == "18:00"

    def test_closed_special_date_wins(self):
        building = _bookable(
            id="building",
            is_special_opening_hours_related=True,
            special_opening_hours=[{"date": "2030-01-01", "start_time": "12:00", "end_time": "12:00"}],
        )
        room = _bookable(
            is_special_opening_hours_related=True,
            special_opening_hours=[{"date": "2030-01-01", "start_time": "10:00", "end_time": "14:00"}],
        )

        merged = merge_opening_hours([room, building])

        assert len(merged.special_opening_hours) == 1
        assert merged.special_opening_hours[0].is_closed

    def test_unflagged_regular_hours_still_merge(self):
        merged = merge_opening_hours([_bookable(is_opening_hours_related=False)])
        assert merged.regular_opening_hours[2].start_time == "08:00"
        assert 0 not in merged.regular_opening_hours

    def test_unflagged_special_hours_are_ignored(self):
        merged = merge_opening_hours(
            [_bookable(special_opening_hours=[{"date": "2030-01-01", "start_time": "00:00", "end_time": "00:00"}])]
        )
        assert merged.special_opening_hours == []


class TestRelatedOpeningHours:
    async def test_includes_ancestors(self, db_session, make_bookable):
        await make_bookable("building", is_opening_hours_related=True, opening_hours=WORKDAYS, related_bookable_ids=["room"])
        await make_bookable(
            "room",
            is_opening_hours_related=True,
            opening_hours=[{"weekdays": [2], "start_time": "10:00", "end_time": "22:00"}],
        )

        merged = await related_opening_hours(ResourceRepository(db_session), "room", "tenant-a")

        assert merged.regular_opening_hours[2].start_time == "10:00"
        assert merged.regular_opening_hours[2].end_time == "18:00"

    async def test_unknown_bookable(self, db_session, tenant):
        with pytest.raises(NotFoundError):
            await related_opening_hours(ResourceRepository(db_session), "nope", "tenant-a")
