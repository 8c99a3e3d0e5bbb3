"""Opening-hours validation and the merged opening-hours calendar.

Regular hours repeat weekly; weekdays are numbered 0 = Sunday .. 6 =
Saturday. Special hours apply to one calendar date and override nothing:
both rule sets are checked and a conflict in either rejects the window.
A window spanning several days is checked day by day, using the part of
the window that falls on each day.
"""

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta

from bookit.checkout.errors import NotFoundError, TimeWindowRequiredError
from bookit.checkout.hierarchy import HierarchyResolver
from bookit.models.bookable import Bookable
from bookit.repositories.resources import ResourceRepository
from bookit.schemas.bookable import (
    OpeningHours,
    OpeningWindow,
    RelatedOpeningHoursResponse,
    SpecialOpeningHours,
)

MINUTES_PER_DAY = 24 * 60


def clock_minutes(value: str) -> int:
    """``"08:30"`` -> 510. ``"24:00"`` is the end of the day."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def weekday_number(day: date) -> int:
    return (day.weekday() + 1) % 7


def _minutes_of(value: datetime) -> float:
    return value.hour * 60 + value.minute + value.second / 60


def day_segments(time_begin: datetime, time_end: datetime) -> Iterator[tuple[date, float, float]]:
    """Yield ``(day, start_minute, end_minute)`` for every calendar day the window touches.

    A window ending exactly at midnight does not touch the following day.
    """
    last_day = time_end.date()
    if time_end.time() == time(0) and last_day > time_begin.date():
        last_day -= timedelta(days=1)

    day = time_begin.date()
    while day <= last_day:
        start = _minutes_of(time_begin) if day == time_begin.date() else 0
        end = _minutes_of(time_end) if day == time_end.date() else MINUTES_PER_DAY
        yield day, start, end
        day += timedelta(days=1)


def _regular_hours_conflict(bookable: Bookable, time_begin: datetime, time_end: datetime) -> bool:
    entries = [OpeningHours.model_validate(raw) for raw in bookable.opening_hours or []]

    for day, start, end in day_segments(time_begin, time_end):
        weekday = weekday_number(day)
        day_entries = [e for e in entries if weekday in e.weekdays]
        if not day_entries:
            return True
        if not any(clock_minutes(e.start_time) <= start and end <= clock_minutes(e.end_time) for e in day_entries):
            return True

    return False


def _special_hours_conflict(bookable: Bookable, time_begin: datetime, time_end: datetime) -> bool:
    entries = [SpecialOpeningHours.model_validate(raw) for raw in bookable.special_opening_hours or []]
    if not entries:
        return False

    for day, start, end in day_segments(time_begin, time_end):
        for entry in entries:
            if entry.date != day:
                continue
            if entry.is_closed:
                return True
            if not (clock_minutes(entry.start_time) <= start and end <= clock_minutes(entry.end_time)):
                return True

    return False


def has_conflict(bookable: Bookable, time_begin: datetime | None, time_end: datetime | None) -> bool:
    """Return True when the window is NOT permitted by the bookable's own hours.

    Ancestors are checked separately by the caller.
    """
    if bookable.is_long_range:
        return False
    if not (bookable.is_opening_hours_related or bookable.is_special_opening_hours_related):
        return False
    if time_begin is None or time_end is None:
        raise TimeWindowRequiredError(
            f"Bookable {bookable.title} has opening hours, a booking time window is required."
        )

    if bookable.is_opening_hours_related and _regular_hours_conflict(bookable, time_begin, time_end):
        return True
    if bookable.is_special_opening_hours_related and _special_hours_conflict(bookable, time_begin, time_end):
        return True
    return False


def merge_opening_hours(bookables: Iterable[Bookable]) -> RelatedOpeningHoursResponse:
    """Combine the hours of several bookables into the window open in all of them.

    Per weekday the latest start and the earliest end win. Regular hours are
    merged whatever the opening-hours flag says; special hours only count for
    bookables flagged as special-hours related. Per special date a fully
    closed entry wins over any partial one; partial entries intersect.
    """
    regular: dict[int, OpeningWindow] = {}
    special: dict[date, SpecialOpeningHours] = {}

    unique = {b.id: b for b in bookables}
    for bookable in unique.values():
        for raw in bookable.opening_hours or []:
            entry = OpeningHours.model_validate(raw)
            for weekday in entry.weekdays:
                current = regular.get(weekday)
                if current is None:
                    regular[weekday] = OpeningWindow(start_time=entry.start_time, end_time=entry.end_time)
                    continue
                if clock_minutes(entry.start_time) > clock_minutes(current.start_time):
                    current.start_time = entry.start_time
                if clock_minutes(entry.end_time) < clock_minutes(current.end_time):
                    current.end_time = entry.end_time

        if bookable.is_special_opening_hours_related:
            for raw in bookable.special_opening_hours or []:
                entry = SpecialOpeningHours.model_validate(raw)
                current = special.get(entry.date)
                if current is None:
                    special[entry.date] = entry
                elif current.is_closed:
                    continue
                elif entry.is_closed:
                    special[entry.date] = entry
                else:
                    if clock_minutes(entry.start_time) > clock_minutes(current.start_time):
                        current.start_time = entry.start_time
                    if clock_minutes(entry.end_time) < clock_minutes(current.end_time):
                        current.end_time = entry.end_time

    return RelatedOpeningHoursResponse(
        regular_opening_hours=dict(sorted(regular.items())),
        special_opening_hours=[special[d] for d in sorted(special)],
    )


async def related_opening_hours(
    repository: ResourceRepository,
    bookable_id: str,
    tenant_id: str,
) -> RelatedOpeningHoursResponse:
    """Opening hours of a bookable including everything inherited from its ancestors."""
    resolver = await HierarchyResolver.for_tenant(repository, tenant_id)
    bookable = resolver.get(bookable_id)
    if bookable is None:
        raise NotFoundError("Bookable", bookable_id)
    return merge_opening_hours([bookable, *resolver.ancestors(bookable_id)])
