"""Materializes a weekly recurrence rule into discrete appointment windows.

Every function here is pure: the same settings always produce the same
sequence, and each call to :func:`generate_slots` starts from the beginning.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, NamedTuple

WEEKDAY_NAMES = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


class SlotWindow(NamedTuple):
    date: date
    start_time: time
    end_time: time


def weekday_numbers(active_weekdays: Iterable[str]) -> set[int]:
    numbers: set[int] = set()
    for name in active_weekdays:
        normalized = name.strip().lower()
        if normalized not in WEEKDAY_NAMES:
            raise ValueError(f'Unknown weekday name: {name!r}')
        numbers.add(WEEKDAY_NAMES.index(normalized))
    return numbers


def iter_active_dates(start_date: date, end_date: date, active_weekdays: Iterable[str]) -> Iterator[date]:
    active = weekday_numbers(active_weekdays)
    current_day = start_date

    while current_day <= end_date:
        if current_day.weekday() in active:
            yield current_day
        current_day += timedelta(days=1)


def iter_day_windows(start_time: time, end_time: time, interval_minutes: int) -> Iterator[tuple[time, time]]:
    """Yield (start, end) pairs covering the window; a trailing partial interval is dropped."""
    if interval_minutes <= 0:
        raise ValueError('interval_minutes must be positive.')

    # Anchor on an arbitrary day so the arithmetic cannot wrap past midnight.
    anchor = date(2000, 1, 1)
    step = timedelta(minutes=interval_minutes)
    window_end = datetime.combine(anchor, end_time)
    current_start = datetime.combine(anchor, start_time)

    while current_start + step <= window_end:
        yield current_start.time(), (current_start + step).time()
        current_start += step


def generate_slots(settings) -> Iterator[SlotWindow]:
    """Yield every slot described by ``settings`` ordered by date then start time.

    ``settings`` is anything exposing ``interval_minutes``, ``start_time``,
    ``end_time``, ``start_date``, ``end_date`` and ``active_weekdays``.
    """
    windows = list(iter_day_windows(settings.start_time, settings.end_time, settings.interval_minutes))
    if not windows:
        return

    for slot_date in iter_active_dates(settings.start_date, settings.end_date, settings.active_weekdays):
        for slot_start, slot_end in windows:
            yield SlotWindow(slot_date, slot_start, slot_end)


def count_slots(settings) -> int:
    if settings.interval_minutes <= 0:
        raise ValueError('interval_minutes must be positive.')

    days = sum(1 for _ in iter_active_dates(settings.start_date, settings.end_date, settings.active_weekdays))
    window = datetime.combine(date.min, settings.end_time) - datetime.combine(date.min, settings.start_time)
    if window <= timedelta(0):
        return 0
    return days * int(window // timedelta(minutes=settings.interval_minutes))


def overlaps_any(slot: SlotWindow, windows: Iterable[tuple[time, time]]) -> bool:
    """True when ``slot`` shares any time with one of ``windows``; touching ends do not count."""
    return any(slot.start_time < other_end and other_start < slot.end_time for other_start, other_end in windows)
