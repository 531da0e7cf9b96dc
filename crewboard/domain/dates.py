"""Calendar helpers for the scheduling grid.

All helpers work on local calendar fields. A date is identified by its
``YYYY-MM-DD`` key built from the value's own year/month/day; nothing here
converts to UTC, because doing so shifts the day for timestamps close to
midnight in zones away from UTC.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

from .models import ViewMode

DateLike = Union[date, datetime, str]

GRID_DAYS = 42


@dataclass(frozen=True)
class GridDay:
    date: date
    is_current_month: bool


def to_local_date(value: DateLike) -> date:
    """Return the calendar day of *value* using its local fields."""

    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported date value: {value!r}")


def date_key(value: DateLike) -> str:
    day = to_local_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def week_start(reference: DateLike) -> date:
    day = to_local_date(reference)
    return day - timedelta(days=day.weekday())


def week_dates(reference: DateLike) -> List[date]:
    """Seven dates of the Monday-first week containing *reference*."""

    start = week_start(reference)
    return [start + timedelta(days=offset) for offset in range(7)]


def month_grid(year: int, month: int) -> List[GridDay]:
    """Six full Monday-first weeks covering *month*, padded with adjacent days."""

    first = date(year, month, 1)
    start = first - timedelta(days=first.weekday())
    return [
        GridDay(date=day, is_current_month=(day.year == year and day.month == month))
        for day in (start + timedelta(days=offset) for offset in range(GRID_DAYS))
    ]


def is_weekend(value: DateLike) -> bool:
    return to_local_date(value).weekday() >= 5


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    return to_local_date(value) == (today or date.today())


def visible_range(cursor: DateLike, view_mode: ViewMode) -> Tuple[date, date]:
    """Inclusive date range loaded for *cursor* in *view_mode*."""

    if ViewMode(view_mode) is ViewMode.MONTH:
        day = to_local_date(cursor)
        grid = month_grid(day.year, day.month)
        return grid[0].date, grid[-1].date
    days = week_dates(cursor)
    return days[0], days[-1]


def visible_days(cursor: DateLike, view_mode: ViewMode, show_weekends: bool) -> List[date]:
    """Column dates shown by the grid: the week, or the month's own days."""

    day = to_local_date(cursor)
    if ViewMode(view_mode) is ViewMode.MONTH:
        days = [cell.date for cell in month_grid(day.year, day.month) if cell.is_current_month]
    else:
        days = week_dates(day)
    return [d for d in days if show_weekends or not is_weekend(d)]


def shift_cursor(cursor: DateLike, view_mode: ViewMode, step: int) -> date:
    """Move the navigation cursor by *step* weeks or months."""

    day = to_local_date(cursor)
    if ViewMode(view_mode) is ViewMode.MONTH:
        index = day.year * 12 + (day.month - 1) + step
        year, month = divmod(index, 12)
        return date(year, month + 1, 1)
    return day + timedelta(weeks=step)


def parse_day(value: Optional[str]) -> date:
    """Parse a ``YYYY-MM-DD`` query value."""

    if not value:
        raise ValueError("Date value is required")
    try:
        return to_local_date(value)
    except ValueError as exc:
        raise ValueError("Date must be in YYYY-MM-DD format") from exc
