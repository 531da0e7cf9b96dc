"""Australian public holiday rules."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List

from .models import PublicHoliday

STATES = ("QLD", "NSW", "VIC", "SA", "WA", "TAS", "NT", "ACT")


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous computus)."""

    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def _second_monday(year: int, month: int) -> date:
    first = date(year, month, 1)
    first_monday = first + timedelta(days=(7 - first.weekday()) % 7)
    return first_monday + timedelta(weeks=1)


def australian_holidays(year: int) -> List[PublicHoliday]:
    """National holidays plus the Queensland-specific Queen's Birthday."""

    easter = easter_sunday(year)
    return [
        PublicHoliday(date(year, 1, 1), "New Year's Day"),
        PublicHoliday(date(year, 1, 26), "Australia Day"),
        PublicHoliday(easter - timedelta(days=2), "Good Friday"),
        PublicHoliday(easter - timedelta(days=1), "Easter Saturday"),
        PublicHoliday(easter + timedelta(days=1), "Easter Monday"),
        PublicHoliday(date(year, 4, 25), "Anzac Day"),
        PublicHoliday(date(year, 12, 25), "Christmas Day"),
        PublicHoliday(date(year, 12, 26), "Boxing Day"),
        PublicHoliday(_second_monday(year, 6), "Queen's Birthday", state="QLD"),
    ]
