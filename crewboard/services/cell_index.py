"""Lookups of the entries and holiday behind one grid cell."""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..domain.dates import DateLike, date_key
from ..domain.models import PublicHoliday, ScheduleEntry, Subject


def _subject_id(subject: "Subject | str") -> str:
    return subject if isinstance(subject, str) else subject.id


def entries_for_cell(entries: Iterable[ScheduleEntry], subject: "Subject | str", day: DateLike) -> List[ScheduleEntry]:
    """Entries occupying the cell of *subject* on *day* (0 to 4 of them).

    Subjects match on their id whether they are technicians or contractors.
    """

    key = date_key(day)
    subject_id = _subject_id(subject)
    return [entry for entry in entries if entry.subject.id == subject_id and date_key(entry.date) == key]


def holiday_for(holidays: Iterable[PublicHoliday], day: DateLike) -> Optional[PublicHoliday]:
    key = date_key(day)
    for holiday in holidays:
        if date_key(holiday.date) == key:
            return holiday
    return None
