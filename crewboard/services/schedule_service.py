from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from ..dao import calendar_dao, contractors_dao, people_dao, schedule_dao
from ..domain.dates import date_key
from ..domain.holidays import australian_holidays
from ..domain.models import ContractorRef, Subject, TechnicianRef, TimeSlot
from ..domain.payloads import entry_from_dict, entry_to_dict, holiday_to_dict
from .sqlite_backend import holiday_from_row

logger = logging.getLogger(__name__)

SUBJECT_WINDOW_DAYS = 14


class CopyConflictError(RuntimeError):
    """Raised when the copy target already holds entries for the copied slots."""

    def __init__(self, slots: Sequence[str]) -> None:
        super().__init__("Target date already has entries for some slots")
        self.slots = list(slots)


class EntriesNotFoundError(LookupError):
    pass


def _subject_filter(subject: Subject) -> Dict[str, str]:
    if isinstance(subject, TechnicianRef):
        return {"technician_id": subject.id}
    return {"contractor_id": subject.id}


def copy_day(subject: Subject, source: date, target: date,
             slots: Optional[Sequence[TimeSlot]] = None) -> List[Dict[str, Any]]:
    """Copy *subject*'s entries on *source* to *target*, optionally for some slots only.

    Nothing is overwritten: any existing entry on *target* in a copied slot
    aborts the copy with :class:`CopyConflictError`.
    """

    wanted = [TimeSlot(slot).value for slot in (slots or [])] or [slot.value for slot in TimeSlot]
    source_rows = schedule_dao.find_by_slots(date_key(source), wanted, **_subject_filter(subject))
    if not source_rows:
        raise EntriesNotFoundError("No entries found to copy")

    existing = schedule_dao.find_by_slots(
        date_key(target), [row["time_slot"] for row in source_rows], **_subject_filter(subject)
    )
    if existing:
        raise CopyConflictError([row["time_slot"] for row in existing])

    copies = [{**row, "id": None, "date": date_key(target)} for row in source_rows]
    ids = schedule_dao.insert_entries(copies)
    logger.info("Copied %d entries of %s from %s to %s", len(ids), subject.id, source, target)
    rows = [schedule_dao.get_entry(entry_id) for entry_id in ids]
    return [entry_to_dict(entry_from_dict(row)) for row in rows if row]


def subject_schedule(subject: Subject, start: Optional[date] = None, end: Optional[date] = None,
                     today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Entries of one technician or contractor; the next two weeks by default."""

    if start is None or end is None:
        start = today or date.today()
        end = start + timedelta(days=SUBJECT_WINDOW_DAYS)
    rows = schedule_dao.list_entries(date_key(start), date_key(end), **_subject_filter(subject))
    return [entry_to_dict(entry_from_dict(row)) for row in rows]


def project_schedule(project_id: str, start: Optional[date] = None, end: Optional[date] = None,
                     today: Optional[date] = None) -> Dict[str, Any]:
    """A project's entries grouped by date, from today onwards unless a range is given."""

    if start is None or end is None:
        rows = schedule_dao.list_project_entries(project_id, date_key(today or date.today()))
    else:
        rows = schedule_dao.list_project_entries(project_id, date_key(start), date_key(end))
    entries = [entry_to_dict(entry_from_dict(row)) for row in rows]

    by_date: Dict[str, List[Dict[str, Any]]] = OrderedDict()
    for entry in entries:
        by_date.setdefault(entry["date"], []).append(entry)
    subjects = {entry.get("technician") or entry.get("contractor") for entry in entries}
    return {
        "entries": entries,
        "by_date": by_date,
        "summary": {"total_slots": len(entries), "subjects_involved": len(subjects)},
    }


def subject_exists(subject: Subject) -> bool:
    if isinstance(subject, ContractorRef):
        return contractors_dao.get_contractor(subject.id) is not None
    return people_dao.get_technician(subject.id) is not None


def list_holidays(year: Optional[int] = None, state: Optional[str] = None,
                  today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Holidays of *year*, or from a month ago until a year ahead."""

    if year is not None:
        start, end = date(year, 1, 1), date(year, 12, 31)
    else:
        now = today or date.today()
        start, end = now - timedelta(days=30), now + timedelta(days=365)
    rows = calendar_dao.list_holidays(date_key(start), date_key(end), state)
    return [holiday_to_dict(holiday_from_row(row)) for row in rows]


def seed_holidays(year: int) -> int:
    holidays = australian_holidays(year)
    count = calendar_dao.upsert_holidays(
        {"date": date_key(holiday.date), "name": holiday.name, "state": holiday.state} for holiday in holidays
    )
    logger.info("Seeded %d public holidays for %d", count, year)
    return count
