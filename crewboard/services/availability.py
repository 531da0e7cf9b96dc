"""Who is free on a given day."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..dao import groups_dao, schedule_dao
from ..domain.dates import date_key
from ..domain.models import TIME_SLOTS, ScheduleEntry, TechnicianGroup, TimeSlot
from ..domain.payloads import entry_from_dict
from .sqlite_backend import groups_from_rows


@dataclass(frozen=True)
class Availability:
    id: str
    name: str
    member_type: str
    group: str
    role: Optional[str]
    booked_slots: List[TimeSlot]
    free_slots: List[TimeSlot]

    @property
    def is_fully_available(self) -> bool:
        return not self.booked_slots

    @property
    def is_partially_available(self) -> bool:
        return bool(self.booked_slots) and bool(self.free_slots)

    @property
    def is_fully_booked(self) -> bool:
        return not self.free_slots

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.member_type,
            "group": self.group,
            "role": self.role,
            "booked_slots": [slot.value for slot in self.booked_slots],
            "free_slots": [slot.value for slot in self.free_slots],
            "is_fully_available": self.is_fully_available,
            "is_partially_available": self.is_partially_available,
            "is_fully_booked": self.is_fully_booked,
        }


def parse_slots(value: Optional[str]) -> List[TimeSlot]:
    """Comma separated slot names; all four slots when empty."""

    if not value:
        return list(TIME_SLOTS)
    return [TimeSlot(part.strip()) for part in value.split(",") if part.strip()]


def compute_availability(groups: Iterable[TechnicianGroup], entries: Iterable[ScheduleEntry], day: date,
                         slots: Sequence[TimeSlot] = TIME_SLOTS) -> List[Availability]:
    """One record per active member of every group, in group order.

    A member appearing in several groups is reported once per group.
    """

    key = date_key(day)
    booked: Dict[str, set] = {}
    for entry in entries:
        if date_key(entry.date) == key and entry.time_slot in slots:
            booked.setdefault(entry.subject.id, set()).add(entry.time_slot)

    result = []
    for group in groups:
        for member in group.active_members():
            taken = booked.get(member.subject.id, set())
            result.append(
                Availability(
                    id=member.subject.id,
                    name=member.name,
                    member_type=member.member_type,
                    group=group.name,
                    role=member.role,
                    booked_slots=[slot for slot in slots if slot in taken],
                    free_slots=[slot for slot in slots if slot not in taken],
                )
            )
    return result


def check_availability(day: date, slots: Sequence[TimeSlot] = TIME_SLOTS) -> List[Dict[str, Any]]:
    group_rows = groups_dao.list_groups()
    groups = groups_from_rows(group_rows, groups_dao.list_members([row["id"] for row in group_rows]))
    key = date_key(day)
    entries = [entry_from_dict(row) for row in schedule_dao.list_entries(key, key)]
    return [record.to_dict() for record in compute_availability(groups, entries, day, slots)]
