"""Working copy of one cell's four time slots while it is being edited."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..domain.dates import DateLike, date_key, to_local_date
from ..domain.models import TIME_SLOTS, EntryType, LeaveType, ScheduleEntry, Subject, TimeSlot

_CONTENT_FIELDS = ("entry_type", "project_id", "leave_type", "description", "notes")


@dataclass(frozen=True)
class SlotState:
    entry_type: EntryType = EntryType.PROJECT
    project_id: Optional[str] = None
    leave_type: Optional[LeaveType] = None
    description: str = ""
    notes: str = ""
    entry_id: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: ScheduleEntry) -> "SlotState":
        return cls(
            entry_type=entry.entry_type,
            project_id=entry.project.id if entry.project else None,
            leave_type=entry.leave_type,
            description=entry.description or "",
            notes=entry.notes or "",
            entry_id=entry.id,
        )

    @property
    def occupied(self) -> bool:
        """Whether the slot holds something worth persisting.

        Project slots need a project and leave slots need a leave type; every
        other category is content on its own.
        """

        if self.entry_type is EntryType.PROJECT:
            return bool(self.project_id)
        if self.entry_type is EntryType.LEAVE:
            return self.leave_type is not None
        return True

    def same_content(self, other: "SlotState") -> bool:
        return all(getattr(self, name) == getattr(other, name) for name in _CONTENT_FIELDS)

    def with_content_of(self, other: "SlotState") -> "SlotState":
        """Copy *other*'s content while keeping this slot's persisted id."""

        return replace(other, entry_id=self.entry_id)

    def cleared(self) -> "SlotState":
        return SlotState(entry_id=self.entry_id)


def _coerce(changes: Dict[str, Any]) -> Dict[str, Any]:
    allowed = {f.name for f in fields(SlotState)} - {"entry_id"}
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unknown slot fields: {', '.join(sorted(unknown))}")
    result = dict(changes)
    if "entry_type" in result:
        result["entry_type"] = EntryType(result["entry_type"])
    if "leave_type" in result:
        result["leave_type"] = LeaveType(result["leave_type"]) if result["leave_type"] else None
    if "project_id" in result:
        result["project_id"] = result["project_id"] or None
    for name in ("description", "notes"):
        if name in result:
            result[name] = result[name] or ""
    return result


class SlotEditor:
    """Editable four-slot state for ``(subject, day)`` seeded from persisted entries."""

    def __init__(self, subject: Subject, day: DateLike, entries: Iterable[ScheduleEntry] = ()) -> None:
        self.subject = subject
        self.day: date = to_local_date(day)
        baseline = {slot: SlotState() for slot in TIME_SLOTS}
        key = date_key(self.day)
        for entry in entries:
            if entry.subject != subject or date_key(entry.date) != key:
                continue
            baseline[entry.time_slot] = SlotState.from_entry(entry)
        self.baseline: Dict[TimeSlot, SlotState] = baseline
        self.slots: Dict[TimeSlot, SlotState] = dict(baseline)
        self.active_slot: TimeSlot = TimeSlot.AM1

    @classmethod
    def open(cls, snapshot: Any, subject: Subject, day: DateLike) -> "SlotEditor":
        """Open the cell using a loaded snapshot's cell index."""

        return cls(subject, day, snapshot.entries_for_cell(subject, day))

    # -- Slot access ----------------------------------------------------------------
    def __getitem__(self, slot: TimeSlot) -> SlotState:
        return self.slots[TimeSlot(slot)]

    @property
    def active(self) -> SlotState:
        return self.slots[self.active_slot]

    def select(self, slot: TimeSlot) -> None:
        self.active_slot = TimeSlot(slot)

    def update(self, slot: Optional[TimeSlot] = None, **changes: Any) -> SlotState:
        """Change content fields of *slot* (the active slot by default)."""

        target = TimeSlot(slot) if slot is not None else self.active_slot
        self.slots[target] = replace(self.slots[target], **_coerce(changes))
        return self.slots[target]

    def occupied_slots(self) -> List[Tuple[TimeSlot, SlotState]]:
        return [(slot, self.slots[slot]) for slot in TIME_SLOTS if self.slots[slot].occupied]

    @property
    def is_dirty(self) -> bool:
        return any(
            not self.slots[slot].same_content(self.baseline[slot])
            or self.slots[slot].entry_id != self.baseline[slot].entry_id
            for slot in TIME_SLOTS
        )

    # -- Quick actions --------------------------------------------------------------
    def fill_day(self) -> None:
        """Copy the active slot's content into all four slots."""

        source = self.active
        for slot in TIME_SLOTS:
            self.slots[slot] = self.slots[slot].with_content_of(source)

    def fill_empty(self) -> None:
        """Copy the active slot's content into the unoccupied slots only."""

        source = self.active
        for slot in TIME_SLOTS:
            if not self.slots[slot].occupied:
                self.slots[slot] = self.slots[slot].with_content_of(source)

    def clear_day(self) -> None:
        for slot in TIME_SLOTS:
            self.slots[slot] = self.slots[slot].cleared()

    def clear_slot(self, slot: Optional[TimeSlot] = None) -> None:
        target = TimeSlot(slot) if slot is not None else self.active_slot
        self.slots[target] = self.slots[target].cleared()
