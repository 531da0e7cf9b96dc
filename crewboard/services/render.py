"""Summaries of one grid cell for display.

A cell renders, in priority order, as a holiday marker, an empty
placeholder, one compact label when its entries are uniform, or a 2x2
mini grid of its time slots.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..domain.entry_types import ENTRY_TYPES, HOLIDAY_BG, background_for, leave_short_label
from ..domain.models import TIME_SLOTS, EntryType, PublicHoliday, ScheduleEntry, TimeSlot

DEFAULT_LABEL_BUDGET = 12
MINI_LABEL_BUDGET = 4
ELLIPSIS = "…"
EMPTY_MARK = "—"


@dataclass(frozen=True)
class HolidayCell:
    name: str
    icon: str = ENTRY_TYPES[EntryType.PUBLIC_HOLIDAY].icon
    bg: str = HOLIDAY_BG
    text: str = ENTRY_TYPES[EntryType.PUBLIC_HOLIDAY].text
    kind: str = "holiday"
    editable: bool = False


@dataclass(frozen=True)
class EmptyCell:
    label: str = EMPTY_MARK
    kind: str = "empty"
    editable: bool = True


@dataclass(frozen=True)
class CompactCell:
    label: str
    entry_type: EntryType
    bg: str
    text: str
    has_notes: bool = False
    kind: str = "compact"
    editable: bool = True


@dataclass(frozen=True)
class MiniSlot:
    slot: TimeSlot
    label: str
    bg: Optional[str] = None
    text: Optional[str] = None
    entry_type: Optional[EntryType] = None

    @property
    def is_empty(self) -> bool:
        return self.entry_type is None


@dataclass(frozen=True)
class MiniGridCell:
    slots: Tuple[MiniSlot, ...]
    kind: str = "mini-grid"
    editable: bool = True


CellSummary = Union[HolidayCell, EmptyCell, CompactCell, MiniGridCell]


def truncate(label: str, budget: int = DEFAULT_LABEL_BUDGET) -> str:
    if len(label) <= budget:
        return label
    return label[:budget] + ELLIPSIS


def _project_id(entry: ScheduleEntry) -> Optional[str]:
    return entry.project.id if entry.project else None


def is_uniform(entries: Sequence[ScheduleEntry]) -> bool:
    """One entry, or all four slots sharing the entry type and project."""

    if len(entries) == 1:
        return True
    if len(entries) != len(TIME_SLOTS):
        return False
    first = entries[0]
    return all(
        entry.entry_type is first.entry_type and _project_id(entry) == _project_id(first)
        for entry in entries
    )


def compact_label(entry: ScheduleEntry) -> str:
    if entry.entry_type is EntryType.PROJECT:
        return (entry.project.name if entry.project else None) or "Project"
    if entry.entry_type is EntryType.LEAVE:
        return leave_short_label(entry.leave_type)
    return ENTRY_TYPES[entry.entry_type].label


def _mini_slot(slot: TimeSlot, entry: Optional[ScheduleEntry]) -> MiniSlot:
    if entry is None:
        return MiniSlot(slot=slot, label=EMPTY_MARK)
    style = ENTRY_TYPES[entry.entry_type]
    if entry.entry_type is EntryType.PROJECT:
        name = entry.project.name if entry.project else None
        label = name[:MINI_LABEL_BUDGET] if name else "PRJ"
    else:
        label = style.icon
    return MiniSlot(
        slot=slot,
        label=label,
        bg=background_for(entry.entry_type, entry.leave_type),
        text=style.text,
        entry_type=entry.entry_type,
    )


def summarize_cell(entries: Sequence[ScheduleEntry], holiday: Optional[PublicHoliday] = None,
                   label_budget: int = DEFAULT_LABEL_BUDGET) -> CellSummary:
    if holiday is not None:
        return HolidayCell(name=holiday.name)
    if not entries:
        return EmptyCell()

    ordered = sorted(entries, key=lambda entry: TIME_SLOTS.index(entry.time_slot))
    if is_uniform(ordered):
        entry = ordered[0]
        return CompactCell(
            label=truncate(compact_label(entry), label_budget),
            entry_type=entry.entry_type,
            bg=background_for(entry.entry_type, entry.leave_type),
            text=ENTRY_TYPES[entry.entry_type].text,
            has_notes=any(e.notes for e in ordered),
        )

    by_slot = {entry.time_slot: entry for entry in ordered}
    return MiniGridCell(slots=tuple(_mini_slot(slot, by_slot.get(slot)) for slot in TIME_SLOTS))


def summary_to_dict(summary: CellSummary) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"kind": summary.kind, "editable": summary.editable}
    if isinstance(summary, HolidayCell):
        payload.update(label=summary.name, icon=summary.icon, bg=summary.bg, text=summary.text)
    elif isinstance(summary, EmptyCell):
        payload["label"] = summary.label
    elif isinstance(summary, CompactCell):
        payload.update(
            label=summary.label,
            entry_type=summary.entry_type.value,
            bg=summary.bg,
            text=summary.text,
            has_notes=summary.has_notes,
        )
    else:
        payload["slots"] = [
            {
                "slot": mini.slot.value,
                "label": mini.label,
                "bg": mini.bg,
                "text": mini.text,
                "entry_type": mini.entry_type.value if mini.entry_type else None,
            }
            for mini in summary.slots
        ]
    return payload
