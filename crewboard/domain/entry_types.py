"""Display catalogue for entry and leave types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .models import EntryType, LeaveType

__all__ = [
    "ENTRY_TYPES",
    "LEAVE_TYPES",
    "EntryTypeStyle",
    "LeaveTypeStyle",
    "background_for",
    "leave_short_label",
]


@dataclass(frozen=True)
class EntryTypeStyle:
    label: str
    icon: str
    bg: str
    text: str


@dataclass(frozen=True)
class LeaveTypeStyle:
    label: str
    short: str
    bg: str


ENTRY_TYPES: Dict[EntryType, EntryTypeStyle] = {
    EntryType.PROJECT: EntryTypeStyle("Project", "\U0001F3D7", "#3b82f6", "#ffffff"),
    EntryType.LEAVE: EntryTypeStyle("Leave", "\U0001F3D6", "#22c55e", "#ffffff"),
    EntryType.TRAINING: EntryTypeStyle("Training", "\U0001F393", "#eab308", "#1f2937"),
    EntryType.MEETING: EntryTypeStyle("Meeting", "\U0001F465", "#6b7280", "#ffffff"),
    EntryType.OFFICE: EntryTypeStyle("Office", "\U0001F3E2", "#8b5cf6", "#ffffff"),
    EntryType.WFH: EntryTypeStyle("WFH", "\U0001F3E0", "#06b6d4", "#ffffff"),
    EntryType.QUOTING: EntryTypeStyle("Quoting", "\U0001F4CB", "#f97316", "#ffffff"),
    EntryType.SERVICE_MEETING: EntryTypeStyle("Service Meeting", "\U0001F527", "#ec4899", "#ffffff"),
    EntryType.UNASSIGNED: EntryTypeStyle("Unassigned", "❓", "#fbbf24", "#1f2937"),
    EntryType.PUBLIC_HOLIDAY: EntryTypeStyle("Public Holiday", "\U0001F389", "#d1d5db", "#4b5563"),
    EntryType.OTHER: EntryTypeStyle("Other", "\U0001F4DD", "#94a3b8", "#1f2937"),
}

LEAVE_TYPES: Dict[LeaveType, LeaveTypeStyle] = {
    LeaveType.ANNUAL: LeaveTypeStyle("Annual Leave", "AL", "#22c55e"),
    LeaveType.SICK: LeaveTypeStyle("Sick Leave", "SL", "#f97316"),
    LeaveType.PERSONAL: LeaveTypeStyle("Personal Leave", "PL", "#a855f7"),
    LeaveType.CARERS: LeaveTypeStyle("Carers Leave", "CL", "#ec4899"),
    LeaveType.COMPASSIONATE: LeaveTypeStyle("Compassionate", "CMP", "#6366f1"),
    LeaveType.TIME_LIEU: LeaveTypeStyle("Time in Lieu", "TIL", "#14b8a6"),
}

HOLIDAY_BG = ENTRY_TYPES[EntryType.PUBLIC_HOLIDAY].bg


def leave_short_label(leave_type: Optional[LeaveType]) -> str:
    """Short grid label for a leave type, ``Leave`` when none is set."""

    if leave_type is None:
        return "Leave"
    return LEAVE_TYPES[leave_type].short


def background_for(entry_type: EntryType, leave_type: Optional[LeaveType] = None) -> str:
    """Leave entries are coloured by their leave type, everything else by entry type."""

    if entry_type is EntryType.LEAVE and leave_type is not None:
        return LEAVE_TYPES[leave_type].bg
    return ENTRY_TYPES[entry_type].bg
