"""Diff a cell's working slots against its persisted entries and apply the result.

A save produces two batches: deletes for persisted entries whose slot was
vacated (or whose entry type changed) and upserts for occupied slots whose
content differs from what was persisted. Deletes run first and are
best-effort; the upsert batch is the part that must succeed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from ..domain.models import TIME_SLOTS, EntryType, ProjectRef, ScheduleEntry, Subject, TimeSlot
from .backend import UPSERT, BackendError, ScheduleBackend
from .slot_editor import SlotEditor, SlotState

logger = logging.getLogger(__name__)


class SaveError(RuntimeError):
    """Raised when the upsert half of a save fails."""


@dataclass(frozen=True)
class SoftFailure:
    entry_id: str
    message: str


@dataclass(frozen=True)
class SavePlan:
    upserts: Tuple[ScheduleEntry, ...] = ()
    deletes: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.upserts and not self.deletes


@dataclass
class SaveResult:
    saved: List[ScheduleEntry] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    warnings: List[SoftFailure] = field(default_factory=list)


def build_entry(subject: Subject, day: date, slot: TimeSlot, state: SlotState,
                project_name: Optional[str] = None) -> ScheduleEntry:
    """Upsert payload for one occupied slot.

    Only the payload matching the entry type is carried: a project for
    project entries, a leave type for leave entries.
    """

    is_project = state.entry_type is EntryType.PROJECT
    return ScheduleEntry(
        date=day,
        time_slot=slot,
        subject=subject,
        entry_type=state.entry_type,
        project=ProjectRef(state.project_id, project_name) if is_project and state.project_id else None,
        leave_type=state.leave_type if state.entry_type is EntryType.LEAVE else None,
        description=state.description,
        notes=state.notes,
    )


def plan_save(editor: SlotEditor) -> SavePlan:
    upserts: List[ScheduleEntry] = []
    deletes: List[str] = []
    for slot in TIME_SLOTS:
        current = editor.slots[slot]
        base = editor.baseline[slot]
        if not current.occupied:
            if current.entry_id:
                deletes.append(current.entry_id)
            continue
        if current.entry_id and current.entry_id == base.entry_id and current.same_content(base):
            continue
        if current.entry_id and base.entry_id == current.entry_id and base.entry_type is not current.entry_type:
            # the slot changes role: drop the old row before writing the new one
            deletes.append(current.entry_id)
        upserts.append(build_entry(editor.subject, editor.day, slot, current))
    return SavePlan(upserts=tuple(upserts), deletes=tuple(deletes))


async def apply_save(backend: ScheduleBackend, plan: SavePlan) -> SaveResult:
    """Run *plan*: every delete first, then one bulk upsert.

    A failing delete is logged and reported in ``SaveResult.warnings``; the
    remaining deletes and the upsert still run. A failing upsert raises
    :class:`SaveError`.
    """

    result = SaveResult()
    for entry_id in plan.deletes:
        try:
            await backend.delete_entry(entry_id)
        except BackendError as exc:
            logger.warning("Could not delete schedule entry %s: %s", entry_id, exc)
            result.warnings.append(SoftFailure(entry_id, str(exc)))
        else:
            result.deleted.append(entry_id)

    if plan.upserts:
        try:
            result.saved = list(await backend.bulk_upsert(list(plan.upserts), UPSERT))
        except BackendError as exc:
            logger.error("Saving %d schedule entries failed: %s", len(plan.upserts), exc)
            raise SaveError(str(exc) or "Failed to save") from exc
    return result


async def save_cell(backend: ScheduleBackend, editor: SlotEditor) -> SaveResult:
    plan = plan_save(editor)
    if plan.is_empty:
        return SaveResult()
    result = await apply_save(backend, plan)
    logger.info(
        "Saved cell %s %s on %s: %d upserted, %d deleted, %d warnings",
        editor.subject.kind,
        editor.subject.id,
        editor.day,
        len(result.saved),
        len(result.deleted),
        len(result.warnings),
    )
    return result
