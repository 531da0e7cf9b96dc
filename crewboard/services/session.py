"""Explicit state of one person's view of the scheduling grid.

A :class:`ScheduleSession` owns the navigation cursor, the loaded snapshot
and at most one open cell editor. Every persistence call goes through the
backend it was built with.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from ..domain.dates import DateLike, is_today, is_weekend, shift_cursor, to_local_date, visible_days, visible_range
from ..domain.models import Member, Subject, TechnicianGroup, ViewMode
from .backend import ScheduleBackend
from .propagation import PropagationError, PropagationResult, propagate
from .reconcile import SaveError, SaveResult, SoftFailure, save_cell
from .render import DEFAULT_LABEL_BUDGET, CellSummary, summarize_cell
from .slot_editor import SlotEditor
from .store import LoadError, ScheduleSnapshot, load_snapshot

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    pass


class CellLockedError(SessionError):
    """Raised when opening a cell that sits on a public holiday."""


class NoOpenCellError(SessionError):
    pass


@dataclass(frozen=True)
class GridColumn:
    date: date
    is_today: bool
    is_weekend: bool
    holiday: Optional[str] = None


@dataclass(frozen=True)
class GridRow:
    group: TechnicianGroup
    member: Member
    cells: Tuple[Tuple[date, CellSummary], ...]


class ScheduleSession:
    def __init__(
        self,
        backend: ScheduleBackend,
        cursor: Optional[DateLike] = None,
        view_mode: ViewMode = ViewMode.WEEK,
        show_weekends: bool = False,
        label_budget: int = DEFAULT_LABEL_BUDGET,
        today: Optional[date] = None,
    ) -> None:
        self.backend = backend
        self.today = today or date.today()
        self.cursor: date = to_local_date(cursor) if cursor is not None else self.today
        self.view_mode = ViewMode(view_mode)
        self.show_weekends = show_weekends
        self.label_budget = label_budget

        self.snapshot: Optional[ScheduleSnapshot] = None
        self.error: Optional[str] = None
        self.loading = False

        self.editor: Optional[SlotEditor] = None
        self.editor_error: Optional[str] = None
        self.warnings: List[SoftFailure] = []
        self.saving = False
        self.propagating = False

    # -- Navigation and loading -----------------------------------------------------
    @property
    def range(self) -> Tuple[date, date]:
        return visible_range(self.cursor, self.view_mode)

    def visible_days(self) -> List[date]:
        return visible_days(self.cursor, self.view_mode, self.show_weekends)

    async def load(self) -> Optional[ScheduleSnapshot]:
        """Replace the snapshot for the current range.

        On failure the error is recorded in :attr:`error` and the previous
        snapshot stays in place.
        """

        start, end = self.range
        self.loading = True
        self.error = None
        try:
            self.snapshot = await load_snapshot(self.backend, start, end)
        except LoadError as exc:
            self.error = str(exc)
            return None
        finally:
            self.loading = False
        return self.snapshot

    async def navigate(self, step: int) -> Optional[ScheduleSnapshot]:
        self.cursor = shift_cursor(self.cursor, self.view_mode, step)
        return await self.load()

    async def go_to_today(self) -> Optional[ScheduleSnapshot]:
        self.cursor = self.today
        return await self.load()

    async def set_view_mode(self, view_mode: ViewMode) -> Optional[ScheduleSnapshot]:
        self.view_mode = ViewMode(view_mode)
        return await self.load()

    def set_show_weekends(self, show_weekends: bool) -> None:
        self.show_weekends = show_weekends

    # -- Editing --------------------------------------------------------------------
    def _require_snapshot(self) -> ScheduleSnapshot:
        if self.snapshot is None:
            raise SessionError("Schedule has not been loaded")
        return self.snapshot

    def _require_editor(self) -> SlotEditor:
        if self.editor is None:
            raise NoOpenCellError("No cell is open")
        return self.editor

    def open_cell(self, subject: Subject, day: DateLike) -> SlotEditor:
        snapshot = self._require_snapshot()
        holiday = snapshot.holiday_for(day)
        if holiday is not None:
            raise CellLockedError(f"{to_local_date(day)} is a public holiday ({holiday.name})")
        self.editor = SlotEditor.open(snapshot, subject, day)
        self.editor_error = None
        return self.editor

    def close_cell(self) -> None:
        self.editor = None
        self.editor_error = None

    async def save(self) -> SaveResult:
        """Reconcile the open cell, then close it and reload.

        A failed upsert keeps the editor open with :attr:`editor_error` set
        and re-raises :class:`SaveError`. If the cell was closed while the
        save was in flight its result is returned but not applied here.
        """

        editor = self._require_editor()
        self.saving = True
        self.editor_error = None
        try:
            result = await save_cell(self.backend, editor)
        except SaveError as exc:
            if self.editor is editor:
                self.editor_error = str(exc)
            raise
        finally:
            self.saving = False

        if self.editor is not editor:
            logger.debug("Save for %s on %s finished after its cell was closed", editor.subject.id, editor.day)
            return result
        self.warnings = list(result.warnings)
        self.close_cell()
        await self.load()
        return result

    async def copy_to_rest_of_week(self) -> PropagationResult:
        """Upsert the open cell's occupied slots onto the rest of its week.

        The editor stays open; the snapshot is reloaded on success.
        """

        editor = self._require_editor()
        snapshot = self._require_snapshot()
        self.propagating = True
        self.editor_error = None
        try:
            result = await propagate(
                self.backend,
                editor,
                show_weekends=self.show_weekends,
                holidays=snapshot.holidays,
            )
        except PropagationError as exc:
            if self.editor is editor:
                self.editor_error = str(exc)
            raise
        finally:
            self.propagating = False

        if result.upserts and self.editor is editor:
            await self.load()
        return result

    # -- Presentation ---------------------------------------------------------------
    def cell_summary(self, subject: Subject, day: DateLike) -> CellSummary:
        snapshot = self._require_snapshot()
        return summarize_cell(
            snapshot.entries_for_cell(subject, day),
            snapshot.holiday_for(day),
            label_budget=self.label_budget,
        )

    def is_editable(self, day: DateLike) -> bool:
        return self._require_snapshot().holiday_for(day) is None

    def columns(self) -> List[GridColumn]:
        snapshot = self._require_snapshot()
        columns = []
        for day in self.visible_days():
            holiday = snapshot.holiday_for(day)
            columns.append(
                GridColumn(
                    date=day,
                    is_today=is_today(day, self.today),
                    is_weekend=is_weekend(day),
                    holiday=holiday.name if holiday else None,
                )
            )
        return columns

    def rows(self) -> List[GridRow]:
        """One row per active member of each active group, in display order."""

        snapshot = self._require_snapshot()
        days = self.visible_days()
        rows = []
        for group in sorted(snapshot.groups, key=lambda g: g.display_order):
            if not group.is_active:
                continue
            for member in group.active_members():
                cells = tuple((day, self.cell_summary(member.subject, day)) for day in days)
                rows.append(GridRow(group=group, member=member, cells=cells))
        return rows

    def describe(self) -> Dict[str, Any]:
        start, end = self.range
        return {
            "cursor": self.cursor.isoformat(),
            "view_mode": self.view_mode.value,
            "show_weekends": self.show_weekends,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "error": self.error,
            "warnings": [{"entry_id": w.entry_id, "message": w.message} for w in self.warnings],
        }
