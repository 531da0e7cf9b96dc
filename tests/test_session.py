import asyncio
from datetime import date, timedelta

import pytest

from conftest import ALEX, MONDAY, FakeBackend, make_entry
from crewboard.domain.models import PublicHoliday, TimeSlot, ViewMode
from crewboard.services.backend import BackendError
from crewboard.services.reconcile import SaveError
from crewboard.services.render import CompactCell, HolidayCell
from crewboard.services.session import CellLockedError, NoOpenCellError, ScheduleSession
from crewboard.services.store import LoadError, load_snapshot


def make_session(backend, **kwargs) -> ScheduleSession:
    return ScheduleSession(backend, cursor=MONDAY + timedelta(days=2), today=MONDAY, **kwargs)


def test_load_builds_snapshot_for_week():
    backend = FakeBackend([make_entry(MONDAY, TimeSlot.AM1, entry_id="e1")])
    session = make_session(backend)
    snapshot = asyncio.run(session.load())

    assert session.range == (MONDAY, MONDAY + timedelta(days=6))
    assert snapshot.entries_for_cell(ALEX, MONDAY)[0].id == "e1"
    assert [p.id for p in snapshot.projects] == ["p1"]
    assert session.error is None


def test_failed_load_keeps_previous_snapshot():
    backend = FakeBackend()
    session = make_session(backend)
    first = asyncio.run(session.load())

    backend.fail_fetch = "fetch_projects"
    assert asyncio.run(session.navigate(1)) is None
    assert session.snapshot is first
    assert "fetch_projects" in session.error
    assert session.loading is False


def test_navigation_and_view_mode():
    backend = FakeBackend()
    session = make_session(backend)
    asyncio.run(session.set_view_mode(ViewMode.MONTH))
    assert session.range == (date(2025, 2, 24), date(2025, 4, 6))
    asyncio.run(session.navigate(1))
    assert session.cursor == date(2025, 4, 1)
    asyncio.run(session.go_to_today())
    assert session.cursor == MONDAY


def test_holiday_cell_is_locked():
    backend = FakeBackend([make_entry(MONDAY, TimeSlot.AM1)], holidays=[PublicHoliday(MONDAY, "Labour Day")])
    session = make_session(backend)
    asyncio.run(session.load())

    assert isinstance(session.cell_summary(ALEX, MONDAY), HolidayCell)
    assert not session.is_editable(MONDAY)
    with pytest.raises(CellLockedError):
        session.open_cell(ALEX, MONDAY)
    assert session.editor is None


def test_save_closes_editor_and_reloads():
    backend = FakeBackend()
    session = make_session(backend)
    asyncio.run(session.load())
    editor = session.open_cell(ALEX, MONDAY)
    editor.update(project_id="p1")

    asyncio.run(session.save())

    assert session.editor is None
    assert backend.call_names().count("fetch_schedule") == 2
    assert isinstance(session.cell_summary(ALEX, MONDAY), CompactCell)


def test_failed_save_keeps_editor_open():
    backend = FakeBackend()
    backend.fail_upsert = True
    session = make_session(backend)
    asyncio.run(session.load())
    editor = session.open_cell(ALEX, MONDAY)
    editor.update(entry_type="training")

    with pytest.raises(SaveError):
        asyncio.run(session.save())
    assert session.editor is editor
    assert session.editor_error == "upsert rejected"
    assert session.saving is False


def test_result_of_save_after_close_is_not_observed():
    backend = FakeBackend([make_entry(MONDAY, TimeSlot.AM2, entry_id="e2")])
    backend.fail_deletes = {"e2"}
    session = make_session(backend)
    asyncio.run(session.load())
    editor = session.open_cell(ALEX, MONDAY)
    editor.clear_slot(TimeSlot.AM2)
    editor.update(TimeSlot.AM1, project_id="p1")
    backend.on_upsert = session.close_cell

    result = asyncio.run(session.save())

    assert len(result.warnings) == 1
    assert session.warnings == []
    assert backend.call_names().count("fetch_schedule") == 1
    assert backend.find(MONDAY, TimeSlot.AM1, ALEX) is not None


def test_copy_to_rest_of_week_keeps_editor_open():
    backend = FakeBackend()
    session = make_session(backend)
    asyncio.run(session.load())
    editor = session.open_cell(ALEX, MONDAY)
    editor.update(project_id="p1")

    result = asyncio.run(session.copy_to_rest_of_week())

    assert len(result.upserts) == 4
    assert session.editor is editor
    assert backend.find(MONDAY, TimeSlot.AM1, ALEX) is None


def test_save_without_open_cell():
    session = make_session(FakeBackend())
    with pytest.raises(NoOpenCellError):
        asyncio.run(session.save())


def test_rows_follow_group_order_and_hide_inactive_members():
    session = make_session(FakeBackend())
    asyncio.run(session.load())
    rows = session.rows()
    assert [row.member.subject.id for row in rows] == ["t-alex", "t-bree", "c-sparks"]
    assert len(rows[0].cells) == 5
    assert [column.is_today for column in session.columns()] == [True, False, False, False, False]


class SlowFailingBackend(FakeBackend):
    def __init__(self):
        super().__init__()
        self.fail_fetch = "fetch_groups"
        self.schedule_finished = False

    async def fetch_schedule(self, start, end):
        await asyncio.sleep(0.01)
        self.schedule_finished = True
        raise BackendError("schedule timed out")


def test_load_waits_for_every_fetch_before_failing():
    backend = SlowFailingBackend()
    with pytest.raises(LoadError, match="fetch_groups unavailable"):
        asyncio.run(load_snapshot(backend, MONDAY, MONDAY + timedelta(days=6)))
    assert backend.schedule_finished
    assert {"fetch_groups", "fetch_projects", "fetch_contractors"} <= set(backend.call_names())
