import asyncio
from datetime import date, timedelta

import pytest

from conftest import ALEX, MONDAY, P2, FakeBackend, make_entry
from crewboard.domain.models import PublicHoliday, TimeSlot
from crewboard.services.propagation import PropagationError, propagate, propagation_targets
from crewboard.services.slot_editor import SlotEditor


def test_targets_rest_of_working_week():
    assert propagation_targets(MONDAY) == [MONDAY + timedelta(days=n) for n in range(1, 5)]


def test_targets_include_weekend_when_shown_and_skip_holidays():
    holidays = [PublicHoliday(date(2025, 3, 5), "Show Day")]
    targets = propagation_targets(MONDAY, show_weekends=True, holidays=holidays)
    assert date(2025, 3, 5) not in targets
    assert targets[-1] == date(2025, 3, 9)
    assert len(targets) == 5


def test_copy_monday_to_rest_of_week_is_upsert_only():
    existing = [make_entry(MONDAY + timedelta(days=n), TimeSlot.PM1, project=P2) for n in range(1, 5)]
    backend = FakeBackend(existing)
    editor = SlotEditor(ALEX, MONDAY)
    editor.update(TimeSlot.AM1, project_id="p1")

    result = asyncio.run(propagate(backend, editor, show_weekends=False))

    assert backend.call_names() == ["bulk_upsert"]
    (_, upserts), = backend.mutations()
    assert len(upserts) == 4
    assert {entry.time_slot for entry in upserts} == {TimeSlot.AM1}
    assert sorted(entry.date for entry in upserts) == result.targets
    for n in range(1, 5):
        day = MONDAY + timedelta(days=n)
        assert backend.find(day, TimeSlot.AM1, ALEX).project.id == "p1"
        assert backend.find(day, TimeSlot.PM1, ALEX).project.id == "p2"


def test_empty_source_slots_do_not_clear_targets():
    tuesday = MONDAY + timedelta(days=1)
    backend = FakeBackend([make_entry(tuesday, TimeSlot.AM1, entry_id="keep", project=P2)])
    editor = SlotEditor(ALEX, MONDAY)
    editor.update(TimeSlot.PM2, entry_type="office")

    asyncio.run(propagate(backend, editor))

    assert "delete_entry" not in backend.call_names()
    assert backend.find(tuesday, TimeSlot.AM1, ALEX).id == "keep"


def test_nothing_to_copy_makes_no_call():
    backend = FakeBackend()
    editor = SlotEditor(ALEX, MONDAY)
    result = asyncio.run(propagate(backend, editor))
    assert backend.calls == []
    assert result.upserts == []

    friday = SlotEditor(ALEX, MONDAY + timedelta(days=4))
    friday.update(project_id="p1")
    assert asyncio.run(propagate(backend, friday)).targets == []
    assert backend.calls == []


def test_failed_copy_raises():
    backend = FakeBackend()
    backend.fail_upsert = True
    editor = SlotEditor(ALEX, MONDAY)
    editor.update(project_id="p1")
    with pytest.raises(PropagationError):
        asyncio.run(propagate(backend, editor))
