from __future__ import annotations

import uuid
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

import pytest

from crewboard import create_app
from crewboard.domain.models import (
    ContractorRef,
    EntryType,
    LeaveType,
    Member,
    Project,
    ProjectRef,
    PublicHoliday,
    ScheduleEntry,
    TechnicianGroup,
    TechnicianRef,
    TimeSlot,
)
from crewboard.services.backend import UPSERT, BackendError, ScheduleData

MONDAY = date(2025, 3, 3)

ALEX = TechnicianRef("t-alex")
BREE = TechnicianRef("t-bree")
SPARKS = ContractorRef("c-sparks")

P1 = ProjectRef("p1", "Harbour View Residence")
P2 = ProjectRef("p2", "Cinema")


def make_entry(day: date, slot: TimeSlot, subject=ALEX, *, entry_id: Optional[str] = None,
               entry_type: EntryType = EntryType.PROJECT, project: Optional[ProjectRef] = P1,
               leave_type: Optional[LeaveType] = None, notes: str = "") -> ScheduleEntry:
    return ScheduleEntry(
        date=day,
        time_slot=slot,
        subject=subject,
        entry_type=entry_type,
        project=project if entry_type is EntryType.PROJECT else None,
        leave_type=leave_type,
        notes=notes,
        id=entry_id,
    )


class FakeBackend:
    """In-memory backend recording every call in order."""

    def __init__(self, entries: Sequence[ScheduleEntry] = (), holidays: Sequence[PublicHoliday] = ()) -> None:
        self.entries: Dict[str, ScheduleEntry] = {}
        for entry in entries:
            entry_id = entry.id or uuid.uuid4().hex
            self.entries[entry_id] = _with_id(entry, entry_id)
        self.holidays = list(holidays)
        self.groups = [
            TechnicianGroup(
                id="g1",
                name="Install Team",
                members=[
                    Member(ALEX, "Alex Morgan", role="SUP", display_order=0),
                    Member(BREE, "Bree Walker", display_order=1),
                    Member(TechnicianRef("t-gone"), "Former Tech", display_order=2, is_active=False),
                ],
            ),
            TechnicianGroup(id="g2", name="Contractors", display_order=1, members=[Member(SPARKS, "Sam Sparks")]),
        ]
        self.projects = [Project("p1", "Harbour View Residence"), Project("p9", "Old job", status="completed")]
        self.calls: List[Tuple[str, object]] = []
        self.fail_fetch: Optional[str] = None
        self.fail_upsert = False
        self.fail_deletes: Set[str] = set()
        self.on_upsert: Optional[Callable[[], None]] = None

    def _fetch(self, name: str) -> None:
        self.calls.append((name, None))
        if self.fail_fetch == name:
            raise BackendError(f"{name} unavailable")

    async def fetch_groups(self):
        self._fetch("fetch_groups")
        return list(self.groups)

    async def fetch_schedule(self, start: date, end: date):
        self._fetch("fetch_schedule")
        return ScheduleData(
            entries=[e for e in self.entries.values() if start <= e.date <= end],
            holidays=[h for h in self.holidays if start <= h.date <= end],
        )

    async def fetch_projects(self):
        self._fetch("fetch_projects")
        return list(self.projects)

    async def fetch_contractors(self):
        self._fetch("fetch_contractors")
        return []

    async def bulk_upsert(self, entries, mode=UPSERT):
        self.calls.append(("bulk_upsert", list(entries)))
        if self.on_upsert is not None:
            self.on_upsert()
        if self.fail_upsert:
            raise BackendError("upsert rejected")
        saved = []
        for entry in entries:
            existing = self.find(entry.date, entry.time_slot, entry.subject)
            entry_id = existing.id if existing else uuid.uuid4().hex
            self.entries[entry_id] = _with_id(entry, entry_id)
            saved.append(self.entries[entry_id])
        return saved

    async def delete_entry(self, entry_id):
        self.calls.append(("delete_entry", entry_id))
        if entry_id in self.fail_deletes or entry_id not in self.entries:
            raise BackendError(f"cannot delete {entry_id}")
        del self.entries[entry_id]

    # -- helpers for assertions --
    def find(self, day: date, slot: TimeSlot, subject) -> Optional[ScheduleEntry]:
        for entry in self.entries.values():
            if entry.natural_key == (day.isoformat(), slot.value, subject.kind, subject.id):
                return entry
        return None

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def mutations(self) -> List[Tuple[str, object]]:
        return [call for call in self.calls if call[0] in {"bulk_upsert", "delete_entry"}]


def _with_id(entry: ScheduleEntry, entry_id: str) -> ScheduleEntry:
    return ScheduleEntry(
        date=entry.date,
        time_slot=entry.time_slot,
        subject=entry.subject,
        entry_type=entry.entry_type,
        project=entry.project,
        leave_type=entry.leave_type,
        description=entry.description,
        notes=entry.notes,
        id=entry_id,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def app(tmp_path: Path):
    db_path = tmp_path / "test.sqlite"
    app = create_app({
        "TESTING": True,
        "DATABASE": str(db_path),
        "AUTO_INIT_DB": True,
    })
    yield app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client
