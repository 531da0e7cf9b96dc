"""Contract of the persistence collaborator used by the scheduling core."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Protocol, Sequence

from ..domain.models import Contractor, Project, PublicHoliday, ScheduleEntry, TechnicianGroup

UPSERT = "upsert"


class BackendError(RuntimeError):
    """Raised by a backend when a persistence call fails."""


@dataclass
class ScheduleData:
    entries: List[ScheduleEntry] = field(default_factory=list)
    holidays: List[PublicHoliday] = field(default_factory=list)


class ScheduleBackend(Protocol):
    """Typed async calls the grid makes against persistence.

    Implementations raise :class:`BackendError` and nothing else.
    ``bulk_upsert`` writes by natural key ``(date, time_slot, subject)``.
    """

    async def fetch_groups(self) -> List[TechnicianGroup]: ...

    async def fetch_schedule(self, start: date, end: date) -> ScheduleData: ...

    async def fetch_projects(self) -> List[Project]: ...

    async def fetch_contractors(self) -> List[Contractor]: ...

    async def bulk_upsert(self, entries: Sequence[ScheduleEntry], mode: str = UPSERT) -> List[ScheduleEntry]: ...

    async def delete_entry(self, entry_id: str) -> None: ...
