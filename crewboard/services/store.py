"""Read-only snapshot of the visible scheduling window."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from ..domain.dates import DateLike
from ..domain.models import Contractor, Project, PublicHoliday, ScheduleEntry, Subject, TechnicianGroup
from . import cell_index
from .backend import BackendError, ScheduleBackend

logger = logging.getLogger(__name__)

EXCLUDED_PROJECT_STATUSES = frozenset({"completed"})


class LoadError(RuntimeError):
    """Raised when any of the snapshot fetches fails."""


@dataclass(frozen=True)
class ScheduleSnapshot:
    start: date
    end: date
    groups: Tuple[TechnicianGroup, ...] = ()
    entries: Tuple[ScheduleEntry, ...] = ()
    holidays: Tuple[PublicHoliday, ...] = ()
    projects: Tuple[Project, ...] = ()
    contractors: Tuple[Contractor, ...] = ()
    _projects_by_id: Dict[str, Project] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._projects_by_id.update({project.id: project for project in self.projects})

    def entries_for_cell(self, subject: "Subject | str", day: DateLike) -> List[ScheduleEntry]:
        return cell_index.entries_for_cell(self.entries, subject, day)

    def holiday_for(self, day: DateLike) -> Optional[PublicHoliday]:
        return cell_index.holiday_for(self.holidays, day)

    def project(self, project_id: Optional[str]) -> Optional[Project]:
        if not project_id:
            return None
        return self._projects_by_id.get(project_id)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


async def load_snapshot(backend: ScheduleBackend, start: date, end: date) -> ScheduleSnapshot:
    """Fetch groups, schedule data, projects and contractors concurrently.

    Any failing fetch aborts the whole load with :class:`LoadError`; no
    partial snapshot is ever returned.
    """

    results = await asyncio.gather(
        backend.fetch_groups(),
        backend.fetch_schedule(start, end),
        backend.fetch_projects(),
        backend.fetch_contractors(),
        return_exceptions=True,
    )
    failures = [result for result in results if isinstance(result, BaseException)]
    for failure in failures:
        if not isinstance(failure, BackendError):
            raise failure
    if failures:
        exc = failures[0]
        logger.error("Schedule load for %s..%s failed: %s", start, end, exc)
        raise LoadError(str(exc) or "Failed to load schedule") from exc
    groups, schedule, projects, contractors = results

    snapshot = ScheduleSnapshot(
        start=start,
        end=end,
        groups=tuple(groups),
        entries=tuple(schedule.entries),
        holidays=tuple(schedule.holidays),
        projects=tuple(p for p in projects if p.status not in EXCLUDED_PROJECT_STATUSES),
        contractors=tuple(contractors),
    )
    logger.debug(
        "Loaded %d entries, %d holidays, %d groups for %s..%s",
        len(snapshot.entries),
        len(snapshot.holidays),
        len(snapshot.groups),
        start,
        end,
    )
    return snapshot
