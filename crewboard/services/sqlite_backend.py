"""SQLite implementation of :class:`ScheduleBackend` over the dao modules."""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..dao import calendar_dao, contractors_dao, db, groups_dao, people_dao, schedule_dao
from ..domain.dates import date_key, to_local_date
from ..domain.models import (
    Contractor,
    ContractorCategory,
    Member,
    Project,
    PublicHoliday,
    ScheduleEntry,
    TechnicianGroup,
    subject_for,
)
from ..domain.payloads import entry_from_dict, entry_to_dict
from .backend import UPSERT, BackendError, ScheduleData
from .store import EXCLUDED_PROJECT_STATUSES

logger = logging.getLogger(__name__)


def contractor_from_row(row: Mapping[str, Any]) -> Contractor:
    return Contractor(
        id=row["id"],
        name=row["name"],
        company=row.get("company") or "",
        phone=row.get("phone") or "",
        email=row.get("email") or "",
        category=ContractorCategory(row.get("category") or "contractor"),
        notes=row.get("notes") or "",
        is_active=bool(row.get("is_active", True)),
        display_order=int(row.get("display_order", 0)),
    )


def project_from_row(row: Mapping[str, Any]) -> Project:
    return Project(id=row["id"], name=row["name"], client_name=row.get("client_name"), status=row["status"])


def holiday_from_row(row: Mapping[str, Any]) -> PublicHoliday:
    return PublicHoliday(date=to_local_date(row["date"]), name=row["name"], state=row.get("state"), id=row.get("id"))


def groups_from_rows(group_rows: Sequence[Mapping[str, Any]], member_rows: Sequence[Mapping[str, Any]]) -> List[TechnicianGroup]:
    members_by_group: Dict[str, List[Member]] = defaultdict(list)
    for row in member_rows:
        if not row["subject_id"] or row["name"] is None:
            continue
        members_by_group[row["group_id"]].append(
            Member(
                subject=subject_for(row["member_type"], row["subject_id"]),
                name=row["name"],
                role=row.get("role"),
                display_order=int(row["display_order"]),
                is_active=bool(row["is_active"]),
            )
        )
    return [
        TechnicianGroup(
            id=row["id"],
            name=row["name"],
            description=row.get("description") or "",
            display_order=int(row.get("display_order", 0)),
            colour=row.get("colour") or "#6b7280",
            is_active=bool(row.get("is_active", True)),
            members=members_by_group.get(row["id"], []),
        )
        for row in group_rows
    ]


class SqliteScheduleBackend:
    """Backend bound to the Flask application context's SQLite connection."""

    def __init__(self, *, holiday_state: Optional[str] = None) -> None:
        self.holiday_state = holiday_state

    async def fetch_groups(self) -> List[TechnicianGroup]:
        try:
            group_rows = groups_dao.list_groups()
            member_rows = groups_dao.list_members([row["id"] for row in group_rows])
        except db.DatabaseError as exc:
            raise BackendError(f"Failed to fetch groups: {exc}") from exc
        return groups_from_rows(group_rows, member_rows)

    async def fetch_schedule(self, start: date, end: date) -> ScheduleData:
        try:
            entry_rows = schedule_dao.list_entries(date_key(start), date_key(end))
            holiday_rows = calendar_dao.list_holidays(date_key(start), date_key(end), self.holiday_state)
        except db.DatabaseError as exc:
            raise BackendError(f"Failed to fetch schedule: {exc}") from exc
        return ScheduleData(
            entries=[entry_from_dict(row) for row in entry_rows],
            holidays=[holiday_from_row(row) for row in holiday_rows],
        )

    async def fetch_projects(self) -> List[Project]:
        try:
            rows = people_dao.list_projects(exclude_statuses=sorted(EXCLUDED_PROJECT_STATUSES))
        except db.DatabaseError as exc:
            raise BackendError(f"Failed to fetch projects: {exc}") from exc
        return [project_from_row(row) for row in rows]

    async def fetch_contractors(self) -> List[Contractor]:
        try:
            rows = contractors_dao.list_contractors(active=True)
        except db.DatabaseError as exc:
            raise BackendError(f"Failed to fetch contractors: {exc}") from exc
        return [contractor_from_row(row) for row in rows]

    async def bulk_upsert(self, entries: Sequence[ScheduleEntry], mode: str = UPSERT) -> List[ScheduleEntry]:
        if mode != UPSERT:
            raise BackendError(f"Unsupported bulk mode: {mode}")
        payload = [entry_to_dict(entry) for entry in entries]
        try:
            ids = schedule_dao.upsert_entries(payload)
            rows = [schedule_dao.get_entry(entry_id) for entry_id in ids]
        except db.DatabaseError as exc:
            raise BackendError(f"Failed to save entries: {exc}") from exc
        logger.debug("Upserted %d schedule entries", len(ids))
        return [entry_from_dict(row) for row in rows if row]

    async def delete_entry(self, entry_id: str) -> None:
        try:
            schedule_dao.delete_entry(entry_id)
        except (db.DatabaseError, schedule_dao.EntryNotFoundError) as exc:
            raise BackendError(f"Failed to delete entry {entry_id}: {exc}") from exc
