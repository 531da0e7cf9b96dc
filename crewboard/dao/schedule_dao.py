"""Data access for schedule entries."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from . import db

_ENTRY_COLUMNS = (
    "e.id, e.date, e.time_slot, e.technician_id, e.contractor_id, e.entry_type, "
    "e.project_id, COALESCE(e.project_name, p.client_name, p.name) AS project_name, "
    "e.leave_type, e.description, e.notes"
)


class EntryNotFoundError(Exception):
    """Raised when a schedule entry id does not exist."""


def _row_to_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "date": row["date"],
        "time_slot": row["time_slot"],
        "technician": row["technician_id"],
        "contractor": row["contractor_id"],
        "entry_type": row["entry_type"],
        "project": row["project_id"],
        "project_name": row["project_name"],
        "leave_type": row["leave_type"],
        "description": row["description"] or "",
        "notes": row["notes"] or "",
    }


def list_entries(
    start: str,
    end: str,
    *,
    technician_id: Optional[str] = None,
    contractor_id: Optional[str] = None,
    project_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    sql = (
        f"SELECT {_ENTRY_COLUMNS} FROM schedule_entries e "
        "LEFT JOIN projects p ON p.id = e.project_id "
        "WHERE e.date >= ? AND e.date <= ?"
    )
    params: list[Any] = [start, end]
    if technician_id:
        sql += " AND e.technician_id = ?"
        params.append(technician_id)
    if contractor_id:
        sql += " AND e.contractor_id = ?"
        params.append(contractor_id)
    if project_id:
        sql += " AND e.project_id = ?"
        params.append(project_id)
    sql += " ORDER BY e.date, e.time_slot"
    return [_row_to_dict(row) for row in db.query_all(sql, params)]


def list_project_entries(project_id: str, start: str, end: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = (
        f"SELECT {_ENTRY_COLUMNS} FROM schedule_entries e "
        "LEFT JOIN projects p ON p.id = e.project_id "
        "WHERE e.project_id = ? AND e.date >= ?"
    )
    params: list[Any] = [project_id, start]
    if end:
        sql += " AND e.date <= ?"
        params.append(end)
    sql += " ORDER BY e.date, e.time_slot"
    return [_row_to_dict(row) for row in db.query_all(sql, params)]


def get_entry(entry_id: str) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        f"SELECT {_ENTRY_COLUMNS} FROM schedule_entries e "
        "LEFT JOIN projects p ON p.id = e.project_id WHERE e.id = ?",
        (entry_id,),
    )
    return _row_to_dict(row) if row else None


def find_by_slots(day: str, slots: Sequence[str], *, technician_id: Optional[str] = None,
                  contractor_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Entries of one subject on *day* restricted to *slots*."""
    if not slots:
        return []
    subject_column, subject_id = (
        ("technician_id", technician_id) if technician_id else ("contractor_id", contractor_id)
    )
    placeholders = ", ".join("?" for _ in slots)
    rows = db.query_all(
        f"SELECT {_ENTRY_COLUMNS} FROM schedule_entries e "
        "LEFT JOIN projects p ON p.id = e.project_id "
        f"WHERE e.date = ? AND e.{subject_column} = ? AND e.time_slot IN ({placeholders}) "
        "ORDER BY e.time_slot",
        [day, subject_id, *slots],
    )
    return [_row_to_dict(row) for row in rows]


def _project_name(conn: Any, project_id: Optional[str]) -> Optional[str]:
    if not project_id:
        return None
    row = conn.execute("SELECT name, client_name FROM projects WHERE id = ?", (project_id,)).fetchone()
    if not row:
        return None
    return row["client_name"] or row["name"]


def upsert_entries(entries: Iterable[Dict[str, Any]]) -> List[str]:
    """Insert or update entries by ``(date, time_slot, subject)`` in one transaction.

    Returns the ids of the written rows in input order.
    """
    ids: List[str] = []
    with db.transaction() as conn:
        for entry in entries:
            technician_id = entry.get("technician")
            contractor_id = entry.get("contractor")
            subject_column = "technician_id" if technician_id else "contractor_id"
            subject_id = technician_id or contractor_id
            existing = conn.execute(
                f"SELECT id FROM schedule_entries WHERE date = ? AND time_slot = ? AND {subject_column} = ?",
                (entry["date"], entry["time_slot"], subject_id),
            ).fetchone()
            values = (
                entry.get("entry_type", "project"),
                entry.get("project"),
                _project_name(conn, entry.get("project")),
                entry.get("leave_type"),
                entry.get("description") or "",
                entry.get("notes") or "",
            )
            if existing:
                conn.execute(
                    "UPDATE schedule_entries SET entry_type = ?, project_id = ?, project_name = ?, "
                    "leave_type = ?, description = ?, notes = ?, updated_at = datetime('now') WHERE id = ?",
                    (*values, existing["id"]),
                )
                ids.append(existing["id"])
                continue
            entry_id = uuid.uuid4().hex
            conn.execute(
                "INSERT INTO schedule_entries(id, date, time_slot, technician_id, contractor_id, entry_type, "
                "project_id, project_name, leave_type, description, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (entry_id, entry["date"], entry["time_slot"], technician_id, contractor_id, *values),
            )
            ids.append(entry_id)
    return ids


def insert_entries(entries: Iterable[Dict[str, Any]]) -> List[str]:
    """Plain inserts; the unique indexes reject natural-key duplicates."""
    ids: List[str] = []
    with db.transaction() as conn:
        for entry in entries:
            entry_id = uuid.uuid4().hex
            conn.execute(
                "INSERT INTO schedule_entries(id, date, time_slot, technician_id, contractor_id, entry_type, "
                "project_id, project_name, leave_type, description, notes) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    entry_id,
                    entry["date"],
                    entry["time_slot"],
                    entry.get("technician"),
                    entry.get("contractor"),
                    entry.get("entry_type", "project"),
                    entry.get("project"),
                    entry.get("project_name") or _project_name(conn, entry.get("project")),
                    entry.get("leave_type"),
                    entry.get("description") or "",
                    entry.get("notes") or "",
                ),
            )
            ids.append(entry_id)
    return ids


def delete_entry(entry_id: str) -> None:
    deleted = db.execute("DELETE FROM schedule_entries WHERE id = ?", (entry_id,))
    if not deleted:
        raise EntryNotFoundError(f"Schedule entry {entry_id} not found")


def count_for_contractor(contractor_id: str) -> int:
    row = db.query_one("SELECT COUNT(1) FROM schedule_entries WHERE contractor_id = ?", (contractor_id,))
    return int(row[0]) if row else 0
