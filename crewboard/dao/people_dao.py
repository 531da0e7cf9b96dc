"""Technicians (schedulable users) and projects."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from . import db


def list_technicians(include_inactive: bool = False) -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, name, email, role, is_active, schedule_notes FROM technicians"
        + ("" if include_inactive else " WHERE is_active = 1")
        + " ORDER BY name"
    )
    return [
        {
            "id": row["id"],
            "name": row["name"],
            "email": row["email"],
            "role": row["role"],
            "is_active": bool(row["is_active"]),
            "schedule_notes": row["schedule_notes"],
        }
        for row in rows
    ]


def get_technician(technician_id: str) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        "SELECT id, name, email, role, is_active, schedule_notes FROM technicians WHERE id = ?",
        (technician_id,),
    )
    if not row:
        return None
    return {
        "id": row["id"],
        "name": row["name"],
        "email": row["email"],
        "role": row["role"],
        "is_active": bool(row["is_active"]),
        "schedule_notes": row["schedule_notes"],
    }


def update_schedule_notes(technician_id: str, notes: str) -> int:
    return db.execute("UPDATE technicians SET schedule_notes = ? WHERE id = ?", (notes, technician_id))


def list_projects(exclude_statuses: Sequence[str] = ()) -> List[Dict[str, Any]]:
    sql = "SELECT id, name, client_name, status FROM projects"
    params: list[Any] = []
    if exclude_statuses:
        sql += f" WHERE status NOT IN ({', '.join('?' for _ in exclude_statuses)})"
        params.extend(exclude_statuses)
    sql += " ORDER BY name"
    return [
        {
            "id": row["id"],
            "name": row["name"],
            "client_name": row["client_name"],
            "status": row["status"],
        }
        for row in db.query_all(sql, params)
    ]
