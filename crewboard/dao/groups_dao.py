"""Data access for technician groups and their members."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence

from . import db


def list_groups(include_inactive: bool = False) -> List[Dict[str, Any]]:
    rows = db.query_all(
        "SELECT id, name, description, display_order, colour, is_active FROM technician_groups"
        + ("" if include_inactive else " WHERE is_active = 1")
        + " ORDER BY display_order, name"
    )
    return [
        {
            "id": row["id"],
            "name": row["name"],
            "description": row["description"],
            "display_order": int(row["display_order"]),
            "colour": row["colour"],
            "is_active": bool(row["is_active"]),
        }
        for row in rows
    ]


def get_group(group_id: str) -> Optional[Dict[str, Any]]:
    row = db.query_one(
        "SELECT id, name, description, display_order, colour, is_active FROM technician_groups WHERE id = ?",
        (group_id,),
    )
    if not row:
        return None
    return {
        "id": row["id"],
        "name": row["name"],
        "description": row["description"],
        "display_order": int(row["display_order"]),
        "colour": row["colour"],
        "is_active": bool(row["is_active"]),
    }


def list_members(group_ids: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
    """Members joined with their technician or contractor record."""
    sql = (
        "SELECT m.id, m.group_id, m.member_type, m.technician_id, m.contractor_id, m.role, m.display_order, "
        "t.name AS technician_name, t.is_active AS technician_active, "
        "c.name AS contractor_name, c.is_active AS contractor_active "
        "FROM group_members m "
        "LEFT JOIN technicians t ON t.id = m.technician_id "
        "LEFT JOIN contractors c ON c.id = m.contractor_id"
    )
    params: list[Any] = []
    if group_ids is not None:
        if not group_ids:
            return []
        sql += f" WHERE m.group_id IN ({', '.join('?' for _ in group_ids)})"
        params.extend(group_ids)
    sql += " ORDER BY m.group_id, m.display_order, m.id"
    result = []
    for row in db.query_all(sql, params):
        is_user = row["member_type"] == "user"
        name = row["technician_name"] if is_user else row["contractor_name"]
        active = row["technician_active"] if is_user else row["contractor_active"]
        result.append(
            {
                "id": int(row["id"]),
                "group_id": row["group_id"],
                "member_type": row["member_type"],
                "subject_id": row["technician_id"] if is_user else row["contractor_id"],
                "name": name,
                "role": row["role"],
                "display_order": int(row["display_order"]),
                "is_active": bool(active) if name is not None else False,
            }
        )
    return result


def create_group(payload: Dict[str, Any]) -> str:
    group_id = payload.get("id") or uuid.uuid4().hex
    db.execute(
        "INSERT INTO technician_groups(id, name, description, display_order, colour, is_active) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            group_id,
            payload["name"],
            payload.get("description", ""),
            int(payload.get("display_order", 0)),
            payload.get("colour", "#6b7280"),
            1 if payload.get("is_active", True) else 0,
        ),
    )
    return group_id


def update_group(group_id: str, payload: Dict[str, Any]) -> int:
    return db.execute(
        "UPDATE technician_groups SET name = ?, description = ?, display_order = ?, colour = ?, is_active = ? "
        "WHERE id = ?",
        (
            payload["name"],
            payload.get("description", ""),
            int(payload.get("display_order", 0)),
            payload.get("colour", "#6b7280"),
            1 if payload.get("is_active", True) else 0,
            group_id,
        ),
    )


def delete_group(group_id: str) -> int:
    return db.execute("DELETE FROM technician_groups WHERE id = ?", (group_id,))


def add_member(group_id: str, member_type: str, subject_id: str, role: Optional[str] = None) -> int:
    with db.transaction() as conn:
        row = conn.execute(
            "SELECT COALESCE(MAX(display_order), -1) FROM group_members WHERE group_id = ?", (group_id,)
        ).fetchone()
        next_order = int(row[0]) + 1
        cursor = conn.execute(
            "INSERT INTO group_members(group_id, member_type, technician_id, contractor_id, role, display_order) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                group_id,
                member_type,
                subject_id if member_type == "user" else None,
                subject_id if member_type == "contractor" else None,
                role or None,
                next_order,
            ),
        )
        return int(cursor.lastrowid)


def _subject_column(member_type: str) -> str:
    return "technician_id" if member_type == "user" else "contractor_id"


def remove_member(group_id: str, member_type: str, subject_id: str) -> int:
    return db.execute(
        f"DELETE FROM group_members WHERE group_id = ? AND {_subject_column(member_type)} = ?",
        (group_id, subject_id),
    )


def update_member_role(group_id: str, member_type: str, subject_id: str, role: Optional[str]) -> int:
    return db.execute(
        f"UPDATE group_members SET role = ? WHERE group_id = ? AND {_subject_column(member_type)} = ?",
        (role or None, group_id, subject_id),
    )


def reorder_members(group_id: str, subject_ids: Sequence[str]) -> int:
    updated = 0
    with db.transaction() as conn:
        for index, subject_id in enumerate(subject_ids):
            cursor = conn.execute(
                "UPDATE group_members SET display_order = ? "
                "WHERE group_id = ? AND (technician_id = ? OR contractor_id = ?)",
                (index, group_id, subject_id, subject_id),
            )
            updated += cursor.rowcount
    return updated


def grouped_technician_ids() -> List[str]:
    rows = db.query_all("SELECT DISTINCT technician_id FROM group_members WHERE technician_id IS NOT NULL")
    return [row["technician_id"] for row in rows]
