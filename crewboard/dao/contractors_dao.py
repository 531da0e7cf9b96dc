from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from . import db

_COLUMNS = "id, name, company, phone, email, category, notes, is_active, display_order"


def _row_to_dict(row: Any) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "company": row["company"],
        "phone": row["phone"],
        "email": row["email"],
        "category": row["category"],
        "notes": row["notes"],
        "is_active": bool(row["is_active"]),
        "display_order": int(row["display_order"]),
    }


def list_contractors(active: Optional[bool] = None) -> List[Dict[str, Any]]:
    sql = f"SELECT {_COLUMNS} FROM contractors"
    params: list[Any] = []
    if active is not None:
        sql += " WHERE is_active = ?"
        params.append(1 if active else 0)
    sql += " ORDER BY display_order, name"
    return [_row_to_dict(row) for row in db.query_all(sql, params)]


def get_contractor(contractor_id: str) -> Optional[Dict[str, Any]]:
    row = db.query_one(f"SELECT {_COLUMNS} FROM contractors WHERE id = ?", (contractor_id,))
    return _row_to_dict(row) if row else None


def create_contractor(payload: Dict[str, Any]) -> str:
    contractor_id = payload.get("id") or uuid.uuid4().hex
    db.execute(
        f"INSERT INTO contractors({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            contractor_id,
            payload["name"].strip(),
            (payload.get("company") or "").strip(),
            (payload.get("phone") or "").strip(),
            (payload.get("email") or "").strip().lower(),
            payload.get("category", "contractor"),
            payload.get("notes") or "",
            1 if payload.get("is_active", True) else 0,
            int(payload.get("display_order", 0)),
        ),
    )
    return contractor_id


def update_contractor(contractor_id: str, payload: Dict[str, Any]) -> int:
    return db.execute(
        "UPDATE contractors SET name = ?, company = ?, phone = ?, email = ?, category = ?, notes = ?, "
        "is_active = ?, display_order = ? WHERE id = ?",
        (
            payload["name"].strip(),
            (payload.get("company") or "").strip(),
            (payload.get("phone") or "").strip(),
            (payload.get("email") or "").strip().lower(),
            payload.get("category", "contractor"),
            payload.get("notes") or "",
            1 if payload.get("is_active", True) else 0,
            int(payload.get("display_order", 0)),
            contractor_id,
        ),
    )


def deactivate_contractor(contractor_id: str) -> int:
    return db.execute("UPDATE contractors SET is_active = 0 WHERE id = ?", (contractor_id,))


def reactivate_contractor(contractor_id: str) -> int:
    return db.execute("UPDATE contractors SET is_active = 1 WHERE id = ?", (contractor_id,))


def delete_contractor(contractor_id: str) -> int:
    """Hard delete including the contractor's entries and memberships."""
    with db.transaction() as conn:
        conn.execute("DELETE FROM schedule_entries WHERE contractor_id = ?", (contractor_id,))
        conn.execute("DELETE FROM group_members WHERE contractor_id = ?", (contractor_id,))
        cursor = conn.execute("DELETE FROM contractors WHERE id = ?", (contractor_id,))
        return cursor.rowcount
