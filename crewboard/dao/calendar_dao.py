from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from . import db


def list_holidays(start: str, end: str, state: Optional[str] = None) -> List[Dict[str, Any]]:
    """Active holidays in ``[start, end]``; national ones plus those of *state*."""
    sql = "SELECT id, date, name, state FROM public_holidays WHERE is_active = 1 AND date >= ? AND date <= ?"
    params: list[Any] = [start, end]
    if state:
        sql += " AND (state IS NULL OR state = ?)"
        params.append(state)
    sql += " ORDER BY date"
    return [
        {
            "id": int(row["id"]),
            "date": row["date"],
            "name": row["name"],
            "state": row["state"],
        }
        for row in db.query_all(sql, params)
    ]


def upsert_holidays(holidays: Iterable[Dict[str, Any]]) -> int:
    count = 0
    with db.transaction() as conn:
        for holiday in holidays:
            conn.execute(
                "INSERT INTO public_holidays(date, name, state, is_active) VALUES (?, ?, ?, 1) "
                "ON CONFLICT(date, name) DO UPDATE SET state=excluded.state, is_active=1",
                (holiday["date"], holiday["name"], holiday.get("state")),
            )
            count += 1
    return count


def delete_holiday(holiday_id: int) -> int:
    return db.execute("DELETE FROM public_holidays WHERE id = ?", (holiday_id,))
