"""Blueprint with the scheduling grid and schedule entry API."""

from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request, send_file

from ...dao import schedule_dao
from ...domain.dates import parse_day
from ...domain.holidays import STATES
from ...domain.models import TimeSlot, ViewMode, subject_for
from ...domain.payloads import PayloadError, entry_from_dict, entry_to_dict, holiday_to_dict, subject_from_dict
from ...services import availability, export, schedule_service
from ...services.backend import UPSERT, BackendError
from ...services.propagation import PropagationError
from ...services.reconcile import SaveError, plan_save
from ...services.render import summary_to_dict
from ...services.session import CellLockedError, ScheduleSession
from ...services.slot_editor import SlotEditor
from ...services.sqlite_backend import SqliteScheduleBackend

bp = Blueprint("schedule", __name__)

QUICK_ACTIONS = ("fill_day", "fill_empty", "clear_day", "clear_slot")


def _flag(value: Optional[str]) -> bool:
    return (value or "").lower() in {"1", "true", "yes", "on"}


def _backend() -> SqliteScheduleBackend:
    return SqliteScheduleBackend(holiday_state=current_app.config.get("HOLIDAY_STATE"))


def _optional_day(name: str) -> Optional[date]:
    value = request.args.get(name)
    return parse_day(value) if value else None


def _session(cursor: Optional[date] = None) -> ScheduleSession:
    config = current_app.config
    weekends = request.args.get("weekends")
    return ScheduleSession(
        _backend(),
        cursor=cursor or _optional_day("date"),
        view_mode=ViewMode(request.args.get("view") or config["DEFAULT_VIEW"]),
        show_weekends=_flag(weekends) if weekends is not None else bool(config["SHOW_WEEKENDS"]),
        label_budget=int(config["LABEL_BUDGET"]),
    )


def _editor_payload(editor: SlotEditor) -> Dict[str, Any]:
    return {
        "subject": {"kind": editor.subject.kind, "id": editor.subject.id},
        "date": editor.day.isoformat(),
        "active_slot": editor.active_slot.value,
        "slots": {
            slot.value: {
                "entry_type": state.entry_type.value,
                "project": state.project_id,
                "leave_type": state.leave_type.value if state.leave_type else None,
                "description": state.description,
                "notes": state.notes,
                "entry_id": state.entry_id,
                "occupied": state.occupied,
            }
            for slot, state in editor.slots.items()
        },
    }


def _apply_edits(editor: SlotEditor, payload: Dict[str, Any]) -> None:
    """Apply posted slot values, then quick actions in the given order."""
    for slot_name, values in (payload.get("slots") or {}).items():
        changes = dict(values or {})
        if "project" in changes:
            changes["project_id"] = changes.pop("project")
        editor.update(TimeSlot(slot_name), **changes)
    if payload.get("active_slot"):
        editor.select(TimeSlot(payload["active_slot"]))
    for action in payload.get("actions") or []:
        if action not in QUICK_ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        getattr(editor, action)()


@bp.get("/schedule")
async def grid():
    try:
        session = _session()
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    await session.load()
    if session.snapshot is None:
        return jsonify({"error": session.error, "session": session.describe()}), 503

    return jsonify(
        {
            "session": session.describe(),
            "columns": [
                {
                    "date": column.date.isoformat(),
                    "is_today": column.is_today,
                    "is_weekend": column.is_weekend,
                    "holiday": column.holiday,
                }
                for column in session.columns()
            ],
            "rows": [
                {
                    "group": {"id": row.group.id, "name": row.group.name, "colour": row.group.colour},
                    "member": {
                        "kind": row.member.subject.kind,
                        "id": row.member.subject.id,
                        "name": row.member.name,
                        "role": row.member.role,
                    },
                    "cells": [{"date": day.isoformat(), **summary_to_dict(summary)} for day, summary in row.cells],
                }
                for row in session.rows()
            ],
            "projects": [{"id": p.id, "name": p.display_name} for p in session.snapshot.projects],
        }
    )


@bp.get("/schedule/export.xlsx")
async def export_grid():
    try:
        session = _session()
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    await session.load()
    if session.snapshot is None:
        return jsonify({"error": session.error}), 503

    start, end = session.range
    content = export.write_grid(session.columns(), session.rows(), title=f"Schedule {start.isoformat()}")
    return send_file(
        BytesIO(content),
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        as_attachment=True,
        download_name=f"schedule-{start.isoformat()}-{end.isoformat()}.xlsx",
    )


@bp.get("/api/schedule")
async def list_entries():
    try:
        start = parse_day(request.args.get("start"))
        end = parse_day(request.args.get("end"))
    except ValueError as exc:
        return jsonify({"error": f"start and end are required: {exc}"}), 400

    try:
        data = await _backend().fetch_schedule(start, end)
    except BackendError as exc:
        return jsonify({"error": str(exc)}), 503
    return jsonify(
        {
            "entries": [entry_to_dict(entry) for entry in data.entries],
            "holidays": [holiday_to_dict(holiday) for holiday in data.holidays],
        }
    )


@bp.post("/api/schedule/bulk")
async def bulk_upsert():
    payload = request.get_json(silent=True) or {}
    items = payload.get("entries")
    if not isinstance(items, list) or not items:
        return jsonify({"error": "entries array is required"}), 400
    mode = payload.get("mode") or UPSERT
    if mode != UPSERT:
        return jsonify({"error": f"Unsupported mode: {mode}"}), 400

    entries = [entry_from_dict(item) for item in items]
    try:
        saved = await _backend().bulk_upsert(entries, mode)
    except BackendError as exc:
        return jsonify({"error": str(exc)}), 502
    return jsonify({"entries": [entry_to_dict(entry) for entry in saved]})


@bp.delete("/api/schedule/entries/<entry_id>")
def delete_entry(entry_id: str):
    try:
        schedule_dao.delete_entry(entry_id)
    except schedule_dao.EntryNotFoundError:
        return jsonify({"error": "Schedule entry not found"}), 404
    return jsonify({"deleted": entry_id})


@bp.get("/api/schedule/cell")
async def open_cell():
    try:
        subject = subject_for(request.args.get("kind") or "technician", request.args.get("id") or "")
        day = parse_day(request.args.get("date"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    session = _session(cursor=day)
    await session.load()
    if session.snapshot is None:
        return jsonify({"error": session.error}), 503

    summary = summary_to_dict(session.cell_summary(subject, day))
    try:
        editor = session.open_cell(subject, day)
    except CellLockedError as exc:
        return jsonify({"error": str(exc), "summary": summary}), 409
    return jsonify({"editor": _editor_payload(editor), "summary": summary})


@bp.post("/api/schedule/cell")
async def edit_cell():
    """Open a cell, apply the posted edits, then save, propagate or preview."""
    payload = request.get_json(silent=True) or {}
    action = payload.get("action") or "save"
    if action not in {"save", "propagate", "preview"}:
        return jsonify({"error": f"Unknown action: {action}"}), 400
    try:
        subject = subject_from_dict(payload)
        day = parse_day(payload.get("date"))
    except (PayloadError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    session = _session(cursor=day)
    if "weekends" in payload:
        weekends = payload["weekends"]
        session.set_show_weekends(_flag(weekends) if isinstance(weekends, str) else bool(weekends))
    await session.load()
    if session.snapshot is None:
        return jsonify({"error": session.error}), 503

    try:
        editor = session.open_cell(subject, day)
    except CellLockedError as exc:
        return jsonify({"error": str(exc)}), 409
    try:
        _apply_edits(editor, payload)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    if action == "preview":
        plan = plan_save(editor)
        return jsonify(
            {
                "editor": _editor_payload(editor),
                "upserts": [entry_to_dict(entry) for entry in plan.upserts],
                "deletes": list(plan.deletes),
            }
        )

    if action == "propagate":
        try:
            result = await session.copy_to_rest_of_week()
        except PropagationError as exc:
            return jsonify({"error": str(exc)}), 502
        return jsonify(
            {
                "targets": [target.isoformat() for target in result.targets],
                "entries": [entry_to_dict(entry) for entry in result.upserts],
            }
        )

    try:
        saved = await session.save()
    except SaveError as exc:
        return jsonify({"error": str(exc), "editor": _editor_payload(editor)}), 502
    return jsonify(
        {
            "saved": [entry_to_dict(entry) for entry in saved.saved],
            "deleted": saved.deleted,
            "warnings": [{"entry_id": w.entry_id, "message": w.message} for w in saved.warnings],
        }
    )


@bp.post("/api/schedule/copy")
def copy_day():
    payload = request.get_json(silent=True) or {}
    try:
        subject = subject_from_dict(payload)
        source = parse_day(payload.get("source_date"))
        target = parse_day(payload.get("target_date"))
        slots = [TimeSlot(slot) for slot in payload.get("slots") or []]
    except (PayloadError, ValueError) as exc:
        return jsonify({"error": f"source_date, target_date and a technician are required: {exc}"}), 400

    try:
        entries = schedule_service.copy_day(subject, source, target, slots)
    except schedule_service.EntriesNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    except schedule_service.CopyConflictError as exc:
        return jsonify({"error": str(exc), "conflicting_slots": exc.slots}), 409
    return jsonify({"message": f"Copied {len(entries)} entries", "entries": entries}), 201


@bp.get("/api/schedule/availability")
def check_availability():
    try:
        day = parse_day(request.args.get("date"))
        slots = availability.parse_slots(request.args.get("slots"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"date": day.isoformat(), "availability": availability.check_availability(day, slots)})


@bp.get("/api/schedule/<kind>/<subject_id>")
def subject_schedule(kind: str, subject_id: str):
    if kind not in {"technicians", "contractors"}:
        return jsonify({"error": "Not found"}), 404
    subject = subject_for(kind[:-1], subject_id)
    if not schedule_service.subject_exists(subject):
        return jsonify({"error": f"{kind[:-1].capitalize()} not found"}), 404
    try:
        start, end = _optional_day("start"), _optional_day("end")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"entries": schedule_service.subject_schedule(subject, start, end)})


@bp.get("/api/schedule/projects/<project_id>")
def project_schedule(project_id: str):
    try:
        start, end = _optional_day("start"), _optional_day("end")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(schedule_service.project_schedule(project_id, start, end))


@bp.get("/api/schedule/holidays")
def list_holidays():
    year = request.args.get("year", type=int)
    state = request.args.get("state") or current_app.config.get("HOLIDAY_STATE")
    if state and state not in STATES:
        return jsonify({"error": f"Unknown state: {state}"}), 400
    return jsonify({"holidays": schedule_service.list_holidays(year, state)})


@bp.post("/api/schedule/holidays/seed")
def seed_holidays():
    payload = request.get_json(silent=True) or {}
    try:
        year = int(payload.get("year"))
    except (TypeError, ValueError):
        return jsonify({"error": "year is required"}), 400
    count = schedule_service.seed_holidays(year)
    return jsonify({"message": f"Holidays seeded for {year}", "count": count})

