from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import roster_service

bp = Blueprint("technicians", __name__)


@bp.route("/api/technicians", methods=["GET"])
def list_technicians():
    if request.args.get("unassigned") == "1":
        return jsonify({"technicians": roster_service.unassigned_technicians()})
    return jsonify({"technicians": roster_service.list_technicians()})


@bp.route("/api/technicians/<technician_id>/notes", methods=["PUT"])
def update_notes(technician_id: str):
    payload = request.get_json(force=True)
    try:
        technician = roster_service.update_technician_notes(technician_id, payload.get("notes"))
    except roster_service.RosterNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify(technician)
