from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import roster_service

bp = Blueprint("groups", __name__)


@bp.errorhandler(roster_service.RosterValidationError)
def validation_error(exc: roster_service.RosterValidationError):
    return jsonify({"error": str(exc)}), 400


@bp.errorhandler(roster_service.RosterNotFoundError)
def not_found(exc: roster_service.RosterNotFoundError):
    return jsonify({"error": str(exc)}), 404


@bp.route("/api/groups", methods=["GET"])
def list_groups():
    include_inactive = request.args.get("include_inactive") == "1"
    return jsonify({"groups": roster_service.list_groups(include_inactive=include_inactive)})


@bp.route("/api/groups", methods=["POST"])
def create_group():
    payload = request.get_json(force=True)
    return jsonify(roster_service.create_group(payload)), 201


@bp.route("/api/groups/<group_id>", methods=["PUT"])
def update_group(group_id: str):
    payload = request.get_json(force=True)
    return jsonify(roster_service.update_group(group_id, payload))


@bp.route("/api/groups/<group_id>", methods=["DELETE"])
def delete_group(group_id: str):
    roster_service.delete_group(group_id)
    return jsonify({"deleted": group_id})


@bp.route("/api/groups/<group_id>/members", methods=["POST"])
def add_member(group_id: str):
    payload = request.get_json(force=True)
    member_type = payload.get("member_type")
    subject_id = payload.get("user_id") if member_type == "user" else payload.get("contractor_id")
    group = roster_service.add_member(group_id, member_type, subject_id or payload.get("id"), payload.get("role"))
    return jsonify(group), 201


@bp.route("/api/groups/<group_id>/members/<subject_id>", methods=["DELETE"])
def remove_member(group_id: str, subject_id: str):
    member_type = request.args.get("member_type")
    return jsonify(roster_service.remove_member(group_id, member_type, subject_id))


@bp.route("/api/groups/<group_id>/members/<subject_id>", methods=["PUT"])
def update_member(group_id: str, subject_id: str):
    payload = request.get_json(force=True)
    group = roster_service.update_member_role(group_id, payload.get("member_type"), subject_id, payload.get("role"))
    return jsonify(group)


@bp.route("/api/groups/<group_id>/reorder", methods=["PUT"])
def reorder_members(group_id: str):
    payload = request.get_json(force=True)
    updated = roster_service.reorder_members(group_id, payload.get("member_ids") or [])
    return jsonify({"updated": updated})
