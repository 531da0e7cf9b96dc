from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...services import roster_service

bp = Blueprint("contractors", __name__)


@bp.errorhandler(roster_service.RosterValidationError)
def validation_error(exc: roster_service.RosterValidationError):
    return jsonify({"error": str(exc)}), 400


@bp.errorhandler(roster_service.RosterNotFoundError)
def not_found(exc: roster_service.RosterNotFoundError):
    return jsonify({"error": str(exc)}), 404


@bp.route("/api/contractors", methods=["GET"])
def list_contractors():
    include_inactive = request.args.get("include_inactive") == "1"
    return jsonify({"contractors": roster_service.list_contractors(include_inactive=include_inactive)})


@bp.route("/api/contractors/<contractor_id>", methods=["GET"])
def get_contractor(contractor_id: str):
    return jsonify(roster_service.get_contractor(contractor_id))


@bp.route("/api/contractors", methods=["POST"])
def create_contractor():
    payload = request.get_json(force=True)
    contractor = roster_service.create_contractor(payload, group_id=payload.get("group_id"))
    return jsonify(contractor), 201


@bp.route("/api/contractors/<contractor_id>", methods=["PUT"])
def update_contractor(contractor_id: str):
    payload = request.get_json(force=True)
    return jsonify(roster_service.update_contractor(contractor_id, payload))


@bp.route("/api/contractors/<contractor_id>", methods=["DELETE"])
def delete_contractor(contractor_id: str):
    hard = request.args.get("hard") == "true"
    return jsonify(roster_service.delete_contractor(contractor_id, hard=hard))


@bp.route("/api/contractors/<contractor_id>/reactivate", methods=["POST"])
def reactivate_contractor(contractor_id: str):
    return jsonify(roster_service.reactivate_contractor(contractor_id))
