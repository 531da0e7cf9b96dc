"""Groups, group membership, contractors and technician notes.

Every operation validates its input before touching the database.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..dao import contractors_dao, groups_dao, people_dao, schedule_dao
from ..domain.models import ContractorCategory
from ..domain.payloads import contractor_to_dict, group_to_dict
from .sqlite_backend import contractor_from_row, groups_from_rows

logger = logging.getLogger(__name__)

MEMBER_TYPES = ("user", "contractor")


class RosterValidationError(ValueError):
    """Raised for invalid roster input, before any write."""


class RosterNotFoundError(LookupError):
    """Raised when a group, contractor or technician does not exist."""


# -- Groups -----------------------------------------------------------------------


def list_groups(include_inactive: bool = False) -> List[Dict[str, Any]]:
    group_rows = groups_dao.list_groups(include_inactive=include_inactive)
    member_rows = groups_dao.list_members([row["id"] for row in group_rows])
    return [group_to_dict(group) for group in groups_from_rows(group_rows, member_rows)]


def get_group(group_id: str) -> Dict[str, Any]:
    row = groups_dao.get_group(group_id)
    if row is None:
        raise RosterNotFoundError("Group not found")
    groups = groups_from_rows([row], groups_dao.list_members([group_id]))
    return group_to_dict(groups[0])


def _group_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    name = (payload.get("name") or "").strip()
    if not name:
        raise RosterValidationError("Group name is required")
    try:
        display_order = int(payload.get("display_order", 0))
    except (TypeError, ValueError) as exc:
        raise RosterValidationError("display_order must be an integer") from exc
    return {**payload, "name": name, "display_order": display_order}


def create_group(payload: Dict[str, Any]) -> Dict[str, Any]:
    group_id = groups_dao.create_group(_group_payload(payload))
    logger.info("Created group %s", group_id)
    return get_group(group_id)


def update_group(group_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    current = groups_dao.get_group(group_id)
    if current is None:
        raise RosterNotFoundError("Group not found")
    groups_dao.update_group(group_id, _group_payload({**current, **payload}))
    return get_group(group_id)


def delete_group(group_id: str) -> None:
    if not groups_dao.delete_group(group_id):
        raise RosterNotFoundError("Group not found")
    logger.info("Deleted group %s", group_id)


def _require_group(group_id: Optional[str]) -> None:
    if not group_id:
        raise RosterValidationError("Select a group first")
    if groups_dao.get_group(group_id) is None:
        raise RosterNotFoundError("Group not found")


def _require_member_type(member_type: Optional[str]) -> str:
    if member_type not in MEMBER_TYPES:
        raise RosterValidationError("member_type must be 'user' or 'contractor'")
    return member_type


def add_member(group_id: Optional[str], member_type: Optional[str], subject_id: Optional[str],
               role: Optional[str] = None) -> Dict[str, Any]:
    _require_group(group_id)
    member_type = _require_member_type(member_type)
    if not subject_id:
        raise RosterValidationError("Select a technician or contractor to add")

    exists = (
        people_dao.get_technician(subject_id) if member_type == "user" else contractors_dao.get_contractor(subject_id)
    )
    if exists is None:
        raise RosterNotFoundError("Technician not found" if member_type == "user" else "Contractor not found")
    already = any(
        row["subject_id"] == subject_id and row["member_type"] == member_type
        for row in groups_dao.list_members([group_id])
    )
    if already:
        raise RosterValidationError("Already a member of this group")

    groups_dao.add_member(group_id, member_type, subject_id, (role or "").strip() or None)
    return get_group(group_id)


def remove_member(group_id: str, member_type: Optional[str], subject_id: str) -> Dict[str, Any]:
    """Remove a member from a group; their schedule entries are kept."""

    _require_group(group_id)
    groups_dao.remove_member(group_id, _require_member_type(member_type or "user"), subject_id)
    return get_group(group_id)


def update_member_role(group_id: str, member_type: Optional[str], subject_id: str,
                       role: Optional[str]) -> Dict[str, Any]:
    _require_group(group_id)
    updated = groups_dao.update_member_role(
        group_id, _require_member_type(member_type or "user"), subject_id, (role or "").strip() or None
    )
    if not updated:
        raise RosterNotFoundError("Member not found")
    return get_group(group_id)


def reorder_members(group_id: str, subject_ids: Sequence[str]) -> int:
    _require_group(group_id)
    if not isinstance(subject_ids, (list, tuple)):
        raise RosterValidationError("member_ids must be a list")
    return groups_dao.reorder_members(group_id, [str(value) for value in subject_ids])


def unassigned_technicians() -> List[Dict[str, Any]]:
    """Active technicians that are not a member of any group yet."""

    grouped = set(groups_dao.grouped_technician_ids())
    return [row for row in people_dao.list_technicians() if row["id"] not in grouped]


# -- Contractors ------------------------------------------------------------------


def _contractor_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    name = (payload.get("name") or "").strip()
    if not name:
        raise RosterValidationError("Contractor name is required")
    category = payload.get("category") or ContractorCategory.CONTRACTOR.value
    try:
        ContractorCategory(category)
    except ValueError as exc:
        raise RosterValidationError(f"Unknown contractor category: {category}") from exc
    return {**payload, "name": name, "category": category}


def list_contractors(include_inactive: bool = False) -> List[Dict[str, Any]]:
    rows = contractors_dao.list_contractors(active=None if include_inactive else True)
    return [contractor_to_dict(contractor_from_row(row)) for row in rows]


def get_contractor(contractor_id: str) -> Dict[str, Any]:
    row = contractors_dao.get_contractor(contractor_id)
    if row is None:
        raise RosterNotFoundError("Contractor not found")
    return contractor_to_dict(contractor_from_row(row))


def create_contractor(payload: Dict[str, Any], group_id: Optional[str] = None) -> Dict[str, Any]:
    """Create a contractor, optionally adding it to *group_id* straight away."""

    data = _contractor_payload(payload)
    requested_id = data.get("id")
    if requested_id and (
        people_dao.get_technician(requested_id) is not None or contractors_dao.get_contractor(requested_id) is not None
    ):
        raise RosterValidationError(f"Id {requested_id} is already in use")
    if group_id:
        _require_group(group_id)
    contractor_id = contractors_dao.create_contractor(data)
    if group_id:
        groups_dao.add_member(group_id, "contractor", contractor_id, payload.get("role") or None)
    logger.info("Created contractor %s", contractor_id)
    return get_contractor(contractor_id)


def update_contractor(contractor_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    current = contractors_dao.get_contractor(contractor_id)
    if current is None:
        raise RosterNotFoundError("Contractor not found")
    contractors_dao.update_contractor(contractor_id, _contractor_payload({**current, **payload}))
    return get_contractor(contractor_id)


def delete_contractor(contractor_id: str, hard: bool = False) -> Dict[str, Any]:
    """Deactivate a contractor, or with *hard* remove it with its entries and memberships."""

    if contractors_dao.get_contractor(contractor_id) is None:
        raise RosterNotFoundError("Contractor not found")
    entry_count = schedule_dao.count_for_contractor(contractor_id)
    if hard:
        contractors_dao.delete_contractor(contractor_id)
        logger.info("Deleted contractor %s and %d entries", contractor_id, entry_count)
        return {"deleted": True, "entries_deleted": entry_count}
    contractors_dao.deactivate_contractor(contractor_id)
    logger.info("Deactivated contractor %s", contractor_id)
    return {"deactivated": True, "scheduled_entries": entry_count}


def reactivate_contractor(contractor_id: str) -> Dict[str, Any]:
    if not contractors_dao.reactivate_contractor(contractor_id):
        raise RosterNotFoundError("Contractor not found")
    return get_contractor(contractor_id)


# -- Technicians ------------------------------------------------------------------


def list_technicians() -> List[Dict[str, Any]]:
    return people_dao.list_technicians()


def update_technician_notes(technician_id: str, notes: Optional[str]) -> Dict[str, Any]:
    if not people_dao.update_schedule_notes(technician_id, (notes or "").strip()):
        raise RosterNotFoundError("Technician not found")
    return people_dao.get_technician(technician_id) or {}
