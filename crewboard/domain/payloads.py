"""JSON payload codec for domain objects.

The persisted shape of a schedule entry keeps its natural key
(``date``, ``time_slot`` and exactly one of ``technician``/``contractor``)
and the discriminated payload (``project`` xor ``leave_type``).
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .dates import date_key, to_local_date
from .models import (
    Contractor,
    ContractorRef,
    EntryType,
    LeaveType,
    Member,
    ProjectRef,
    PublicHoliday,
    ScheduleEntry,
    Subject,
    TechnicianGroup,
    TechnicianRef,
    TimeSlot,
    subject_for,
)


class PayloadError(ValueError):
    """Raised when an incoming payload cannot be decoded."""


def subject_to_dict(subject: Subject) -> Dict[str, str]:
    return {subject.kind: subject.id}


def subject_from_dict(payload: Mapping[str, Any]) -> Subject:
    technician = payload.get("technician")
    contractor = payload.get("contractor")
    if technician and contractor:
        raise PayloadError("An entry cannot have both technician and contractor")
    if technician:
        return TechnicianRef(str(technician))
    if contractor:
        return ContractorRef(str(contractor))
    kind = payload.get("kind") or payload.get("member_type")
    subject_id = payload.get("id")
    if kind and subject_id:
        try:
            return subject_for(str(kind), str(subject_id))
        except ValueError as exc:
            raise PayloadError(str(exc)) from exc
    raise PayloadError("An entry needs either technician or contractor")


def entry_to_dict(entry: ScheduleEntry) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": entry.id,
        "date": date_key(entry.date),
        "time_slot": entry.time_slot.value,
        **subject_to_dict(entry.subject),
        "entry_type": entry.entry_type.value,
        "project": entry.project.id if entry.project else None,
        "project_name": entry.project.name if entry.project else None,
        "leave_type": entry.leave_type.value if entry.leave_type else None,
        "description": entry.description,
        "notes": entry.notes,
    }
    return payload


def entry_from_dict(payload: Mapping[str, Any]) -> ScheduleEntry:
    """Decode one entry; the payload not matching ``entry_type`` is dropped."""

    try:
        entry_type = EntryType(payload.get("entry_type") or EntryType.PROJECT.value)
        time_slot = TimeSlot(payload["time_slot"])
        day = to_local_date(payload["date"])
        leave_raw = payload.get("leave_type")
        leave_type = LeaveType(leave_raw) if leave_raw and entry_type is EntryType.LEAVE else None
    except KeyError as exc:
        raise PayloadError(f"Missing field: {exc.args[0]}") from exc
    except (TypeError, ValueError) as exc:
        raise PayloadError(str(exc)) from exc

    project: Optional[ProjectRef] = None
    if entry_type is EntryType.PROJECT:
        project_id = payload.get("project")
        if not project_id:
            raise PayloadError("Project entries need a project")
        project = ProjectRef(str(project_id), payload.get("project_name"))

    try:
        return ScheduleEntry(
            id=payload.get("id"),
            date=day,
            time_slot=time_slot,
            subject=subject_from_dict(payload),
            entry_type=entry_type,
            project=project,
            leave_type=leave_type,
            description=payload.get("description") or "",
            notes=payload.get("notes") or "",
        )
    except PayloadError:
        raise
    except (TypeError, ValueError) as exc:
        raise PayloadError(str(exc)) from exc


def holiday_to_dict(holiday: PublicHoliday) -> Dict[str, Any]:
    return {"id": holiday.id, "date": date_key(holiday.date), "name": holiday.name, "state": holiday.state}


def member_to_dict(member: Member) -> Dict[str, Any]:
    return {
        "member_type": member.member_type,
        "id": member.subject.id,
        "name": member.name,
        "role": member.role,
        "display_order": member.display_order,
    }


def group_to_dict(group: TechnicianGroup) -> Dict[str, Any]:
    return {
        "id": group.id,
        "name": group.name,
        "description": group.description,
        "display_order": group.display_order,
        "colour": group.colour,
        "members": [member_to_dict(member) for member in group.active_members()],
    }


def contractor_to_dict(contractor: Contractor) -> Dict[str, Any]:
    return {
        "id": contractor.id,
        "name": contractor.name,
        "company": contractor.company,
        "phone": contractor.phone,
        "email": contractor.email,
        "category": contractor.category.value,
        "notes": contractor.notes,
        "is_active": contractor.is_active,
        "display_order": contractor.display_order,
        "display_name": contractor.display_name,
        "role_label": contractor.role_label,
    }
