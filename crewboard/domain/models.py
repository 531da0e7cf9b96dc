"""Domain dataclasses for the Crewboard scheduling grid."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class TimeSlot(str, Enum):
    AM1 = "AM1"
    AM2 = "AM2"
    PM1 = "PM1"
    PM2 = "PM2"


TIME_SLOTS: Tuple[TimeSlot, ...] = (TimeSlot.AM1, TimeSlot.AM2, TimeSlot.PM1, TimeSlot.PM2)


class EntryType(str, Enum):
    PROJECT = "project"
    LEAVE = "leave"
    PUBLIC_HOLIDAY = "public-holiday"
    TRAINING = "training"
    MEETING = "meeting"
    OFFICE = "office"
    WFH = "wfh"
    QUOTING = "quoting"
    SERVICE_MEETING = "service-meeting"
    UNASSIGNED = "unassigned"
    OTHER = "other"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    PERSONAL = "personal"
    CARERS = "carers"
    COMPASSIONATE = "compassionate"
    TIME_LIEU = "time-lieu"


class ContractorCategory(str, Enum):
    CONTRACTOR = "contractor"
    SUBCONTRACTOR = "subcontractor"


class ViewMode(str, Enum):
    WEEK = "week"
    MONTH = "month"


# -- Subjects -------------------------------------------------------------------


@dataclass(frozen=True)
class TechnicianRef:
    """An internal technician (a user account) being scheduled."""

    id: str
    kind: ClassVar[str] = "technician"
    member_type: ClassVar[str] = "user"


@dataclass(frozen=True)
class ContractorRef:
    """An external contractor being scheduled."""

    id: str
    kind: ClassVar[str] = "contractor"
    member_type: ClassVar[str] = "contractor"


Subject = Union[TechnicianRef, ContractorRef]

_SUBJECT_TYPES = {
    "technician": TechnicianRef,
    "user": TechnicianRef,
    "contractor": ContractorRef,
}


def subject_for(kind: str, subject_id: str) -> Subject:
    """Build the subject variant named by *kind* (``technician``/``user``/``contractor``)."""

    try:
        factory = _SUBJECT_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unknown subject kind: {kind!r}") from None
    if not subject_id:
        raise ValueError("Subject id is required")
    return factory(str(subject_id))


# -- Schedule entries -----------------------------------------------------------


@dataclass(frozen=True)
class ProjectRef:
    id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEntry:
    date: date
    time_slot: TimeSlot
    subject: Subject
    entry_type: EntryType = EntryType.PROJECT
    project: Optional[ProjectRef] = None
    leave_type: Optional[LeaveType] = None
    description: str = ""
    notes: str = ""
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.subject, (TechnicianRef, ContractorRef)):
            raise TypeError("subject must be a TechnicianRef or a ContractorRef")
        if (self.entry_type is EntryType.PROJECT) != (self.project is not None):
            raise ValueError("project is required for project entries and only for them")
        if (self.entry_type is EntryType.LEAVE) != (self.leave_type is not None):
            raise ValueError("leave_type is required for leave entries and only for them")

    @property
    def natural_key(self) -> Tuple[str, str, str, str]:
        return (self.date.isoformat(), self.time_slot.value, self.subject.kind, self.subject.id)


@dataclass(frozen=True)
class PublicHoliday:
    date: date
    name: str
    state: Optional[str] = None
    id: Optional[int] = None


# -- People and projects --------------------------------------------------------


@dataclass
class Contractor:
    id: str
    name: str
    company: str = ""
    phone: str = ""
    email: str = ""
    category: ContractorCategory = ContractorCategory.CONTRACTOR
    notes: str = ""
    is_active: bool = True
    display_order: int = 0

    @property
    def display_name(self) -> str:
        if self.company:
            return f"{self.name} ({self.company})"
        return self.name

    @property
    def role_label(self) -> str:
        return "SUB" if self.category is ContractorCategory.SUBCONTRACTOR else "CON"


@dataclass
class Project:
    id: str
    name: str
    client_name: Optional[str] = None
    status: str = "active"

    @property
    def display_name(self) -> str:
        return self.client_name or self.name


@dataclass(frozen=True)
class Member:
    subject: Subject
    name: str
    role: Optional[str] = None
    display_order: int = 0
    is_active: bool = True

    @property
    def member_type(self) -> str:
        return self.subject.member_type


@dataclass
class TechnicianGroup:
    id: str
    name: str
    description: str = ""
    display_order: int = 0
    colour: str = "#6b7280"
    is_active: bool = True
    members: list[Member] = field(default_factory=list)

    def active_members(self) -> list[Member]:
        return sorted((m for m in self.members if m.is_active), key=lambda m: m.display_order)
