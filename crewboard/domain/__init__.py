"""Domain objects for the Crewboard scheduling grid."""

from .models import (
    TIME_SLOTS,
    Contractor,
    ContractorCategory,
    ContractorRef,
    EntryType,
    LeaveType,
    Member,
    Project,
    ProjectRef,
    PublicHoliday,
    ScheduleEntry,
    Subject,
    TechnicianGroup,
    TechnicianRef,
    TimeSlot,
    ViewMode,
    subject_for,
)

__all__ = [
    "TIME_SLOTS",
    "Contractor",
    "ContractorCategory",
    "ContractorRef",
    "EntryType",
    "LeaveType",
    "Member",
    "Project",
    "ProjectRef",
    "PublicHoliday",
    "ScheduleEntry",
    "Subject",
    "TechnicianGroup",
    "TechnicianRef",
    "TimeSlot",
    "ViewMode",
    "subject_for",
]
