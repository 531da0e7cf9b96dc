"""Copy one day's slot state onto the remaining days of its week."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Tuple

from ..domain.dates import DateLike, date_key, is_weekend, to_local_date, week_dates
from ..domain.models import PublicHoliday, ScheduleEntry
from .backend import UPSERT, BackendError, ScheduleBackend
from .reconcile import build_entry
from .slot_editor import SlotEditor

logger = logging.getLogger(__name__)


class PropagationError(RuntimeError):
    """Raised when the bulk upsert of a propagation fails."""


@dataclass
class PropagationResult:
    targets: List[date] = field(default_factory=list)
    upserts: List[ScheduleEntry] = field(default_factory=list)


def propagation_targets(day: DateLike, show_weekends: bool = False,
                        holidays: Iterable[PublicHoliday] = ()) -> List[date]:
    """Days after *day* in its Monday-first week that can receive a copy.

    Weekend days are skipped unless *show_weekends*; holiday dates are always
    skipped because their cells cannot be edited.
    """

    source = to_local_date(day)
    blocked = {date_key(holiday.date) for holiday in holidays}
    return [
        target
        for target in week_dates(source)
        if target > source
        and (show_weekends or not is_weekend(target))
        and date_key(target) not in blocked
    ]


def plan_propagation(editor: SlotEditor, targets: Iterable[date]) -> Tuple[ScheduleEntry, ...]:
    """Upserts stamping every occupied slot of *editor* onto each target day.

    Slots left empty on the source day produce nothing: existing content on
    the target days is never cleared.
    """

    occupied = editor.occupied_slots()
    return tuple(
        build_entry(editor.subject, target, slot, state)
        for target in targets
        for slot, state in occupied
    )


async def propagate(backend: ScheduleBackend, editor: SlotEditor, *, show_weekends: bool = False,
                    holidays: Iterable[PublicHoliday] = ()) -> PropagationResult:
    targets = propagation_targets(editor.day, show_weekends, holidays)
    upserts = plan_propagation(editor, targets)
    result = PropagationResult(targets=targets)
    if not upserts:
        logger.debug("Nothing to copy from %s for %s", editor.day, editor.subject.id)
        return result

    try:
        saved = await backend.bulk_upsert(list(upserts), UPSERT)
    except BackendError as exc:
        logger.error("Copy to rest of week from %s failed: %s", editor.day, exc)
        raise PropagationError(str(exc) or "Failed to copy to rest of week") from exc
    result.upserts = list(saved)
    logger.info(
        "Copied %d entries of %s %s from %s onto %d days",
        len(upserts),
        editor.subject.kind,
        editor.subject.id,
        editor.day,
        len(targets),
    )
    return result
