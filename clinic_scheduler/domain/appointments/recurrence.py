"""
Recurrence Expansion

Generates the child appointments of a recurring series. Occurrence n is
computed from the parent's own start (start + n * step), so monthly series
clamp to the last day of short months without drifting afterwards:
a series starting on Jan 31 yields Jan 31, Feb 29 (or 28), Mar 31, Apr 30.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union
import logging

from dateutil.relativedelta import relativedelta

from clinic_scheduler.core.config import settings
from clinic_scheduler.domain.appointments.models import (
    Appointment, AppointmentStatus, RecurrenceRule
)
from clinic_scheduler.domain.appointments.overlap import OverlapChecker, intervals_overlap

logger = logging.getLogger(__name__)


def occurrence_offset(rule: Union[RecurrenceRule, str], n: int):
    """Offset of the n-th occurrence from the series start, or None for unknown rules"""
    try:
        rule = RecurrenceRule(rule)
    except ValueError:
        return None
    if rule == RecurrenceRule.DAILY:
        return timedelta(days=n)
    if rule == RecurrenceRule.WEEKLY:
        return timedelta(weeks=n)
    return relativedelta(months=n)


def occurrence_starts(
    start_time: datetime,
    rule: Union[RecurrenceRule, str],
    end_date: Union[date, datetime],
    max_occurrences: Optional[int] = None
) -> List[datetime]:
    """Start times of every occurrence after the first, up to end_date inclusive"""
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    limit = max_occurrences or settings.RECURRENCE_MAX_OCCURRENCES

    starts = []
    for n in range(1, limit + 1):
        offset = occurrence_offset(rule, n)
        if offset is None:
            return []
        candidate = start_time + offset
        if candidate.date() > end_date:
            break
        starts.append(candidate)
    return starts


def exceeds_occurrence_limit(
    start_time: datetime,
    rule: Union[RecurrenceRule, str],
    end_date: Union[date, datetime],
    max_occurrences: Optional[int] = None
) -> bool:
    """True when reaching end_date would take more occurrences than the cap allows"""
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    limit = max_occurrences or settings.RECURRENCE_MAX_OCCURRENCES

    offset = occurrence_offset(rule, limit + 1)
    return offset is not None and (start_time + offset).date() <= end_date


class RecurrenceExpander:
    """Builds the children of a recurring appointment"""

    def __init__(self, db, overlap_checker: Optional[OverlapChecker] = None):
        self.db = db
        self.overlap = overlap_checker or OverlapChecker(db)

    def expand(
        self,
        parent: Appointment,
        rule: Union[RecurrenceRule, str],
        end_date: Union[date, datetime]
    ) -> List[Appointment]:
        """Create child appointments for every free occurrence.

        Only the doctor's calendar is checked; occurrences that collide with
        an existing booking are skipped. The children are added to the
        session but not committed, so they land with the parent or not at all.
        """
        duration = parent.end_time - parent.start_time
        children: List[Appointment] = []

        for start in occurrence_starts(parent.start_time, rule, end_date):
            end = start + duration
            if self.overlap.doctor_has_conflict(parent.doctor_id, start, end):
                logger.debug(f"Skipping occurrence {start.isoformat()} of {parent.id}: doctor busy")
                continue
            if any(intervals_overlap(start, end, c.start_time, c.end_time) for c in children):
                continue
            children.append(Appointment(
                patient_id=parent.patient_id,
                doctor_id=parent.doctor_id,
                workplace_id=parent.workplace_id,
                start_time=start,
                end_time=end,
                notes=parent.notes,
                status=AppointmentStatus.SCHEDULED,
                parent_appointment_id=parent.id
            ))

        if children:
            self.db.add_all(children)
            self.db.flush()
        logger.info(f"Expanded recurring appointment {parent.id} into {len(children)} occurrences")
        return children
