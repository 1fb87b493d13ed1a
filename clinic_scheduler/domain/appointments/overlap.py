"""
Overlap Detection

Detects scheduling conflicts between appointments of the same doctor or
the same patient. Intervals are half-open: [start, end). Two appointments
that merely touch (one ends exactly when the other starts) do not conflict.
Cancelled appointments never conflict.
"""

from datetime import datetime
from typing import Optional
import enum
import uuid

from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus


class OverlapScope(str, enum.Enum):
    """Which owner an overlap check is scoped to"""
    DOCTOR = "doctor"
    PATIENT = "patient"


def intervals_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime
) -> bool:
    """True when [start_a, end_a) and [start_b, end_b) share an instant"""
    return start_a < end_b and start_b < end_a


class OverlapChecker:
    """Read-only conflict predicate over the appointments table"""

    def __init__(self, db):
        self.db = db

    def _owner_column(self, scope: OverlapScope):
        if scope == OverlapScope.DOCTOR:
            return Appointment.doctor_id
        return Appointment.patient_id

    def find_conflict(
        self,
        scope: OverlapScope,
        owner_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[uuid.UUID] = None
    ) -> Optional[Appointment]:
        """Return the first non-cancelled appointment overlapping the range"""
        query = self.db.query(Appointment).filter(
            self._owner_column(scope) == owner_id,
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.start_time < end_time,
            Appointment.end_time > start_time
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.start_time).first()

    def has_conflict(
        self,
        scope: OverlapScope,
        owner_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[uuid.UUID] = None
    ) -> bool:
        return self.find_conflict(scope, owner_id, start_time, end_time, exclude_id) is not None

    def doctor_has_conflict(self, doctor_id, start_time, end_time, exclude_id=None) -> bool:
        return self.has_conflict(OverlapScope.DOCTOR, doctor_id, start_time, end_time, exclude_id)

    def patient_has_conflict(self, patient_id, start_time, end_time, exclude_id=None) -> bool:
        return self.has_conflict(OverlapScope.PATIENT, patient_id, start_time, end_time, exclude_id)
