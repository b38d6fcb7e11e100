"""
Calendar mirroring - best-effort replication of appointments to the doctor's calendar

Every operation returns a MirrorResult instead of raising, so callers commit
local state first and treat the mirror outcome as informational.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ...config import SLOT_DURATION_MINUTES
from ...errors import ExternalServiceError
from ...models import Appointment
from ...services.google_calendar_service import build_event_body
from ...shared.validators import from_db_datetime
from .availability_service import CalendarFactory

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Mental health consultation"


@dataclass
class MirrorResult:
    ok: bool
    action: str  # create, update, delete
    event_id: Optional[str] = None
    error: Optional[str] = None


def appointment_event(appointment: Appointment) -> dict:
    """Calendar event body for an appointment"""
    doctor = appointment.doctor
    patient = appointment.user
    start = from_db_datetime(appointment.date_time)
    patient_name = patient.name if patient and patient.name else "patient"
    return build_event_body(
        summary=f"Appointment with {patient_name} and Dr. {doctor.name}",
        description=appointment.notes or DEFAULT_DESCRIPTION,
        start=start,
        end=start + timedelta(minutes=SLOT_DURATION_MINUTES),
        attendees=[patient.email if patient else None, doctor.email],
    )


class CalendarMirror:
    """Creates, updates, and deletes the external event backing an appointment"""

    def __init__(self, calendar_factory: CalendarFactory):
        self.calendar_factory = calendar_factory

    async def create(self, appointment: Appointment) -> MirrorResult:
        try:
            calendar = self.calendar_factory(appointment.doctor)
            event_id = await calendar.create_event(appointment_event(appointment))
        except ExternalServiceError as e:
            logger.warning(f"Failed to mirror appointment {appointment.id} to calendar: {e.message}")
            return MirrorResult(ok=False, action="create", error=e.message)
        return MirrorResult(ok=True, action="create", event_id=event_id)

    async def update(self, appointment: Appointment) -> MirrorResult:
        if not appointment.google_event_id:
            return MirrorResult(ok=False, action="update", error="Appointment has no calendar event")
        try:
            calendar = self.calendar_factory(appointment.doctor)
            event_id = await calendar.update_event(appointment.google_event_id, appointment_event(appointment))
        except ExternalServiceError as e:
            logger.warning(f"Failed to update calendar event for appointment {appointment.id}: {e.message}")
            return MirrorResult(ok=False, action="update", event_id=appointment.google_event_id, error=e.message)
        return MirrorResult(ok=True, action="update", event_id=event_id)

    async def delete(self, appointment: Appointment) -> MirrorResult:
        if not appointment.google_event_id:
            return MirrorResult(ok=False, action="delete", error="Appointment has no calendar event")
        try:
            calendar = self.calendar_factory(appointment.doctor)
            await calendar.delete_event(appointment.google_event_id)
        except ExternalServiceError as e:
            logger.warning(f"Failed to delete calendar event for appointment {appointment.id}: {e.message}")
            return MirrorResult(ok=False, action="delete", event_id=appointment.google_event_id, error=e.message)
        return MirrorResult(ok=True, action="delete", event_id=appointment.google_event_id)
