"""Booking coordinator - Business logic for creating, rescheduling, and cancelling appointments"""

import logging
from collections import Counter
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import AlreadyCancelled, Conflict, InvalidInput, NotFound, SlotUnavailable
from ...models import Appointment, AppointmentStatus, Doctor, User
from ...shared.validators import ensure_utc, from_db_datetime
from ..doctors.repository import DoctorRepository
from .availability_service import AvailabilityResolver
from .mirror import CalendarMirror, MirrorResult
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate, SyncItemResult

logger = logging.getLogger(__name__)


class BookingCoordinator:
    """
    Service layer for appointment booking.

    Local storage is authoritative: availability and conflicts are checked
    before every commit, and calendar mirroring runs after the commit as a
    best-effort step whose failure never fails the request.
    """

    def __init__(self, db: Session, resolver: AvailabilityResolver, mirror: CalendarMirror):
        self.db = db
        self.resolver = resolver
        self.mirror = mirror
        self.repo = AppointmentRepository()
        self.doctors = DoctorRepository()

    def get_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_for_user(self.db, appointment_id, user.id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    def list_appointments(self, user: User) -> list[Appointment]:
        return self.repo.list_for_user(self.db, user.id)

    async def _ensure_bookable(
        self, doctor: Doctor, date_time: datetime, exclude_id: Optional[int] = None
    ) -> None:
        """Raise unless date_time starts an available slot with no active appointment on it"""
        if not await self.resolver.is_slot_available(doctor, date_time):
            raise SlotUnavailable()

        if self.repo.find_active_at(self.db, doctor.id, date_time, exclude_id=exclude_id):
            raise Conflict()

    async def create_appointment(
        self, data: AppointmentCreate, user: User
    ) -> tuple[Appointment, Optional[MirrorResult]]:
        """Book a slot; returns the appointment and the mirror outcome when mirroring was requested"""
        if not data.doctorId or not data.dateTime:
            raise InvalidInput("Doctor ID and date/time are required")

        doctor = self.doctors.get_doctor(self.db, data.doctorId)
        if not doctor:
            raise NotFound("Doctor not found")

        date_time = ensure_utc(data.dateTime)
        await self._ensure_bookable(doctor, date_time)

        appointment = self.repo.create(
            self.db,
            user_id=user.id,
            doctor_id=doctor.id,
            date_time=date_time,
            notes=data.notes or "",
            status=AppointmentStatus.CONFIRMED,
        )
        logger.info(f"Appointment {appointment.id} booked: user {user.id} with doctor {doctor.id} at {date_time}")

        mirror_result = None
        if data.useGoogleCalendar:
            mirror_result = await self.mirror.create(appointment)
            if mirror_result.ok:
                appointment = self.repo.update(self.db, appointment, google_event_id=mirror_result.event_id)

        return appointment, mirror_result

    async def update_appointment(
        self, appointment_id: int, data: AppointmentUpdate, user: User
    ) -> tuple[Appointment, Optional[MirrorResult]]:
        """Reschedule, edit notes, or change status of an appointment"""
        appointment = self.get_appointment(appointment_id, user)

        if appointment.status == AppointmentStatus.CANCELLED:
            raise AlreadyCancelled("Cannot update a cancelled appointment")

        updates: dict = {}
        if data.notes is not None:
            updates["notes"] = data.notes
        if data.status is not None:
            updates["status"] = data.status

        # A cancellation keeps the booked time and never waits on the calendar
        cancelling = data.status == AppointmentStatus.CANCELLED

        time_changed = False
        if data.dateTime is not None and not cancelling:
            new_time = ensure_utc(data.dateTime)
            if new_time != from_db_datetime(appointment.date_time):
                await self._ensure_bookable(appointment.doctor, new_time, exclude_id=appointment.id)
                updates["date_time"] = new_time
                time_changed = True
                updates.setdefault("status", AppointmentStatus.CONFIRMED)

        if not updates:
            return appointment, None

        appointment = self.repo.update(self.db, appointment, **updates)
        logger.info(f"Appointment {appointment.id} updated: {sorted(updates)}")

        mirror_result = None
        if appointment.google_event_id:
            if appointment.status == AppointmentStatus.CANCELLED:
                mirror_result = await self.mirror.delete(appointment)
            elif time_changed:
                mirror_result = await self.mirror.update(appointment)

        return appointment, mirror_result

    async def cancel_appointment(
        self, appointment_id: int, user: User
    ) -> tuple[Appointment, Optional[MirrorResult]]:
        """Soft-cancel an appointment; the record is kept with status cancelled"""
        appointment = self.get_appointment(appointment_id, user)

        if appointment.status == AppointmentStatus.CANCELLED:
            raise AlreadyCancelled()

        appointment = self.repo.update(self.db, appointment, status=AppointmentStatus.CANCELLED)
        logger.info(f"Appointment {appointment.id} cancelled by user {user.id}")

        mirror_result = None
        if appointment.google_event_id:
            mirror_result = await self.mirror.delete(appointment)

        return appointment, mirror_result

    async def sync_appointments(self, user: User) -> tuple[dict[str, int], list[SyncItemResult]]:
        """Mirror every active appointment of the user onto the doctors' calendars"""
        results: list[SyncItemResult] = []

        for appointment in self.repo.list_for_user(self.db, user.id):
            if appointment.status == AppointmentStatus.CANCELLED:
                results.append(
                    SyncItemResult(id=appointment.id, status="skipped", message="Appointment already cancelled")
                )
                continue

            if appointment.google_event_id:
                outcome = await self.mirror.update(appointment)
                if outcome.ok:
                    results.append(
                        SyncItemResult(
                            id=appointment.id, status="updated", message="Appointment updated in Google Calendar"
                        )
                    )
                else:
                    results.append(SyncItemResult(id=appointment.id, status="error", message=outcome.error))
                continue

            outcome = await self.mirror.create(appointment)
            if outcome.ok:
                self.repo.update(self.db, appointment, google_event_id=outcome.event_id)
                results.append(
                    SyncItemResult(
                        id=appointment.id, status="created", message="Appointment created in Google Calendar"
                    )
                )
            else:
                results.append(SyncItemResult(id=appointment.id, status="error", message=outcome.error))

        counts = dict(Counter(result.status for result in results))
        logger.info(f"Synced appointments for user {user.id}: {counts}")
        return counts, results
