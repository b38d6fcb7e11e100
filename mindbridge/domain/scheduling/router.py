"""Appointment router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from ...auth import get_current_user
from ...dependencies import get_booking_coordinator
from ...models import Appointment, User
from ...shared.validators import from_db_datetime
from .mirror import MirrorResult
from .schemas import (
    AppointmentCreate,
    AppointmentMutationResponse,
    AppointmentResponse,
    AppointmentUpdate,
    DoctorSummary,
    SyncResponse,
)
from .service import BookingCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def to_response(appointment: Appointment, include_doctor: bool = False) -> AppointmentResponse:
    doctor = appointment.doctor
    return AppointmentResponse(
        id=appointment.id,
        userId=appointment.user_id,
        doctorId=appointment.doctor_id,
        doctorName=doctor.name if doctor else None,
        specialty=doctor.specialty if doctor else None,
        dateTime=from_db_datetime(appointment.date_time),
        status=appointment.status,
        notes=appointment.notes,
        googleEventId=appointment.google_event_id,
        createdAt=appointment.created_at,
        updatedAt=appointment.updated_at,
        doctor=DoctorSummary.model_validate(doctor) if include_doctor and doctor else None,
    )


def _synced(result: Optional[MirrorResult]) -> Optional[bool]:
    return None if result is None else result.ok


@router.post("", response_model=AppointmentMutationResponse)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Book an available slot with a doctor"""
    appointment, mirror_result = await service.create_appointment(data, current_user)
    return AppointmentMutationResponse(
        message="Appointment created successfully",
        appointment=to_response(appointment),
        calendarSynced=_synced(mirror_result),
    )


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Get all appointments for the current user, newest first"""
    return [to_response(a) for a in service.list_appointments(current_user)]


@router.post("/sync", response_model=SyncResponse)
async def sync_appointments(
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Push the current user's active appointments to the doctors' Google Calendars"""
    counts, results = await service.sync_appointments(current_user)
    return SyncResponse(message="Appointments synced with Google Calendar", counts=counts, results=results)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Get a specific appointment with doctor details"""
    return to_response(service.get_appointment(appointment_id, current_user), include_doctor=True)


@router.put("/{appointment_id}", response_model=AppointmentMutationResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Reschedule an appointment, edit its notes, or change its status"""
    appointment, mirror_result = await service.update_appointment(appointment_id, data, current_user)
    return AppointmentMutationResponse(
        message="Appointment updated successfully",
        appointment=to_response(appointment),
        calendarSynced=_synced(mirror_result),
    )


@router.delete("/{appointment_id}")
async def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingCoordinator = Depends(get_booking_coordinator),
):
    """Cancel an appointment (the record is kept with status cancelled)"""
    _, mirror_result = await service.cancel_appointment(appointment_id, current_user)
    return {"message": "Appointment cancelled successfully", "calendarSynced": _synced(mirror_result)}
