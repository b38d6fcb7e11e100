"""Doctor service - directory lookups with calendar availability"""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import Session

from ...errors import ExternalServiceError, InvalidInput, NotFound
from ...models import Appointment, Doctor
from ...shared.validators import parse_iso_datetime, to_db_datetime
from ..scheduling.availability_service import AvailabilityResolver
from ..scheduling.repository import AppointmentRepository
from .repository import DoctorRepository
from .schemas import DoctorProfileUpdate, DoctorResponse, DoctorVerification

logger = logging.getLogger(__name__)


def parse_day(value: str) -> Union[date, datetime]:
    """Accept a plain YYYY-MM-DD day or a full ISO timestamp"""
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise InvalidInput("Invalid date format") from None
    if parsed is None:
        raise InvalidInput("Invalid date format")
    return parsed


def to_response(doctor: Doctor, **extra) -> DoctorResponse:
    return DoctorResponse(
        id=doctor.id,
        name=doctor.name,
        email=doctor.email,
        specialty=doctor.specialty,
        bio=doctor.bio,
        verified=doctor.verified,
        **extra,
    )


class DoctorService:
    """Service layer for the doctor directory"""

    def __init__(self, db: Session, resolver: AvailabilityResolver):
        self.db = db
        self.resolver = resolver
        self.repo = DoctorRepository()

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    async def _with_availability(self, doctor: Doctor, day: Union[date, datetime]) -> DoctorResponse:
        try:
            slots = await self.resolver.get_available_time_slots(doctor, day)
        except ExternalServiceError as e:
            # A doctor whose calendar cannot be read is listed with no availability
            logger.error(f"Failed to get availability for doctor {doctor.id}: {e.message}")
            return to_response(doctor, availableSlots=[], availabilityError="Failed to get availability")
        return to_response(doctor, availableSlots=slots)

    async def list_doctors(self, specialty: Optional[str] = None, day: Optional[str] = None) -> list[DoctorResponse]:
        doctors = self.repo.list_doctors(self.db, specialty)
        if not day:
            return [to_response(doctor) for doctor in doctors]

        parsed = parse_day(day)
        return list(await asyncio.gather(*(self._with_availability(doctor, parsed) for doctor in doctors)))

    async def get_slots(self, doctor_id: int, day: str):
        doctor = self.get_doctor(doctor_id)
        return await self.resolver.get_available_time_slots(doctor, parse_day(day))

    def list_doctor_appointments(
        self, doctor: Doctor, status: Optional[str] = None, past: bool = False, limit: int = 10
    ) -> list[Appointment]:
        return AppointmentRepository.list_for_doctor(
            self.db, doctor.id, datetime.now(timezone.utc), status=status, past=past, limit=limit
        )


class DoctorAccountService:
    """Profile editing by doctors and registration review by admins"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository()

    def update_profile(self, doctor: Doctor, data: DoctorProfileUpdate) -> Doctor:
        updates = data.model_dump(exclude_none=True)
        if not updates:
            raise InvalidInput("No profile fields to update")

        if "name" in updates:
            if not data.name.strip():
                raise InvalidInput("Name cannot be empty")
            doctor.name = data.name.strip()
            if doctor.user:
                doctor.user.name = doctor.name
        if "specialty" in updates:
            doctor.specialty = data.specialty
        if "licenseNumber" in updates:
            doctor.license_number = data.licenseNumber
        if "bio" in updates:
            doctor.bio = data.bio
        if "education" in updates:
            doctor.education = data.education
        if "experience" in updates:
            doctor.experience = data.experience

        doctor = self.repo.save(self.db, doctor)
        logger.info(f"Doctor {doctor.id} updated profile fields: {sorted(updates)}")
        return doctor

    def list_for_review(self, status: str = "pending") -> list[Doctor]:
        return self.repo.list_by_verification_status(self.db, status)

    def verify_doctor(self, doctor_id: int, data: DoctorVerification) -> Doctor:
        """Approve or reject a doctor; the linked user account mirrors the verified flag"""
        if data.verified is None:
            raise InvalidInput("Verified status is required")
        if data.rejected and data.verified:
            raise InvalidInput("A doctor cannot be both verified and rejected")
        if data.rejected and not data.rejectionReason.strip():
            raise InvalidInput("Rejection reason is required")

        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")

        doctor.verified = data.verified
        doctor.rejected = data.rejected
        doctor.rejection_reason = data.rejectionReason.strip() if data.rejected else None
        doctor.verified_at = to_db_datetime(datetime.now(timezone.utc)) if data.verified else None
        if doctor.user:
            doctor.user.verified = data.verified

        doctor = self.repo.save(self.db, doctor)
        logger.info(f"Doctor {doctor.id} verification set: verified={data.verified} rejected={data.rejected}")
        return doctor
