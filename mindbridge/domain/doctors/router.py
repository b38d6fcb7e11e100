"""Doctor router - directory, availability, doctor dashboard, and admin review endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_doctor, get_current_user
from ...database import get_db
from ...dependencies import get_availability_resolver
from ...models import Doctor, User
from ...shared.validators import from_db_datetime
from ..scheduling.availability_service import AvailabilityResolver
from .schemas import (
    AdminDoctorListResponse,
    AdminDoctorResponse,
    DoctorAppointmentResponse,
    DoctorListResponse,
    DoctorProfileResponse,
    DoctorProfileUpdate,
    DoctorResponse,
    DoctorVerification,
    SlotsResponse,
)
from .service import DoctorAccountService, DoctorService, to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])
doctor_router = APIRouter(prefix="/doctor", tags=["Doctor Dashboard"])
admin_router = APIRouter(prefix="/admin/doctors", tags=["Admin"])


def get_doctor_service(
    db: Session = Depends(get_db),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db, resolver)


def get_doctor_account_service(db: Session = Depends(get_db)) -> DoctorAccountService:
    return DoctorAccountService(db)


@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    specialty: Optional[str] = Query(None),
    date: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """List doctors; with a date, each doctor carries its available slots for that day"""
    return DoctorListResponse(doctors=await service.list_doctors(specialty, date))


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: int,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    return to_response(service.get_doctor(doctor_id))


@router.get("/{doctor_id}/slots", response_model=SlotsResponse)
async def get_doctor_slots(
    doctor_id: int,
    date: str = Query(...),
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """Available one-hour slots for a doctor on a day"""
    slots = await service.get_slots(doctor_id, date)
    return SlotsResponse(doctorId=doctor_id, date=date, slots=slots)


@doctor_router.get("/appointments", response_model=list[DoctorAppointmentResponse])
async def list_doctor_appointments(
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    past: bool = Query(False),
    doctor: Doctor = Depends(get_current_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Upcoming (or past) appointments booked with the current doctor"""
    appointments = service.list_doctor_appointments(doctor, status=status, past=past, limit=limit)
    return [
        DoctorAppointmentResponse(
            id=a.id,
            patientName=a.user.name if a.user else None,
            patientEmail=a.user.email if a.user else None,
            dateTime=from_db_datetime(a.date_time),
            status=a.status,
            notes=a.notes,
            googleEventId=a.google_event_id,
            createdAt=a.created_at,
            updatedAt=a.updated_at,
        )
        for a in appointments
    ]


def to_profile_response(doctor: Doctor) -> DoctorProfileResponse:
    user = doctor.user
    return DoctorProfileResponse(
        id=doctor.id,
        userId=doctor.user_id,
        name=user.name if user and user.name else doctor.name,
        email=user.email if user else doctor.email,
        specialty=doctor.specialty,
        licenseNumber=doctor.license_number,
        education=doctor.education or [],
        experience=doctor.experience or [],
        bio=doctor.bio,
        verified=doctor.verified,
        verifiedAt=doctor.verified_at,
        createdAt=doctor.created_at,
        updatedAt=doctor.updated_at,
    )


@doctor_router.get("/profile", response_model=DoctorProfileResponse)
async def get_doctor_profile(doctor: Doctor = Depends(get_current_doctor)):
    return to_profile_response(doctor)


@doctor_router.put("/profile")
async def update_doctor_profile(
    data: DoctorProfileUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    service: DoctorAccountService = Depends(get_doctor_account_service),
):
    service.update_profile(doctor, data)
    return {"message": "Profile updated successfully"}


@admin_router.get("", response_model=AdminDoctorListResponse)
async def list_doctors_for_review(
    status: str = Query("pending"),
    admin: User = Depends(get_current_admin),
    service: DoctorAccountService = Depends(get_doctor_account_service),
):
    """Doctors filtered by review status: pending, verified, or rejected"""
    doctors = service.list_for_review(status)
    return AdminDoctorListResponse(
        doctors=[
            AdminDoctorResponse(
                id=d.id,
                userId=d.user_id,
                name=d.user.name if d.user and d.user.name else d.name,
                email=d.user.email if d.user else d.email,
                specialty=d.specialty,
                licenseNumber=d.license_number,
                bio=d.bio,
                verified=d.verified,
                rejected=d.rejected,
                rejectionReason=d.rejection_reason,
                verifiedAt=d.verified_at,
                createdAt=d.created_at,
                updatedAt=d.updated_at,
            )
            for d in doctors
        ]
    )


@admin_router.post("/{doctor_id}/verify")
async def verify_doctor(
    doctor_id: int,
    data: DoctorVerification,
    admin: User = Depends(get_current_admin),
    service: DoctorAccountService = Depends(get_doctor_account_service),
):
    """Approve or reject a doctor's registration"""
    doctor = service.verify_doctor(doctor_id, data)
    logger.info(f"Admin {admin.id} reviewed doctor {doctor.id}")
    return {
        "success": True,
        "message": "Doctor approved successfully" if doctor.verified else "Doctor rejected successfully",
    }
