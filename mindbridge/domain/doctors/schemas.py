"""Doctor domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..scheduling.schemas import TimeSlot


class DoctorResponse(BaseModel):
    """Schema for doctor response"""

    id: int
    name: str
    email: Optional[str] = None
    specialty: Optional[str] = None
    bio: Optional[str] = None
    verified: bool = False
    availableSlots: Optional[list[TimeSlot]] = None
    availabilityError: Optional[str] = None


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]


class SlotsResponse(BaseModel):
    doctorId: int
    date: str
    slots: list[TimeSlot]


class DoctorAppointmentResponse(BaseModel):
    """Appointment as seen from the doctor's dashboard"""

    id: int
    patientName: Optional[str] = None
    patientEmail: Optional[str] = None
    dateTime: datetime
    status: str
    notes: Optional[str] = None
    googleEventId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class DoctorProfileResponse(BaseModel):
    """The signed-in doctor's own profile"""

    id: int
    userId: Optional[int] = None
    name: str
    email: Optional[str] = None
    specialty: Optional[str] = None
    licenseNumber: Optional[str] = None
    education: list[dict] = []
    experience: list[dict] = []
    bio: Optional[str] = None
    verified: bool = False
    verifiedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class DoctorProfileUpdate(BaseModel):
    """Schema for a doctor editing their profile; omitted fields are left unchanged"""

    name: Optional[str] = None
    specialty: Optional[str] = None
    licenseNumber: Optional[str] = None
    bio: Optional[str] = None
    education: Optional[list[dict]] = None
    experience: Optional[list[dict]] = None


class DoctorVerification(BaseModel):
    """Admin decision on a doctor's registration"""

    verified: Optional[bool] = None
    rejected: bool = False
    rejectionReason: str = ""


class AdminDoctorResponse(BaseModel):
    """Doctor as listed in the admin verification queue"""

    id: int
    userId: Optional[int] = None
    name: str
    email: Optional[str] = None
    specialty: Optional[str] = None
    licenseNumber: Optional[str] = None
    bio: Optional[str] = None
    verified: bool = False
    rejected: bool = False
    rejectionReason: Optional[str] = None
    verifiedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class AdminDoctorListResponse(BaseModel):
    doctors: list[AdminDoctorResponse]
