"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import AppointmentStatus


class Interval(BaseModel):
    """Half-open time interval [start, end)"""

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

    def overlaps(self, other: "Interval") -> bool:
        # Touching endpoints do not overlap
        return self.start < other.end and self.end > other.start


class TimeSlot(Interval):
    """A bookable candidate appointment window"""


class BusyInterval(Interval):
    """Time a provider's external calendar reports as unavailable"""


class AppointmentCreate(BaseModel):
    """Schema for booking a slot"""

    doctorId: Optional[int] = None
    dateTime: Optional[datetime] = None
    notes: Optional[str] = None
    useGoogleCalendar: bool = False


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling, editing notes, or changing status"""

    dateTime: Optional[datetime] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in AppointmentStatus.SETTABLE:
            raise ValueError(f"status must be one of: {', '.join(AppointmentStatus.SETTABLE)}")
        return v


class DoctorSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    specialty: Optional[str] = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    userId: int
    doctorId: int
    doctorName: Optional[str] = None
    specialty: Optional[str] = None
    dateTime: datetime
    status: str
    notes: Optional[str] = None
    googleEventId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    doctor: Optional[DoctorSummary] = None


class AppointmentMutationResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
    calendarSynced: Optional[bool] = None


class SyncItemResult(BaseModel):
    id: int
    status: str  # created, updated, skipped, error
    message: str


class SyncResponse(BaseModel):
    message: str
    counts: dict[str, int]
    results: list[SyncItemResult]
