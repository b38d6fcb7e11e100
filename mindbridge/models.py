from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class AppointmentStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    ALL = (PENDING, CONFIRMED, CANCELLED)
    ACTIVE = (PENDING, CONFIRMED)
    # Updates never move an appointment back to pending
    SETTABLE = (CONFIRMED, CANCELLED)


# Raw SQL so the same predicate works for both SQLite and PostgreSQL partial indexes
ACTIVE_STATUS_PREDICATE = text("status IN ('pending', 'confirmed')")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), default="patient", nullable=False)  # patient, doctor, admin
    verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    doctor_profile = relationship("Doctor", back_populates="user", uselist=False)
    appointments = relationship("Appointment", back_populates="user")
    calendar_integration = relationship("GoogleCalendarIntegration", back_populates="user", uselist=False)
    mood_entries = relationship("MoodEntry", back_populates="user")
    assessments = relationship("Assessment", back_populates="user")


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, unique=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    specialty = Column(String(100), nullable=True, index=True)
    bio = Column(Text, nullable=True)
    license_number = Column(String(100), nullable=True)
    education = Column(JSON, nullable=True)
    experience = Column(JSON, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)
    rejected = Column(Boolean, default=False, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="doctor_profile")
    appointments = relationship("Appointment", back_populates="doctor")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one active appointment per doctor per start instant
        Index(
            "uq_appointments_doctor_active_slot",
            "doctor_id",
            "date_time",
            unique=True,
            sqlite_where=ACTIVE_STATUS_PREDICATE,
            postgresql_where=ACTIVE_STATUS_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    date_time = Column(DateTime, nullable=False)  # UTC start, one-hour duration
    status = Column(String(20), default=AppointmentStatus.CONFIRMED, nullable=False)
    notes = Column(Text, nullable=True)
    google_event_id = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")


class MoodEntry(Base):
    __tablename__ = "mood_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mood = Column(Integer, nullable=False)  # 1-10
    notes = Column(Text, nullable=True)  # Fernet ciphertext under the owner's key
    activities = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, index=True)  # naive UTC

    user = relationship("User", back_populates="mood_entries")


class Assessment(Base):
    """PHQ-9 / GAD-7 screening result"""

    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    phq9_score = Column(Integer, nullable=False)
    gad7_score = Column(Integer, nullable=False)
    depression_severity = Column(String(40), nullable=False)
    anxiety_severity = Column(String(40), nullable=False)
    # JSON answer lists, encrypted under the owner's key
    phq9_answers = Column(Text, nullable=True)
    gad7_answers = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)  # naive UTC

    user = relationship("User", back_populates="assessments")
