"""
Calendar connection model

A doctor's availability is read from, and appointments are mirrored to, the
Google Calendar linked through this row. Patients may link a calendar too but
nothing reads it for scheduling.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class GoogleCalendarIntegration(Base):
    """One linked Google Calendar per user, with Fernet-encrypted OAuth tokens"""

    __tablename__ = "google_calendar_integrations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    # Fernet ciphertext, see security_utils.encrypt_token
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    token_expires_at = Column(DateTime, nullable=False)  # naive UTC

    # Calendar queried for free/busy and receiving appointment events
    google_calendar_id = Column(String(500), nullable=True)  # None means "primary"
    google_user_email = Column(String(255), nullable=True)

    # Reported by /google-calendar/status as the default for mirroring new bookings
    auto_sync_enabled = Column(Boolean, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="calendar_integration")
