"""Appointment repository - Database operations for appointments"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ...errors import Conflict, StorageError
from ...models import Appointment, AppointmentStatus
from ...shared.validators import to_db_datetime

logger = logging.getLogger(__name__)


def _commit(db: Session) -> None:
    """Commit, mapping the active-slot unique index to Conflict and anything else to StorageError"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error on appointment commit: {e.orig}")
        raise Conflict() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist appointment: {e}")
        raise StorageError("Failed to save appointment") from e


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_for_user(db: Session, appointment_id: int, user_id: int) -> Optional[Appointment]:
        """Get an appointment owned by the given requester"""
        try:
            return (
                db.query(Appointment)
                .options(joinedload(Appointment.doctor))
                .filter(Appointment.id == appointment_id, Appointment.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load appointment") from e

    @staticmethod
    def list_for_user(db: Session, user_id: int) -> list[Appointment]:
        """Get all appointments for a requester, newest first"""
        try:
            return (
                db.query(Appointment)
                .options(joinedload(Appointment.doctor))
                .filter(Appointment.user_id == user_id)
                .order_by(Appointment.date_time.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load appointments") from e

    @staticmethod
    def find_active_at(
        db: Session, doctor_id: int, date_time: datetime, exclude_id: Optional[int] = None
    ) -> Optional[Appointment]:
        """Find a pending or confirmed appointment for the doctor at this exact instant"""
        try:
            query = db.query(Appointment).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date_time == to_db_datetime(date_time),
                Appointment.status.in_(AppointmentStatus.ACTIVE),
            )
            if exclude_id is not None:
                query = query.filter(Appointment.id != exclude_id)
            return query.first()
        except SQLAlchemyError as e:
            raise StorageError("Failed to check for conflicting appointments") from e

    @staticmethod
    def create(db: Session, user_id: int, doctor_id: int, date_time: datetime, **data) -> Appointment:
        """Create a new appointment"""
        appointment = Appointment(
            user_id=user_id, doctor_id=doctor_id, date_time=to_db_datetime(date_time), **data
        )
        db.add(appointment)
        _commit(db)
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Apply updates (including explicit None values) and commit"""
        for key, value in updates.items():
            if key == "date_time" and value is not None:
                value = to_db_datetime(value)
            setattr(appointment, key, value)
        _commit(db)
        db.refresh(appointment)
        return appointment

    @staticmethod
    def list_for_doctor(
        db: Session,
        doctor_id: int,
        now: datetime,
        status: Optional[str] = None,
        past: bool = False,
        limit: int = 10,
    ) -> list[Appointment]:
        """Upcoming appointments ascending, or past appointments descending"""
        try:
            query = (
                db.query(Appointment)
                .options(joinedload(Appointment.user))
                .filter(Appointment.doctor_id == doctor_id)
            )
            if status:
                query = query.filter(Appointment.status == status)

            cutoff = to_db_datetime(now)
            if past:
                query = query.filter(Appointment.date_time < cutoff).order_by(Appointment.date_time.desc())
            else:
                query = query.filter(Appointment.date_time >= cutoff).order_by(Appointment.date_time.asc())

            return query.limit(limit).all()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load appointments") from e
