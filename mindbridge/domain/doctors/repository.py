"""Doctor repository - Database operations for doctors"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ...errors import StorageError
from ...models import Doctor

logger = logging.getLogger(__name__)


class DoctorRepository:
    """Repository for doctor database operations"""

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[Doctor]:
        try:
            return db.query(Doctor).filter(Doctor.id == doctor_id).first()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load doctor") from e

    @staticmethod
    def get_by_user_id(db: Session, user_id: int) -> Optional[Doctor]:
        try:
            return db.query(Doctor).filter(Doctor.user_id == user_id).first()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load doctor") from e

    @staticmethod
    def list_doctors(db: Session, specialty: Optional[str] = None) -> list[Doctor]:
        """List doctors, optionally filtered by specialty"""
        try:
            query = db.query(Doctor)
            if specialty:
                query = query.filter(Doctor.specialty == specialty)
            return query.order_by(Doctor.name.asc()).all()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load doctors") from e

    @staticmethod
    def list_by_verification_status(db: Session, status: str) -> list[Doctor]:
        """Doctors awaiting review (pending), approved (verified), or rejected; newest first"""
        try:
            query = db.query(Doctor).options(joinedload(Doctor.user))
            if status == "pending":
                query = query.filter(Doctor.verified.is_(False), Doctor.rejected.is_(False))
            elif status == "verified":
                query = query.filter(Doctor.verified.is_(True))
            elif status == "rejected":
                query = query.filter(Doctor.rejected.is_(True))
            return query.order_by(Doctor.created_at.desc(), Doctor.id.desc()).all()
        except SQLAlchemyError as e:
            raise StorageError("Failed to load doctors") from e

    @staticmethod
    def list_by_specialties(db: Session, specialties: list[str], limit: int = 6) -> list[Doctor]:
        """Verified doctors practicing any of the given specialties"""
        try:
            return (
                db.query(Doctor)
                .filter(Doctor.specialty.in_(specialties), Doctor.verified.is_(True))
                .order_by(Doctor.name.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load doctors") from e

    @staticmethod
    def save(db: Session, doctor: Doctor) -> Doctor:
        """Commit pending changes to a doctor and its linked user"""
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist doctor {doctor.id}: {e}")
            raise StorageError("Failed to save doctor") from e
        db.refresh(doctor)
        return doctor
