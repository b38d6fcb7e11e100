"""Assessment repository - Database operations for screening results"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import StorageError
from ...models import Assessment

logger = logging.getLogger(__name__)


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action} assessment: {e}")
        raise StorageError(f"Failed to {action} assessment") from e


class AssessmentRepository:
    """Repository for assessment database operations"""

    @staticmethod
    def create(db: Session, assessment: Assessment) -> Assessment:
        db.add(assessment)
        _commit(db, "save")
        db.refresh(assessment)
        return assessment

    @staticmethod
    def get_for_user(db: Session, assessment_id: int, user_id: int) -> Optional[Assessment]:
        """Get an assessment owned by the given user"""
        try:
            return (
                db.query(Assessment)
                .filter(Assessment.id == assessment_id, Assessment.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load assessment") from e

    @staticmethod
    def list_for_user(db: Session, user_id: int, limit: int = 10) -> list[Assessment]:
        """Most recent assessments first"""
        try:
            return (
                db.query(Assessment)
                .filter(Assessment.user_id == user_id)
                .order_by(Assessment.created_at.desc(), Assessment.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load assessments") from e

    @staticmethod
    def delete(db: Session, assessment: Assessment) -> None:
        db.delete(assessment)
        _commit(db, "delete")
