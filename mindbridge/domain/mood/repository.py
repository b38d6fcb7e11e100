"""Mood repository - Database operations for mood entries"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import StorageError
from ...models import MoodEntry
from ...shared.validators import to_db_datetime

logger = logging.getLogger(__name__)


class MoodRepository:
    """Repository for mood entry database operations"""

    @staticmethod
    def create(db: Session, entry: MoodEntry) -> MoodEntry:
        db.add(entry)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist mood entry: {e}")
            raise StorageError("Failed to save mood entry") from e
        db.refresh(entry)
        return entry

    @staticmethod
    def list_since(db: Session, user_id: int, since: datetime) -> list[MoodEntry]:
        """Entries of a user recorded at or after since, oldest first"""
        try:
            return (
                db.query(MoodEntry)
                .filter(MoodEntry.user_id == user_id, MoodEntry.created_at >= to_db_datetime(since))
                .order_by(MoodEntry.created_at.asc(), MoodEntry.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to load mood history") from e
