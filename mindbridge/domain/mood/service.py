"""Mood service - recording and reading mood check-ins"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.orm import Session

from ...errors import InvalidInput
from ...models import MoodEntry, User
from ...security_utils import decrypt_field, encrypt_field
from ...shared.validators import from_db_datetime, to_db_datetime
from .repository import MoodRepository
from .schemas import MoodCreate, MoodResponse

logger = logging.getLogger(__name__)

MOOD_MIN = 1
MOOD_MAX = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MoodService:
    """Service layer for mood tracking"""

    def __init__(self, db: Session, now: Callable[[], datetime] = _utcnow):
        self.db = db
        self.now = now
        self.repo = MoodRepository()

    def record_mood(self, data: MoodCreate, user: User) -> MoodEntry:
        if data.mood is None or not MOOD_MIN <= data.mood <= MOOD_MAX:
            raise InvalidInput("Mood must be a number between 1 and 10")

        entry = MoodEntry(
            user_id=user.id,
            mood=data.mood,
            notes=encrypt_field(user.id, data.notes),
            activities=data.activities or [],
            created_at=to_db_datetime(self.now()),
        )
        entry = self.repo.create(self.db, entry)
        logger.info(f"Mood entry {entry.id} recorded for user {user.id}")
        return entry

    def list_moods(self, user: User, days: int = 30) -> list[MoodResponse]:
        """Check-ins of the last `days` days, oldest first, with notes decrypted"""
        since = self.now() - timedelta(days=days)
        return [
            MoodResponse(
                id=entry.id,
                mood=entry.mood,
                notes=decrypt_field(user.id, entry.notes),
                activities=entry.activities or [],
                createdAt=from_db_datetime(entry.created_at),
            )
            for entry in self.repo.list_since(self.db, user.id, since)
        ]
