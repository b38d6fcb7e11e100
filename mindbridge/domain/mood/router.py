"""Mood router - FastAPI endpoints for mood tracking"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import MoodCreate, MoodCreatedResponse, MoodHistoryResponse
from .service import MoodService

router = APIRouter(prefix="/mood", tags=["Mood"])


def get_mood_service(db: Session = Depends(get_db)) -> MoodService:
    """Dependency injection for MoodService"""
    return MoodService(db)


@router.post("", response_model=MoodCreatedResponse)
async def record_mood(
    data: MoodCreate,
    current_user: User = Depends(get_current_user),
    service: MoodService = Depends(get_mood_service),
):
    entry = service.record_mood(data, current_user)
    return MoodCreatedResponse(id=entry.id, message="Mood recorded successfully")


@router.get("", response_model=MoodHistoryResponse)
async def get_mood_history(
    days: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    service: MoodService = Depends(get_mood_service),
):
    """Mood history for the last `days` days, oldest first"""
    return MoodHistoryResponse(moods=service.list_moods(current_user, days))
