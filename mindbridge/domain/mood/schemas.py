"""Mood domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MoodCreate(BaseModel):
    """Schema for recording a mood check-in"""

    mood: Optional[int] = None
    notes: Optional[str] = None
    activities: Optional[list[str]] = None


class MoodResponse(BaseModel):
    id: int
    mood: int
    notes: Optional[str] = None
    activities: list[str] = []
    createdAt: datetime


class MoodCreatedResponse(BaseModel):
    id: int
    message: str


class MoodHistoryResponse(BaseModel):
    moods: list[MoodResponse]
