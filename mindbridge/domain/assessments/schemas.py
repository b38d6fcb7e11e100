"""Assessment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AssessmentCreate(BaseModel):
    """Schema for saving a completed screening; severities are always derived server-side"""

    phq9Score: Optional[int] = None
    gad7Score: Optional[int] = None
    phq9Answers: Optional[list[int]] = None
    gad7Answers: Optional[list[int]] = None


class AssessmentResponse(BaseModel):
    id: int
    phq9Score: int
    gad7Score: int
    depressionSeverity: str
    anxietySeverity: str
    date: datetime
    phq9Answers: Optional[list[int]] = None
    gad7Answers: Optional[list[int]] = None


class AssessmentCreatedResponse(BaseModel):
    id: int
    message: str


class AssessmentListResponse(BaseModel):
    assessments: list[AssessmentResponse]


class AssessmentDetailResponse(BaseModel):
    assessment: AssessmentResponse
