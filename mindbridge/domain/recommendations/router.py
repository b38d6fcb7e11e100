"""Recommendation router - symptom triage to a specialist and matching doctors"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..doctors.repository import DoctorRepository
from ..doctors.schemas import DoctorResponse
from ..doctors.service import to_response
from .recommender import recommend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


class SymptomRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        if not v or not v.strip():
            raise ValueError("Message is required")
        return v.strip()


class SpecialistRecommendation(BaseModel):
    specialist: str
    resources: list[str]


class SymptomResponse(BaseModel):
    message: str
    recommendation: SpecialistRecommendation
    doctors: list[DoctorResponse]


@router.post("/symptoms", response_model=SymptomResponse)
async def recommend_specialist(
    data: SymptomRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Recommend a specialist for the described symptoms, with doctors who practice it"""
    result = recommend(data.message)
    doctors = DoctorRepository.list_by_specialties(db, [result.specialist])
    logger.info(f"Recommended {result.specialist} for user {current_user.id} ({len(doctors)} doctors)")
    return SymptomResponse(
        message=result.message,
        recommendation=SpecialistRecommendation(specialist=result.specialist, resources=result.resources),
        doctors=[to_response(doctor) for doctor in doctors],
    )
