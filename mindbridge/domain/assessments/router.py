"""Assessment router - FastAPI endpoints for screening results"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    AssessmentCreate,
    AssessmentCreatedResponse,
    AssessmentDetailResponse,
    AssessmentListResponse,
)
from .service import AssessmentService

router = APIRouter(prefix="/assessments", tags=["Assessments"])


def get_assessment_service(db: Session = Depends(get_db)) -> AssessmentService:
    """Dependency injection for AssessmentService"""
    return AssessmentService(db)


@router.post("", response_model=AssessmentCreatedResponse)
async def save_assessment(
    data: AssessmentCreate,
    current_user: User = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
):
    assessment = service.save_assessment(data, current_user)
    return AssessmentCreatedResponse(id=assessment.id, message="Assessment saved successfully")


@router.get("", response_model=AssessmentListResponse, response_model_exclude_none=True)
async def list_assessments(
    limit: int = Query(10, ge=1, le=100),
    includeAnswers: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
):
    """Most recent assessments first; answers only when includeAnswers=true"""
    return AssessmentListResponse(assessments=service.list_assessments(current_user, limit, includeAnswers))


@router.get("/{assessment_id}", response_model=AssessmentDetailResponse)
async def get_assessment(
    assessment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
):
    return AssessmentDetailResponse(assessment=service.get_assessment(assessment_id, current_user))


@router.delete("/{assessment_id}")
async def delete_assessment(
    assessment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
):
    service.delete_assessment(assessment_id, current_user)
    return {"message": "Assessment deleted successfully"}
