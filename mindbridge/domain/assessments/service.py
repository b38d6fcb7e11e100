"""Assessment service - saving and reading PHQ-9 / GAD-7 results"""

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...errors import InvalidInput, NotFound
from ...models import Assessment, User
from ...security_utils import decrypt_field, encrypt_field
from ...shared.validators import from_db_datetime, to_db_datetime
from . import scoring
from .repository import AssessmentRepository
from .schemas import AssessmentCreate, AssessmentResponse

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _seal_answers(user_id: int, answers: Optional[list[int]]) -> Optional[str]:
    if answers is None:
        return None
    return encrypt_field(user_id, json.dumps(answers))


def _open_answers(user_id: int, value: Optional[str]) -> Optional[list[int]]:
    plain = decrypt_field(user_id, value)
    return json.loads(plain) if plain is not None else None


class AssessmentService:
    """Service layer for screening assessments"""

    def __init__(self, db: Session, now: Callable[[], datetime] = _utcnow):
        self.db = db
        self.now = now
        self.repo = AssessmentRepository()

    def _validate(self, data: AssessmentCreate) -> None:
        if data.phq9Score is None or data.gad7Score is None:
            raise InvalidInput("Assessment scores are required")
        if not 0 <= data.phq9Score <= scoring.PHQ9_MAX:
            raise InvalidInput(f"PHQ-9 score must be between 0 and {scoring.PHQ9_MAX}")
        if not 0 <= data.gad7Score <= scoring.GAD7_MAX:
            raise InvalidInput(f"GAD-7 score must be between 0 and {scoring.GAD7_MAX}")

        error = scoring.answers_error(data.phq9Answers, scoring.PHQ9_QUESTIONS, "PHQ-9") or scoring.answers_error(
            data.gad7Answers, scoring.GAD7_QUESTIONS, "GAD-7"
        )
        if error:
            raise InvalidInput(error)

    def save_assessment(self, data: AssessmentCreate, user: User) -> Assessment:
        self._validate(data)

        assessment = Assessment(
            user_id=user.id,
            phq9_score=data.phq9Score,
            gad7_score=data.gad7Score,
            depression_severity=scoring.depression_severity(data.phq9Score),
            anxiety_severity=scoring.anxiety_severity(data.gad7Score),
            phq9_answers=_seal_answers(user.id, data.phq9Answers),
            gad7_answers=_seal_answers(user.id, data.gad7Answers),
            created_at=to_db_datetime(self.now()),
        )
        assessment = self.repo.create(self.db, assessment)
        logger.info(f"Assessment {assessment.id} saved for user {user.id}")
        return assessment

    def to_response(self, assessment: Assessment, include_answers: bool = False) -> AssessmentResponse:
        response = AssessmentResponse(
            id=assessment.id,
            phq9Score=assessment.phq9_score,
            gad7Score=assessment.gad7_score,
            depressionSeverity=assessment.depression_severity,
            anxietySeverity=assessment.anxiety_severity,
            date=from_db_datetime(assessment.created_at),
        )
        if include_answers:
            response.phq9Answers = _open_answers(assessment.user_id, assessment.phq9_answers)
            response.gad7Answers = _open_answers(assessment.user_id, assessment.gad7_answers)
        return response

    def list_assessments(self, user: User, limit: int = 10, include_answers: bool = False) -> list[AssessmentResponse]:
        return [
            self.to_response(assessment, include_answers)
            for assessment in self.repo.list_for_user(self.db, user.id, limit)
        ]

    def get_assessment(self, assessment_id: int, user: User) -> AssessmentResponse:
        assessment = self.repo.get_for_user(self.db, assessment_id, user.id)
        if not assessment:
            raise NotFound("Assessment not found")
        return self.to_response(assessment, include_answers=True)

    def delete_assessment(self, assessment_id: int, user: User) -> None:
        """Permanently remove one of the user's assessments"""
        assessment = self.repo.get_for_user(self.db, assessment_id, user.id)
        if not assessment:
            raise NotFound("Assessment not found or you do not have permission to delete it")
        self.repo.delete(self.db, assessment)
        logger.info(f"Assessment {assessment_id} deleted by user {user.id}")
