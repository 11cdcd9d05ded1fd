# leadership/infrastructure/repositories_assessment.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, NoReturn

from sqlalchemy import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import AssessmentNotFoundError, handle_database_error
from .logging import get_logger, log_database_operation as log_op
from .models import AssessmentORM, DimensionScoreORM, QuestionAnswerORM, UserORM
from .repositories_base import BaseRepository as GenericBaseRepository


class AssessmentRepo(GenericBaseRepository[AssessmentORM]):
    """
    Repository for assessments and their per-dimension scores and answers.

    Every write creates new rows; assessments are never updated in place.
    """

    model = AssessmentORM

    def __init__(self, session: Session):
        super().__init__(session)
        self._logger = get_logger(__name__)

    def _handle_error(self, exc: Exception, operation: str) -> NoReturn:
        db_error = handle_database_error(exc, operation)
        self._logger.error("DB error in %s: %s", operation, str(exc), exc_info=True)
        raise db_error from exc

    # ------------------- Write -------------------

    @log_op("assessment.create")
    def create_with_children(
        self,
        user_id: int,
        average_score: int,
        assessed_at: datetime,
        dimension_scores: Mapping[str, int],
        answers: list[tuple[str, str, int]],
    ) -> AssessmentORM:
        """
        Insert one assessment plus its dimension scores and answers.

        ``answers`` holds ``(question_id, dimension_id, value)`` triples.
        """
        try:
            assessment = AssessmentORM(
                user_id=user_id, average_score=average_score, date=assessed_at
            )
            self.s.add(assessment)
            self.s.flush()

            self.s.add_all(
                QuestionAnswerORM(
                    assessment_id=assessment.id,
                    question_id=question_id,
                    dimension=dimension_id,
                    answer=value,
                )
                for question_id, dimension_id, value in answers
            )
            self.s.add_all(
                DimensionScoreORM(assessment_id=assessment.id, dimension=dimension, score=score)
                for dimension, score in dimension_scores.items()
            )
            self.s.flush()
            return assessment
        except SQLAlchemyError as e:
            self._handle_error(e, "assessment.create")

    # ------------------- Read -------------------

    @log_op("assessment.get_required")
    def get_by_id_required(self, assessment_id: int) -> AssessmentORM:
        if assessment_id <= 0:
            raise AssessmentNotFoundError(assessment_id)
        try:
            obj = self.s.get(AssessmentORM, assessment_id)
        except SQLAlchemyError as e:
            self._handle_error(e, "assessment.get")
        if obj is None:
            raise AssessmentNotFoundError(assessment_id)
        return obj

    @log_op("assessment.dimension_scores")
    def dimension_scores_for(self, assessment_id: int) -> list[tuple[str, Any]]:
        rows = (
            self.s.query(DimensionScoreORM.dimension, DimensionScoreORM.score)
            .filter(DimensionScoreORM.assessment_id == assessment_id)
            .order_by(DimensionScoreORM.id)
            .all()
        )
        return [(row.dimension, row.score) for row in rows]

    @log_op("assessment.answers")
    def answers_for(self, assessment_id: int) -> list[tuple[str, int]]:
        rows = (
            self.s.query(QuestionAnswerORM.question_id, QuestionAnswerORM.answer)
            .filter(QuestionAnswerORM.assessment_id == assessment_id)
            .order_by(QuestionAnswerORM.id)
            .all()
        )
        return [(row.question_id, row.answer) for row in rows]

    @log_op("assessment.list_with_users")
    def list_with_users(self) -> list[Row]:
        """Assessments joined to their user, newest first."""
        try:
            return (
                self.s.query(
                    AssessmentORM.id,
                    AssessmentORM.user_id,
                    AssessmentORM.date,
                    AssessmentORM.average_score,
                    UserORM.name,
                    UserORM.email,
                )
                .join(UserORM, AssessmentORM.user_id == UserORM.id)
                .order_by(AssessmentORM.date.desc(), AssessmentORM.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self._handle_error(e, "assessment.list_with_users")
