"""
Application API layer with error handling, validation and logging.

These functions sit between the HTTP routes and the domain/persistence
layers. Database-bound functions take an open SQLAlchemy session and leave
commit/rollback to the caller; ``submit_assessment`` owns its own unit of
work so a failed save never hides a computed result.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..domain.catalog import DIMENSIONS, QUESTIONS, question_dimension_map
from ..domain.models import (
    AssessmentListItem,
    AssessmentRecord,
    AssessmentResult,
    Dimension,
    DimensionRecommendations,
    Question,
    SavedAssessment,
    User,
)
from ..domain.recommendations import build_recommendations
from ..domain.schemas import (
    AnswersInput,
    AssessmentSaveInput,
    ResultsSaveInput,
    ValidationResponse,
    validate_input,
)
from ..domain.services import (
    assemble_result,
    average_from_answers,
    compute_average,
    missing_answers,
    normalize_stored_score,
)
from ..infrastructure.csv_sink import CsvResultSink
from ..infrastructure.db import session_scope
from ..infrastructure.exceptions import (
    IncompleteAnswersError,
    LeadershipAssessmentError,
    MultipleValidationError,
    ValidationError,
    create_user_friendly_error_message,
    handle_database_error,
    log_error_details,
)
from ..infrastructure.logging import get_logger, log_operation, set_context
from ..infrastructure.repositories import AssessmentRepo, UserRepo
from ..utils.exports import make_xlsx_export_bytes
from ..utils.radar import make_leadership_radar
from .questionnaire import QuestionnaireFlow
from .result_cache import ResultCache

logger = get_logger(__name__)

UNKNOWN_DIMENSION = "unknown"


def _raise_for_invalid(validation: ValidationResponse) -> dict[str, Any]:
    if validation.success and validation.data is not None:
        return validation.data
    errors = [ValidationError(e.field, e.message, e.value) for e in validation.errors]
    logger.warning("Input validation failed: %s", "; ".join(e.message for e in errors))
    if len(errors) == 1:
        raise errors[0]
    raise MultipleValidationError(errors)


def _as_number(value: Any) -> int | float | None:
    """Decimal/float column values to int when integral, else float."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _stored_score(value: Any) -> int | float | None:
    return normalize_stored_score(_as_number(value))


@log_operation("score_answers")
def score_answers(
    answers: Mapping[str, int],
    questions: Sequence[Question] = QUESTIONS,
    dimensions: Sequence[Dimension] = DIMENSIONS,
    timestamp: datetime | None = None,
) -> tuple[AssessmentResult, list[DimensionRecommendations]]:
    """
    Score a complete answer map and pick recommendations. Nothing is stored.

    Raises:
        ValidationError: If an answer is out of range
        IncompleteAnswersError: If any catalog question is unanswered
    """
    _raise_for_invalid(validate_input(AnswersInput, {"answers": dict(answers)}))

    missing = missing_answers(answers, questions)
    if missing:
        raise IncompleteAnswersError(missing)

    result = assemble_result(answers, questions, dimensions, timestamp)
    return result, build_recommendations(result.dimension_scores, dimensions)


@log_operation("save_assessment")
def save_assessment(
    session: Session,
    answers: Mapping[str, int],
    dimension_scores: Mapping[str, int] | None = None,
    user_id: int | None = None,
    assessed_at: datetime | None = None,
) -> SavedAssessment:
    """
    Persist one assessment with its dimension scores and answers.

    Args:
        session: Database session (caller commits)
        answers: question id -> 1..5
        dimension_scores: dimension id -> percentage; used for the average when present
        user_id: Existing user; an anonymous user is created when omitted
        assessed_at: Timestamp to store, defaults to now (UTC)

    Raises:
        ValidationError: If the payload is invalid
        UserNotFoundError: If ``user_id`` does not exist
        PersistenceError: If the database rejects the write

    Example:
        >>> saved = save_assessment(session, {"q1_1": 4}, {"raising_expectations": 80})
        >>> saved.average_score
        80
    """
    data = _raise_for_invalid(
        validate_input(
            AssessmentSaveInput,
            {
                "answers": dict(answers),
                "dimension_scores": dict(dimension_scores or {}),
                "user_id": user_id,
            },
        )
    )
    answers = data["answers"]
    scores = data["dimension_scores"]

    if scores:
        average = compute_average(scores)
    else:
        average = average_from_answers(answers)

    dimension_of = question_dimension_map()
    rows = [(q_id, dimension_of.get(q_id, UNKNOWN_DIMENSION), value) for q_id, value in answers.items()]

    try:
        user_repo = UserRepo(session)
        if data["user_id"] is None:
            user = user_repo.create_anonymous()
        else:
            user = user_repo.get_by_id_required(data["user_id"])
        set_context(user_id=user.id)

        assessment = AssessmentRepo(session).create_with_children(
            user_id=user.id,
            average_score=average,
            assessed_at=assessed_at or datetime.utcnow(),
            dimension_scores=scores,
            answers=rows,
        )
        logger.info(f"Saved assessment {assessment.id} for user {user.id} (average {average}%)")
        return SavedAssessment(
            assessment_id=assessment.id,
            user_id=user.id,
            average_score=average,
            dimension_scores=dict(scores),
        )

    except SQLAlchemyError as e:
        raise handle_database_error(e, "save_assessment") from e
    except Exception as e:
        error_details = log_error_details(e, {"user_id": user_id})
        logger.error("Failed to save assessment", extra=error_details)

        # Re-raise custom exceptions as-is
        if isinstance(e, LeadershipAssessmentError):
            raise

        raise LeadershipAssessmentError(
            f"Failed to save assessment: {str(e)}",
            details=error_details,
            user_message=create_user_friendly_error_message(e),
        ) from e


@log_operation("get_assessment_by_id")
def get_assessment_by_id(session: Session, assessment_id: int) -> AssessmentRecord:
    """
    Load one stored assessment.

    Missing or unreadable child rows come back as empty mappings; stored
    scores pass through the legacy 1..5 rescale.

    Raises:
        AssessmentNotFoundError: If the id does not exist
    """
    set_context(assessment_id=assessment_id)
    repo = AssessmentRepo(session)
    assessment = repo.get_by_id_required(assessment_id)

    dimension_scores: dict[str, int | float] = {}
    try:
        for dimension, score in repo.dimension_scores_for(assessment_id):
            dimension_scores[dimension] = _stored_score(score)
    except SQLAlchemyError as e:
        logger.warning(f"Could not load dimension scores for assessment {assessment_id}: {e}")
        dimension_scores = {}

    answers: dict[str, int] = {}
    try:
        for question_id, value in repo.answers_for(assessment_id):
            answers[question_id] = value
    except SQLAlchemyError as e:
        logger.warning(f"Could not load answers for assessment {assessment_id}: {e}")
        answers = {}

    return AssessmentRecord(
        id=assessment.id,
        user_id=assessment.user_id,
        date=assessment.date,
        average_score=_stored_score(assessment.average_score),
        dimension_scores=dimension_scores,
        answers=answers,
    )


@log_operation("list_assessments")
def list_assessments(session: Session) -> list[AssessmentListItem]:
    """All assessments with their user's name and e-mail, newest first."""
    rows = AssessmentRepo(session).list_with_users()
    return [
        AssessmentListItem(
            id=row.id,
            user_id=row.user_id,
            date=row.date,
            average_score=_stored_score(row.average_score),
            name=row.name,
            email=row.email,
        )
        for row in rows
    ]


@log_operation("list_users")
def list_users(session: Session) -> list[User]:
    try:
        users = UserRepo(session).list_all()
    except SQLAlchemyError as e:
        raise handle_database_error(e, "list_users") from e
    return [User(id=u.id, name=u.name, email=u.email, created_at=u.created_at) for u in users]


@log_operation("save_results_csv")
def save_results_csv(
    csv_sink: CsvResultSink,
    answers: Mapping[str, int],
    dimension_scores: Mapping[str, int],
    manager_name: str | None = None,
    average_score: int | None = None,
    assessed_at: datetime | None = None,
) -> str:
    """
    Append one result line to the CSV history and return it.

    Raises:
        ValidationError: If scores or answers are out of range
        CsvWriteError: If the file cannot be written
    """
    data = _raise_for_invalid(
        validate_input(
            ResultsSaveInput,
            {
                "manager_name": manager_name,
                "answers": dict(answers),
                "dimension_scores": dict(dimension_scores),
                "average_score": average_score,
                "date": assessed_at,
            },
        )
    )

    scores = data["dimension_scores"]
    average = data["average_score"]
    if average is None:
        average = compute_average(scores) if scores else average_from_answers(data["answers"])

    return csv_sink.append(
        data["manager_name"],
        data["date"] or datetime.utcnow(),
        average,
        scores,
        data["answers"],
    )


@log_operation("export_results_xlsx")
def export_results_xlsx(csv_sink: CsvResultSink) -> bytes:
    return make_xlsx_export_bytes(csv_sink.load_frame())


def build_results_figure(
    dimension_scores: Mapping[str, int | float],
    dimensions: Sequence[Dimension] = DIMENSIONS,
    title: str | None = None,
) -> dict[str, Any]:
    """Plotly radar figure for a set of dimension percentages, as a JSON-ready dict."""
    labels = [d.name for d in dimensions]
    scores = [float(dimension_scores.get(d.id, 0) or 0) for d in dimensions]
    figure = make_leadership_radar(labels, scores, title=title)
    return json.loads(figure.to_json())


@dataclass
class QuestionnaireStep:
    """Where the questionnaire stands after one page was checked."""

    index: int
    dimension_id: str
    progress: float
    complete: bool
    answers: dict[str, int] | None = None


@log_operation("advance_questionnaire")
def advance_questionnaire(
    answers: Mapping[str, Any],
    page_index: int,
    questions: Sequence[Question] = QUESTIONS,
    dimensions: Sequence[Dimension] = DIMENSIONS,
) -> QuestionnaireStep:
    """
    Check that a page is fully answered and move past it.

    On the last page the step is complete and carries the full answer map.

    Raises:
        NotFoundError: If ``page_index`` is outside the questionnaire
        ValidationError: If an answer is out of range or names an unknown question
        IncompleteAnswersError: If a question on the page is unanswered
    """
    flow = QuestionnaireFlow(questions, dimensions)
    flow.go_to(page_index)
    for question_id, value in answers.items():
        flow.answer(question_id, value)
    completed = flow.next()
    return QuestionnaireStep(
        index=flow.index,
        dimension_id=flow.current_dimension.id,
        progress=flow.progress,
        complete=completed is not None,
        answers=completed,
    )


@dataclass
class SubmissionOutcome:
    """What happened to one submitted questionnaire."""

    result: AssessmentResult
    recommendations: list[DimensionRecommendations]
    assessment_id: int | None = None
    user_id: int | None = None
    saved_to_database: bool = False
    saved_to_csv: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def saved(self) -> bool:
        return not self.errors


@log_operation("submit_assessment")
def submit_assessment(
    answers: Mapping[str, int],
    session_factory: sessionmaker | None = None,
    csv_sink: CsvResultSink | None = None,
    cache: ResultCache | None = None,
    manager_name: str | None = None,
    user_id: int | None = None,
    cache_key: str | None = None,
    questions: Sequence[Question] = QUESTIONS,
    dimensions: Sequence[Dimension] = DIMENSIONS,
    timestamp: datetime | None = None,
) -> SubmissionOutcome:
    """
    Score, snapshot and persist a completed questionnaire.

    Scoring errors are raised, as are an invalid manager name. Storage errors
    are recorded on the outcome instead, so the caller always gets the
    computed result back. The snapshot is stored under ``cache_key`` (the
    cache default when omitted) so concurrent clients keep separate results.
    """
    if manager_name is not None:
        manager_name = _raise_for_invalid(
            validate_input(ResultsSaveInput, {"manager_name": manager_name})
        )["manager_name"]

    result, recommendations = score_answers(answers, questions, dimensions, timestamp)
    outcome = SubmissionOutcome(result=result, recommendations=recommendations)

    if cache is not None:
        cache.save(result, cache_key)

    if session_factory is not None:
        try:
            with session_scope(session_factory) as s:
                saved = save_assessment(
                    s,
                    dict(result.answers),
                    dict(result.dimension_scores),
                    user_id=user_id,
                    assessed_at=result.timestamp,
                )
            outcome.assessment_id = saved.assessment_id
            outcome.user_id = saved.user_id
            outcome.saved_to_database = True
        except SQLAlchemyError as e:
            error = handle_database_error(e, "submit_assessment")
            logger.error("Database save failed", extra=log_error_details(error))
            outcome.errors.append(error.user_message)
        except LeadershipAssessmentError as e:
            logger.error("Database save failed", extra=log_error_details(e))
            outcome.errors.append(e.user_message)

    if csv_sink is not None:
        try:
            csv_sink.append(
                manager_name,
                result.timestamp,
                result.average_score,
                result.dimension_scores,
                result.answers,
            )
            outcome.saved_to_csv = True
        except LeadershipAssessmentError as e:
            logger.error("CSV save failed", extra=log_error_details(e))
            outcome.errors.append(e.user_message)

    if outcome.errors:
        logger.warning(f"Assessment scored but not fully saved: {'; '.join(outcome.errors)}")
    return outcome
