from __future__ import annotations

import io
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse, StreamingResponse
from sqlalchemy.orm import Session, sessionmaker

from leadership.application import api as app_api
from leadership.application.result_cache import ResultCache
from leadership.domain.catalog import DIMENSIONS, QUESTIONS, get_dimension
from leadership.domain.models import AssessmentResult
from leadership.domain.recommendations import get_recommendations, score_band
from leadership.infrastructure.csv_sink import CsvResultSink
from leadership.infrastructure.db import create_database_engine, create_session_factory, initialise_database
from leadership.infrastructure.exceptions import (
    LeadershipAssessmentError,
    MultipleValidationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from leadership.web.dependencies import (
    get_csv_sink,
    get_db_config,
    get_db_session,
    get_enabled_csv_sink,
    get_result_cache,
    get_submission_session_factory,
)
from leadership.web.schemas import (
    AssessmentCreatedResponse,
    AssessmentCreateRequest,
    AssessmentDetail,
    AssessmentListItem,
    AssessmentResultResponse,
    AnswersRequest,
    CacheClearResponse,
    DatabaseOperationResponse,
    Dimension,
    DimensionRecommendations,
    HealthResponse,
    Question,
    QuestionnaireStepResponse,
    RecommendationResponse,
    SaveResultsRequest,
    SaveResultsResponse,
    ScoreResponse,
    SubmitRequest,
    SubmitResponse,
    UserResponse,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _http_error(exc: LeadershipAssessmentError) -> HTTPException:
    if isinstance(exc, (ValidationError, MultipleValidationError)):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.user_message)


def _result_payload(result: AssessmentResult) -> AssessmentResultResponse:
    return AssessmentResultResponse(
        answers=dict(result.answers),
        dimension_scores=dict(result.dimension_scores),
        average_score=result.average_score,
        timestamp=result.timestamp,
    )


def _recommendation_payload(items) -> list[DimensionRecommendations]:
    return [
        DimensionRecommendations(
            dimension_id=item.dimension_id,
            name=item.name,
            score=item.score,
            band=item.band,
            recommendations=item.recommendations,
            resources=item.resources,
        )
        for item in items
    ]


@router.get("/health", response_model=HealthResponse)
def health(csv_sink: CsvResultSink = Depends(get_csv_sink)) -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.utcnow(), csv_path=str(csv_sink.path))


@router.get("/dimensions", response_model=list[Dimension])
def list_dimensions() -> list[Dimension]:
    return [
        Dimension(
            id=d.id,
            name=d.name,
            description=d.description,
            short_description=d.short_description,
            resources=list(d.resources),
        )
        for d in DIMENSIONS
    ]


@router.get("/questions", response_model=list[Question])
def list_questions(dimension_id: str | None = Query(None, alias="dimensionId")) -> list[Question]:
    if dimension_id is not None and get_dimension(dimension_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dimension not found")
    return [
        Question(id=q.id, text=q.text, dimension_id=q.dimension_id, principle=q.principle)
        for q in QUESTIONS
        if dimension_id is None or q.dimension_id == dimension_id
    ]


@router.post("/score", response_model=ScoreResponse)
def score_assessment(payload: AnswersRequest) -> ScoreResponse:
    try:
        result, recommendations = app_api.score_answers(payload.answers)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return ScoreResponse(
        result=_result_payload(result),
        recommendations=_recommendation_payload(recommendations),
    )


@router.post("/questionnaire/pages/{page_index}", response_model=QuestionnaireStepResponse)
def advance_questionnaire(page_index: int, payload: AnswersRequest) -> QuestionnaireStepResponse:
    try:
        step = app_api.advance_questionnaire(payload.answers, page_index)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return QuestionnaireStepResponse(
        page_index=step.index,
        dimension_id=step.dimension_id,
        progress=step.progress,
        complete=step.complete,
        answers=step.answers,
    )


@router.get("/recommendations/{dimension_id}", response_model=RecommendationResponse)
def recommendations(
    dimension_id: str,
    score: float = Query(..., ge=0, le=100),
) -> RecommendationResponse:
    return RecommendationResponse(
        dimension_id=dimension_id,
        score=score,
        band=score_band(score),
        recommendations=get_recommendations(dimension_id, score),
    )


@router.post(
    "/assessment",
    response_model=AssessmentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_assessment(
    payload: AssessmentCreateRequest,
    db: Session = Depends(get_db_session),
) -> AssessmentCreatedResponse:
    try:
        saved = app_api.save_assessment(
            db,
            answers=payload.answers,
            dimension_scores=payload.dimension_scores,
            user_id=payload.user_id,
        )
        db.commit()
    except LeadershipAssessmentError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise

    return AssessmentCreatedResponse(
        assessment_id=saved.assessment_id,
        user_id=saved.user_id,
        average_score=saved.average_score,
        dimension_scores=saved.dimension_scores,
    )


@router.get("/assessment/{assessment_id}", response_model=AssessmentDetail)
def get_assessment(assessment_id: int, db: Session = Depends(get_db_session)) -> AssessmentDetail:
    try:
        record = app_api.get_assessment_by_id(db, assessment_id)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return AssessmentDetail(
        id=record.id,
        user_id=record.user_id,
        date=record.date,
        average_score=record.average_score,
        dimension_scores=record.dimension_scores,
        answers=record.answers,
    )


@router.get("/assessment/{assessment_id}/figure")
def get_assessment_figure(assessment_id: int, db: Session = Depends(get_db_session)) -> dict:
    try:
        record = app_api.get_assessment_by_id(db, assessment_id)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return {"figure": app_api.build_results_figure(record.dimension_scores)}


@router.get("/assessments", response_model=list[AssessmentListItem])
def list_assessments(db: Session = Depends(get_db_session)) -> list[AssessmentListItem]:
    try:
        items = app_api.list_assessments(db)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return [
        AssessmentListItem(
            id=item.id,
            user_id=item.user_id,
            date=item.date,
            average_score=item.average_score,
            name=item.name,
            email=item.email,
        )
        for item in items
    ]


@router.get("/users", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db_session)) -> list[UserResponse]:
    try:
        users = app_api.list_users(db)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return [
        UserResponse(id=u.id, name=u.name, email=u.email, created_at=u.created_at) for u in users
    ]


@router.post("/save-results", response_model=SaveResultsResponse)
def save_results(
    payload: SaveResultsRequest,
    csv_sink: CsvResultSink | None = Depends(get_enabled_csv_sink),
) -> SaveResultsResponse:
    if csv_sink is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Saving results to CSV is disabled."
        )
    legacy = payload.results or {}
    dimension_scores = payload.dimension_scores or legacy.get("dimensionScores")
    if not dimension_scores:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No valid results were provided."
        )
    average_score = payload.average_score
    if average_score is None:
        average_score = legacy.get("averageScore")
    answers = payload.answers or legacy.get("answers") or {}

    try:
        app_api.save_results_csv(
            csv_sink,
            answers=answers,
            dimension_scores=dimension_scores,
            manager_name=payload.manager_name,
            average_score=average_score,
            assessed_at=payload.date,
        )
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc

    name = payload.manager_name or "Anonymous"
    return SaveResultsResponse(
        success=True,
        message=f"Results saved for {name}",
        file_path=str(csv_sink.path),
    )


@router.get("/results", response_class=PlainTextResponse)
def get_results(csv_sink: CsvResultSink = Depends(get_csv_sink)) -> PlainTextResponse:
    try:
        content = csv_sink.read_text()
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return PlainTextResponse(content, media_type="text/csv")


@router.get("/results/export.xlsx")
def export_results(csv_sink: CsvResultSink = Depends(get_csv_sink)) -> StreamingResponse:
    try:
        payload = app_api.export_results_xlsx(csv_sink)
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc
    return StreamingResponse(
        io.BytesIO(payload),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="leadership_results.xlsx"'},
    )


@router.get("/results/latest", response_model=AssessmentResultResponse)
def latest_result(
    key: str | None = Query(None, min_length=1, max_length=64),
    cache: ResultCache = Depends(get_result_cache),
) -> AssessmentResultResponse:
    result = cache.load(key)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No saved result")
    return _result_payload(result)


@router.delete("/results/latest", response_model=CacheClearResponse)
def clear_latest_result(
    key: str | None = Query(None, min_length=1, max_length=64),
    cache: ResultCache = Depends(get_result_cache),
) -> CacheClearResponse:
    return CacheClearResponse(cleared=cache.clear(key))


@router.post("/submit", response_model=SubmitResponse)
def submit(
    payload: SubmitRequest,
    session_factory: sessionmaker | None = Depends(get_submission_session_factory),
    csv_sink: CsvResultSink | None = Depends(get_enabled_csv_sink),
    cache: ResultCache = Depends(get_result_cache),
) -> SubmitResponse:
    try:
        outcome = app_api.submit_assessment(
            payload.answers,
            session_factory=session_factory,
            csv_sink=csv_sink,
            cache=cache,
            manager_name=payload.manager_name,
            user_id=payload.user_id,
            cache_key=payload.session_key,
        )
    except LeadershipAssessmentError as exc:
        raise _http_error(exc) from exc

    return SubmitResponse(
        result=_result_payload(outcome.result),
        recommendations=_recommendation_payload(outcome.recommendations),
        saved=outcome.saved,
        saved_to_database=outcome.saved_to_database,
        saved_to_csv=outcome.saved_to_csv,
        assessment_id=outcome.assessment_id,
        user_id=outcome.user_id,
        errors=outcome.errors,
    )


@router.post("/settings/database/init", response_model=DatabaseOperationResponse)
def initialise_database_endpoint(request: Request) -> DatabaseOperationResponse:
    config = get_db_config(request)
    try:
        engine = create_database_engine(config)
        already_exists = initialise_database(engine)
    except Exception as exc:  # pragma: no cover - driver errors vary
        logger.exception("Failed to initialise database")
        return DatabaseOperationResponse(
            status="error",
            message="Failed to initialise database.",
            details=str(exc),
        )

    request.app.state.db_engine = engine
    request.app.state.session_factory = create_session_factory(engine)
    request.app.state.session_factory_config = config.model_dump()
    return DatabaseOperationResponse(
        status="ok",
        message="Database tables already exist." if already_exists else "Database tables created.",
    )
