from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    csv_path: str


class Dimension(CamelModel):
    id: str
    name: str
    description: str
    short_description: str = ""
    resources: list[str] = Field(default_factory=list)


class Question(CamelModel):
    id: str
    text: str
    dimension_id: str
    principle: str = ""


class AnswersRequest(CamelModel):
    answers: dict[str, Any] = Field(default_factory=dict)


class DimensionRecommendations(CamelModel):
    dimension_id: str
    name: str
    score: int
    band: Literal["low", "medium", "high"]
    recommendations: list[str]
    resources: list[str] = Field(default_factory=list)


class AssessmentResultResponse(CamelModel):
    answers: dict[str, int]
    dimension_scores: dict[str, int]
    average_score: int
    timestamp: datetime


class ScoreResponse(CamelModel):
    result: AssessmentResultResponse
    recommendations: list[DimensionRecommendations]


class RecommendationResponse(CamelModel):
    dimension_id: str
    score: float
    band: Literal["low", "medium", "high"]
    recommendations: list[str]


class AssessmentCreateRequest(CamelModel):
    user_id: Optional[int] = None
    answers: dict[str, Any] = Field(default_factory=dict)
    dimension_scores: dict[str, Any] = Field(default_factory=dict)


class AssessmentCreatedResponse(CamelModel):
    assessment_id: int
    user_id: int
    average_score: int
    dimension_scores: dict[str, int]


class AssessmentDetail(CamelModel):
    id: int
    user_id: int
    date: datetime
    average_score: Optional[int | float] = None
    dimension_scores: dict[str, int | float] = Field(default_factory=dict)
    answers: dict[str, int] = Field(default_factory=dict)


class AssessmentListItem(CamelModel):
    id: int
    user_id: int
    date: datetime
    average_score: Optional[int | float] = None
    name: Optional[str] = None
    email: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime


class SaveResultsRequest(CamelModel):
    manager_name: Optional[str] = None
    date: Optional[datetime] = None
    average_score: Optional[int] = None
    dimension_scores: Optional[dict[str, Any]] = None
    answers: dict[str, Any] = Field(default_factory=dict)
    # Legacy clients nest the scores under "results"
    results: Optional[dict[str, Any]] = None


class SaveResultsResponse(CamelModel):
    success: bool
    message: str
    file_path: str


class SubmitRequest(CamelModel):
    answers: dict[str, Any] = Field(default_factory=dict)
    manager_name: Optional[str] = None
    user_id: Optional[int] = None
    session_key: Optional[str] = Field(None, min_length=1, max_length=64)


class SubmitResponse(CamelModel):
    result: AssessmentResultResponse
    recommendations: list[DimensionRecommendations]
    saved: bool
    saved_to_database: bool
    saved_to_csv: bool
    assessment_id: Optional[int] = None
    user_id: Optional[int] = None
    errors: list[str] = Field(default_factory=list)


class CacheClearResponse(CamelModel):
    cleared: bool


class DatabaseOperationResponse(CamelModel):
    status: Literal["ok", "error"]
    message: str
    details: Optional[str] = None


class QuestionnaireStepResponse(CamelModel):
    page_index: int
    dimension_id: str
    progress: float
    complete: bool
    answers: Optional[dict[str, int]] = None
