"""
Pydantic schemas for validating questionnaire answers and save requests.

These run at the application boundary; the scoring engine re-checks answer
ranges on its own so it stays safe to call directly.
"""

from __future__ import annotations

import re
from datetime import datetime
from html import unescape
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

AnswerValue = Annotated[int, Field(strict=True, ge=1, le=5)]
Percentage = Annotated[int, Field(strict=True, ge=0, le=100)]


class BaseValidationSchema(BaseModel):
    """Base schema with common validation utilities."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_strings(cls, v):
        """Strip markup and control characters from free-text inputs."""
        if isinstance(v, str):
            cleaned = unescape(v.strip())
            cleaned = re.sub(
                r"<\s*script[^>]*>.*?<\s*/\s*script\s*>",
                "",
                cleaned,
                flags=re.IGNORECASE | re.DOTALL,
            )
            cleaned = re.sub(r"<[^>]+>", "", cleaned)
            cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", cleaned)
            return cleaned
        return v


class AnswersInput(BaseValidationSchema):
    """A (possibly partial) answer map; values are Likert 1..5."""

    answers: dict[str, AnswerValue] = Field(default_factory=dict)

    @field_validator("answers")
    @classmethod
    def validate_question_ids(cls, v: dict[str, int]) -> dict[str, int]:
        for key in v:
            if not key or not key.strip():
                raise ValueError("Question id cannot be empty")
        return v


class AssessmentSaveInput(AnswersInput):
    """Payload for persisting one assessment to the database."""

    user_id: int | None = Field(None, gt=0)
    dimension_scores: dict[str, Percentage] = Field(default_factory=dict)


class ResultsSaveInput(AnswersInput):
    """Payload for appending one result line to the CSV history."""

    manager_name: str | None = Field(None, max_length=100)
    date: datetime | None = None
    average_score: Percentage | None = None
    dimension_scores: dict[str, Percentage] = Field(default_factory=dict)

    @field_validator("manager_name")
    @classmethod
    def blank_name_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class ValidationErrorDetail(BaseModel):
    """Schema for validation error details."""

    field: str
    message: str
    value: Any = None


class ValidationResponse(BaseModel):
    """Schema for validation responses."""

    success: bool
    errors: list[ValidationErrorDetail] = []
    data: dict[str, Any] | None = None


def validate_input(schema_class: type[BaseModel], data: dict[str, Any]) -> ValidationResponse:
    """
    Centralized validation function that returns structured validation results.

    Example:
        >>> result = validate_input(AnswersInput, {"answers": {"q1_1": 6}})
        >>> result.success
        False
        >>> result.errors[0].field
        'answers.q1_1'
    """
    try:
        validated = schema_class(**data)
        return ValidationResponse(success=True, data=validated.model_dump())
    except Exception as e:
        errors = []
        if hasattr(e, "errors"):  # Pydantic validation errors
            for error in e.errors():
                errors.append(
                    ValidationErrorDetail(
                        field=".".join(str(x) for x in error["loc"]),
                        message=error["msg"],
                        value=error.get("input"),
                    )
                )
        else:
            errors.append(ValidationErrorDetail(field="general", message=str(e)))

        return ValidationResponse(success=False, errors=errors)
