"""
Scoring engine for the leadership questionnaire.

All functions here are pure: they take the catalog as arguments, hold no
state and never touch storage. Percentages are rounded half-up on the exact
rational value (``Decimal``), so ``62.5`` becomes ``63`` and ``67.5``
becomes ``68`` regardless of float representation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from ..infrastructure.exceptions import ValidationError
from .models import AssessmentResult, Dimension, Question

MIN_ANSWER = 1
MAX_ANSWER = 5


def round_half_up(value: Decimal | int | float) -> int:
    """
    Round to the nearest integer, ties away from zero for positive values.

    Example:
        >>> round_half_up(Decimal("62.5"))
        63
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def validate_answer(question_id: str, value: object) -> int:
    """Return ``value`` if it is an int in 1..5, else raise ValidationError."""
    # bool is an int subclass; True/False are not Likert answers
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(question_id, "answer must be an integer between 1 and 5", value)
    if not (MIN_ANSWER <= value <= MAX_ANSWER):
        raise ValidationError(question_id, "answer must be between 1 and 5", value)
    return value


def _percentage(total: int, count: int) -> int:
    if count == 0:
        return 0
    return round_half_up(Decimal(total) * 100 / (Decimal(count) * MAX_ANSWER))


def compute_dimension_scores(
    answers: Mapping[str, int],
    questions: Iterable[Question],
    dimensions: Iterable[Dimension],
) -> dict[str, int]:
    """
    Percentage score per dimension, in catalog order.

    - Only answered questions of a dimension contribute; a dimension with no
      answered question scores 0.
    - Answers for ids outside the catalog are range-checked but ignored.
    - Raises ValidationError for out-of-range values and for questions that
      reference an unknown dimension.
    """
    for question_id, value in answers.items():
        validate_answer(question_id, value)

    dimension_ids = [d.id for d in dimensions]
    totals: dict[str, list[int]] = {d_id: [0, 0] for d_id in dimension_ids}

    for q in questions:
        if q.dimension_id not in totals:
            raise ValidationError(
                "dimension_id", f"question {q.id} references unknown dimension", q.dimension_id
            )
        value = answers.get(q.id)
        if value is None:
            continue
        totals[q.dimension_id][0] += value
        totals[q.dimension_id][1] += 1

    return {d_id: _percentage(total, count) for d_id, (total, count) in totals.items()}


def compute_average(scores: Mapping[str, int | float]) -> int:
    """Round-half-up mean of the dimension percentages; 0 when empty."""
    if not scores:
        return 0
    total = sum(Decimal(str(v)) for v in scores.values())
    return round_half_up(total / len(scores))


def average_from_answers(answers: Mapping[str, int]) -> int:
    """Overall percentage straight from raw 1..5 answers; 0 when empty."""
    if not answers:
        return 0
    return _percentage(sum(answers.values()), len(answers))


def normalize_stored_score(score: int | float | Decimal | None) -> int | float | Decimal | None:
    """
    Legacy rescale for scores read back from storage.

    Older rows stored raw 1..5 values instead of percentages. Anything at or
    below 5 is treated as raw and multiplied by 20. A genuine percentage of
    1..5 is therefore misread; that limitation is kept for compatibility
    with existing data.
    """
    if score is None:
        return None
    if score < 20 and score <= 5:
        return round_half_up(Decimal(str(score)) * 20)
    return score


def missing_answers(answers: Mapping[str, int], questions: Iterable[Question]) -> list[str]:
    """Catalog question ids without an answer, in catalog order."""
    return [q.id for q in questions if q.id not in answers]


def assemble_result(
    answers: Mapping[str, int],
    questions: Iterable[Question],
    dimensions: Iterable[Dimension],
    timestamp: datetime | None = None,
) -> AssessmentResult:
    """
    Score a completed questionnaire pass into an immutable result.

    The timestamp is captured once here and should be reused for every
    downstream write of this result.
    """
    scores = compute_dimension_scores(answers, questions, dimensions)
    return AssessmentResult(
        answers=dict(answers),
        dimension_scores=scores,
        average_score=compute_average(scores),
        timestamp=timestamp or datetime.utcnow(),
    )
