from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Dimension:
    id: str
    name: str
    description: str
    short_description: str = ""
    resources: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    text: str
    dimension_id: str
    principle: str = ""


@dataclass(frozen=True, slots=True)
class AssessmentResult:
    """Scored output of one completed questionnaire pass."""

    answers: Mapping[str, int]
    dimension_scores: Mapping[str, int]
    average_score: int
    timestamp: datetime

    def __post_init__(self) -> None:
        # Read-only copies so the result cannot be mutated after assembly
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))
        object.__setattr__(
            self, "dimension_scores", MappingProxyType(dict(self.dimension_scores))
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "answers": dict(self.answers),
            "dimension_scores": dict(self.dimension_scores),
            "average_score": self.average_score,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AssessmentResult:
        return cls(
            answers={str(k): int(v) for k, v in data["answers"].items()},
            dimension_scores={str(k): int(v) for k, v in data["dimension_scores"].items()},
            average_score=int(data["average_score"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass(slots=True)
class DimensionRecommendations:
    dimension_id: str
    name: str
    score: int
    band: str
    recommendations: list[str]
    resources: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SavedAssessment:
    assessment_id: int
    user_id: int
    average_score: int
    dimension_scores: dict[str, int]


@dataclass(slots=True)
class AssessmentRecord:
    id: int
    user_id: int
    date: datetime
    average_score: int | float | None
    dimension_scores: dict[str, int | float]
    answers: dict[str, int]


@dataclass(slots=True)
class AssessmentListItem:
    id: int
    user_id: int
    date: datetime
    average_score: int | float | None
    name: str | None
    email: str | None


@dataclass(slots=True)
class User:
    id: int
    name: str | None
    email: str | None
    created_at: datetime
