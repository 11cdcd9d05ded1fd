from __future__ import annotations

from collections.abc import Sequence

from ..domain.catalog import DIMENSIONS, QUESTIONS
from ..domain.models import Dimension, Question
from ..domain.services import validate_answer
from ..infrastructure.exceptions import IncompleteAnswersError, NotFoundError, ValidationError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


class QuestionnaireFlow:
    """
    Page-per-dimension walk through the questionnaire.

    A page can only be left forward once every question on it is answered.
    ``next()`` on the last page returns the complete answer map.

    Example:
        >>> flow = QuestionnaireFlow()
        >>> for q in flow.current_questions:
        ...     flow.answer(q.id, 4)
        >>> flow.next() is None
        True
        >>> flow.progress
        40.0
    """

    def __init__(
        self,
        questions: Sequence[Question] = QUESTIONS,
        dimensions: Sequence[Dimension] = DIMENSIONS,
    ):
        if not dimensions:
            raise ValidationError("dimensions", "questionnaire needs at least one dimension")
        self.questions = tuple(questions)
        self.dimensions = tuple(dimensions)
        self._question_ids = {q.id for q in self.questions}
        self.index = 0
        self.answers: dict[str, int] = {}

    @property
    def current_dimension(self) -> Dimension:
        return self.dimensions[self.index]

    @property
    def current_questions(self) -> list[Question]:
        d_id = self.current_dimension.id
        return [q for q in self.questions if q.dimension_id == d_id]

    @property
    def is_last_page(self) -> bool:
        return self.index == len(self.dimensions) - 1

    @property
    def progress(self) -> float:
        """Percent of pages reached, counting the current one."""
        return (self.index + 1) / len(self.dimensions) * 100

    def answer(self, question_id: str, value: int) -> None:
        if question_id not in self._question_ids:
            raise ValidationError("question_id", "unknown question", question_id)
        self.answers[question_id] = validate_answer(question_id, value)

    def unanswered(self) -> list[str]:
        return [q.id for q in self.current_questions if q.id not in self.answers]

    def next(self) -> dict[str, int] | None:
        missing = self.unanswered()
        if missing:
            raise IncompleteAnswersError(missing)
        if self.is_last_page:
            logger.info("Questionnaire completed with %d answers", len(self.answers))
            return dict(self.answers)
        self.index += 1
        return None

    def go_to(self, index: int) -> None:
        """Jump to a page; answers already recorded are kept."""
        if not 0 <= index < len(self.dimensions):
            raise NotFoundError("Questionnaire page", index)
        self.index = index

    def previous(self) -> None:
        if self.index > 0:
            self.index -= 1

    def reset(self) -> None:
        self.index = 0
        self.answers.clear()
