from datetime import datetime
from decimal import Decimal

import pytest

from leadership.domain.catalog import DIMENSIONS, QUESTIONS
from leadership.domain.models import Dimension, Question
from leadership.domain.services import (
    assemble_result,
    average_from_answers,
    compute_average,
    compute_dimension_scores,
    missing_answers,
    normalize_stored_score,
    round_half_up,
)
from leadership.infrastructure.exceptions import ValidationError


def test_all_fours_score_eighty_everywhere(all_fours):
    scores = compute_dimension_scores(all_fours, QUESTIONS, DIMENSIONS)
    assert scores == {d.id: 80 for d in DIMENSIONS}
    assert compute_average(scores) == 80


def test_mixed_answers(mixed_answers):
    scores = compute_dimension_scores(mixed_answers, QUESTIONS, DIMENSIONS)
    assert scores == {
        "raising_expectations": 75,
        "increasing_urgency": 65,
        "intensifying_commitment": 95,
        "transforming_conversations": 30,
        "data_driven_leadership": 80,
    }
    assert compute_average(scores) == 69


def test_scores_follow_catalog_order(all_fours):
    scores = compute_dimension_scores(all_fours, QUESTIONS, DIMENSIONS)
    assert list(scores) == [d.id for d in DIMENSIONS]


def test_extremes():
    ones = {q.id: 1 for q in QUESTIONS}
    fives = {q.id: 5 for q in QUESTIONS}
    assert set(compute_dimension_scores(ones, QUESTIONS, DIMENSIONS).values()) == {20}
    assert set(compute_dimension_scores(fives, QUESTIONS, DIMENSIONS).values()) == {100}


def test_partial_dimension_divides_by_answered_count():
    scores = compute_dimension_scores({"q1_1": 4, "q1_2": 4, "q1_3": 5}, QUESTIONS, DIMENSIONS)
    # 13 / 15 = 86.67%
    assert scores["raising_expectations"] == 87
    assert scores["increasing_urgency"] == 0


def test_three_answers_of_four_five_three():
    scores = compute_dimension_scores({"q1_1": 4, "q1_2": 5, "q1_3": 3}, QUESTIONS, DIMENSIONS)
    # 12 / 15
    assert scores["raising_expectations"] == 80


def test_empty_answers_score_zero():
    scores = compute_dimension_scores({}, QUESTIONS, DIMENSIONS)
    assert set(scores.values()) == {0}
    assert compute_average(scores) == 0


def test_half_rounds_up_on_exact_value():
    dims = (Dimension("d", "D", "desc"),)
    questions = tuple(Question(f"x{i}", f"x{i}", "d") for i in range(8))
    answers = {f"x{i}": v for i, v in enumerate([4, 3, 3, 3, 3, 3, 3, 3])}
    # 25 / 40 = 62.5%
    assert compute_dimension_scores(answers, questions, dims) == {"d": 63}


@pytest.mark.parametrize(
    "scores, expected",
    [
        ({"a": 62, "b": 63}, 63),
        ({"a": 67, "b": 68}, 68),
        ({"a": 10, "b": 10, "c": 11}, 10),
        ({}, 0),
    ],
)
def test_compute_average_rounding(scores, expected):
    assert compute_average(scores) == expected


def test_round_half_up():
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.4999")) == 2
    assert round_half_up(0.5) == 1


@pytest.mark.parametrize("bad", [0, 6, -1, True, "3", 3.0, None])
def test_out_of_range_answers_rejected(bad):
    with pytest.raises(ValidationError):
        compute_dimension_scores({"q1_1": bad}, QUESTIONS, DIMENSIONS)


def test_unknown_question_ids_ignored_but_range_checked():
    scores = compute_dimension_scores({"q1_1": 5, "zz_9": 3}, QUESTIONS, DIMENSIONS)
    assert scores["raising_expectations"] == 100

    with pytest.raises(ValidationError):
        compute_dimension_scores({"zz_9": 9}, QUESTIONS, DIMENSIONS)


def test_question_with_unknown_dimension_rejected():
    questions = QUESTIONS + (Question("q9_1", "?", "no_such_dimension"),)
    with pytest.raises(ValidationError):
        compute_dimension_scores({}, questions, DIMENSIONS)


@pytest.mark.parametrize(
    "stored, expected",
    [
        (4, 80),
        (3.5, 70),
        (5, 100),
        (1, 20),
        (0, 0),
        (Decimal("4.0"), 80),
        (6, 6),
        (19, 19),
        (80, 80),
        (100, 100),
        (None, None),
    ],
)
def test_normalize_stored_score(stored, expected):
    assert normalize_stored_score(stored) == expected


def test_average_from_answers():
    assert average_from_answers({"q1_1": 4, "q1_2": 3}) == 70
    assert average_from_answers({}) == 0


def test_missing_answers_in_catalog_order(all_fours):
    del all_fours["q3_2"]
    del all_fours["q1_4"]
    assert missing_answers(all_fours, QUESTIONS) == ["q1_4", "q3_2"]


def test_assemble_result_uses_one_timestamp(mixed_answers):
    stamp = datetime(2025, 3, 7, 9, 30)
    result = assemble_result(mixed_answers, QUESTIONS, DIMENSIONS, timestamp=stamp)
    assert result.timestamp == stamp
    assert result.average_score == 69
    assert result.dimension_scores["transforming_conversations"] == 30
    assert dict(result.answers) == mixed_answers


def test_assembled_result_is_read_only(all_fours):
    result = assemble_result(all_fours, QUESTIONS, DIMENSIONS)
    with pytest.raises(TypeError):
        result.dimension_scores["raising_expectations"] = 1  # type: ignore[index]
    all_fours["q1_1"] = 1
    assert result.answers["q1_1"] == 4


def test_scoring_is_deterministic(mixed_answers):
    first = compute_dimension_scores(mixed_answers, QUESTIONS, DIMENSIONS)
    second = compute_dimension_scores(mixed_answers, QUESTIONS, DIMENSIONS)
    assert first == second
