"""Service for validating respondents and scoring submissions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from survey_app.constants.scoring_constants import SCORE_QUANTUM
from survey_app.core.answer_evaluator import is_answer_correct
from survey_app.core.errors import ValidationError
from survey_app.core.models import (
    Question,
    RespondentInfo,
    ScoreCalculation,
    Submission,
    SurveyTest,
)


def round_score(value: Decimal) -> Decimal:
    """Round a score to the stored precision (half-up)."""
    return value.quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


def question_points(question: Question) -> Decimal:
    """Points a question is worth when answered correctly.

    Each question carries its own stored point value; max score is the sum of
    those values over the test. The value is kept at stored precision so the
    per-question points always add up to the rounded total.
    """
    return round_score(Decimal(question.points))


def points_awarded(question: Question, is_correct: bool) -> Decimal:
    return question_points(question) if is_correct else Decimal(0)


def validate_required_fields(test: SurveyTest, respondent: RespondentInfo) -> None:
    """Raise ValidationError for the first required field the respondent left empty."""
    if test.require_name and _is_blank(respondent.user_name):
        raise ValidationError("user_name", "A name is required for this test.")
    if test.require_group and _is_blank(respondent.group):
        raise ValidationError("group", "A group is required for this test.")
    if test.require_age and respondent.age is None:
        raise ValidationError("age", "Age is required for this test.")


def score_submission(
    test: SurveyTest,
    submission: Submission,
    respondent: RespondentInfo,
) -> ScoreCalculation:
    """Validate the respondent, then score every question of ``test``."""
    validate_required_fields(test, respondent)

    actual = Decimal(0)
    maximum = Decimal(0)
    for question in test.questions:
        maximum += question_points(question)
        answer = submission.get(question.id)
        actual += points_awarded(question, is_answer_correct(question, answer))

    return ScoreCalculation(actual_score=round_score(actual), max_score=round_score(maximum))


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
