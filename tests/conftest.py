from decimal import Decimal

import pytest

from survey_app.core.models import (
    AnswerOption,
    Question,
    QuestionType,
    SubmittedAnswer,
    SurveyTest,
)
from survey_app.core.services.survey_repository import SurveyRepository
from survey_app.core.survey_manager import SurveyManager


def make_question(
    question_id: int,
    question_type: QuestionType = QuestionType.SINGLE_CHOICE,
    options: list[tuple[str, bool]] | None = None,
    correct_text_answer: str | None = None,
    points: Decimal = Decimal("1"),
    order: int | None = None,
) -> Question:
    """Build a question whose option ids are ``question_id * 10 + n``."""
    return Question(
        id=question_id,
        test_id=1,
        order=question_id if order is None else order,
        text=f"Question {question_id}",
        type=question_type,
        options=[
            AnswerOption(id=question_id * 10 + n, text=text, is_correct=is_correct)
            for n, (text, is_correct) in enumerate(options or [], start=1)
        ],
        correct_text_answer=correct_text_answer,
        points=points,
    )


@pytest.fixture
def mixed_test() -> SurveyTest:
    """A four-question test covering every question type.

    Correct answers: Q1 -> 12, Q2 -> {21, 23}, Q3 -> "Paris", Q4 -> 41.
    """
    return SurveyTest(
        id=1,
        title="General knowledge",
        questions=[
            make_question(1, options=[("3", False), ("4", True), ("5", False)]),
            make_question(
                2,
                QuestionType.MULTIPLE_CHOICE,
                options=[("Red", True), ("Banana", False), ("Blue", True)],
            ),
            make_question(3, QuestionType.TEXT_ANSWER, correct_text_answer="Paris"),
            make_question(4, QuestionType.TRUE_FALSE, options=[("True", True), ("False", False)]),
        ],
    )


@pytest.fixture
def three_correct_submission() -> dict[int, SubmittedAnswer]:
    """Answers for ``mixed_test`` with Q2 wrong (an extra option selected)."""
    return {
        1: SubmittedAnswer(1, QuestionType.SINGLE_CHOICE, selected_option_id=12),
        2: SubmittedAnswer(2, QuestionType.MULTIPLE_CHOICE, selected_option_ids=frozenset({21, 22, 23})),
        3: SubmittedAnswer(3, QuestionType.TEXT_ANSWER, text_answer=" paris "),
        4: SubmittedAnswer(4, QuestionType.TRUE_FALSE, selected_option_id=41),
    }


@pytest.fixture
def repository() -> SurveyRepository:
    return SurveyRepository()


@pytest.fixture
def manager(repository: SurveyRepository) -> SurveyManager:
    return SurveyManager(repository)
