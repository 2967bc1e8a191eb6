"""Domain models for the survey application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from survey_app.constants.scoring_constants import DEFAULT_QUESTION_POINTS


class QuestionType(str, Enum):
    """Closed set of question kinds understood by the evaluator."""

    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TEXT_ANSWER = "text_answer"
    TRUE_FALSE = "true_false"


@dataclass(slots=True)
class AnswerOption:
    """One selectable option of a choice-based question."""

    id: int
    text: str
    is_correct: bool = False


@dataclass(slots=True)
class Question:
    """A single question owned by a test."""

    id: int
    test_id: int
    order: int
    text: str
    type: QuestionType = QuestionType.SINGLE_CHOICE
    options: list[AnswerOption] = field(default_factory=list)
    correct_text_answer: str | None = None
    points: Decimal = DEFAULT_QUESTION_POINTS

    def correct_options(self) -> list[AnswerOption]:
        return [option for option in self.options if option.is_correct]

    def find_option(self, option_id: int) -> AnswerOption | None:
        return next((option for option in self.options if option.id == option_id), None)


@dataclass(slots=True)
class SurveyTest:
    """A survey/quiz definition with its ordered questions."""

    id: int
    title: str
    description: str | None = None
    questions: list[Question] = field(default_factory=list)
    require_name: bool = False
    require_group: bool = False
    require_age: bool = False
    is_published: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def ordered_questions(self) -> list[Question]:
        return sorted(self.questions, key=lambda q: q.order)


@dataclass(slots=True, frozen=True)
class SubmittedAnswer:
    """A respondent's answer to one question.

    Only the field matching the question type is meaningful; the others stay
    at their defaults.
    """

    question_id: int
    question_type: QuestionType | None = None
    selected_option_id: int | None = None
    selected_option_ids: frozenset[int] = frozenset()
    text_answer: str | None = None


# A submission is keyed by question id, at most one answer per question.
Submission = dict[int, SubmittedAnswer]


@dataclass(slots=True, frozen=True)
class RespondentInfo:
    """Optional respondent metadata a test may require."""

    user_name: str | None = None
    group: str | None = None
    age: int | None = None


@dataclass(slots=True, frozen=True)
class ScoreCalculation:
    """Outcome of scoring a submission."""

    actual_score: Decimal
    max_score: Decimal


@dataclass(slots=True)
class SurveyResult:
    """Persisted, immutable record of one completed submission."""

    id: int
    test_id: int
    respondent: RespondentInfo
    completed_at: datetime
    score: Decimal
    max_score: Decimal
    answers_payload: str


@dataclass(slots=True)
class QuestionResultDetail:
    """Per-question line of a reconstructed result."""

    question_id: int
    question_text: str
    question_type: QuestionType
    points: Decimal
    user_answer: str
    correct_answer: str
    is_correct: bool
    points_awarded: Decimal


@dataclass(slots=True)
class ResultDetail:
    """Human-readable breakdown of a stored result."""

    result_id: int
    test_title: str
    respondent: RespondentInfo
    completed_at: datetime
    score: Decimal
    max_score: Decimal
    percentage: Decimal
    question_details: list[QuestionResultDetail] = field(default_factory=list)
