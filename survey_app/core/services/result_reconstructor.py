"""Service that rebuilds the per-question breakdown of a stored result."""

from __future__ import annotations

from decimal import Decimal

from survey_app.constants.scoring_constants import (
    NO_ANSWER_TEXT,
    NO_CORRECT_ANSWER_TEXT,
    NO_REFERENCE_ANSWER_TEXT,
    NONE_SELECTED_TEXT,
    NOT_SELECTED_TEXT,
    UNKNOWN_OPTION_TEXT,
)
from survey_app.core.answer_codec import decode_answers
from survey_app.core.answer_evaluator import is_answer_correct
from survey_app.core.models import (
    Question,
    QuestionResultDetail,
    QuestionType,
    ResultDetail,
    SubmittedAnswer,
    SurveyResult,
    SurveyTest,
)
from survey_app.core.services.scorer import points_awarded, question_points, round_score


def reconstruct_detail(result: SurveyResult, test: SurveyTest) -> ResultDetail:
    """Build the detail view of ``result`` against the current ``test`` definition.

    Correctness is re-evaluated from the stored payload, so it reflects any
    edits made to the questions since submission. The stored score and max
    score are reported as they were persisted.
    """
    answers = decode_answers(result.answers_payload)
    details: list[QuestionResultDetail] = []
    for question in test.ordered_questions():
        answer = answers.get(question.id)
        is_correct = is_answer_correct(question, answer)
        details.append(
            QuestionResultDetail(
                question_id=question.id,
                question_text=question.text,
                question_type=question.type,
                points=question_points(question),
                user_answer=format_user_answer(question, answer),
                correct_answer=format_correct_answer(question),
                is_correct=is_correct,
                points_awarded=points_awarded(question, is_correct),
            )
        )

    return ResultDetail(
        result_id=result.id,
        test_title=test.title,
        respondent=result.respondent,
        completed_at=result.completed_at,
        score=result.score,
        max_score=result.max_score,
        percentage=score_percentage(result.score, result.max_score),
        question_details=details,
    )


def score_percentage(score: Decimal, max_score: Decimal) -> Decimal:
    if max_score <= 0:
        return Decimal(0)
    return round_score(Decimal(score) * 100 / Decimal(max_score))


def format_user_answer(question: Question, answer: SubmittedAnswer | None) -> str:
    if answer is None:
        return NO_ANSWER_TEXT

    if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        return _selected_option_text(question, answer.selected_option_id)
    if question.type is QuestionType.MULTIPLE_CHOICE:
        return _multiple_options_text(question, answer.selected_option_ids)
    if question.type is QuestionType.TEXT_ANSWER:
        if answer.text_answer is None or not answer.text_answer.strip():
            return NO_ANSWER_TEXT
        return answer.text_answer
    return NO_ANSWER_TEXT


def format_correct_answer(question: Question) -> str:
    correct = question.correct_options()
    if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        return correct[0].text if correct else NO_CORRECT_ANSWER_TEXT
    if question.type is QuestionType.MULTIPLE_CHOICE:
        return ", ".join(option.text for option in correct) if correct else NO_CORRECT_ANSWER_TEXT
    if question.type is QuestionType.TEXT_ANSWER:
        return question.correct_text_answer or NO_REFERENCE_ANSWER_TEXT
    return NO_CORRECT_ANSWER_TEXT


def _selected_option_text(question: Question, option_id: int | None) -> str:
    if option_id is None:
        return NOT_SELECTED_TEXT
    option = question.find_option(option_id)
    return option.text if option is not None else UNKNOWN_OPTION_TEXT


def _multiple_options_text(question: Question, option_ids: frozenset[int]) -> str:
    if not option_ids:
        return NONE_SELECTED_TEXT
    # Options removed since submission are left out.
    texts = [option.text for option in question.options if option.id in option_ids]
    return ", ".join(texts) if texts else UNKNOWN_OPTION_TEXT
