"""Correctness checks for submitted answers, one strategy per question type."""

from __future__ import annotations

from typing import Callable

from survey_app.core.models import Question, QuestionType, SubmittedAnswer


def _check_single_choice(question: Question, answer: SubmittedAnswer) -> bool:
    correct = question.correct_options()
    if not correct:
        return False
    # If several options are flagged by mistake the first one wins.
    return answer.selected_option_id == correct[0].id


def _check_multiple_choice(question: Question, answer: SubmittedAnswer) -> bool:
    correct_ids = {option.id for option in question.correct_options()}
    return bool(correct_ids) and set(answer.selected_option_ids) == correct_ids


def _check_text_answer(question: Question, answer: SubmittedAnswer) -> bool:
    submitted = (answer.text_answer or "").strip()
    expected = (question.correct_text_answer or "").strip()
    if not submitted or not expected:
        return False
    return submitted.casefold() == expected.casefold()


_CHECKS: dict[QuestionType, Callable[[Question, SubmittedAnswer], bool]] = {
    QuestionType.SINGLE_CHOICE: _check_single_choice,
    QuestionType.MULTIPLE_CHOICE: _check_multiple_choice,
    QuestionType.TEXT_ANSWER: _check_text_answer,
    QuestionType.TRUE_FALSE: _check_single_choice,
}


def is_answer_correct(question: Question, answer: SubmittedAnswer | None) -> bool:
    """Return True when ``answer`` fully satisfies ``question``.

    A skipped question (``answer`` is None) and an unknown question type are
    both simply incorrect.
    """
    if answer is None:
        return False
    check = _CHECKS.get(question.type)
    if check is None:
        return False
    return check(question, answer)
