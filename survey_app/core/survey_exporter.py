"""Utilities for exporting surveys to the plain-text format used for imports."""

from __future__ import annotations

from pathlib import Path

from survey_app.core.models import Question, QuestionType, SurveyTest

_MARKERS = ("Q:", "TYPE:", "POINTS:", "ANSWER:")

_TYPE_KEYWORDS = {
    QuestionType.SINGLE_CHOICE: "single",
    QuestionType.MULTIPLE_CHOICE: "multiple",
    QuestionType.TEXT_ANSWER: "text",
    QuestionType.TRUE_FALSE: "truefalse",
}


def save_survey_to_file(file_path: Path, test: SurveyTest) -> None:
    """Persist ``test`` to disk in the text import format."""

    if not test.questions:
        raise ValueError("Cannot export a survey without questions.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_survey(test), encoding="utf-8")


def serialize_survey(test: SurveyTest) -> str:
    blocks = [_serialize_header(test)]
    blocks.extend(_serialize_question(question) for question in test.ordered_questions())
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_header(test: SurveyTest) -> str:
    lines = [f"TITLE: {test.title}"]
    if test.description:
        lines.append(f"DESCRIPTION: {' '.join(test.description.split())}")
    required = [
        name
        for name, flag in (
            ("name", test.require_name),
            ("group", test.require_group),
            ("age", test.require_age),
        )
        if flag
    ]
    if required:
        lines.append(f"REQUIRE: {', '.join(required)}")
    return "\n".join(lines)


def _serialize_question(question: Question) -> str:
    # Blank lines would split the block on import.
    question_lines = [line for line in question.text.splitlines() if line.strip()]
    lines = [f"Q: {question_lines[0] if question_lines else ''}"]
    lines.extend(_escape_continuation(line) for line in question_lines[1:])

    if question.type is not QuestionType.SINGLE_CHOICE:
        lines.append(f"TYPE: {_TYPE_KEYWORDS[question.type]}")
    if question.points != 1:
        lines.append(f"POINTS: {question.points}")

    for option in question.options:
        if "\n" in option.text:
            raise ValueError(f"Option {option.id} of question {question.id} spans several lines.")
        marker = "*" if option.is_correct else "-"
        lines.append(f"{marker} {option.text}")

    if question.type is QuestionType.TEXT_ANSWER and question.correct_text_answer:
        lines.append(f"ANSWER: {question.correct_text_answer}")

    return "\n".join(lines)


def _escape_continuation(line: str) -> str:
    # Lines that look like options or markers would change the survey on import.
    line = line.strip()
    if line[0] in "*-\\" or line.upper().startswith(_MARKERS):
        return "\\" + line
    return line
