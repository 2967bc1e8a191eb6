"""Utilities for importing surveys from a human-friendly text file.

File format (blocks separated by blank lines or '---'):

    TITLE: Survey title            (first block only)
    DESCRIPTION: Optional text
    REQUIRE: name, group, age      (optional respondent fields to enforce)

    Q: Question text. Additional lines until the next marker are treated as
       part of the question. A continuation line starting with a backslash
       is taken literally without it, so "\\- text" stays question text.
    TYPE: single | multiple | text | truefalse   (optional, default single)
    POINTS: 2                      (optional, default 1)
    * Correct option text
    - Other option text
    ANSWER: reference answer       (text questions only)

Example:

    TITLE: Capitals

    Q: Capital of France?
    * Paris
    - Lyon

    Q: Name the capital of Italy.
    TYPE: text
    ANSWER: Rome
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from survey_app.constants.scoring_constants import SCORE_DECIMAL_PLACES
from survey_app.core.models import AnswerOption, Question, QuestionType, SurveyTest

_TYPE_NAMES = {
    "single": QuestionType.SINGLE_CHOICE,
    "multiple": QuestionType.MULTIPLE_CHOICE,
    "text": QuestionType.TEXT_ANSWER,
    "truefalse": QuestionType.TRUE_FALSE,
}
_REQUIRE_FIELDS = ("name", "group", "age")


class SurveyImportError(Exception):
    """Raised when a survey definition cannot be parsed."""


@dataclass(slots=True)
class ImportedSurvey:
    """Container for an imported survey and the file it came from."""

    source_path: Path
    test: SurveyTest


def load_survey_from_file(file_path: Path) -> ImportedSurvey:
    text = file_path.read_text(encoding="utf-8")
    return ImportedSurvey(source_path=file_path, test=parse_survey_text(text))


def parse_survey_text(text: str) -> SurveyTest:
    blocks = _split_blocks(text)
    if not blocks:
        raise SurveyImportError("Survey file is empty.")

    test = _parse_header(blocks[0])
    for position, block in enumerate(blocks[1:], start=1):
        test.questions.append(_parse_question(block, position))
    if not test.questions:
        raise SurveyImportError("Survey file did not contain any questions.")
    return test


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---" or not stripped:
            if current_block:
                blocks.append("\n".join(current_block))
                current_block = []
            continue
        current_block.append(stripped)
    if current_block:
        blocks.append("\n".join(current_block))
    return blocks


def _parse_header(block: str) -> SurveyTest:
    title: str | None = None
    description: str | None = None
    required: set[str] = set()

    for line in block.splitlines():
        key, _, value = line.partition(":")
        key = key.strip().upper()
        value = value.strip()
        if key == "TITLE":
            title = value
        elif key == "DESCRIPTION":
            description = value or None
        elif key == "REQUIRE":
            required = {item.strip().lower() for item in value.split(",") if item.strip()}
            unknown = required.difference(_REQUIRE_FIELDS)
            if unknown:
                raise SurveyImportError(f"Unknown required field(s): {', '.join(sorted(unknown))}.")
        else:
            raise SurveyImportError(f"Encountered text outside of a known section: '{line}'.")

    if not title:
        raise SurveyImportError("Survey title missing (TITLE: ...)")

    return SurveyTest(
        id=0,  # assigned by the repository
        title=title,
        description=description,
        require_name="name" in required,
        require_group="group" in required,
        require_age="age" in required,
    )


def _parse_question(block: str, position: int) -> Question:
    question_lines: list[str] = []
    question_type = QuestionType.SINGLE_CHOICE
    points = Decimal(1)
    options: list[AnswerOption] = []
    correct_text: str | None = None
    in_question = False

    for line in block.splitlines():
        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            in_question = True
            continue
        if upper.startswith("TYPE:"):
            type_name = line.split(":", 1)[1].strip().lower()
            if type_name not in _TYPE_NAMES:
                raise SurveyImportError(f"Unknown question type '{type_name}'.")
            question_type = _TYPE_NAMES[type_name]
            in_question = False
            continue
        if upper.startswith("POINTS:"):
            points = _parse_points(line.split(":", 1)[1].strip())
            in_question = False
            continue
        if upper.startswith("ANSWER:"):
            correct_text = line.split(":", 1)[1].strip() or None
            in_question = False
            continue
        if line[0] in "*-" and len(line) > 1:
            options.append(
                AnswerOption(id=len(options) + 1, text=line[1:].strip(), is_correct=line[0] == "*")
            )
            in_question = False
            continue
        if in_question:
            question_lines.append(line[1:] if line.startswith("\\") else line)
        else:
            raise SurveyImportError(f"Encountered text outside of a known section: '{line}'.")

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise SurveyImportError("Question text missing (Q: ...)")

    if question_type is QuestionType.TEXT_ANSWER:
        if options:
            raise SurveyImportError("Text questions cannot define options.")
    else:
        if len(options) < 2:
            raise SurveyImportError("Choice questions need at least two options.")
        if correct_text is not None:
            raise SurveyImportError("ANSWER is only valid for text questions.")
        if question_type is QuestionType.TRUE_FALSE and len(options) != 2:
            raise SurveyImportError("True/false questions must define exactly two options.")

    return Question(
        id=position,
        test_id=0,
        order=position,
        text=question_text,
        type=question_type,
        options=options,
        correct_text_answer=correct_text,
        points=points,
    )


def _parse_points(raw_value: str) -> Decimal:
    try:
        points = Decimal(raw_value)
    except InvalidOperation as exc:
        raise SurveyImportError("POINTS must be a number.") from exc
    if not points.is_finite() or points <= 0:
        raise SurveyImportError("POINTS must be a positive number.")
    if points.normalize().as_tuple().exponent < -SCORE_DECIMAL_PLACES:
        raise SurveyImportError(f"POINTS allows at most {SCORE_DECIMAL_PLACES} decimal places.")
    return points
