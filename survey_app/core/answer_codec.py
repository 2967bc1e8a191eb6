"""Serialization of a respondent's answers to the payload stored on a result.

Payload format (JSON array, one record per answered question, ordered by
question id)::

    [
      {"question_id": 1, "question_type": "single_choice", "selected_option_id": 2},
      {"question_id": 2, "question_type": "multiple_choice", "selected_option_ids": [1, 3]},
      {"question_id": 3, "question_type": "text_answer", "text_answer": "Paris"}
    ]

Records written by the legacy system use PascalCase keys (``QuestionId``,
``SelectedOptionIds`` ...) and an integer ordinal for ``QuestionType``; both
spellings are accepted when decoding.

Decoding is lenient: a payload that is empty or cannot be parsed decodes to
an empty submission so that a damaged record still renders as "all answers
missing" instead of failing.
"""

from __future__ import annotations

import logging

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PayloadValidationError

from survey_app.core.models import QuestionType, Submission, SubmittedAnswer

logger = logging.getLogger(__name__)

_LEGACY_TYPE_ORDER = [
    QuestionType.SINGLE_CHOICE,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.TEXT_ANSWER,
    QuestionType.TRUE_FALSE,
]


class AnswerRecord(BaseModel):
    """Wire schema of one stored answer."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(validation_alias=AliasChoices("question_id", "QuestionId"))
    question_type: QuestionType | None = Field(
        default=None, validation_alias=AliasChoices("question_type", "QuestionType")
    )
    selected_option_id: int | None = Field(
        default=None, validation_alias=AliasChoices("selected_option_id", "SelectedOptionId")
    )
    selected_option_ids: list[int] | None = Field(
        default=None, validation_alias=AliasChoices("selected_option_ids", "SelectedOptionIds")
    )
    text_answer: str | None = Field(
        default=None, validation_alias=AliasChoices("text_answer", "TextAnswer")
    )

    @field_validator("question_type", mode="before")
    @classmethod
    def _accept_legacy_ordinal(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < len(_LEGACY_TYPE_ORDER):
                return _LEGACY_TYPE_ORDER[value]
            return None
        return value

    @classmethod
    def from_answer(cls, answer: SubmittedAnswer) -> "AnswerRecord":
        return cls(
            question_id=answer.question_id,
            question_type=answer.question_type,
            selected_option_id=answer.selected_option_id,
            selected_option_ids=sorted(answer.selected_option_ids) if answer.selected_option_ids else None,
            text_answer=answer.text_answer,
        )

    def to_answer(self) -> SubmittedAnswer:
        return SubmittedAnswer(
            question_id=self.question_id,
            question_type=self.question_type,
            selected_option_id=self.selected_option_id,
            selected_option_ids=frozenset(self.selected_option_ids or ()),
            text_answer=self.text_answer,
        )


_RECORDS = TypeAdapter(list[AnswerRecord])


def encode_answers(submission: Submission) -> str:
    """Serialize ``submission`` to its durable JSON payload."""
    records = [AnswerRecord.from_answer(submission[key]) for key in sorted(submission)]
    return _RECORDS.dump_json(records, exclude_none=True).decode("utf-8")


def decode_answers(payload: str | None) -> Submission:
    """Parse a stored payload; malformed input yields an empty submission."""
    if not payload or not payload.strip():
        return {}
    try:
        records = _RECORDS.validate_json(payload)
    except PayloadValidationError as exc:
        logger.warning("Discarding unreadable answer payload (%d errors)", exc.error_count())
        return {}

    submission: Submission = {}
    for record in records:
        # The first record for a question wins.
        submission.setdefault(record.question_id, record.to_answer())
    return submission
