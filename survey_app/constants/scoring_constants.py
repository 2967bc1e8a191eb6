"""Scoring and result-rendering constants shared across core and API layers."""

from decimal import Decimal

SCORE_DECIMAL_PLACES: int = 2
SCORE_QUANTUM: Decimal = Decimal(1).scaleb(-SCORE_DECIMAL_PLACES)
DEFAULT_QUESTION_POINTS: Decimal = Decimal("1")

# Markers used when rendering answers in a result breakdown.
NOT_SELECTED_TEXT: str = "not selected"
UNKNOWN_OPTION_TEXT: str = "unknown option"
NONE_SELECTED_TEXT: str = "none selected"
NO_ANSWER_TEXT: str = "no answer"
NO_CORRECT_ANSWER_TEXT: str = "no correct answer"
NO_REFERENCE_ANSWER_TEXT: str = "no reference answer"
