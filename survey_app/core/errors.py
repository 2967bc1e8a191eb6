"""Exceptions raised by the survey engine."""

from __future__ import annotations


class SurveyError(Exception):
    """Base class for survey engine errors."""


class ValidationError(SurveyError):
    """Raised when a respondent field required by the test is missing."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(SurveyError):
    """Raised when a referenced test or result does not exist."""


class StorageError(SurveyError):
    """Raised by the storage collaborator; never retried by the engine."""
