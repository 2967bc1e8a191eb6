"""Business logic for scoring submissions and presenting stored results."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from logging import Logger

from survey_app.core.answer_codec import encode_answers
from survey_app.core.errors import NotFoundError, SurveyError, ValidationError
from survey_app.core.models import (
    RespondentInfo,
    ResultDetail,
    Submission,
    SurveyResult,
    SurveyTest,
)
from survey_app.core.services import result_reconstructor, scorer
from survey_app.core.services.survey_repository import SurveyStore


class SurveyManager:
    """Facade over the scorer, the result reconstructor and the store."""

    def __init__(self, store: SurveyStore, logger: Logger | None = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    # --- Pure engine operations ---

    def evaluate_and_score(
        self,
        test: SurveyTest,
        submission: Submission,
        respondent: RespondentInfo,
    ) -> tuple[Decimal, Decimal, str]:
        """Score ``submission`` and serialize it.

        Raises ValidationError before any scoring when a required respondent
        field is missing.
        """
        calculation = scorer.score_submission(test, submission, respondent)
        payload = encode_answers(submission)
        return calculation.actual_score, calculation.max_score, payload

    def reconstruct_detail(self, result: SurveyResult, test: SurveyTest) -> ResultDetail:
        return result_reconstructor.reconstruct_detail(result, test)

    # --- Store-backed operations ---

    def get_test(self, test_id: int) -> SurveyTest:
        test = self._store.load_test_with_questions(test_id)
        if test is None or not test.is_published:
            raise NotFoundError(f"Test {test_id} was not found.")
        return test

    def list_published_tests(self) -> list[SurveyTest]:
        return self._store.list_published_tests()

    def submit(
        self,
        test_id: int,
        submission: Submission,
        respondent: RespondentInfo,
    ) -> SurveyResult:
        """Score a submission and persist its result in a single transaction."""
        try:
            with self._store.transaction():
                test = self.get_test(test_id)
                score, max_score, payload = self.evaluate_and_score(test, submission, respondent)
                result = SurveyResult(
                    id=0,
                    test_id=test.id,
                    respondent=respondent,
                    completed_at=datetime.now(timezone.utc),
                    score=score,
                    max_score=max_score,
                    answers_payload=payload,
                )
                result.id = self._store.persist_result(result)
        except (ValidationError, NotFoundError) as exc:
            self._logger.warning("Rejected submission for test %s: %s", test_id, exc)
            raise
        except SurveyError:
            self._logger.exception("Failed to record submission for test %s", test_id)
            raise

        self._logger.info(
            "Stored result %s for test %s: %s / %s",
            result.id,
            test_id,
            result.score,
            result.max_score,
        )
        return result

    def get_result(self, result_id: int) -> SurveyResult:
        result = self._store.load_result(result_id)
        if result is None:
            raise NotFoundError(f"Result {result_id} was not found.")
        return result

    def list_results(self, test_id: int) -> list[SurveyResult]:
        self.get_test(test_id)
        return self._store.list_results(test_id)

    def get_result_details(self, result_id: int) -> ResultDetail:
        result = self.get_result(result_id)
        # Unpublished tests still own their results, so they are not filtered here.
        test = self._store.load_test_with_questions(result.test_id)
        if test is None:
            raise NotFoundError(f"Test {result.test_id} for result {result_id} was not found.")
        return self.reconstruct_detail(result, test)
