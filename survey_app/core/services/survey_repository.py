"""Storage collaborator for tests and results."""

from __future__ import annotations

import copy
from contextlib import AbstractContextManager, contextmanager
from threading import RLock
from typing import Iterator, Protocol

from survey_app.core.errors import StorageError
from survey_app.core.models import SurveyResult, SurveyTest


class SurveyStore(Protocol):
    """Storage interface consumed by the survey engine."""

    def load_test_with_questions(self, test_id: int) -> SurveyTest | None: ...

    def load_result(self, result_id: int) -> SurveyResult | None: ...

    def persist_result(self, result: SurveyResult) -> int: ...

    def list_results(self, test_id: int) -> list[SurveyResult]: ...

    def list_published_tests(self) -> list[SurveyTest]: ...

    def transaction(self) -> AbstractContextManager[object]: ...


class SurveyRepository:
    """In-memory store for tests and their results.

    Every public method takes the store lock, so a ``transaction()`` block
    sees a consistent view. Results are owned by their test and removed with
    it.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._tests: dict[int, SurveyTest] = {}
        self._results: dict[int, SurveyResult] = {}
        self._test_counter: int = 0
        self._result_counter: int = 0

    @contextmanager
    def transaction(self) -> Iterator["SurveyRepository"]:
        """Hold the store lock; roll back every change if the block raises."""
        with self._lock:
            snapshot = (
                dict(self._tests),
                dict(self._results),
                self._test_counter,
                self._result_counter,
            )
            try:
                yield self
            except BaseException:
                self._tests, self._results, self._test_counter, self._result_counter = snapshot
                raise

    # --- Tests ---

    def add_test(self, test: SurveyTest) -> int:
        """Store a copy of ``test`` under a fresh id and return that id."""
        with self._lock:
            self._validate_question_order(test)
            test_id = self._next_test_id()
            stored = copy.deepcopy(test)
            stored.id = test_id
            for question in stored.questions:
                question.test_id = test_id
            self._tests[test_id] = stored
            return test_id

    def load_test_with_questions(self, test_id: int) -> SurveyTest | None:
        with self._lock:
            test = self._tests.get(test_id)
            if test is None:
                return None
            loaded = copy.deepcopy(test)
            loaded.questions = loaded.ordered_questions()
            return loaded

    def list_published_tests(self) -> list[SurveyTest]:
        with self._lock:
            published = [copy.deepcopy(t) for t in self._tests.values() if t.is_published]
        return sorted(published, key=lambda t: t.created_at, reverse=True)

    def delete_test(self, test_id: int) -> bool:
        """Remove a test together with every result recorded against it."""
        with self._lock:
            if test_id not in self._tests:
                return False
            owned = [rid for rid, result in self._results.items() if result.test_id == test_id]
            for result_id in owned:
                del self._results[result_id]
            del self._tests[test_id]
            return True

    # --- Results ---

    def persist_result(self, result: SurveyResult) -> int:
        """Store a new result and return its id. Results are never updated."""
        with self._lock:
            if result.test_id not in self._tests:
                raise StorageError(f"Cannot store a result for unknown test {result.test_id}.")
            result_id = self._next_result_id()
            stored = copy.deepcopy(result)
            stored.id = result_id
            self._results[result_id] = stored
            return result_id

    def load_result(self, result_id: int) -> SurveyResult | None:
        with self._lock:
            result = self._results.get(result_id)
            return copy.deepcopy(result) if result is not None else None

    def list_results(self, test_id: int) -> list[SurveyResult]:
        """Return the results of a test, newest first."""
        with self._lock:
            results = [copy.deepcopy(r) for r in self._results.values() if r.test_id == test_id]
        return sorted(results, key=lambda r: r.completed_at, reverse=True)

    def get_result_count(self) -> int:
        with self._lock:
            return len(self._results)

    # --- Helpers ---

    def _next_test_id(self) -> int:
        self._test_counter += 1
        return self._test_counter

    def _next_result_id(self) -> int:
        self._result_counter += 1
        return self._result_counter

    @staticmethod
    def _validate_question_order(test: SurveyTest) -> None:
        orders = [question.order for question in test.questions]
        if len(orders) != len(set(orders)):
            raise ValueError("Question order values must be unique within a test.")
        ids = [question.id for question in test.questions]
        if len(ids) != len(set(ids)):
            raise ValueError("Question ids must be unique within a test.")
