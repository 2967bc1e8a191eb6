"""Tests for the in-memory survey store."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from survey_app.core.errors import StorageError
from survey_app.core.models import RespondentInfo, SurveyResult, SurveyTest

from conftest import make_question


def _result(test_id: int, minutes: int = 0) -> SurveyResult:
    return SurveyResult(
        id=0,
        test_id=test_id,
        respondent=RespondentInfo(),
        completed_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
        score=Decimal("1.00"),
        max_score=Decimal("2.00"),
        answers_payload="[]",
    )


class TestTests:
    def test_add_assigns_ids_and_owner(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        loaded = repository.load_test_with_questions(test_id)
        assert loaded.id == test_id
        assert {q.test_id for q in loaded.questions} == {test_id}

    def test_loaded_questions_are_ordered(self, repository):
        test = SurveyTest(
            id=0,
            title="t",
            questions=[make_question(1, order=3), make_question(2, order=1), make_question(3, order=2)],
        )
        loaded = repository.load_test_with_questions(repository.add_test(test))
        assert [q.id for q in loaded.questions] == [2, 3, 1]

    def test_duplicate_order_is_rejected(self, repository):
        test = SurveyTest(id=0, title="t", questions=[make_question(1, order=1), make_question(2, order=1)])
        with pytest.raises(ValueError):
            repository.add_test(test)

    def test_loaded_test_is_a_copy(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        repository.load_test_with_questions(test_id).questions.clear()
        assert len(repository.load_test_with_questions(test_id).questions) == 4

    def test_missing_test(self, repository):
        assert repository.load_test_with_questions(42) is None

    def test_published_listing(self, repository):
        repository.add_test(SurveyTest(id=0, title="draft", is_published=False))
        repository.add_test(SurveyTest(id=0, title="live"))
        assert [t.title for t in repository.list_published_tests()] == ["live"]


class TestResults:
    def test_persist_and_load(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        result_id = repository.persist_result(_result(test_id))
        loaded = repository.load_result(result_id)
        assert loaded.id == result_id
        assert loaded.score == Decimal("1.00")

    def test_unknown_test_raises_storage_error(self, repository):
        with pytest.raises(StorageError):
            repository.persist_result(_result(99))

    def test_list_results_newest_first(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        older = repository.persist_result(_result(test_id, minutes=0))
        newer = repository.persist_result(_result(test_id, minutes=5))
        assert [r.id for r in repository.list_results(test_id)] == [newer, older]

    def test_delete_test_cascades_to_results(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        other_id = repository.add_test(SurveyTest(id=0, title="other"))
        result_id = repository.persist_result(_result(test_id))
        kept_id = repository.persist_result(_result(other_id))

        assert repository.delete_test(test_id)

        assert repository.load_test_with_questions(test_id) is None
        assert repository.load_result(result_id) is None
        assert repository.load_result(kept_id) is not None
        assert not repository.delete_test(test_id)


class TestTransaction:
    def test_failure_rolls_back(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        with pytest.raises(RuntimeError):
            with repository.transaction():
                repository.persist_result(_result(test_id))
                raise RuntimeError("boom")
        assert repository.get_result_count() == 0
        assert repository.list_results(test_id) == []

    def test_success_commits(self, repository, mixed_test):
        test_id = repository.add_test(mixed_test)
        with repository.transaction():
            repository.persist_result(_result(test_id))
        assert repository.get_result_count() == 1
