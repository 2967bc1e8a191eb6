"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from survey_app.core.errors import StorageError
from survey_app.core.services.survey_repository import SurveyRepository
from survey_app.core.survey_manager import SurveyManager
from survey_app.server.api_server import create_api_app

PERFECT_ANSWERS = [
    {"question_id": 1, "question_type": "single_choice", "selected_option_id": 12},
    {"question_id": 2, "question_type": "multiple_choice", "selected_option_ids": [23, 21]},
    {"question_id": 3, "question_type": "text_answer", "text_answer": "PARIS"},
    {"question_id": 4, "question_type": "true_false", "selected_option_id": 41},
]


@pytest.fixture
def survey_id(repository, mixed_test):
    return repository.add_test(mixed_test)


@pytest.fixture
def client(manager):
    return TestClient(create_api_app(manager))


class TestSurveyEndpoints:
    def test_get_test_hides_answer_key(self, client, survey_id):
        response = client.get(f"/tests/{survey_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "General knowledge"
        assert [q["id"] for q in body["questions"]] == [1, 2, 3, 4]
        assert "is_correct" not in body["questions"][0]["options"][0]
        assert "correct_text_answer" not in body["questions"][2]

    def test_list_tests(self, client, survey_id):
        response = client.get("/tests")
        assert [t["id"] for t in response.json()] == [survey_id]

    def test_unknown_test_is_404(self, client):
        assert client.get("/tests/999").status_code == 404


class TestSubmissionEndpoints:
    def test_submit_and_view_details(self, client, survey_id):
        response = client.post(
            f"/tests/{survey_id}/submissions",
            json={"user_name": "Ann", "answers": PERFECT_ANSWERS},
        )
        assert response.status_code == 201
        result = response.json()
        assert float(result["score"]) == 4.0
        assert float(result["max_score"]) == 4.0

        details = client.get(f"/results/{result['id']}/details").json()
        assert float(details["percentage"]) == 100.0
        assert all(line["is_correct"] for line in details["question_details"])
        assert details["question_details"][1]["user_answer"] == "Red, Blue"

        listed = client.get(f"/tests/{survey_id}/results").json()
        assert [r["id"] for r in listed] == [result["id"]]

    def test_missing_required_field_is_422(self, client, repository, mixed_test):
        mixed_test.require_name = True
        survey_id = repository.add_test(mixed_test)

        response = client.post(f"/tests/{survey_id}/submissions", json={"answers": PERFECT_ANSWERS})

        assert response.status_code == 422
        assert response.json()["field"] == "user_name"
        assert repository.get_result_count() == 0

    def test_duplicate_answers_are_rejected(self, client, survey_id):
        answers = PERFECT_ANSWERS + [{"question_id": 1, "selected_option_id": 11}]
        response = client.post(f"/tests/{survey_id}/submissions", json={"answers": answers})
        assert response.status_code == 422

    def test_missing_result_is_404(self, client):
        assert client.get("/results/1/details").status_code == 404

    def test_storage_error_is_503(self, mixed_test):
        class FailingRepository(SurveyRepository):
            def persist_result(self, result):
                raise StorageError("disk full")

        repository = FailingRepository()
        survey_id = repository.add_test(mixed_test)
        client = TestClient(create_api_app(SurveyManager(repository)))

        response = client.post(f"/tests/{survey_id}/submissions", json={"answers": []})

        assert response.status_code == 503
