"""FastAPI server that exposes respondent and result endpoints."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from survey_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from survey_app.core.answer_codec import AnswerRecord
from survey_app.core.errors import NotFoundError, StorageError, ValidationError
from survey_app.core.models import (
    QuestionType,
    RespondentInfo,
    ResultDetail,
    Submission,
    SurveyResult,
    SurveyTest,
)
from survey_app.core.survey_manager import SurveyManager


class OptionOut(BaseModel):
    id: int
    text: str


class QuestionOut(BaseModel):
    id: int
    order: int
    text: str
    type: QuestionType
    points: Decimal
    options: list[OptionOut]


class SurveyOut(BaseModel):
    """Survey definition as shown to respondents (no answer key)."""

    id: int
    title: str
    description: str | None
    require_name: bool
    require_group: bool
    require_age: bool
    questions: list[QuestionOut]


class SubmissionPayload(BaseModel):
    """Payload schema for a completed survey."""

    user_name: str | None = None
    group: str | None = None
    age: int | None = Field(default=None, ge=0)
    answers: list[AnswerRecord] = Field(default_factory=list)


class ResultOut(BaseModel):
    id: int
    test_id: int
    user_name: str | None
    group: str | None
    age: int | None
    completed_at: datetime
    score: Decimal
    max_score: Decimal


class QuestionDetailOut(BaseModel):
    question_id: int
    question_text: str
    question_type: QuestionType
    points: Decimal
    user_answer: str
    correct_answer: str
    is_correct: bool
    points_awarded: Decimal


class ResultDetailOut(BaseModel):
    result_id: int
    test_title: str
    user_name: str | None
    group: str | None
    age: int | None
    completed_at: datetime
    score: Decimal
    max_score: Decimal
    percentage: Decimal
    question_details: list[QuestionDetailOut]


def _survey_out(test: SurveyTest) -> SurveyOut:
    return SurveyOut(
        id=test.id,
        title=test.title,
        description=test.description,
        require_name=test.require_name,
        require_group=test.require_group,
        require_age=test.require_age,
        questions=[
            QuestionOut(
                id=question.id,
                order=question.order,
                text=question.text,
                type=question.type,
                points=question.points,
                options=[OptionOut(id=option.id, text=option.text) for option in question.options],
            )
            for question in test.ordered_questions()
        ],
    )


def _result_out(result: SurveyResult) -> ResultOut:
    return ResultOut(
        id=result.id,
        test_id=result.test_id,
        user_name=result.respondent.user_name,
        group=result.respondent.group,
        age=result.respondent.age,
        completed_at=result.completed_at,
        score=result.score,
        max_score=result.max_score,
    )


def _detail_out(detail: ResultDetail) -> ResultDetailOut:
    return ResultDetailOut(
        result_id=detail.result_id,
        test_title=detail.test_title,
        user_name=detail.respondent.user_name,
        group=detail.respondent.group,
        age=detail.respondent.age,
        completed_at=detail.completed_at,
        score=detail.score,
        max_score=detail.max_score,
        percentage=detail.percentage,
        question_details=[
            QuestionDetailOut(
                question_id=line.question_id,
                question_text=line.question_text,
                question_type=line.question_type,
                points=line.points,
                user_answer=line.user_answer,
                correct_answer=line.correct_answer,
                is_correct=line.is_correct,
                points_awarded=line.points_awarded,
            )
            for line in detail.question_details
        ],
    )


def _to_submission(payload: SubmissionPayload) -> Submission:
    submission: Submission = {}
    for record in payload.answers:
        if record.question_id in submission:
            raise HTTPException(
                status_code=422,
                detail=f"Question {record.question_id} was answered more than once.",
            )
        submission[record.question_id] = record.to_answer()
    return submission


def _get_survey_manager_dependency(survey_manager: SurveyManager):
    def dependency() -> SurveyManager:
        return survey_manager

    return dependency


def create_api_app(survey_manager: SurveyManager) -> FastAPI:
    """Create a FastAPI application wired to the provided survey manager."""
    app = FastAPI(title="Survey API", version="0.1.0")
    manager_dep = _get_survey_manager_dependency(survey_manager)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": "Storage is unavailable."})

    @app.get("/tests", response_model=list[SurveyOut])
    def list_tests(manager: SurveyManager = Depends(manager_dep)) -> list[SurveyOut]:
        return [_survey_out(test) for test in manager.list_published_tests()]

    @app.get("/tests/{test_id}", response_model=SurveyOut)
    def get_test(test_id: int, manager: SurveyManager = Depends(manager_dep)) -> SurveyOut:
        return _survey_out(manager.get_test(test_id))

    @app.post("/tests/{test_id}/submissions", status_code=201, response_model=ResultOut)
    def submit_answers(
        test_id: int,
        payload: SubmissionPayload,
        manager: SurveyManager = Depends(manager_dep),
    ) -> ResultOut:
        respondent = RespondentInfo(user_name=payload.user_name, group=payload.group, age=payload.age)
        result = manager.submit(test_id, _to_submission(payload), respondent)
        return _result_out(result)

    @app.get("/tests/{test_id}/results", response_model=list[ResultOut])
    def list_results(test_id: int, manager: SurveyManager = Depends(manager_dep)) -> list[ResultOut]:
        return [_result_out(result) for result in manager.list_results(test_id)]

    @app.get("/results/{result_id}/details", response_model=ResultDetailOut)
    def get_result_details(result_id: int, manager: SurveyManager = Depends(manager_dep)) -> ResultDetailOut:
        return _detail_out(manager.get_result_details(result_id))

    return app


def run_api_server(
    survey_manager: SurveyManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API until interrupted."""
    app = create_api_app(survey_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
