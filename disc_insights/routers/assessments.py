# disc_insights/routers/assessments.py

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.auth.schemas import AuthenticatedUser, ErrorResponse
from disc_insights.db import crud
from disc_insights.db.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    Assessment,
    AssessmentResponse,
    AssessmentResult,
    DiscQuestion,
)
from disc_insights.db.session import db_session
from disc_insights.middleware.auth import get_current_user
from disc_insights.routers.common import get_accessible_result, http_error, result_out
from disc_insights.schemas.assessments import (
    AnswersRequest,
    AssessmentOut,
    DiscQuestionOut,
    QuestionsResponse,
    ResponseOut,
    ResultOut,
)
from disc_insights.scoring.behavior import InvalidBehaviorAnswerError, calculate_behavior_results
from disc_insights.scoring.definitions import (
    DISC_CATEGORIES,
    FREQUENCY_QUESTIONS,
    FREQUENCY_SCALE_LABELS,
    TRAIT_QUESTIONS,
)
from disc_insights.scoring.disc import calculate_disc_results, count_answers

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Assessments"])

SCORED_TYPES = ("disc", "behavior")


def _check_type(assessment_type: str) -> None:
    if assessment_type not in SCORED_TYPES:
        raise http_error(status.HTTP_404_NOT_FOUND, "ASMT_001", f"Unknown assessment type '{assessment_type}'.")


async def _active_assessment(session: AsyncSession, assessment_type: str) -> Assessment:
    _check_type(assessment_type)
    assessment = await crud.get_active_assessment(session, assessment_type)
    if assessment is None:
        raise http_error(status.HTTP_404_NOT_FOUND, "ASMT_002", f"No active '{assessment_type}' assessment.")
    return assessment


async def _owned_response(session: AsyncSession, response_id: uuid.UUID, user: AuthenticatedUser) -> AssessmentResponse:
    response = await session.get(AssessmentResponse, response_id)
    if response is None or response.user_id != user.id:
        raise http_error(status.HTTP_404_NOT_FOUND, "ASMT_003", "Assessment response not found.")
    if response.status == STATUS_COMPLETED:
        raise http_error(status.HTTP_409_CONFLICT, "ASMT_005", "Assessment response is already completed.")
    return response


def _validate_disc_answers(answers: Dict[int, Any]) -> Dict[int, str]:
    invalid = {qid: value for qid, value in answers.items() if value not in DISC_CATEGORIES}
    if invalid:
        raise http_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "ASMT_006",
            f"Invalid DISC answers for questions {sorted(invalid)}; expected one of {', '.join(DISC_CATEGORIES)}.",
        )
    return answers


def behavior_questions() -> List[Dict[str, Any]]:
    questions = [dict(q) for q in TRAIT_QUESTIONS]
    for q in FREQUENCY_QUESTIONS:
        questions.append({**q, "scale": FREQUENCY_SCALE_LABELS})
    return questions


@router.get("/assessments", response_model=List[AssessmentOut], summary="List active assessments")
async def list_assessments(session: AsyncSession = Depends(db_session)):
    rows = await crud.list_rows(session, Assessment, filters={"is_active": True}, order_by="title")
    return [AssessmentOut.model_validate(row) for row in rows]


@router.get(
    "/assessments/{assessment_type}/questions",
    response_model=QuestionsResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_questions(assessment_type: str, session: AsyncSession = Depends(db_session)):
    """DISC questions come from the database; behavior questions are fixed."""
    _check_type(assessment_type)
    if assessment_type == "behavior":
        return QuestionsResponse(assessment_type=assessment_type, questions=behavior_questions())

    result = await session.execute(select(DiscQuestion).order_by(DiscQuestion.question_number))
    questions = [DiscQuestionOut.model_validate(q).model_dump() for q in result.scalars().all()]
    return QuestionsResponse(assessment_type=assessment_type, questions=questions)


@router.post(
    "/assessments/{assessment_type}/start",
    response_model=ResponseOut,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def start_assessment(
    assessment_type: str,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    """Resumes the user's latest in-progress response, or starts a new one."""
    assessment = await _active_assessment(session, assessment_type)
    latest = await crud.get_latest_response(session, user.id, assessment.id)
    if latest is not None and latest.status == STATUS_IN_PROGRESS:
        logger.info(f"Resuming response {latest.id} of user {user.id} for {assessment_type}")
        return ResponseOut.model_validate(latest)

    response = AssessmentResponse(
        user_id=user.id,
        assessment_id=assessment.id,
        status=STATUS_IN_PROGRESS,
        responses={"answers": {}},
        started_at=datetime.now(timezone.utc),
    )
    session.add(response)
    await session.flush()
    logger.info(f"Started response {response.id} of user {user.id} for {assessment_type}")
    return ResponseOut.model_validate(response)


@router.put(
    "/responses/{response_id}/answers",
    response_model=ResponseOut,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
)
async def save_answers(
    response_id: uuid.UUID,
    body: AnswersRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    """Merges partial answers into an in-progress response."""
    response = await _owned_response(session, response_id, user)
    stored = dict(response.responses or {})
    answers = dict(stored.get("answers") or {})
    answers.update({str(qid): value for qid, value in body.answers.items()})
    stored["answers"] = answers
    if body.time_stats is not None:
        stored["timeStats"] = body.time_stats
    response.responses = stored
    await session.flush()
    return ResponseOut.model_validate(response)


@router.post(
    "/responses/{response_id}/complete",
    response_model=ResultOut,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
    },
)
async def complete_response(
    response_id: uuid.UUID,
    body: AnswersRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    """
    Finalizes a response and stores its scored result.

    Answers in the body are merged over the saved ones. DISC results hold the
    normalized scores plus raw counts; behavior results hold traits and
    frequencies.
    """
    response = await _owned_response(session, response_id, user)
    assessment = await session.get(Assessment, response.assessment_id)
    if assessment is None or assessment.type not in SCORED_TYPES:
        raise http_error(status.HTTP_400_BAD_REQUEST, "ASMT_007", "This assessment type cannot be scored.")

    stored = dict(response.responses or {})
    answers: Dict[int, Any] = {int(qid): value for qid, value in (stored.get("answers") or {}).items()}
    answers.update(body.answers)
    if not answers:
        raise http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, "ASMT_008", "No answers to score.")

    completed_at = datetime.now(timezone.utc)
    time_stats = dict(body.time_stats or stored.get("timeStats") or {})
    time_stats.setdefault("completedAt", completed_at.isoformat())

    if assessment.type == "disc":
        disc_answers = _validate_disc_answers(answers)
        results = {"counts": count_answers(disc_answers), **calculate_disc_results(disc_answers)}
    else:
        try:
            results = calculate_behavior_results(answers, time_stats)
        except InvalidBehaviorAnswerError as e:
            raise http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, "ASMT_006", str(e))

    response.responses = {"answers": {str(qid): value for qid, value in answers.items()}, "timeStats": time_stats}
    response.status = STATUS_COMPLETED
    response.completed_at = completed_at

    result = AssessmentResult(
        response_id=response.id,
        user_id=user.id,
        assessment=assessment,
        results=results,
        created_at=completed_at,
    )
    session.add(result)
    await session.flush()
    logger.info(f"Completed {assessment.type} response {response.id}; result {result.id}")
    return result_out(result)


@router.get("/results", response_model=List[ResultOut], summary="Assessment history of the current user")
async def list_results(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    results = await crud.fetch_user_assessment_history(session, user.id)
    return [result_out(r) for r in results]


@router.get(
    "/results/{result_id}",
    response_model=ResultOut,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}, status.HTTP_403_FORBIDDEN: {"model": ErrorResponse}},
)
async def get_result(
    result_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    result = await get_accessible_result(session, result_id, user)
    return result_out(result)
