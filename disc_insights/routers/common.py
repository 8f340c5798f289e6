import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.auth.schemas import AuthenticatedUser, ErrorDetail, ErrorResponse
from disc_insights.db import crud
from disc_insights.db.models import AssessmentResult
from disc_insights.schemas.assessments import ResultOut

_log = logging.getLogger(__name__)


def http_error(status_code: int, code: str, message: str, headers: Optional[dict] = None) -> HTTPException:
    """HTTPException carrying the standard ErrorResponse envelope."""
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(detail=ErrorDetail(code=code, message=message)).model_dump(),
        headers=headers,
    )


async def get_accessible_result(
    session: AsyncSession, result_id: uuid.UUID, user: AuthenticatedUser
) -> AssessmentResult:
    """Loads a result the user owns (any result for admins). 404 when missing, 403 otherwise."""
    result = await crud.fetch_assessment_result(session, result_id)
    if result is None:
        raise http_error(status.HTTP_404_NOT_FOUND, "ASMT_404", "Result not found.")
    if result.user_id != user.id and not user.is_admin:
        _log.warning(f"User {user.id} tried to read result {result_id} owned by {result.user_id}")
        raise http_error(status.HTTP_403_FORBIDDEN, "AUTH_003", "Insufficient permissions for this resource.")
    return result


def result_out(result: AssessmentResult) -> ResultOut:
    return ResultOut(
        id=result.id,
        response_id=result.response_id,
        user_id=result.user_id,
        assessment_id=result.assessment_id,
        assessment_type=result.assessment.type if result.assessment else None,
        results=result.results or {},
        ai_analysis=result.ai_analysis,
        pdf_url=result.pdf_url,
        created_at=result.created_at,
    )
