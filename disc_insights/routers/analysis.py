# disc_insights/routers/analysis.py

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.analysis.queue import AnalysisQueue, get_analysis_queue
from disc_insights.auth.schemas import AuthenticatedUser, ErrorResponse
from disc_insights.db.session import db_session
from disc_insights.errors import RateLimitedError
from disc_insights.middleware.auth import get_current_user
from disc_insights.routers.common import get_accessible_result, http_error
from disc_insights.schemas.assessments import AnalysisResponse
from disc_insights.scoring.behavior import traits_from_results

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Analysis"])


def rate_limited_http_error(error: RateLimitedError):
    return http_error(
        status.HTTP_429_TOO_MANY_REQUESTS,
        error.code,
        error.message,
        headers={"Retry-After": str(error.retry_after)},
    )


@router.get(
    "/results/{result_id}/analysis",
    response_model=AnalysisResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Not a behavior result"},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Result not found"},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse, "description": "AI analysis rate limited"},
    },
)
async def get_result_analysis(
    result_id: uuid.UUID,
    force_refresh: bool = Query(False, description="Ignore the cached analysis and generate a new one."),
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
    queue: AnalysisQueue = Depends(get_analysis_queue),
):
    """
    Returns the AI analysis of a behavior result, generating it on first use.

    `status` is the way the record was obtained: `cached_hit`, `succeeded`,
    `fallback_succeeded`, or `no_traits` when the result has nothing to analyze.
    """
    result = await get_accessible_result(session, result_id, user)
    if result.assessment is None or result.assessment.type != "behavior":
        raise http_error(status.HTTP_400_BAD_REQUEST, "AI_400", "AI analysis is only available for behavior results.")

    results = result.results or {}
    profile = result.user.profile if result.user else None
    try:
        outcome = await queue.request_analysis(
            result.id,
            traits_from_results(results),
            results.get("frequencies") or None,
            user_name=profile.full_name if profile else None,
            force_refresh=force_refresh,
            assessment_date=result.created_at.date() if result.created_at else None,
        )
    except RateLimitedError as e:
        logger.warning(f"Analysis for result {result_id} rate limited; retry after {e.retry_after}s")
        raise rate_limited_http_error(e)

    if outcome is None:
        return AnalysisResponse(result_id=result.id, status="no_traits", analysis=None)
    return AnalysisResponse(result_id=result.id, status=outcome.state.value, analysis=outcome.record)
