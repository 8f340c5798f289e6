# disc_insights/routers/reports.py

import io
import logging
import uuid
from datetime import datetime, timezone
from urllib.parse import quote

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.auth.schemas import AuthenticatedUser, ErrorResponse
from disc_insights.db.session import db_session
from disc_insights.middleware.auth import get_current_user
from disc_insights.reports.pdf import (
    behavior_report_filename,
    build_behavior_pdf_report,
    build_disc_pdf_report,
    disc_report_filename,
)
from disc_insights.routers.common import get_accessible_result, http_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Reports"])


@router.get(
    "/results/{result_id}/report.pdf",
    response_class=StreamingResponse,
    responses={
        status.HTTP_200_OK: {"content": {"application/pdf": {}}},
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
)
async def download_report(
    result_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    """Renders the PDF report of a DISC or behavior result. The stored AI analysis is included when present."""
    result = await get_accessible_result(session, result_id, user)
    assessment_type = result.assessment.type if result.assessment else None
    profile = result.user.profile if result.user else None
    profile_name = profile.full_name if profile else None
    created_at = result.created_at or datetime.now(timezone.utc)

    buffer = io.BytesIO()
    if assessment_type == "disc":
        build_disc_pdf_report(buffer, profile_name, result.results or {}, created_at)
        filename = disc_report_filename(profile_name, created_at)
    elif assessment_type == "behavior":
        build_behavior_pdf_report(buffer, profile_name, result.results or {}, result.ai_analysis, created_at)
        filename = behavior_report_filename(profile_name, created_at)
    else:
        raise http_error(status.HTTP_400_BAD_REQUEST, "RPT_001", f"No PDF report for '{assessment_type}' results.")

    buffer.seek(0)
    logger.info(f"Generated {assessment_type} PDF report for result {result_id}")
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
