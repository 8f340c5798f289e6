# disc_insights/routers/admin.py

import logging
import uuid
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from disc_insights.analysis.queue import AnalysisQueue, get_analysis_queue
from disc_insights.analysis.updater import update_all_behavior_results_with_ai, update_behavior_result_with_ai
from disc_insights.auth.schemas import AuthenticatedUser, ErrorResponse
from disc_insights.db.models import Assessment, AssessmentResult, Profile, User
from disc_insights.db.session import db_session
from disc_insights.errors import RateLimitedError
from disc_insights.middleware.auth import require_role
from disc_insights.routers.analysis import rate_limited_http_error
from disc_insights.routers.common import http_error
from disc_insights.schemas.admin import (
    AdminReportOut,
    AdminUserList,
    AdminUserOut,
    ProfileUpdateRequest,
    RegenerationSummary,
    RoleUpdateRequest,
)
from disc_insights.schemas.assessments import AnalysisResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])

require_admin = require_role("admin")

USER_SORT_COLUMNS = {
    "created_at": User.created_at,
    "email": User.email,
    "full_name": Profile.full_name,
    "company": Profile.company,
}


def _user_out(user: User) -> AdminUserOut:
    profile = user.profile
    return AdminUserOut(
        id=user.id,
        email=user.email,
        role=user.role,
        full_name=profile.full_name if profile else None,
        company=profile.company if profile else None,
        position=profile.position if profile else None,
        linkedin_url=profile.linkedin_url if profile else None,
        created_at=user.created_at,
    )


async def _load_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    result = await session.execute(select(User).options(selectinload(User.profile)).where(User.id == user_id))
    user = result.scalars().first()
    if user is None:
        raise http_error(status.HTTP_404_NOT_FOUND, "USER_001", "User not found.")
    return user


@router.get("/users", response_model=AdminUserList)
async def list_users(
    search: Optional[str] = Query(None, description="Matches email, name or company (case-insensitive)."),
    sort: Literal["created_at", "email", "full_name", "company"] = "created_at",
    descending: bool = True,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
):
    stmt = select(User).outerjoin(Profile, Profile.user_id == User.id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(or_(
            func.lower(User.email).like(pattern),
            func.lower(Profile.full_name).like(pattern),
            func.lower(Profile.company).like(pattern),
        ))

    total = (await session.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    column = USER_SORT_COLUMNS[sort]
    stmt = (
        stmt.options(selectinload(User.profile))
        .order_by(column.desc() if descending else column.asc())
        .offset(offset)
        .limit(limit)
    )
    users = (await session.execute(stmt)).scalars().all()
    return AdminUserList(total=total, items=[_user_out(u) for u in users])


@router.patch("/users/{user_id}", response_model=AdminUserOut, responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}})
async def update_user(
    user_id: uuid.UUID,
    body: ProfileUpdateRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
):
    """Edits profile fields; fields left out of the body are unchanged."""
    user = await _load_user(session, user_id)
    if user.profile is None:
        user.profile = Profile(email=user.email, user_id=user.id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(user.profile, field, value)
    await session.flush()
    logger.info(f"Admin {admin.id} updated profile of user {user_id}")
    return _user_out(user)


@router.patch("/users/{user_id}/role", response_model=AdminUserOut, responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}})
async def update_user_role(
    user_id: uuid.UUID,
    body: RoleUpdateRequest,
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
):
    if user_id == admin.id and body.role != "admin":
        raise http_error(status.HTTP_400_BAD_REQUEST, "ADMIN_001", "Admins cannot remove their own admin role.")
    user = await _load_user(session, user_id)
    user.role = body.role
    await session.flush()
    logger.info(f"Admin {admin.id} set role of user {user_id} to {body.role}")
    return _user_out(user)


async def _reports(
    session: AsyncSession, assessment_type: str, user_id: Optional[uuid.UUID], limit: int, offset: int
) -> List[AdminReportOut]:
    stmt = (
        select(AssessmentResult)
        .join(Assessment, AssessmentResult.assessment_id == Assessment.id)
        .where(Assessment.type == assessment_type)
        .options(selectinload(AssessmentResult.user).selectinload(User.profile))
        .order_by(AssessmentResult.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    if user_id is not None:
        stmt = stmt.where(AssessmentResult.user_id == user_id)
    results = (await session.execute(stmt)).scalars().all()

    reports = []
    for r in results:
        profile = r.user.profile if r.user else None
        reports.append(AdminReportOut(
            result_id=r.id,
            user_id=r.user_id,
            email=r.user.email if r.user else None,
            full_name=profile.full_name if profile else None,
            results=r.results or {},
            has_analysis=bool(r.ai_analysis),
            created_at=r.created_at,
        ))
    return reports


@router.get("/disc-reports", response_model=List[AdminReportOut])
async def list_disc_reports(
    user_id: Optional[uuid.UUID] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
):
    return await _reports(session, "disc", user_id, limit, offset)


@router.get("/behavior-reports", response_model=List[AdminReportOut])
async def list_behavior_reports(
    user_id: Optional[uuid.UUID] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
):
    return await _reports(session, "behavior", user_id, limit, offset)


@router.post(
    "/users/{user_id}/behavior-reports/analysis",
    response_model=RegenerationSummary,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def regenerate_user_analyses(
    user_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
    queue: AnalysisQueue = Depends(get_analysis_queue),
):
    """Regenerates every behavior analysis of one user. Stops at the first rate limit."""
    user = await _load_user(session, user_id)
    user_name = user.profile.full_name if user.profile else None
    summary = await update_all_behavior_results_with_ai(session, queue, user_id, user_name)
    logger.info(f"Admin {admin.id} regenerated analyses of user {user_id}: {summary}")
    return RegenerationSummary(**summary)


@router.post(
    "/results/{result_id}/analysis",
    response_model=AnalysisResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    },
)
async def regenerate_result_analysis(
    result_id: uuid.UUID,
    admin: AuthenticatedUser = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
    queue: AnalysisQueue = Depends(get_analysis_queue),
):
    try:
        updated = await update_behavior_result_with_ai(session, queue, result_id)
    except RateLimitedError as e:
        raise rate_limited_http_error(e)
    if not updated:
        raise http_error(
            status.HTTP_404_NOT_FOUND, "AI_404", "No behavior result with trait data found for this id."
        )

    result = await session.get(AssessmentResult, result_id)
    await session.refresh(result, ["ai_analysis"])
    return AnalysisResponse(result_id=result_id, status="updated", analysis=result.ai_analysis)
