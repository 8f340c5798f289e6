# disc_insights/db/crud.py
import logging
import uuid
from typing import Any, List, Mapping, Optional, Sequence, Type

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from disc_insights.core.retry import with_connectivity_retry
from disc_insights.db.models import Assessment, AssessmentResponse, AssessmentResult, Base, User

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def upsert(
    session: AsyncSession,
    model: Type[Base],
    values: Mapping[str, Any],
    conflict_columns: Sequence[str],
) -> Any:
    """
    Insert-or-update keyed on `conflict_columns` (which must carry a unique constraint).

    On conflict every supplied column except the key columns and `id` is
    overwritten. Returns the stored ORM instance.
    """
    dialect = session.get_bind().dialect.name
    insert_fn = _INSERT_BY_DIALECT.get(dialect)
    if insert_fn is None:
        raise NotImplementedError(f"upsert is not supported for dialect '{dialect}'")

    stmt = insert_fn(model).values(**values)
    update_columns = {
        key: stmt.excluded[key] for key in values if key not in conflict_columns and key != "id"
    }
    if update_columns:
        stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=update_columns)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))

    await session.execute(stmt)

    lookup = select(model).execution_options(populate_existing=True)
    for column in conflict_columns:
        lookup = lookup.where(getattr(model, column) == values[column])
    result = await session.execute(lookup)
    row = result.scalars().one()
    logger.debug(f"Upserted {model.__tablename__} row {row.id} on {list(conflict_columns)}")
    return row


async def list_rows(
    session: AsyncSession,
    model: Type[Base],
    filters: Optional[Mapping[str, Any]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Any]:
    """Equality-filtered, ordered, paginated listing of `model` rows."""
    stmt = select(model)
    for column, value in (filters or {}).items():
        stmt = stmt.where(getattr(model, column) == value)
    if order_by:
        column = getattr(model, order_by)
        stmt = stmt.order_by(column.desc() if descending else column.asc())
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


@with_connectivity_retry()
async def fetch_assessment_result(session: AsyncSession, result_id: uuid.UUID) -> Optional[AssessmentResult]:
    """Loads one result with its assessment, response and owner (including the owner's profile)."""
    stmt = (
        select(AssessmentResult)
        .where(AssessmentResult.id == result_id)
        .options(
            selectinload(AssessmentResult.assessment),
            selectinload(AssessmentResult.response),
            selectinload(AssessmentResult.user).selectinload(User.profile),
        )
    )
    result = await session.execute(stmt)
    return result.scalars().first()


@with_connectivity_retry()
async def fetch_user_assessment_history(session: AsyncSession, user_id: uuid.UUID) -> List[AssessmentResult]:
    """All results of a user, newest first."""
    stmt = (
        select(AssessmentResult)
        .where(AssessmentResult.user_id == user_id)
        .options(selectinload(AssessmentResult.assessment))
        .order_by(AssessmentResult.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_user_results_by_type(
    session: AsyncSession, user_id: uuid.UUID, assessment_type: str
) -> List[AssessmentResult]:
    """A user's results for one assessment type, newest first."""
    stmt = (
        select(AssessmentResult)
        .join(Assessment, AssessmentResult.assessment_id == Assessment.id)
        .where(AssessmentResult.user_id == user_id, Assessment.type == assessment_type)
        .options(selectinload(AssessmentResult.assessment), selectinload(AssessmentResult.response))
        .order_by(AssessmentResult.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_active_assessment(session: AsyncSession, assessment_type: str) -> Optional[Assessment]:
    stmt = select(Assessment).where(Assessment.type == assessment_type, Assessment.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_latest_response(
    session: AsyncSession, user_id: uuid.UUID, assessment_id: uuid.UUID
) -> Optional[AssessmentResponse]:
    stmt = (
        select(AssessmentResponse)
        .where(AssessmentResponse.user_id == user_id, AssessmentResponse.assessment_id == assessment_id)
        .order_by(AssessmentResponse.created_at.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalars().first()

