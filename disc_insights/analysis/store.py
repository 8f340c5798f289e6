# disc_insights/analysis/store.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from disc_insights.db.models import AssessmentResult

logger = logging.getLogger(__name__)


def _as_uuid(result_id: Union[str, uuid.UUID]) -> uuid.UUID:
    return result_id if isinstance(result_id, uuid.UUID) else uuid.UUID(str(result_id))


class ResultAnalysisStore:
    """
    Persistent analysis cache backed by `assessment_results.ai_analysis`.

    Each call opens its own short session so the queue worker never shares a
    session with a request handler. Failures are logged and reported as a miss
    (`get_cached`) or as False (`save`).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_cached(self, result_id: Union[str, uuid.UUID]) -> Optional[Dict[str, Any]]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AssessmentResult.ai_analysis).where(AssessmentResult.id == _as_uuid(result_id))
                )
                analysis = result.scalar_one_or_none()
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Error retrieving cached analysis for result {result_id}: {e}")
            return None

        if analysis:
            logger.info(f"Retrieved cached behavior analysis for result {result_id}")
            return analysis
        return None

    async def save(self, result_id: Union[str, uuid.UUID], record: Dict[str, Any]) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    update(AssessmentResult)
                    .where(AssessmentResult.id == _as_uuid(result_id))
                    .values(ai_analysis=record, updated_at=datetime.now(timezone.utc))
                )
                await session.commit()
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Error caching analysis for result {result_id}: {e}")
            return False

        logger.info(f"Cached behavior analysis for result {result_id}")
        return True
