# disc_insights/analysis/updater.py
# Admin-triggered regeneration of stored behavior analyses.

import logging
import uuid
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.analysis.queue import AnalysisQueue
from disc_insights.db import crud
from disc_insights.errors import RateLimitedError
from disc_insights.scoring.behavior import traits_from_results

logger = logging.getLogger(__name__)


async def update_behavior_result_with_ai(
    session: AsyncSession,
    queue: AnalysisQueue,
    result_id: uuid.UUID,
    user_name: Optional[str] = None,
) -> bool:
    """
    Regenerates the analysis of one behavior result, bypassing the cache.

    Returns False when the result is missing, is not a behavior result or has
    no trait data. RateLimitedError propagates.
    """
    result = await crud.fetch_assessment_result(session, result_id)
    if result is None:
        logger.error(f"Assessment result {result_id} not found")
        return False

    assessment_type = result.assessment.type if result.assessment else None
    if assessment_type != "behavior":
        logger.error(f"Result {result_id} is not a behavior assessment: {assessment_type}")
        return False

    traits = traits_from_results(result.results or {})
    if not traits:
        logger.error(f"No trait data found in result {result_id}")
        return False

    if user_name is None and result.user is not None and result.user.profile is not None:
        user_name = result.user.profile.full_name

    record = await queue.get_analysis(
        result.id,
        traits,
        (result.results or {}).get("frequencies") or None,
        user_name,
        force_refresh=True,
        assessment_date=result.created_at.date() if result.created_at else None,
    )
    if not record:
        logger.error(f"Failed to generate AI analysis for result {result_id}")
        return False

    logger.info(f"Updated result {result_id} with AI analysis")
    return True


async def update_all_behavior_results_with_ai(
    session: AsyncSession,
    queue: AnalysisQueue,
    user_id: uuid.UUID,
    user_name: Optional[str] = None,
) -> Dict[str, int]:
    """Regenerates every behavior analysis of a user, one at a time. Stops early on a rate limit."""
    results = await crud.get_user_results_by_type(session, user_id, "behavior")
    logger.info(f"Found {len(results)} behavior assessment results to update for user {user_id}")

    updated = 0
    for index, result in enumerate(results):
        try:
            if await update_behavior_result_with_ai(session, queue, result.id, user_name):
                updated += 1
        except RateLimitedError as e:
            skipped = len(results) - index
            logger.warning(f"Rate limited after {index} results; skipping {skipped} (retry after {e.retry_after}s)")
            break

    summary = {"total": len(results), "updated": updated, "failed": len(results) - updated}
    logger.info(f"Updated {updated} of {len(results)} behavior assessment results for user {user_id}")
    return summary
