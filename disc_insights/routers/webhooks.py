# disc_insights/routers/webhooks.py

import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from disc_insights.auth.schemas import ErrorResponse
from disc_insights.core.config import linkedin_settings
from disc_insights.db.session import db_session
from disc_insights.profiles.webhook import WebhookPayloadError, handle_linkedin_webhook, unwrap_webhook_data
from disc_insights.routers.common import http_error

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/webhooks", tags=["Webhooks"])


def verify_webhook_secret(x_webhook_secret: Optional[str] = Header(None)) -> None:
    """Checks X-Webhook-Secret when LINKEDIN_WEBHOOK_SECRET is set; no-op otherwise."""
    expected = linkedin_settings.webhook_secret
    if not expected:
        return
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected):
        logger.warning("LinkedIn webhook rejected: bad or missing X-Webhook-Secret")
        raise http_error(status.HTTP_401_UNAUTHORIZED, "HOOK_401", "Invalid webhook secret.")


@router.post(
    "/linkedin",
    dependencies=[Depends(verify_webhook_secret)],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Payload has no data"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Processing failed"},
    },
)
async def linkedin_webhook(
    payload: Dict[str, Any] = Body(...),
    session: AsyncSession = Depends(db_session),
):
    """Receives enriched LinkedIn profile data and stores it."""
    if unwrap_webhook_data(payload) is None:
        raise http_error(status.HTTP_400_BAD_REQUEST, "HOOK_400", "No data provided")

    try:
        return await handle_linkedin_webhook(session, payload)
    except (WebhookPayloadError, SQLAlchemyError) as e:
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "HOOK_500", str(e))
