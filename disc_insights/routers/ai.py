# disc_insights/routers/ai.py
# Server-side proxy to the completion interface so the API key never reaches the browser.

import logging

from fastapi import APIRouter, Depends, status

from disc_insights.analysis.completion import CompletionClient, get_completion_client
from disc_insights.analysis.prompt import DEFAULT_SYSTEM_MESSAGE
from disc_insights.auth.schemas import AuthenticatedUser, ErrorResponse
from disc_insights.core.config import openai_settings
from disc_insights.errors import CompletionError, RateLimitedError
from disc_insights.middleware.auth import get_current_user
from disc_insights.routers.analysis import rate_limited_http_error
from disc_insights.routers.common import http_error
from disc_insights.schemas.assessments import AvailabilityResponse, CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ai", tags=["AI"])


@router.post(
    "/completions",
    response_model=CompletionResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Missing prompt"},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse, "description": "Rate limited"},
        status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse, "description": "Completion service error"},
    },
)
async def create_completion(
    body: CompletionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    client: CompletionClient = Depends(get_completion_client),
):
    if not body.prompt:
        raise http_error(status.HTTP_400_BAD_REQUEST, "AI_400", "Prompt is required")

    try:
        result = await client.complete_with_usage(
            body.prompt,
            system_message=body.system_message or DEFAULT_SYSTEM_MESSAGE,
            temperature=body.temperature if body.temperature is not None else openai_settings.temperature,
            max_tokens=body.max_tokens or openai_settings.max_tokens,
        )
    except RateLimitedError as e:
        raise rate_limited_http_error(e)
    except CompletionError as e:
        logger.error(f"Completion for user {user.id} failed: {e.message}")
        raise http_error(status.HTTP_502_BAD_GATEWAY, e.code, e.message)

    return CompletionResponse(
        completion=result["completion"],
        model=result["model"],
        status="success",
        usage=result["usage"],
    )


@router.get("/status", response_model=AvailabilityResponse, response_model_by_alias=True)
async def completion_status(client: CompletionClient = Depends(get_completion_client)):
    """Reports whether the completion interface is configured. Public."""
    return AvailabilityResponse(**client.check_availability())
