# disc_insights/analysis/completion.py
import asyncio
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from disc_insights.analysis.prompt import DEFAULT_SYSTEM_MESSAGE
from disc_insights.core.config import analysis_settings, openai_settings
from disc_insights.errors import CompletionError, RateLimitedError

logger = logging.getLogger(__name__)

# Run states that end polling without a usable answer
FAILED_RUN_STATUSES = ("failed", "expired", "cancelled")


def _retry_after_seconds(error: openai.RateLimitError, default: int) -> int:
    """Reads Retry-After (seconds) from a 429 response, falling back to `default`."""
    response = getattr(error, "response", None)
    header = response.headers.get("retry-after") if response is not None else None
    if header:
        try:
            return max(int(float(header)), 1)
        except ValueError:
            logger.debug(f"Ignoring non-numeric Retry-After header: {header!r}")
    return default


class CompletionClient:
    """
    Thin wrapper over the OpenAI SDK used by the analysis queue and the AI proxy routes.

    Two modes are supported:
      - chat completions (`complete`), a single request/response;
      - assistants (`complete_with_assistant`), thread + run + poll + read messages.

    A 429 from the API surfaces as RateLimitedError; every other SDK failure is
    wrapped in CompletionError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4-turbo",
        assistant_id: str = "",
        timeout_seconds: float = 120.0,
        poll_interval_seconds: float = 10.0,
        poll_max_attempts: int = 30,
        default_retry_after: int = 60,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.assistant_id = assistant_id
        self.poll_interval_seconds = poll_interval_seconds
        self.poll_max_attempts = poll_max_attempts
        self.default_retry_after = default_retry_after
        self._client = client
        self._timeout_seconds = timeout_seconds

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise CompletionError("OpenAI API key is not configured", code="AI_003")
            # SDK-level retries are off; the analysis queue owns retrying
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self._timeout_seconds, max_retries=0)
        return self._client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def assistant_configured(self) -> bool:
        return bool(self.api_key and self.assistant_id)

    async def complete(
        self,
        prompt: str,
        system_message: str = DEFAULT_SYSTEM_MESSAGE,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        model: Optional[str] = None,
    ) -> str:
        """Single-shot chat completion. Returns the first choice's text."""
        result = await self.complete_with_usage(prompt, system_message, temperature, max_tokens, model)
        return result["completion"]

    async def complete_with_usage(
        self,
        prompt: str,
        system_message: str = DEFAULT_SYSTEM_MESSAGE,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Like `complete`, but also returns the model name and token usage."""
        if not prompt:
            raise ValueError("Prompt is required")
        model = model or self.model
        logger.info(f"Requesting chat completion (model={model}, prompt_chars={len(prompt)})")
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_message},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.RateLimitError as e:
            retry_after = _retry_after_seconds(e, self.default_retry_after)
            logger.warning(f"Chat completion rate limited; retry after {retry_after}s")
            raise RateLimitedError(retry_after) from e
        except openai.OpenAIError as e:
            logger.error(f"Chat completion failed: {type(e).__name__} - {e}")
            raise CompletionError(f"Chat completion failed: {e}") from e

        if not response.choices:
            raise CompletionError("Chat completion returned no choices")
        usage = response.usage.model_dump() if response.usage is not None else None
        return {
            "completion": response.choices[0].message.content or "",
            "usage": usage,
            "model": response.model,
        }

    async def complete_with_assistant(self, prompt: str, thread_id: Optional[str] = None) -> Dict[str, str]:
        """
        Sends `prompt` to the configured assistant and waits for its reply.

        Returns:
            {"completion": text, "thread_id": id}. Passing the returned thread id
            back continues the same conversation.

        Raises:
            CompletionError: assistant not configured, run failed, run timed out.
            RateLimitedError: the API answered 429.
        """
        if not prompt:
            raise ValueError("Prompt is required")
        if not self.assistant_id:
            raise CompletionError("OpenAI Assistant ID is not configured", code="AI_003")

        threads = self.client.beta.threads
        try:
            if thread_id is None:
                thread = await threads.create()
                thread_id = thread.id
                logger.info(f"Created assistant thread {thread_id}")

            await threads.messages.create(thread_id, role="user", content=prompt)
            run = await threads.runs.create(thread_id=thread_id, assistant_id=self.assistant_id)
            logger.info(f"Started assistant run {run.id} on thread {thread_id}")

            completed = False
            for attempt in range(1, self.poll_max_attempts + 1):
                await asyncio.sleep(self.poll_interval_seconds)
                run = await threads.runs.retrieve(run.id, thread_id=thread_id)
                logger.debug(f"Run {run.id} status {run.status} (poll {attempt}/{self.poll_max_attempts})")
                if run.status == "completed":
                    completed = True
                    break
                if run.status in FAILED_RUN_STATUSES:
                    raise CompletionError(f"Run {run.status}: {getattr(run, 'last_error', None)}")

            if not completed:
                raise CompletionError("Run timed out")

            messages = await threads.messages.list(thread_id)
        except openai.RateLimitError as e:
            retry_after = _retry_after_seconds(e, self.default_retry_after)
            logger.warning(f"Assistant run rate limited; retry after {retry_after}s")
            raise RateLimitedError(retry_after) from e
        except openai.OpenAIError as e:
            logger.error(f"Assistant run failed on thread {thread_id}: {type(e).__name__} - {e}")
            raise CompletionError(f"Assistant run failed: {e}") from e

        if not messages.data or not messages.data[0].content:
            raise CompletionError("Assistant returned no messages")
        block = messages.data[0].content[0]
        text = getattr(block, "text", None)
        if text is None:
            raise CompletionError(f"Unexpected assistant content block: {getattr(block, 'type', '?')}")
        return {"completion": text.value, "thread_id": thread_id}

    def check_availability(self) -> Dict[str, Any]:
        """Configuration status reported by GET /api/v1/ai/status."""
        available = self.is_configured
        return {
            "available": available,
            "assistantAvailable": bool(self.assistant_id),
            "message": "OpenAI integration is properly configured" if available else "OpenAI API key is not configured",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@lru_cache(maxsize=1)
def get_completion_client() -> CompletionClient:
    """Process-wide client built from OPENAI_* settings."""
    return CompletionClient(
        openai_settings.api_key,
        model=openai_settings.model,
        assistant_id=openai_settings.assistant_id,
        timeout_seconds=openai_settings.timeout_seconds,
        poll_interval_seconds=openai_settings.poll_interval_seconds,
        poll_max_attempts=openai_settings.poll_max_attempts,
        default_retry_after=analysis_settings.rate_limit_cooldown_seconds,
    )
