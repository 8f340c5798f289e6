# disc_insights/analysis/queue.py
"""
Process-wide queue for AI behavior analyses.

Requests that miss the persistent cache are put on one asyncio.Queue and
handled by a single worker task, so at most one completion call is in flight
per process. Each item moves through:

    pending -> in_flight -> cached_hit | succeeded | fallback_succeeded | rate_limited

A rate-limited caller may try again later; its new request starts at pending.
"""
import asyncio
import copy
import enum
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Protocol

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from disc_insights.analysis.completion import CompletionClient, get_completion_client
from disc_insights.analysis.prompt import (
    EXAMPLE_ANALYSIS,
    coerce_analysis,
    generate_behavior_analysis_prompt,
    is_valid_analysis,
    parse_behavior_analysis_response,
)
from disc_insights.analysis.store import ResultAnalysisStore
from disc_insights.core.config import analysis_settings, openai_settings
from disc_insights.db.session import SessionFactory
from disc_insights.errors import CompletionError, MalformedAnalysisError, RateLimitedError
from disc_insights.scoring.behavior import prepare_trait_metadata

logger = logging.getLogger(__name__)


class QueueItemState(str, enum.Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    CACHED_HIT = "cached_hit"
    SUCCEEDED = "succeeded"
    FALLBACK_SUCCEEDED = "fallback_succeeded"
    RATE_LIMITED = "rate_limited"


class AnalysisStore(Protocol):
    async def get_cached(self, result_id: Any) -> Optional[Dict[str, Any]]: ...

    async def save(self, result_id: Any, record: Dict[str, Any]) -> bool: ...


@dataclass
class AnalysisOutcome:
    record: Dict[str, Any]
    state: QueueItemState


@dataclass
class _QueueItem:
    result_id: Any
    prompt: str
    future: asyncio.Future
    state: QueueItemState = field(default=QueueItemState.PENDING)


class AnalysisQueue:
    """Single-flight, cache-first access to the completion interface."""

    def __init__(
        self,
        store: AnalysisStore,
        completion: CompletionClient,
        *,
        max_attempts: int = 2,
        backoff_min: float = 1.0,
        backoff_max: float = 2.0,
        yield_delay: float = 0.1,
        use_assistant: bool = False,
    ):
        self.store = store
        self.completion = completion
        self.max_attempts = max_attempts
        self.yield_delay = yield_delay
        self.use_assistant = use_assistant

        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self._current: Optional[_QueueItem] = None
        self._cooldown_until = 0.0

        self._generate_with_retry = retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff_min, min=backoff_min, max=backoff_max),
            retry=retry_if_exception_type((MalformedAnalysisError, CompletionError)),
            before_sleep=lambda state: logger.warning(
                f"Analysis attempt {state.attempt_number}/{max_attempts} failed: {state.outcome.exception()}"
            ),
            reraise=True,
        )(self._generate_once)

    # --- Rate-limit cooldown ---

    @property
    def cooldown_remaining(self) -> int:
        remaining = self._cooldown_until - time.monotonic()
        return int(remaining) + 1 if remaining > 0 else 0

    def _start_cooldown(self, seconds: int) -> None:
        self._cooldown_until = max(self._cooldown_until, time.monotonic() + seconds)
        logger.warning(f"Completion rate limit hit; skipping calls for {seconds}s")

    # --- Public API ---

    async def get_analysis(
        self,
        result_id: Any,
        traits: Mapping[int, float],
        frequencies: Optional[Mapping[str, float]] = None,
        user_name: Optional[str] = None,
        force_refresh: bool = False,
        assessment_date: Optional[date] = None,
    ) -> Optional[Dict[str, Any]]:
        """Returns the analysis record for `result_id`, or None when there are no traits."""
        outcome = await self.request_analysis(
            result_id, traits, frequencies, user_name, force_refresh, assessment_date
        )
        return outcome.record if outcome else None

    async def request_analysis(
        self,
        result_id: Any,
        traits: Mapping[int, float],
        frequencies: Optional[Mapping[str, float]] = None,
        user_name: Optional[str] = None,
        force_refresh: bool = False,
        assessment_date: Optional[date] = None,
    ) -> Optional[AnalysisOutcome]:
        """
        Like `get_analysis`, but also reports how the record was obtained.

        Raises:
            RateLimitedError: the completion interface is rate limited (now or
                during an earlier call whose cooldown has not run out).
        """
        if not traits:
            logger.warning(f"No traits to analyze for result {result_id}")
            return None

        if force_refresh:
            logger.info(f"Bypassing cached analysis for result {result_id} (forced refresh)")
        else:
            cached = await self.store.get_cached(result_id)
            if is_valid_analysis(cached):
                return AnalysisOutcome(cached, QueueItemState.CACHED_HIT)

        remaining = self.cooldown_remaining
        if remaining:
            raise RateLimitedError(remaining)

        prompt = generate_behavior_analysis_prompt(
            traits, prepare_trait_metadata(traits), frequencies, user_name, assessment_date
        )
        item = _QueueItem(result_id, prompt, asyncio.get_running_loop().create_future())
        queue = self._ensure_worker()
        await queue.put(item)
        logger.debug(f"Queued analysis for result {result_id} (queue size {queue.qsize()})")
        # Callers that go away do not cancel the queued work
        return await asyncio.shield(item.future)

    async def close(self) -> None:
        """
        Stops the worker. Callers still waiting on the in-flight item or on
        queued items get CompletionError instead of waiting forever.
        """
        worker, queue, current = self._worker, self._queue, self._current
        self._worker = None
        self._queue = None
        self._current = None
        if worker is None or worker.get_loop() is not asyncio.get_running_loop():
            return

        if not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

        unfinished = [current] if current is not None else []
        while queue is not None and not queue.empty():
            unfinished.append(queue.get_nowait())
        for item in unfinished:
            if not item.future.done():
                item.future.set_exception(CompletionError("Analysis queue closed", code="AI_503"))
        if unfinished:
            logger.warning(f"Analysis queue closed with {len(unfinished)} unfinished item(s)")

    # --- Worker ---

    def _ensure_worker(self) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        if self._worker is None or self._worker.done() or self._worker.get_loop() is not loop:
            self._queue = asyncio.Queue()
            self._worker = loop.create_task(self._drain(self._queue), name="analysis-queue-worker")
            logger.info("Analysis queue worker started")
        return self._queue

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            item: _QueueItem = await queue.get()
            self._current = item
            try:
                outcome = await self._process(item)
            except Exception as e:
                if not item.future.done():
                    item.future.set_exception(e)
            else:
                if not item.future.done():
                    item.future.set_result(outcome)
            finally:
                self._current = None
                queue.task_done()
            await asyncio.sleep(self.yield_delay)

    async def _process(self, item: _QueueItem) -> AnalysisOutcome:
        item.state = QueueItemState.IN_FLIGHT
        remaining = self.cooldown_remaining
        if remaining:
            item.state = QueueItemState.RATE_LIMITED
            raise RateLimitedError(remaining)

        try:
            record = await self._generate_with_retry(item.prompt)
        except RateLimitedError as e:
            self._start_cooldown(e.retry_after)
            item.state = QueueItemState.RATE_LIMITED
            raise
        except (MalformedAnalysisError, CompletionError) as e:
            logger.error(f"All {self.max_attempts} analysis attempts failed for result {item.result_id}: {e}")
            record = copy.deepcopy(EXAMPLE_ANALYSIS)
            await self.store.save(item.result_id, record)
            item.state = QueueItemState.FALLBACK_SUCCEEDED
            logger.info(f"Stored fallback analysis for result {item.result_id}")
            return AnalysisOutcome(record, item.state)

        await self.store.save(item.result_id, record)
        item.state = QueueItemState.SUCCEEDED
        logger.info(f"Generated behavior analysis for result {item.result_id}")
        return AnalysisOutcome(record, item.state)

    async def _generate_once(self, prompt: str) -> Dict[str, Any]:
        if self.use_assistant:
            text = (await self.completion.complete_with_assistant(prompt))["completion"]
        else:
            text = await self.completion.complete(prompt)

        parsed = parse_behavior_analysis_response(text)
        if not isinstance(parsed, dict) or not parsed.get("summary"):
            raise MalformedAnalysisError()
        return coerce_analysis(parsed)


@lru_cache(maxsize=1)
def get_analysis_queue() -> AnalysisQueue:
    """The process-wide queue, built from ANALYSIS_* and OPENAI_* settings."""
    completion = get_completion_client()
    return AnalysisQueue(
        ResultAnalysisStore(SessionFactory),
        completion,
        max_attempts=analysis_settings.max_attempts,
        backoff_min=analysis_settings.backoff_min_seconds,
        backoff_max=analysis_settings.backoff_max_seconds,
        yield_delay=analysis_settings.yield_delay_seconds,
        use_assistant=openai_settings.use_assistant and completion.assistant_configured,
    )
