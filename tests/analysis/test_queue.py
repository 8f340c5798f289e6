import asyncio
import json

import pytest

from disc_insights.analysis.prompt import EXAMPLE_ANALYSIS
from disc_insights.analysis.queue import AnalysisQueue, QueueItemState
from disc_insights.errors import CompletionError, RateLimitedError

pytestmark = pytest.mark.asyncio

TRAITS = {1: 5, 3: 2}
GOOD_RESPONSE = "```json\n" + json.dumps({
    "summary": "Perfil analítico.",
    "strengths": ["Foco"],
    "developmentAreas": ["Delegar"],
    "workStyleInsights": "Metódico.",
    "teamDynamicsInsights": "Colabora.",
    "traitDescriptions": {"1": "Amigável."},
}) + "\n```"


class FakeStore:
    def __init__(self, cached=None):
        self.records = dict(cached or {})
        self.saves = []

    async def get_cached(self, result_id):
        return self.records.get(result_id)

    async def save(self, result_id, record):
        self.saves.append((result_id, record))
        self.records[result_id] = record
        return True


class FakeCompletion:
    """Returns (or raises) the queued responses in order."""

    def __init__(self, *responses, delay=0.0):
        self.responses = list(responses)
        self.prompts = []
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def complete(self, prompt, *args, **kwargs):
        self.prompts.append(prompt)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            response = self.responses.pop(0)
        finally:
            self.active -= 1
        if isinstance(response, Exception):
            raise response
        return response

    async def complete_with_assistant(self, prompt, thread_id=None):
        return {"completion": await self.complete(prompt), "thread_id": "thread_1"}

    @property
    def calls(self):
        return len(self.prompts)


def make_queue(store, completion, **kwargs):
    kwargs.setdefault("max_attempts", 2)
    return AnalysisQueue(store, completion, backoff_min=0, backoff_max=0, yield_delay=0, **kwargs)


async def test_cache_hit_skips_completion():
    cached = {"summary": "Já existe", "strengths": []}
    store = FakeStore({"r1": cached})
    completion = FakeCompletion()
    queue = make_queue(store, completion)

    outcome = await queue.request_analysis("r1", TRAITS)

    assert outcome.record == cached
    assert outcome.state is QueueItemState.CACHED_HIT
    assert completion.calls == 0
    await queue.close()


async def test_second_call_is_served_from_cache_written_by_first():
    store = FakeStore()
    completion = FakeCompletion(GOOD_RESPONSE)
    queue = make_queue(store, completion)

    first = await queue.request_analysis("r1", TRAITS)
    assert first.state is QueueItemState.SUCCEEDED
    assert completion.calls == 1
    assert store.saves == [("r1", first.record)]

    second = await queue.request_analysis("r1", TRAITS, force_refresh=False)
    assert second.state is QueueItemState.CACHED_HIT
    assert second.record == first.record
    assert completion.calls == 1
    await queue.close()


async def test_invalid_cached_record_is_regenerated():
    store = FakeStore({"r1": {"summary": ""}})
    completion = FakeCompletion(GOOD_RESPONSE)
    queue = make_queue(store, completion)

    outcome = await queue.request_analysis("r1", TRAITS, user_name="Ana")

    assert outcome.state is QueueItemState.SUCCEEDED
    assert outcome.record["summary"] == "Perfil analítico."
    assert completion.calls == 1
    assert "Nome: Ana" in completion.prompts[0]
    await queue.close()


async def test_success_is_persisted():
    store = FakeStore()
    completion = FakeCompletion(GOOD_RESPONSE)
    queue = make_queue(store, completion)

    record = await queue.get_analysis("r1", TRAITS, {"competitivo": 4})

    assert record["traitDescriptions"] == {"1": "Amigável."}
    assert store.saves == [("r1", record)]
    await queue.close()


async def test_force_refresh_bypasses_cache():
    store = FakeStore({"r1": {"summary": "Antigo"}})
    completion = FakeCompletion(GOOD_RESPONSE)
    queue = make_queue(store, completion)

    outcome = await queue.request_analysis("r1", TRAITS, force_refresh=True)

    assert outcome.state is QueueItemState.SUCCEEDED
    assert completion.calls == 1
    assert store.records["r1"]["summary"] == "Perfil analítico."
    await queue.close()


async def test_malformed_responses_fall_back_to_example():
    store = FakeStore()
    completion = FakeCompletion("isto não é json", '{"strengths": []}')
    queue = make_queue(store, completion)

    outcome = await queue.request_analysis("r1", TRAITS)

    assert outcome.state is QueueItemState.FALLBACK_SUCCEEDED
    assert outcome.record == EXAMPLE_ANALYSIS
    assert outcome.record is not EXAMPLE_ANALYSIS
    assert completion.calls == 2
    assert store.saves == [("r1", EXAMPLE_ANALYSIS)]
    await queue.close()


async def test_retry_recovers_after_one_malformed_response():
    store = FakeStore()
    completion = FakeCompletion("{}", GOOD_RESPONSE)
    queue = make_queue(store, completion)

    outcome = await queue.request_analysis("r1", TRAITS)

    assert outcome.state is QueueItemState.SUCCEEDED
    assert completion.calls == 2
    await queue.close()


async def test_completion_errors_fall_back_after_retries():
    store = FakeStore()
    completion = FakeCompletion(CompletionError("down"), CompletionError("down"), CompletionError("down"))
    queue = make_queue(store, completion, max_attempts=3)

    outcome = await queue.request_analysis("r1", TRAITS)

    assert outcome.state is QueueItemState.FALLBACK_SUCCEEDED
    assert completion.calls == 3
    await queue.close()


async def test_rate_limit_propagates_and_starts_cooldown():
    store = FakeStore()
    completion = FakeCompletion(RateLimitedError(30))
    queue = make_queue(store, completion)

    with pytest.raises(RateLimitedError) as exc_info:
        await queue.request_analysis("r1", TRAITS)

    assert exc_info.value.retry_after == 30
    assert completion.calls == 1
    assert store.saves == []
    assert 0 < queue.cooldown_remaining <= 31

    # Later requests fail fast without reaching the completion interface
    with pytest.raises(RateLimitedError):
        await queue.request_analysis("r2", TRAITS)
    assert completion.calls == 1
    await queue.close()


async def test_cooldown_still_serves_cached_records():
    store = FakeStore({"r2": {"summary": "Em cache"}})
    completion = FakeCompletion(RateLimitedError(30))
    queue = make_queue(store, completion)

    with pytest.raises(RateLimitedError):
        await queue.request_analysis("r1", TRAITS)

    outcome = await queue.request_analysis("r2", TRAITS)
    assert outcome.state is QueueItemState.CACHED_HIT
    await queue.close()


async def test_empty_traits_return_none():
    completion = FakeCompletion()
    queue = make_queue(FakeStore(), completion)

    assert await queue.request_analysis("r1", {}) is None
    assert await queue.get_analysis("r1", {}) is None
    assert completion.calls == 0


async def test_one_completion_in_flight_at_a_time():
    store = FakeStore()
    completion = FakeCompletion(GOOD_RESPONSE, GOOD_RESPONSE, GOOD_RESPONSE, delay=0.01)
    queue = make_queue(store, completion)

    outcomes = await asyncio.gather(*(queue.request_analysis(f"r{i}", TRAITS) for i in range(3)))

    assert [o.state for o in outcomes] == [QueueItemState.SUCCEEDED] * 3
    assert completion.max_active == 1
    assert [result_id for result_id, _ in store.saves] == ["r0", "r1", "r2"]
    await queue.close()


async def test_assistant_mode():
    completion = FakeCompletion(GOOD_RESPONSE)
    queue = make_queue(FakeStore(), completion, use_assistant=True)

    outcome = await queue.request_analysis("r1", TRAITS)

    assert outcome.state is QueueItemState.SUCCEEDED
    await queue.close()


async def test_close_without_worker_is_safe():
    queue = make_queue(FakeStore(), FakeCompletion())
    await queue.close()
    await queue.close()


async def test_close_settles_in_flight_and_queued_requests():
    completion = FakeCompletion(GOOD_RESPONSE, GOOD_RESPONSE, delay=0.2)
    queue = make_queue(FakeStore(), completion)
    in_flight = asyncio.create_task(queue.request_analysis("r1", TRAITS))
    queued = asyncio.create_task(queue.request_analysis("r2", TRAITS))
    await asyncio.sleep(0.05)

    await queue.close()
    done, pending = await asyncio.wait({in_flight, queued}, timeout=1)

    assert not pending
    for task in done:
        with pytest.raises(CompletionError) as exc_info:
            task.result()
        assert exc_info.value.code == "AI_503"
