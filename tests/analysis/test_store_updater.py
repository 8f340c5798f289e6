import uuid

import pytest

from disc_insights.analysis.queue import AnalysisQueue
from disc_insights.analysis.store import ResultAnalysisStore
from disc_insights.analysis.updater import update_all_behavior_results_with_ai, update_behavior_result_with_ai
from disc_insights.errors import RateLimitedError

pytestmark = pytest.mark.asyncio

BEHAVIOR_RESULTS = {"traits": {"1": 5, "3": 2}, "frequencies": {"competitivo": 4}, "timeStats": {}}
ANALYSIS_JSON = (
    '{"summary": "Novo resumo", "strengths": ["A"], "developmentAreas": ["B"], '
    '"workStyleInsights": "C", "teamDynamicsInsights": "D", "traitDescriptions": {"1": "E"}}'
)


class ScriptedCompletion:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    async def complete(self, prompt, *args, **kwargs):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_queue(store, completion):
    return AnalysisQueue(store, completion, max_attempts=1, backoff_min=0, backoff_max=0, yield_delay=0)


async def test_store_roundtrip(session_factory, seeder):
    user = await seeder.user()
    assessment = await seeder.assessment("behavior")
    result = await seeder.result(user.id, assessment.id, BEHAVIOR_RESULTS)
    store = ResultAnalysisStore(session_factory)

    assert await store.get_cached(result.id) is None
    assert await store.save(str(result.id), {"summary": "Salvo"}) is True
    assert await store.get_cached(str(result.id)) == {"summary": "Salvo"}


async def test_store_treats_bad_ids_as_miss(session_factory):
    store = ResultAnalysisStore(session_factory)

    assert await store.get_cached("not-a-uuid") is None
    assert await store.get_cached(uuid.uuid4()) is None
    assert await store.save("not-a-uuid", {"summary": "x"}) is False


async def test_update_single_result(session_factory, seeder):
    user = await seeder.user(full_name="João Lima")
    assessment = await seeder.assessment("behavior")
    result = await seeder.result(user.id, assessment.id, BEHAVIOR_RESULTS, ai_analysis={"summary": "Antigo"})
    completion = ScriptedCompletion(ANALYSIS_JSON)
    queue = make_queue(ResultAnalysisStore(session_factory), completion)

    async with session_factory() as session:
        assert await update_behavior_result_with_ai(session, queue, result.id) is True

    assert "Nome: João Lima" in completion.prompts[0]
    assert "Data da avaliação: 17/05/2024" in completion.prompts[0]
    assert (await ResultAnalysisStore(session_factory).get_cached(result.id))["summary"] == "Novo resumo"
    await queue.close()


async def test_update_rejects_missing_and_non_behavior_results(session_factory, seeder):
    user = await seeder.user()
    disc = await seeder.assessment("disc")
    disc_result = await seeder.result(user.id, disc.id, {"scores": {"D": 100}})
    behavior = await seeder.assessment("behavior")
    empty_result = await seeder.result(user.id, behavior.id, {"traits": {}})
    completion = ScriptedCompletion()
    queue = make_queue(ResultAnalysisStore(session_factory), completion)

    async with session_factory() as session:
        assert await update_behavior_result_with_ai(session, queue, uuid.uuid4()) is False
        assert await update_behavior_result_with_ai(session, queue, disc_result.id) is False
        assert await update_behavior_result_with_ai(session, queue, empty_result.id) is False
    assert completion.prompts == []


async def test_update_all_counts_results(session_factory, seeder):
    user = await seeder.user()
    behavior = await seeder.assessment("behavior")
    await seeder.result(user.id, behavior.id, BEHAVIOR_RESULTS)
    await seeder.result(user.id, behavior.id, {"traits": {}})
    completion = ScriptedCompletion(ANALYSIS_JSON)
    queue = make_queue(ResultAnalysisStore(session_factory), completion)

    async with session_factory() as session:
        summary = await update_all_behavior_results_with_ai(session, queue, user.id, "Maria")

    assert summary == {"total": 2, "updated": 1, "failed": 1}
    await queue.close()


async def test_update_all_stops_on_rate_limit(session_factory, seeder):
    user = await seeder.user()
    behavior = await seeder.assessment("behavior")
    for _ in range(3):
        await seeder.result(user.id, behavior.id, BEHAVIOR_RESULTS)
    completion = ScriptedCompletion(RateLimitedError(60))
    queue = make_queue(ResultAnalysisStore(session_factory), completion)

    async with session_factory() as session:
        summary = await update_all_behavior_results_with_ai(session, queue, user.id)

    assert summary == {"total": 3, "updated": 0, "failed": 3}
    assert len(completion.prompts) == 1
    await queue.close()
