from types import SimpleNamespace

import httpx
import openai
import pytest

from disc_insights.analysis.completion import CompletionClient
from disc_insights.errors import CompletionError, RateLimitedError


def _rate_limit_error(headers=None):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, headers=headers or {}, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


def _chat_response(content="Olá", model="gpt-4-turbo"):
    usage = SimpleNamespace(model_dump=lambda: {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15})
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
        model=model,
    )


@pytest.fixture
def sdk(mocker):
    return mocker.MagicMock()


@pytest.fixture
def client(sdk):
    return CompletionClient("sk-test", model="gpt-4-turbo", assistant_id="asst_1", poll_interval_seconds=0, client=sdk)


async def test_complete_returns_first_choice(client, sdk, mocker):
    sdk.chat.completions.create = mocker.AsyncMock(return_value=_chat_response("Resposta"))

    assert await client.complete("Oi", system_message="sys", temperature=0.2, max_tokens=100) == "Resposta"

    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4-turbo"
    assert kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "Oi"},
    ]
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 100


async def test_complete_with_usage(client, sdk, mocker):
    sdk.chat.completions.create = mocker.AsyncMock(return_value=_chat_response(model="gpt-4o"))

    result = await client.complete_with_usage("Oi", model="gpt-4o")

    assert result["completion"] == "Olá"
    assert result["model"] == "gpt-4o"
    assert result["usage"]["total_tokens"] == 15


async def test_empty_prompt_is_rejected(client):
    with pytest.raises(ValueError):
        await client.complete("")


async def test_rate_limit_uses_retry_after_header(client, sdk, mocker):
    sdk.chat.completions.create = mocker.AsyncMock(side_effect=_rate_limit_error({"retry-after": "30"}))

    with pytest.raises(RateLimitedError) as exc_info:
        await client.complete("Oi")
    assert exc_info.value.retry_after == 30
    assert exc_info.value.code == "AI_429"


async def test_rate_limit_without_header_uses_default(sdk, mocker):
    client = CompletionClient("sk-test", default_retry_after=45, client=sdk)
    sdk.chat.completions.create = mocker.AsyncMock(side_effect=_rate_limit_error())

    with pytest.raises(RateLimitedError) as exc_info:
        await client.complete("Oi")
    assert exc_info.value.retry_after == 45


async def test_other_sdk_errors_become_completion_error(client, sdk, mocker):
    sdk.chat.completions.create = mocker.AsyncMock(side_effect=openai.OpenAIError("boom"))

    with pytest.raises(CompletionError):
        await client.complete("Oi")


async def test_missing_api_key():
    client = CompletionClient("")
    with pytest.raises(CompletionError) as exc_info:
        await client.complete("Oi")
    assert exc_info.value.code == "AI_003"


async def test_assistant_run_polls_until_completed(client, sdk, mocker):
    threads = sdk.beta.threads
    threads.create = mocker.AsyncMock(return_value=SimpleNamespace(id="thread_1"))
    threads.messages.create = mocker.AsyncMock()
    threads.runs.create = mocker.AsyncMock(return_value=SimpleNamespace(id="run_1", status="queued"))
    threads.runs.retrieve = mocker.AsyncMock(side_effect=[
        SimpleNamespace(id="run_1", status="in_progress"),
        SimpleNamespace(id="run_1", status="completed"),
    ])
    block = SimpleNamespace(type="text", text=SimpleNamespace(value="Análise pronta"))
    threads.messages.list = mocker.AsyncMock(return_value=SimpleNamespace(data=[SimpleNamespace(content=[block])]))

    result = await client.complete_with_assistant("Analise")

    assert result == {"completion": "Análise pronta", "thread_id": "thread_1"}
    assert threads.runs.retrieve.await_count == 2
    threads.runs.create.assert_awaited_once_with(thread_id="thread_1", assistant_id="asst_1")


async def test_assistant_run_failure(client, sdk, mocker):
    threads = sdk.beta.threads
    threads.messages.create = mocker.AsyncMock()
    threads.runs.create = mocker.AsyncMock(return_value=SimpleNamespace(id="run_1", status="queued"))
    threads.runs.retrieve = mocker.AsyncMock(return_value=SimpleNamespace(id="run_1", status="failed", last_error="x"))

    with pytest.raises(CompletionError):
        await client.complete_with_assistant("Analise", thread_id="thread_9")


async def test_assistant_run_timeout(sdk, mocker):
    client = CompletionClient("sk-test", assistant_id="asst_1", poll_interval_seconds=0, poll_max_attempts=2, client=sdk)
    threads = sdk.beta.threads
    threads.messages.create = mocker.AsyncMock()
    threads.runs.create = mocker.AsyncMock(return_value=SimpleNamespace(id="run_1", status="queued"))
    threads.runs.retrieve = mocker.AsyncMock(return_value=SimpleNamespace(id="run_1", status="in_progress"))

    with pytest.raises(CompletionError, match="timed out"):
        await client.complete_with_assistant("Analise", thread_id="thread_9")
    assert threads.runs.retrieve.await_count == 2


async def test_assistant_not_configured(sdk):
    client = CompletionClient("sk-test", client=sdk)
    with pytest.raises(CompletionError) as exc_info:
        await client.complete_with_assistant("Analise")
    assert exc_info.value.code == "AI_003"


def test_check_availability():
    status = CompletionClient("sk-test", assistant_id="").check_availability()
    assert status["available"] is True
    assert status["assistantAvailable"] is False
    assert status["message"] == "OpenAI integration is properly configured"

    status = CompletionClient("").check_availability()
    assert status["available"] is False
    assert status["message"] == "OpenAI API key is not configured"
