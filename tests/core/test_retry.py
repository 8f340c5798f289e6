import httpx
import pytest

from disc_insights.core.retry import with_connectivity_retry
from disc_insights.errors import OFFLINE_MESSAGE, ConnectivityError

pytestmark = pytest.mark.asyncio


async def test_returns_first_success():
    calls = []

    @with_connectivity_retry(max_retries=3, retry_delay=0)
    async def fetch():
        calls.append(1)
        return "ok"

    assert await fetch() == "ok"
    assert len(calls) == 1


async def test_retries_connectivity_errors_then_succeeds():
    calls = []

    @with_connectivity_retry(max_retries=3, retry_delay=0)
    async def fetch():
        calls.append(1)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused")
        return "ok"

    assert await fetch() == "ok"
    assert len(calls) == 3


async def test_gives_up_with_offline_message():
    calls = []

    @with_connectivity_retry(max_retries=2, retry_delay=0)
    async def fetch():
        calls.append(1)
        raise ConnectionError("unreachable")

    with pytest.raises(ConnectivityError) as exc_info:
        await fetch()

    assert len(calls) == 3
    assert exc_info.value.message == OFFLINE_MESSAGE
    assert exc_info.value.code == "NET_001"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


async def test_other_errors_are_not_retried():
    calls = []

    @with_connectivity_retry(max_retries=3, retry_delay=0)
    async def fetch():
        calls.append(1)
        raise KeyError("bad input")

    with pytest.raises(KeyError):
        await fetch()
    assert len(calls) == 1
