# disc_insights/cache/connection.py
import asyncio
import logging
from functools import wraps
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from disc_insights.core.config import app_settings

_log = logging.getLogger(__name__)


def _once(fn):
    """Runs an async factory at most once at a time and caches a non-None result."""
    in_flight = None
    result = None

    @wraps(fn)
    async def wrapper():
        nonlocal in_flight, result
        if result is not None:
            return result
        if in_flight is None:
            in_flight = asyncio.create_task(fn())
        try:
            result = await in_flight
            return result
        finally:
            in_flight = None

    async def reset():
        nonlocal result, in_flight
        if in_flight and not in_flight.done():
            in_flight.cancel()
            try:
                await in_flight
            except asyncio.CancelledError:
                _log.debug(f"Cancelled in-flight task for {fn.__name__}")
        in_flight = None
        previous, result = result, None
        return previous

    wrapper.reset = reset  # type: ignore
    return wrapper


@_once
async def _create_redis_connection() -> Optional[aioredis.Redis]:
    url = app_settings.redis_url
    try:
        client = aioredis.from_url(
            url,
            decode_responses=False,
            socket_connect_timeout=1,  # 1-second TCP connect cap
            socket_timeout=2,  # 2-second op cap
        )
    except (RedisError, ValueError) as exc:
        _log.error(f"Failed to create Redis client for {url}: {exc}")
        return None
    _log.info(f"Created Redis client for {url}")
    return client


async def get_redis() -> Optional[aioredis.Redis]:
    """
    Shared Redis client, created lazily. Returns None when the client cannot
    be created; callers decide whether that fails open or closed.
    """
    return await _create_redis_connection()


async def close_redis() -> None:
    """Close and discard the cached client."""
    client = await _create_redis_connection.reset()  # type: ignore
    if client:
        try:
            await client.aclose()
            _log.info("Redis connection pool closed.")
        except RedisError as e:
            _log.warning(f"Error closing Redis connection: {e}")
