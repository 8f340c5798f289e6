import logging
from functools import wraps

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from disc_insights.errors import ConnectivityError

logger = logging.getLogger(__name__)

# Errors that mean "could not reach the backing service", as opposed to a bad query
CONNECTIVITY_ERRORS = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
    RedisConnectionError,
    OperationalError,
    InterfaceError,
    DisconnectionError,
)


def with_connectivity_retry(max_retries: int = 3, retry_delay: float = 1.0):
    """
    Decorator factory for coroutine functions that talk to a backing service.

    Connectivity errors are retried `max_retries` times, waiting
    `retry_delay * attempt` seconds before each retry. Any other exception is
    raised immediately. When the retries run out a ConnectivityError carrying
    the user-facing offline message is raised instead.
    """
    def decorator(fn):
        retrying = retry(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_incrementing(start=retry_delay, increment=retry_delay),
            retry=retry_if_exception_type(CONNECTIVITY_ERRORS),
            before_sleep=lambda state: logger.warning(
                f"{fn.__name__} failed with a connectivity error "
                f"(attempt {state.attempt_number}/{max_retries + 1}): {state.outcome.exception()}"
            ),
        )(fn)

        @wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await retrying(*args, **kwargs)
            except RetryError as e:
                last_error = e.last_attempt.exception()
                logger.error(f"{fn.__name__} gave up after {max_retries + 1} attempts: {last_error}")
                raise ConnectivityError() from last_error

        wrapper.retry = retrying.retry  # type: ignore
        return wrapper

    return decorator
