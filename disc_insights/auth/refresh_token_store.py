# disc_insights/auth/refresh_token_store.py
"""
Redis-backed state for auth tokens.

Refresh tokens are tracked by their jti so they can be rotated and revoked;
password reset tokens map a random UUID to a user id and are single-use.
Every check fails closed: without Redis no token is considered valid.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from redis.exceptions import RedisError

from disc_insights.cache.connection import get_redis

_log = logging.getLogger(__name__)

REFRESH_TOKEN_KEY_PREFIX = "disc:rt"
PASSWORD_RESET_KEY_PREFIX = "disc:pwreset"
PASSWORD_RESET_TTL_SECONDS = 3600  # 1 hour


def _refresh_key(user_id: uuid.UUID, token_id: uuid.UUID) -> str:
    if not isinstance(user_id, uuid.UUID) or not isinstance(token_id, uuid.UUID):
        raise TypeError("user_id and token_id must be UUID objects.")
    return f"{REFRESH_TOKEN_KEY_PREFIX}:{user_id}:{token_id}"


def _reset_key(reset_token: uuid.UUID) -> str:
    if not isinstance(reset_token, uuid.UUID):
        raise TypeError("reset_token must be a UUID object.")
    return f"{PASSWORD_RESET_KEY_PREFIX}:{reset_token}"


async def store_refresh_token(token_id: uuid.UUID, user_id: uuid.UUID, expires_at: datetime) -> bool:
    """Records a refresh token jti until `expires_at` (UTC). Returns False if it could not be stored."""
    redis = await get_redis()
    if not redis:
        _log.error(f"Failed to store refresh token {token_id}: Redis connection unavailable.")
        return False

    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    ttl_seconds = int((expires_at - datetime.now(timezone.utc)).total_seconds())
    if ttl_seconds <= 0:
        _log.warning(f"Attempted to store already expired refresh token {token_id} for user {user_id}.")
        return False

    try:
        await redis.set(_refresh_key(user_id, token_id), int(expires_at.timestamp()), ex=ttl_seconds)
    except RedisError as e:
        _log.error(f"Redis error storing refresh token {token_id} for user {user_id}: {e}")
        return False
    _log.debug(f"Stored refresh token {token_id} for user {user_id} with TTL {ttl_seconds}s.")
    return True


async def revoke_refresh_token(token_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Deletes a refresh token jti. Deleting an unknown jti counts as success."""
    redis = await get_redis()
    if not redis:
        _log.error(f"Failed to revoke refresh token {token_id}: Redis connection unavailable.")
        return False
    try:
        deleted = await redis.delete(_refresh_key(user_id, token_id))
    except RedisError as e:
        _log.error(f"Redis error revoking refresh token {token_id} for user {user_id}: {e}")
        return False
    if deleted:
        _log.info(f"Revoked refresh token {token_id} for user {user_id}.")
    return True


async def is_refresh_token_valid(token_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    redis = await get_redis()
    if not redis:
        _log.error(f"Failed to check refresh token {token_id} validity: Redis connection unavailable.")
        return False
    try:
        return await redis.exists(_refresh_key(user_id, token_id)) > 0
    except RedisError as e:
        _log.error(f"Redis error checking refresh token {token_id} for user {user_id}: {e}")
        return False


async def store_password_reset_token(reset_token: uuid.UUID, user_id: uuid.UUID) -> bool:
    redis = await get_redis()
    if not redis:
        _log.error(f"Failed to store password reset token {reset_token}: Redis connection unavailable.")
        return False
    try:
        await redis.set(_reset_key(reset_token), str(user_id).encode("utf-8"), ex=PASSWORD_RESET_TTL_SECONDS)
    except RedisError as e:
        _log.error(f"Redis error storing password reset token {reset_token}: {e}")
        return False
    _log.info(f"Stored password reset token for user {user_id}.")
    return True


async def consume_password_reset_token(reset_token: uuid.UUID) -> Optional[uuid.UUID]:
    """Returns the user id for a reset token and deletes the token (GETDEL). None if unknown or expired."""
    redis = await get_redis()
    if not redis:
        _log.error(f"Failed to consume password reset token {reset_token}: Redis connection unavailable.")
        return None
    try:
        raw = await redis.getdel(_reset_key(reset_token))
    except RedisError as e:
        _log.error(f"Redis error consuming password reset token {reset_token}: {e}")
        return None

    if not raw:
        _log.warning(f"Attempted to consume non-existent or expired password reset token {reset_token}.")
        return None
    try:
        return uuid.UUID(raw.decode("utf-8") if isinstance(raw, bytes) else raw)
    except ValueError:
        _log.error(f"Invalid user ID stored for password reset token {reset_token}: {raw!r}")
        return None
