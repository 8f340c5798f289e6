# disc_insights/routers/auth.py

import uuid
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from redis.exceptions import RedisError

from disc_insights.db.session import db_session, get_session_factory_dependency
from disc_insights.db.models import ROLE_USER, Profile, User

from disc_insights.auth.crypto import hash_password, verify_password
from disc_insights.auth.jwt import (
    create_access_token, create_refresh_token, decode_and_validate,
    TokenExpired, TokenError,
)
from disc_insights.auth.refresh_token_store import (
    store_refresh_token, revoke_refresh_token, is_refresh_token_valid,
    store_password_reset_token, consume_password_reset_token,
)
from disc_insights.auth.schemas import (
    AuthenticatedUser, CurrentUserResponse, ErrorResponse,
    PasswordForgotRequest, PasswordResetRequest, RefreshTokenRequest,
    SuccessResponse, TokenResponse, UserLoginRequest, UserRegisterRequest,
)
from disc_insights.cache.connection import get_redis
from disc_insights.core.config import jwt_settings
from disc_insights.middleware.auth import get_current_user
from disc_insights.profiles.linkedin import enrich_profile_from_linkedin, is_valid_linkedin_url
from disc_insights.routers.common import http_error

_log = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])

RATE_LIMIT_KEY_PREFIX = "disc:rl"


# --- Rate Limiting Dependencies ---

async def _rate_limit_check(key_prefix: str, identifier: str, limit: int, window_seconds: int) -> None:
    """Fixed-window counter in Redis. Fails open when Redis is unavailable."""
    if not identifier:
        _log.warning(f"Rate limiting check skipped: Empty identifier provided for prefix {key_prefix}.")
        return

    redis: Optional[aioredis.Redis] = await get_redis()
    if not redis:
        _log.warning(f"Rate limiting check skipped for {key_prefix}:{identifier}: Redis unavailable.")
        return

    normalized_identifier = identifier.lower() if key_prefix == "email" else identifier
    key = f"{RATE_LIMIT_KEY_PREFIX}:{key_prefix}:{normalized_identifier}"

    try:
        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, window_seconds, nx=True)  # only set expiry on the first hit of the window
        results = await pipe.execute()
        current_count = int(results[0])
    except RedisError as e:
        _log.error(f"Redis error during rate limiting for {key}: {e}. Allowing request.")
        return

    if current_count > limit:
        _log.warning(f"Rate limit exceeded for {key_prefix}:{normalized_identifier}. Count: {current_count}, Limit: {limit}")
        raise http_error(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "RATE_LIMIT_EXCEEDED",
            f"Too many requests. Limit: {limit} per {window_seconds} seconds.",
            headers={"Retry-After": str(window_seconds)},
        )
    _log.debug(f"Rate limit check passed for {key_prefix}:{normalized_identifier}. Count: {current_count}/{limit}")


async def rate_limit_ip(request: Request):
    """IP-based rate limiting for /login: 10 requests per 5 minutes."""
    ip_address = request.client.host if request.client else "unknown_ip"
    await _rate_limit_check("ip", ip_address, 10, 300)


async def rate_limit_email(email: str, limit: int = 3, window_seconds: int = 3600) -> None:
    """Email-based rate limiting for /password/forgot: 3 requests per hour."""
    await _rate_limit_check("email", email.strip(), limit, window_seconds)


async def _issue_tokens(user_id: uuid.UUID, role: str) -> TokenResponse:
    refresh_token_id = uuid.uuid4()
    access_token = create_access_token(user_id=user_id, role=role)
    refresh_token = create_refresh_token(user_id=user_id, role=role, token_id=refresh_token_id)

    refresh_expires_at = datetime.now(timezone.utc) + timedelta(seconds=jwt_settings.refresh_ttl_seconds)
    stored = await store_refresh_token(token_id=refresh_token_id, user_id=user_id, expires_at=refresh_expires_at)
    if not stored:
        _log.error(f"Failed to store refresh token in Redis for user {user_id}.")
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AUTH_999", "Internal server error during login process (token store).")
    return TokenResponse(access_token=access_token, refresh_token=refresh_token, token_type="bearer")


# --- Endpoint Implementations ---

@router.post(
    "/register",
    response_model=SuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid input data"},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Email already registered"},
    }
)
async def register_user(
    user_data: UserRegisterRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(db_session),
    session_factory: async_sessionmaker = Depends(get_session_factory_dependency),
):
    """
    Registers a new user and its profile.
    - Hashes the password using Argon2 + Pepper.
    - Links a profile row previously created by the LinkedIn webhook, if any.
    - Schedules a best-effort LinkedIn profile fetch when a valid URL is given.
    """
    email_lower = user_data.email.strip().lower()
    if "@" not in email_lower or "." not in email_lower.split('@')[-1]:
        raise http_error(status.HTTP_400_BAD_REQUEST, "REG_003", "Invalid email format.")

    result = await session.execute(select(User).where(User.email == email_lower))
    if result.scalars().first():
        _log.warning(f"Registration attempt failed: Email '{email_lower}' already exists.")
        raise http_error(status.HTTP_409_CONFLICT, "REG_001", "Email address is already registered.")

    try:
        hashed_pw = hash_password(user_data.password)
    except ValueError as e:
        _log.error(f"Password hashing failed during registration for {email_lower}: {e}")
        raise http_error(status.HTTP_400_BAD_REQUEST, "REG_002", str(e))

    new_user = User(email=email_lower, password_hash=hashed_pw, role=ROLE_USER)
    session.add(new_user)
    try:
        await session.flush()
        profile_result = await session.execute(select(Profile).where(Profile.email == email_lower))
        profile = profile_result.scalars().first()
        if profile is None:
            profile = Profile(email=email_lower)
            session.add(profile)
        profile.user_id = new_user.id
        profile.full_name = user_data.full_name.strip()
        profile.company = user_data.company
        profile.position = user_data.position
        profile.linkedin_url = user_data.linkedin_url
        await session.flush()
    except SQLAlchemyError as e:
        _log.error(f"Database error during user registration for {email_lower}: {e}", exc_info=True)
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "DB_ERROR", "Could not register user due to a database error.")

    _log.info(f"User registered successfully: {new_user.email} (ID: {new_user.id})")
    if user_data.linkedin_url and is_valid_linkedin_url(user_data.linkedin_url):
        background_tasks.add_task(enrich_profile_from_linkedin, session_factory, new_user.id, user_data.linkedin_url)

    return SuccessResponse(message="User registered successfully.", code="REG_OK")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate user and return tokens",
    dependencies=[Depends(rate_limit_ip)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "Invalid credentials"},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    }
)
async def login_user(
    login_data: UserLoginRequest,
    session: AsyncSession = Depends(db_session)
):
    """
    Authenticates a user via email and password and returns a new token pair.
    The refresh token's JTI is stored in Redis for rotation and revocation.
    """
    email_lower = login_data.email.strip().lower()
    result = await session.execute(select(User).where(User.email == email_lower))
    user = result.scalars().first()

    if not user or not verify_password(login_data.password, user.password_hash):
        _log.warning(f"Login attempt failed for email: {email_lower}")
        raise http_error(
            status.HTTP_401_UNAUTHORIZED, "AUTH_004", "Incorrect email or password.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    tokens = await _issue_tokens(user.id, user.role)
    _log.info(f"User logged in successfully: {user.email} (ID: {user.id})")
    return tokens


def _refresh_claims(refresh_token: str):
    """Validates a refresh token and returns (user_id, token_id, role)."""
    try:
        payload = decode_and_validate(token=refresh_token, expected_type="refresh")
        return uuid.UUID(payload["sub"]), uuid.UUID(payload["jti"]), payload.get("role") or ROLE_USER
    except TokenExpired:
        raise http_error(
            status.HTTP_401_UNAUTHORIZED, "AUTH_006", "Refresh token has expired.",
            headers={"WWW-Authenticate": "Bearer error=\"invalid_token\", error_description=\"Refresh token expired\""},
        )
    except TokenError as e:
        raise http_error(
            status.HTTP_401_UNAUTHORIZED, e.code, e.message,
            headers={"WWW-Authenticate": f"Bearer error=\"invalid_token\", error_description=\"{e.message}\""},
        )
    except ValueError:
        raise http_error(status.HTTP_401_UNAUTHORIZED, "TOKEN_INVALID_UUID", "Invalid UUID format in refresh token claims.")


@router.post(
    "/token/refresh",
    response_model=TokenResponse,
    summary="Refresh access and refresh tokens",
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse, "description": "Invalid, expired, or revoked refresh token"},
    }
)
async def refresh_token(refresh_request: RefreshTokenRequest):
    """
    Rotates a refresh token: the presented JTI must still be in Redis, it is
    revoked, and a new token pair is issued.
    """
    user_id, token_id, role = _refresh_claims(refresh_request.refresh_token)

    if not await is_refresh_token_valid(token_id=token_id, user_id=user_id):
        _log.warning(f"Refresh token rejected: Token ID {token_id} for user {user_id} not found or expired in Redis.")
        raise http_error(
            status.HTTP_401_UNAUTHORIZED, "AUTH_005", "Refresh token is invalid or has been revoked.",
            headers={"WWW-Authenticate": "Bearer error=\"invalid_token\", error_description=\"Refresh token revoked or invalid\""},
        )

    if not await revoke_refresh_token(token_id=token_id, user_id=user_id):
        _log.error(f"Failed to revoke used refresh token {token_id} for user {user_id} in Redis. Continuing with refresh.")

    tokens = await _issue_tokens(user_id, role)
    _log.info(f"Token refreshed successfully for user {user_id}.")
    return tokens


@router.post("/logout", response_model=SuccessResponse, summary="Revoke a refresh token")
async def logout(refresh_request: RefreshTokenRequest):
    """Invalidates the session by revoking the presented refresh token."""
    user_id, token_id, _ = _refresh_claims(refresh_request.refresh_token)
    if not await revoke_refresh_token(token_id=token_id, user_id=user_id):
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AUTH_999", "Internal server error during logout.")
    _log.info(f"User {user_id} logged out.")
    return SuccessResponse(message="Logged out successfully.", code="LOGOUT_OK")


@router.post(
    "/password/forgot",
    response_model=SuccessResponse,
    summary="Request password reset token",
    responses={
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    }
)
async def forgot_password(
    forgot_request: PasswordForgotRequest,
    session: AsyncSession = Depends(db_session)
):
    """
    Starts the password reset flow. Answers the same way whether or not the
    email is registered.
    """
    await rate_limit_email(forgot_request.email)
    email = forgot_request.email.strip().lower()
    ok = SuccessResponse(message="If an account exists for this email, a password reset link has been sent.", code="PWD_FORGOT_OK")

    result = await session.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if not user:
        _log.info(f"Password forgot request for non-existent email: {email}")
        return ok

    reset_token = uuid.uuid4()
    if not await store_password_reset_token(reset_token=reset_token, user_id=user.id):
        _log.error(f"Failed to store password reset token in Redis for user {user.id}.")
        raise http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AUTH_999", "Internal server error during password reset request (token store).")

    # TODO: hand the token to the transactional email sender once one is configured
    _log.info(f"Password reset token generated for user {user.id}.")
    return ok


@router.post(
    "/password/reset",
    response_model=SuccessResponse,
    summary="Reset password using a valid token",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid/expired token or weak password"},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "User associated with token not found"},
    }
)
async def reset_password(
    reset_request: PasswordResetRequest,
    session: AsyncSession = Depends(db_session)
):
    try:
        reset_token_uuid = uuid.UUID(reset_request.reset_token)
    except ValueError:
        raise http_error(status.HTTP_400_BAD_REQUEST, "PWD_RESET_001", "Invalid reset token format.")

    user_id = await consume_password_reset_token(reset_token=reset_token_uuid)
    if not user_id:
        _log.warning(f"Password reset attempt failed: Invalid, expired, or already used token {reset_token_uuid}")
        raise http_error(status.HTTP_400_BAD_REQUEST, "PWD_RESET_002", "Password reset token is invalid or has expired.")

    user = await session.get(User, user_id)
    if not user:
        _log.error(f"Password reset failed: User {user_id} associated with token {reset_token_uuid} not found in DB.")
        raise http_error(status.HTTP_404_NOT_FOUND, "PWD_RESET_003", "User associated with the reset token not found.")

    try:
        user.password_hash = hash_password(reset_request.new_password)
    except ValueError as e:
        raise http_error(status.HTTP_400_BAD_REQUEST, "PWD_RESET_004", str(e))
    await session.flush()
    _log.info(f"Password successfully reset for user {user_id}.")
    return SuccessResponse(message="Password has been reset successfully.", code="PWD_RESET_OK")


@router.get("/me", response_model=CurrentUserResponse, summary="Current session user")
async def read_current_user(
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
):
    result = await session.execute(
        select(User).options(selectinload(User.profile)).where(User.id == current_user.id)
    )
    user = result.scalars().first()
    if user is None:
        raise http_error(status.HTTP_404_NOT_FOUND, "USER_001", "User not found.")

    profile = user.profile
    return CurrentUserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        full_name=profile.full_name if profile else None,
        company=profile.company if profile else None,
        position=profile.position if profile else None,
        linkedin_url=profile.linkedin_url if profile else None,
        headline=profile.headline if profile else None,
        profile_image_url=profile.profile_image_url if profile else None,
        created_at=user.created_at,
    )
