# disc_insights/auth/jwt.py
import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Tuple

import jwt
from cryptography.hazmat.primitives import serialization

from disc_insights.core.config import jwt_settings

_log = logging.getLogger(__name__)


# --- Load Keys ---
@lru_cache(maxsize=1)
def _load_keys() -> Tuple[Any, Any, str]:
    """Reads the RS256 key pair once. Returns (private_key, public_key, key_id)."""
    private_path = Path(jwt_settings.private_key_path)
    public_path = Path(jwt_settings.public_key_path)
    try:
        private_key = serialization.load_pem_private_key(private_path.read_bytes(), password=None)
        public_key = serialization.load_pem_public_key(public_path.read_bytes())
    except FileNotFoundError as e:
        raise EnvironmentError(f"JWT key file not found at configured path: {e}")
    except PermissionError as e:
        raise EnvironmentError(f"Permission denied when trying to read JWT key file: {e}")
    except ValueError as e:
        raise EnvironmentError(f"Error loading JWT keys: {type(e).__name__} - {e}")
    # Key ID derived from the public key file name (for rotation)
    return private_key, public_key, public_path.stem


# --- Custom Exceptions ---
class TokenError(Exception):
    """Base class for token-related errors."""
    def __init__(self, message="Token error occurred", code="TOKEN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class TokenExpired(TokenError):
    """Raised when a token's expiration time has passed."""
    def __init__(self, message="Token has expired", code="TOKEN_EXPIRED"):
        super().__init__(message, code)


class TokenInvalid(TokenError):
    """Raised when a token is invalid (bad signature, wrong format, claims etc.)."""
    def __init__(self, message="Token is invalid", code="TOKEN_INVALID"):
        super().__init__(message, code)


# --- Token Creation ---
def _create_token(
    payload: Dict[str, Any],
    expires_delta: timedelta,
    token_type: Literal["access", "refresh"],
) -> str:
    private_key, _, key_id = _load_keys()
    to_encode = payload.copy()
    now = datetime.now(timezone.utc)

    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "nbf": now,
        "iss": jwt_settings.issuer,
        "aud": jwt_settings.audience,
        "typ": token_type,
    })

    try:
        return jwt.encode(to_encode, private_key, algorithm=jwt_settings.algorithm, headers={"kid": key_id})
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        _log.error(f"Error encoding JWT: {type(e).__name__} - {e}")
        raise RuntimeError("Failed to create token due to encoding error.") from e


def create_access_token(*, user_id: uuid.UUID, role: str) -> str:
    """Creates a new access token."""
    if not isinstance(user_id, uuid.UUID):
        raise TypeError("user_id must be a UUID.")
    return _create_token(
        payload={"sub": str(user_id), "role": role},
        expires_delta=timedelta(seconds=jwt_settings.access_ttl_seconds),
        token_type="access",
    )


def create_refresh_token(*, user_id: uuid.UUID, role: str, token_id: uuid.UUID) -> str:
    """Creates a new refresh token with a unique token ID (jti)."""
    if not isinstance(user_id, uuid.UUID) or not isinstance(token_id, uuid.UUID):
        raise TypeError("user_id and token_id must be UUIDs.")
    return _create_token(
        payload={"sub": str(user_id), "role": role, "jti": str(token_id)},
        expires_delta=timedelta(seconds=jwt_settings.refresh_ttl_seconds),
        token_type="refresh",
    )


# --- Token Decoding and Validation ---
def decode_and_validate(
    token: str,
    expected_type: Literal["access", "refresh"]
) -> Dict[str, Any]:
    """
    Decodes and validates a JWT token.

    Args:
        token: The JWT token string.
        expected_type: The expected token type ('access' or 'refresh').

    Returns:
        The decoded payload dictionary.

    Raises:
        TokenExpired: If the token has expired.
        TokenInvalid: If the token is invalid (bad signature, format, claims).
    """
    if not token:
        raise TokenInvalid("Token cannot be empty.")

    _, public_key, _ = _load_keys()
    try:
        payload = jwt.decode(
            token,
            public_key,
            algorithms=[jwt_settings.algorithm],
            audience=jwt_settings.audience,
            issuer=jwt_settings.issuer,
            leeway=timedelta(seconds=30),
            options={"require": ["exp", "iat", "nbf", "iss", "aud", "sub", "typ"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidAudienceError:
        raise TokenInvalid("Invalid audience.", code="TOKEN_INVALID_AUDIENCE")
    except jwt.InvalidIssuerError:
        raise TokenInvalid("Invalid issuer.", code="TOKEN_INVALID_ISSUER")
    except jwt.MissingRequiredClaimError as e:
        raise TokenInvalid(f"Missing required claim: {e}", code="TOKEN_MISSING_CLAIM")
    except jwt.InvalidSignatureError as e:
        raise TokenInvalid(f"Token signature verification failed: {e}", code="TOKEN_SIGNATURE_INVALID")
    except jwt.DecodeError as e:
        raise TokenInvalid(f"Token decoding failed: {e}", code="TOKEN_DECODE_ERROR")
    except jwt.InvalidTokenError as e:
        raise TokenInvalid(f"Token is invalid: {e}", code="TOKEN_GENERIC_INVALID")

    token_type = payload.get("typ")
    if token_type != expected_type:
        raise TokenInvalid(
            f"Invalid token type. Expected '{expected_type}', got '{token_type}'.", code="TOKEN_TYPE_MISMATCH"
        )

    if expected_type == "refresh":
        jti = payload.get("jti")
        if not jti:
            raise TokenInvalid("Refresh token missing 'jti' claim.", code="TOKEN_MISSING_JTI")
        try:
            uuid.UUID(jti)
        except ValueError:
            raise TokenInvalid("Invalid 'jti' format in refresh token.", code="TOKEN_INVALID_JTI")

    try:
        uuid.UUID(payload["sub"])
    except ValueError:
        raise TokenInvalid("Invalid 'sub' format in token.", code="TOKEN_INVALID_SUB")

    return payload
