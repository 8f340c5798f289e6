# disc_insights/middleware/auth.py
import logging
import uuid
from typing import Awaitable, Callable, Optional, Sequence, Set, Union

from fastapi import HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from disc_insights.auth.jwt import TokenError, TokenExpired, TokenInvalid, decode_and_validate
from disc_insights.auth.schemas import (
    ROLE_LEVELS,
    AuthenticatedUser,
    ErrorDetail,
    ErrorResponse,
    get_role_level,
)

_log = logging.getLogger(__name__)

# --- Error Definitions ---
AUTH_ERROR_DETAIL_MISSING = ErrorDetail(code="AUTH_001", message="Authentication credentials were not provided.")
AUTH_ERROR_DETAIL_EXPIRED = ErrorDetail(code="AUTH_002", message="Token has expired.")
AUTH_ERROR_DETAIL_FORBIDDEN = ErrorDetail(code="AUTH_003", message="Insufficient permissions for this resource.")
AUTH_ERROR_DETAIL_INTERNAL = ErrorDetail(code="AUTH_999", message="An internal error occurred during authentication.")

# auto_error=False returns None when the header is missing
bearer_scheme = HTTPBearer(auto_error=False, description="JWT Access Token for authentication.")


def _unauthorized(detail: ErrorDetail, description: Optional[str] = None) -> JSONResponse:
    header = "Bearer" if description is None else f"Bearer error=\"invalid_token\", error_description=\"{description}\""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ErrorResponse(detail=detail).model_dump(),
        headers={"WWW-Authenticate": header},
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    JWT authentication for every route except the excluded ones.

    - Extracts the Bearer token from the Authorization header.
    - Validates it as an access token.
    - Attaches AuthenticatedUser(id, role) to request.state.user.
    - Answers 401 when the token is missing, invalid or expired.

    Paths in `excluded_paths` match exactly; paths in `excluded_prefixes`
    match by prefix. OPTIONS requests always pass for CORS preflight.
    """
    def __init__(
        self,
        app,
        excluded_paths: Union[Sequence[str], Set[str], None] = None,
        excluded_prefixes: Sequence[str] = (),
    ):
        super().__init__(app)
        self.excluded_paths = set(excluded_paths) if excluded_paths else set()
        self.excluded_paths.update({"/docs", "/openapi.json", "/redoc"})
        self.excluded_prefixes = tuple(excluded_prefixes)
        _log.info(f"Auth Middleware initialized. Excluded paths: {sorted(self.excluded_paths)}")

    def _is_excluded(self, path: str) -> bool:
        return path in self.excluded_paths or (bool(self.excluded_prefixes) and path.startswith(self.excluded_prefixes))

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.user = None

        if self._is_excluded(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        credentials: Optional[HTTPAuthorizationCredentials] = await bearer_scheme(request)
        if not credentials:
            _log.warning(f"Auth failed: No token provided for path {request.url.path}")
            return _unauthorized(AUTH_ERROR_DETAIL_MISSING)

        try:
            payload = decode_and_validate(token=credentials.credentials, expected_type="access")
            role = payload.get("role")
            if not role:
                raise TokenInvalid("Token payload missing required fields.", code="TOKEN_MISSING_CLAIM")
            request.state.user = AuthenticatedUser(id=uuid.UUID(payload["sub"]), role=str(role))
        except TokenExpired as e:
            _log.warning(f"Auth failed: Token expired for path {request.url.path}.")
            return _unauthorized(AUTH_ERROR_DETAIL_EXPIRED, e.message)
        except TokenError as e:
            _log.warning(f"Auth failed for path {request.url.path}. Code: {e.code}, Msg: {e.message}")
            return _unauthorized(ErrorDetail(code=e.code, message=e.message), e.message)
        except EnvironmentError as e:
            _log.error(f"Auth failed: token keys unavailable: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(detail=AUTH_ERROR_DETAIL_INTERNAL).model_dump(),
            )

        _log.debug(f"Auth success: User {request.state.user.id} ({role}) accessed {request.url.path}")
        return await call_next(request)


def get_current_user(request: Request) -> AuthenticatedUser:
    """Dependency returning the user attached by AuthenticationMiddleware."""
    user: Optional[AuthenticatedUser] = getattr(request.state, "user", None)
    if not isinstance(user, AuthenticatedUser):
        _log.error(f"request.state.user not set on path {request.url.path}; is the auth middleware installed?")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorResponse(detail=AUTH_ERROR_DETAIL_MISSING).model_dump(),
        )
    return user


def require_role(min_role: str) -> Callable[[Request], Awaitable[AuthenticatedUser]]:
    """
    Factory for a dependency that checks the user's role level.

    Args:
        min_role: Minimum role name, a key of ROLE_LEVELS (e.g. "admin").

    Raises:
        HTTPException(403): If the user's role is insufficient.
        ValueError: If `min_role` is not a known role (at setup time).
    """
    required_level = get_role_level(min_role)
    if required_level == -1:
        raise ValueError(f"Invalid role in require_role: '{min_role}'. Must be one of {list(ROLE_LEVELS)}")

    async def _verify_role(request: Request) -> AuthenticatedUser:
        user = get_current_user(request)
        if get_role_level(user.role) < required_level:
            _log.warning(f"Forbidden: User {user.id} (role {user.role}) needs {min_role} for {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ErrorResponse(detail=AUTH_ERROR_DETAIL_FORBIDDEN).model_dump(),
            )
        return user

    return _verify_role
