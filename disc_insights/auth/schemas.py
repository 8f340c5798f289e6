# disc_insights/auth/schemas.py
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)  # Immutable user state
class AuthenticatedUser:
    id: uuid.UUID
    role: str  # "user" or "admin"

    @property
    def is_admin(self) -> bool:
        return get_role_level(self.role) >= ROLE_LEVELS["admin"]


class ErrorDetail(BaseModel):
    """Standard error response detail."""
    code: str = Field(..., description="Application-specific error code.")
    message: str = Field(..., description="User-friendly error message.")


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: ErrorDetail


# --- Role definitions ---
# Lower numbers are lower privilege.
ROLE_LEVELS: Dict[str, int] = {
    "user": 0,
    "admin": 99,
}


def get_role_level(role_name: Optional[str]) -> int:
    """
    Returns the numerical level of a role name.
    Returns -1 if the role name is None or not found.
    """
    if role_name is None:
        return -1
    return ROLE_LEVELS.get(role_name.lower(), -1)


# --- Endpoint Schemas ---

class UserRegisterRequest(BaseModel):
    email: str = Field(..., description="User's email address.", examples=["user@example.com"])
    password: str = Field(..., min_length=8, description="User's chosen password (min 8 characters).")
    full_name: str = Field(..., min_length=1, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    linkedin_url: Optional[str] = Field(None, description="Public LinkedIn profile URL, used to enrich the profile.")


class UserLoginRequest(BaseModel):
    email: str = Field(..., description="User's email address.", examples=["user@example.com"])
    password: str = Field(..., description="User's password.")


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT Access Token.")
    refresh_token: str = Field(..., description="JWT Refresh Token.")
    token_type: str = Field("bearer", description="Token type (always 'bearer').")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="The JWT Refresh Token to use.")


class PasswordForgotRequest(BaseModel):
    email: str = Field(..., description="Email address to send password reset instructions.", examples=["user@example.com"])


class PasswordResetRequest(BaseModel):
    reset_token: str = Field(..., description="The password reset token received via email.")
    new_password: str = Field(..., min_length=8, description="The new password for the user (min 8 characters).")


class SuccessResponse(BaseModel):
    """Generic success response for actions like registration or password reset."""
    message: str = Field("Operation successful.", description="Confirmation message.")
    code: str = Field("OK", description="Status code.")


class CurrentUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    role: str
    full_name: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    linkedin_url: Optional[str] = None
    headline: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
