import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class AdminUserOut(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    full_name: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminUserList(BaseModel):
    total: int
    items: List[AdminUserOut]


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)
    linkedin_url: Optional[str] = Field(None, max_length=512)


class RoleUpdateRequest(BaseModel):
    role: Literal["user", "admin"]


class AdminReportOut(BaseModel):
    result_id: uuid.UUID
    user_id: uuid.UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    results: Dict[str, Any]
    has_analysis: bool = False
    created_at: datetime


class RegenerationSummary(BaseModel):
    total: int
    updated: int
    failed: int
