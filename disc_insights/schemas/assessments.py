import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: str
    title: str
    description: Optional[str] = None
    estimated_time_minutes: int
    question_count: int


class DiscQuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_number: int
    option_d: str
    option_i: str
    option_s: str
    option_c: str


class QuestionsResponse(BaseModel):
    assessment_type: str
    questions: List[Dict[str, Any]]


class AnswersRequest(BaseModel):
    """Question id -> answer: 'D'/'I'/'S'/'C' for DISC, 1-5 for behavior."""
    answers: Dict[int, Union[int, str]] = Field(default_factory=dict)
    time_stats: Optional[Dict[str, Any]] = Field(None, alias="timeStats")

    model_config = ConfigDict(populate_by_name=True)


class ResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    assessment_id: uuid.UUID
    status: str
    responses: Dict[str, Any]
    started_at: datetime
    completed_at: Optional[datetime] = None


class ResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    response_id: uuid.UUID
    user_id: uuid.UUID
    assessment_id: uuid.UUID
    assessment_type: Optional[str] = None
    results: Dict[str, Any]
    ai_analysis: Optional[Dict[str, Any]] = None
    pdf_url: Optional[str] = None
    created_at: datetime


class AnalysisResponse(BaseModel):
    result_id: uuid.UUID
    status: str
    analysis: Optional[Dict[str, Any]] = None


class CompletionRequest(BaseModel):
    prompt: Optional[str] = None
    system_message: Optional[str] = Field(None, alias="systemMessage")
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0)

    model_config = ConfigDict(populate_by_name=True)


class CompletionResponse(BaseModel):
    completion: str
    model: str
    status: str = "success"
    usage: Optional[Dict[str, Any]] = None


class AvailabilityResponse(BaseModel):
    available: bool
    assistant_available: bool = Field(..., alias="assistantAvailable")
    message: str
    timestamp: str

    model_config = ConfigDict(populate_by_name=True)
