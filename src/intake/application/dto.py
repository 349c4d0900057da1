"""
Intake Application DTOs
=======================

Pydantic models for the conversational API. JSON keys are camelCase
(`conversationId`, `currentStep`, ...) to match the chat widget.
"""

from typing import List, Literal, Optional

from pydantic import Field

from shared.api.schemas import CamelModel
from tickets.application.dto import TicketInfo, KnowledgeBaseSuggestion


# ========== Request DTOs ==========

class StartConversationRequest(CamelModel):
    """Open a new intake dialogue for a requester."""
    user_id: str = Field(..., min_length=1, description="Requester ID")
    user_name: str = Field(..., min_length=1, description="Requester display name")


class SelectTypeRequest(CamelModel):
    conversation_id: str = Field(..., min_length=1)
    request_type: str = Field(..., description="Catalog key, e.g. 'troubleshooting'")


class RespondRequest(CamelModel):
    """Answer to the current detail question."""
    conversation_id: str = Field(..., min_length=1)
    response: str = Field(..., description="Free-text answer")


class ImpactTimelineAnswers(CamelModel):
    """Answers to the five impact/timeline prompts."""
    impact: Optional[str] = None
    timeline: Optional[str] = None
    frequency: Optional[str] = None
    requirements: Optional[str] = None
    links: Optional[str] = None


class ImpactTimelineRequest(CamelModel):
    conversation_id: str = Field(..., min_length=1)
    responses: ImpactTimelineAnswers


class ConfirmRequest(CamelModel):
    conversation_id: str = Field(..., min_length=1)
    confirmed: bool


# ========== Response DTOs ==========

class RequestTypeOption(CamelModel):
    id: str
    name: str


class StartConversationResponse(CamelModel):
    conversation_id: str
    session_id: str
    message: str
    request_types: List[RequestTypeOption]
    current_step: Literal["request_type_selection"] = "request_type_selection"


class QuestionResponse(CamelModel):
    """Next detail question."""
    message: str
    question: str
    question_index: int
    total_questions: int
    current_step: Literal["collecting_details"] = "collecting_details"


class ImpactTimelinePromptResponse(CamelModel):
    """All detail questions answered; impact/timeline prompts follow."""
    message: str
    questions: List[str]
    current_step: Literal["impact_timeline"] = "impact_timeline"


class RequestSummary(CamelModel):
    request_type: str
    summary: str
    priority: str
    difficulty: str
    impact: Optional[str] = None
    timeline: Optional[str] = None
    frequency: Optional[str] = None
    requirements: Optional[str] = None
    links: Optional[str] = None


class ConfirmationResponse(CamelModel):
    """Classified request awaiting the requester's confirmation."""
    message: str
    summary: RequestSummary
    suggestions: List[KnowledgeBaseSuggestion] = Field(default_factory=list)
    current_step: Literal["confirmation"] = "confirmation"


class RestartResponse(CamelModel):
    message: str
    current_step: Literal["restart_option"] = "restart_option"


class CompletedResponse(CamelModel):
    message: str
    ticket: TicketInfo
    duplicates: int
    current_step: Literal["completed"] = "completed"
