"""
Intake Application Layer
========================

Contains:
- Services: the conversation state machine
- DTOs: Data transfer objects for API serialization
"""

from intake.application.dto import (
    StartConversationRequest,
    SelectTypeRequest,
    RespondRequest,
    ImpactTimelineAnswers,
    ImpactTimelineRequest,
    ConfirmRequest,
    RequestTypeOption,
    StartConversationResponse,
    QuestionResponse,
    ImpactTimelinePromptResponse,
    RequestSummary,
    ConfirmationResponse,
    RestartResponse,
    CompletedResponse,
)
from intake.application.services import (
    ConversationService,
    ConversationLockRegistry,
    IConversationRepository,
)

__all__ = [
    # DTOs
    "StartConversationRequest",
    "SelectTypeRequest",
    "RespondRequest",
    "ImpactTimelineAnswers",
    "ImpactTimelineRequest",
    "ConfirmRequest",
    "RequestTypeOption",
    "StartConversationResponse",
    "QuestionResponse",
    "ImpactTimelinePromptResponse",
    "RequestSummary",
    "ConfirmationResponse",
    "RestartResponse",
    "CompletedResponse",
    # Services
    "ConversationService",
    "ConversationLockRegistry",
    # Repository Interfaces
    "IConversationRepository",
]
