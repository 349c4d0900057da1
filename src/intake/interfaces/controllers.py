"""
Intake Controllers (API Routes)
===============================

FastAPI routes for the conversational intake flow:

    start -> select-type -> respond (xN) -> impact-timeline -> confirm

Controllers are thin - they delegate to ConversationService.
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from intake.application import (
    ConversationService,
    IConversationRepository,
    StartConversationRequest,
    SelectTypeRequest,
    RespondRequest,
    ImpactTimelineRequest,
    ConfirmRequest,
    StartConversationResponse,
    QuestionResponse,
    ImpactTimelinePromptResponse,
    ConfirmationResponse,
    RestartResponse,
    CompletedResponse,
)
from intake.infrastructure import SQLAlchemyConversationRepository
from tickets.application import ITicketRepository, IKnowledgeBaseRepository, TicketFactory
from tickets.interfaces import (
    get_db_session,
    get_ticket_repository,
    get_knowledge_base_repository,
)
from shared.infrastructure.logging import get_context_logger

router = APIRouter(prefix="/api/conversation", tags=["Intake"])


# ========== Example payloads for Swagger ==========

START_EXAMPLE = {
    "conversationId": "5b0c2a3e-8f0f-4b5e-9d0a-0c7d1f0e9a11",
    "sessionId": "0f9b3c52-1f43-4d0c-8a8f-6a2f3b9d7c20",
    "message": "Hi Dana! I'm your BI Triage Agent. I'm here to help you submit a "
               "well-structured BI request. Let's start by selecting the type of "
               "request you need help with:",
    "requestTypes": [
        {"id": "troubleshooting", "name": "Troubleshooting"},
        {"id": "reporting", "name": "Reporting/Dashboard"}
    ],
    "currentStep": "request_type_selection"
}

CONFIRMATION_EXAMPLE = {
    "message": "Thank you! I've analyzed your request and prepared a summary. "
               "Please review and confirm:",
    "summary": {
        "requestType": "Reporting/Dashboard",
        "summary": "Reporting/Dashboard request: No description provided. Impact: Blocks "
                   "Monday review. Timeline: Needed soon. Requirements: None specified.",
        "priority": "P1",
        "difficulty": "Medium",
        "impact": "Blocks Monday review",
        "timeline": "Needed soon"
    },
    "suggestions": [],
    "currentStep": "confirmation"
}


# ========== Dependencies ==========

def get_conversation_repository(
    request: Request,
    session: Optional[AsyncSession] = Depends(get_db_session)
) -> IConversationRepository:
    if session is None:
        return request.app.state.conversation_repository
    return SQLAlchemyConversationRepository(session)


def get_conversation_service(
    request: Request,
    conversation_repository: IConversationRepository = Depends(get_conversation_repository),
    ticket_repository: ITicketRepository = Depends(get_ticket_repository),
    knowledge_base_repository: IKnowledgeBaseRepository = Depends(get_knowledge_base_repository)
) -> ConversationService:
    """Build the service on the request's storage (one session shared by all repos)."""
    state = request.app.state
    return ConversationService(
        conversation_repository=conversation_repository,
        ticket_repository=ticket_repository,
        knowledge_base_repository=knowledge_base_repository,
        ticket_factory=TicketFactory(ticket_repository, state.ticket_number_generator),
        locks=state.conversation_locks
    )


# ========== Route Handlers ==========

@router.post(
    "/start",
    response_model=StartConversationResponse,
    summary="Open an intake conversation",
    responses={200: {"content": {"application/json": {"example": START_EXAMPLE}}}}
)
async def start_conversation(
    request: Request,
    payload: StartConversationRequest,
    service: ConversationService = Depends(get_conversation_service)
):
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    logger.info("Starting conversation", extra={"user_id": payload.user_id})
    return await service.start(payload.user_id, payload.user_name)


@router.post(
    "/select-type",
    response_model=QuestionResponse,
    summary="Choose the request type",
    description="""
    Valid from `request_type_selection` only. Returns the first detail
    question of the chosen type.

    **Types**: `troubleshooting`, `reporting`, `automation`, `access`, `tools`
    """,
    responses={
        404: {"description": "Conversation not found"},
        409: {"description": "Conversation is not selecting a type"},
        422: {"description": "Unknown request type"}
    }
)
async def select_type(
    payload: SelectTypeRequest,
    service: ConversationService = Depends(get_conversation_service)
):
    return await service.select_type(payload.conversation_id, payload.request_type)


@router.post(
    "/respond",
    response_model=Union[QuestionResponse, ImpactTimelinePromptResponse],
    summary="Answer the current detail question",
    responses={
        404: {"description": "Conversation not found"},
        409: {"description": "Conversation is not collecting details"}
    }
)
async def respond(
    payload: RespondRequest,
    service: ConversationService = Depends(get_conversation_service)
):
    return await service.respond(payload.conversation_id, payload.response)


@router.post(
    "/impact-timeline",
    response_model=ConfirmationResponse,
    summary="Submit impact and timeline answers",
    description="""
    All five answers are optional; blank ones show as placeholders in the
    summary. The request is summarized and rated for priority and
    difficulty here; related knowledge base entries are returned as
    `suggestions`.
    """,
    responses={
        200: {"content": {"application/json": {"example": CONFIRMATION_EXAMPLE}}},
        404: {"description": "Conversation not found"},
        409: {"description": "Conversation is not at the impact/timeline step"}
    }
)
async def submit_impact_timeline(
    payload: ImpactTimelineRequest,
    service: ConversationService = Depends(get_conversation_service)
):
    return await service.submit_impact_timeline(
        payload.conversation_id,
        payload.responses.model_dump()
    )


@router.post(
    "/confirm",
    response_model=Union[CompletedResponse, RestartResponse],
    summary="Confirm or reject the summarized request",
    description="""
    `confirmed: true` creates exactly one ticket and completes the
    conversation. `confirmed: false` moves it to `restart_option`.
    """,
    responses={
        404: {"description": "Conversation not found"},
        409: {"description": "Conversation is not awaiting confirmation"},
        503: {"description": "Ticket could not be stored"}
    }
)
async def confirm(
    request: Request,
    payload: ConfirmRequest,
    service: ConversationService = Depends(get_conversation_service)
):
    result = await service.confirm(payload.conversation_id, payload.confirmed)

    if isinstance(result, CompletedResponse):
        logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
        logger.info(
            "Ticket created",
            extra={
                "conversation_id": payload.conversation_id,
                "ticket_number": result.ticket.ticket_number
            }
        )
    return result


# Export router for inclusion in main app
intake_router = router
