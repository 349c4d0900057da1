"""
Intake Application Services
===========================

The conversation state machine.

Each operation takes the conversation id, serializes on a per-id lock,
loads the conversation, checks its state, applies the event to a copy and
only then writes the copy back. A failed write therefore leaves the stored
conversation as it was, and the requester can retry the same step.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Mapping, Optional, Union

from config import ConversationState
from core import ConversationNotFoundException, ValidationException
from intake.domain import (
    Conversation,
    IMPACT_TIMELINE_FIELDS,
    IMPACT_TIMELINE_QUESTIONS,
    classify,
    detect_duplicates,
    get_request_type,
    list_request_types,
    suggest_knowledge_base,
)
from intake.application.dto import (
    StartConversationResponse,
    RequestTypeOption,
    QuestionResponse,
    ImpactTimelinePromptResponse,
    RequestSummary,
    ConfirmationResponse,
    RestartResponse,
    CompletedResponse,
)
from shared.infrastructure.logging import get_logger, log_latency
from tickets.application import (
    ITicketRepository,
    IKnowledgeBaseRepository,
    TicketFactory,
    TicketInfo,
    KnowledgeBaseSuggestion,
)

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IConversationRepository(ABC):
    """Interface for conversation data access."""

    @abstractmethod
    async def get_by_id(self, conversation_id: str) -> Optional[Conversation]:
        """Get conversation by ID."""

    @abstractmethod
    async def get_for_update(self, conversation_id: str) -> Optional[Conversation]:
        """Get conversation by ID, locking it for the current transaction."""

    @abstractmethod
    async def save(self, conversation: Conversation) -> Conversation:
        """Insert or update a conversation."""


# ========== Concurrency ==========

class ConversationLockRegistry:
    """
    One asyncio.Lock per conversation id.

    Shared by every request in the process so that at most one transition
    per conversation is in flight. A lock exists only while some request
    holds or waits for it.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(conversation_id, asyncio.Lock())
        self._holders[conversation_id] = self._holders.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[conversation_id] -= 1
            if not self._holders[conversation_id]:
                del self._holders[conversation_id]
                del self._locks[conversation_id]

    def __len__(self) -> int:
        return len(self._locks)


# ========== Application Services ==========

class ConversationService:
    """
    Drives intake conversations from type selection to ticket creation.

    Coordinates the Conversation aggregate, the classification engine, the
    ticket factory and the repositories.
    """

    def __init__(
        self,
        conversation_repository: IConversationRepository,
        ticket_repository: ITicketRepository,
        knowledge_base_repository: IKnowledgeBaseRepository,
        ticket_factory: TicketFactory,
        locks: ConversationLockRegistry
    ):
        self._conversations = conversation_repository
        self._tickets = ticket_repository
        self._knowledge_base = knowledge_base_repository
        self._ticket_factory = ticket_factory
        self._locks = locks

    async def start(self, user_id: str, user_name: str) -> StartConversationResponse:
        """
        Open a conversation in `request_type_selection`.

        Returns:
            Greeting and the request types to choose from
        """
        conversation = Conversation.start(user_id, user_name)
        await self._conversations.save(conversation)
        self._log_transition(conversation, ConversationState.INITIAL)

        return StartConversationResponse(
            conversation_id=conversation.id,
            session_id=conversation.session_id,
            message=(
                f"Hi {user_name}! I'm your BI Triage Agent. I'm here to help you submit "
                "a well-structured BI request. Let's start by selecting the type of "
                "request you need help with:"
            ),
            request_types=[RequestTypeOption(**rt) for rt in list_request_types()]
        )

    async def select_type(self, conversation_id: str, request_type: str) -> QuestionResponse:
        """
        Choose the request type and ask its first question.

        Raises:
            ConversationNotFoundException: Unknown id
            InvalidStateTransitionException: Not in request_type_selection
            ValidationException: Key not in the request catalog
        """
        async with self._locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            conversation.require_state(
                ConversationState.REQUEST_TYPE_SELECTION, "select a request type for"
            )
            selected = get_request_type(request_type)

            previous_state = conversation.state
            conversation.select_type(selected)
            await self._conversations.save(conversation)
            self._log_transition(conversation, previous_state)

        return QuestionResponse(
            message=(
                f"Great! You've selected {selected.name}. Let me ask you a few questions "
                "to better understand your needs."
            ),
            question=selected.question(0),
            question_index=0,
            total_questions=selected.total_questions
        )

    async def respond(
        self,
        conversation_id: str,
        answer: str
    ) -> Union[QuestionResponse, ImpactTimelinePromptResponse]:
        """
        Record the answer to the current detail question.

        Returns:
            The next question, or the impact/timeline prompts once every
            detail question is answered

        Raises:
            ConversationNotFoundException: Unknown id
            InvalidStateTransitionException: Not in collecting_details
            ValidationException: Empty answer
        """
        async with self._locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            conversation.require_state(ConversationState.COLLECTING_DETAILS, "respond to")
            if not answer or not answer.strip():
                raise ValidationException(
                    "An answer is required",
                    {"question_index": conversation.question_index}
                )

            request_type = get_request_type(conversation.request_type)
            previous_state = conversation.state
            more_questions = conversation.record_answer(answer, request_type.total_questions)
            await self._conversations.save(conversation)
            self._log_transition(conversation, previous_state)

        if more_questions:
            return QuestionResponse(
                message="Thank you for that information!",
                question=request_type.question(conversation.question_index),
                question_index=conversation.question_index,
                total_questions=request_type.total_questions
            )

        return ImpactTimelinePromptResponse(
            message="Perfect! Now I need to understand the business impact and timeline.",
            questions=list(IMPACT_TIMELINE_QUESTIONS)
        )

    async def submit_impact_timeline(
        self,
        conversation_id: str,
        answers: Mapping[str, Optional[str]]
    ) -> ConfirmationResponse:
        """
        Record impact/timeline answers and classify the request.

        Every answer is optional. Summary, priority and difficulty are
        computed here, once.

        Raises:
            ConversationNotFoundException: Unknown id
            InvalidStateTransitionException: Not in impact_timeline
        """
        async with self._locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            conversation.require_state(
                ConversationState.IMPACT_TIMELINE, "submit impact and timeline for"
            )
            request_type = get_request_type(conversation.request_type)
            previous_state = conversation.state
            conversation.record_impact_timeline(answers)

            with log_latency(logger, "classification", conversation_id=conversation_id):
                result = classify(request_type.name, conversation.responses)
            conversation.apply_classification(result)

            await self._conversations.save(conversation)
            self._log_transition(conversation, previous_state)

        entries = await self._knowledge_base.list_all()
        suggestions = suggest_knowledge_base(conversation.summary, entries)

        return ConfirmationResponse(
            message=(
                "Thank you! I've analyzed your request and prepared a summary. "
                "Please review and confirm:"
            ),
            summary=RequestSummary(
                request_type=request_type.name,
                summary=conversation.summary,
                priority=conversation.priority,
                difficulty=conversation.difficulty,
                **{slot: conversation.responses.get(slot) for slot in IMPACT_TIMELINE_FIELDS}
            ),
            suggestions=[KnowledgeBaseSuggestion.from_domain(e) for e in suggestions]
        )

    async def confirm(
        self,
        conversation_id: str,
        accepted: bool
    ) -> Union[RestartResponse, CompletedResponse]:
        """
        Accept or reject the classified request.

        Rejection ends the conversation without a ticket. Acceptance creates
        exactly one ticket; a replayed confirmation fails because the
        conversation is no longer in `confirmation`.

        Raises:
            ConversationNotFoundException: Unknown id
            InvalidStateTransitionException: Not in confirmation
            StorageException: Ticket or conversation could not be stored
        """
        async with self._locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            previous_state = conversation.state

            if not accepted:
                conversation.reject()
                await self._conversations.save(conversation)
                self._log_transition(conversation, previous_state)
                return RestartResponse(
                    message=(
                        "No problem! You can restart the conversation or make changes. "
                        "What would you like to do?"
                    )
                )

            conversation.require_state(ConversationState.CONFIRMATION, "confirm")
            open_tickets = await self._tickets.list_open()
            duplicates = detect_duplicates(conversation.summary, open_tickets)

            ticket = await self._ticket_factory.create(conversation)
            conversation.complete()
            await self._conversations.save(conversation)
            self._log_transition(conversation, previous_state)

        logger.info(
            "Duplicate check finished",
            extra={
                "conversation_id": conversation_id,
                "ticket_number": ticket.ticket_number,
                "duplicates": len(duplicates)
            }
        )

        message = (
            "Perfect! Your ticket has been created successfully.\n\n"
            f"**Ticket Number:** {ticket.ticket_number}\n"
            f"**Status:** {ticket.status}\n"
            f"**Priority:** {ticket.priority}\n"
            f"**Estimated Difficulty:** {ticket.difficulty}\n\n"
            "Your request has been submitted to the BI team. You can check the status "
            f"anytime by asking me about ticket {ticket.ticket_number}."
        )
        if duplicates:
            message += (
                f"\n\n⚠️ **Note:** I found {len(duplicates)} similar ticket(s) that might be "
                "related to your request. The BI team will review these for potential "
                "consolidation."
            )

        return CompletedResponse(
            message=message,
            ticket=TicketInfo.from_domain(ticket),
            duplicates=len(duplicates)
        )

    async def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = await self._conversations.get_by_id(conversation_id)
        if conversation is None:
            raise ConversationNotFoundException(conversation_id)
        return conversation

    async def _load(self, conversation_id: str) -> Conversation:
        """Working copy of the stored conversation."""
        conversation = await self._conversations.get_for_update(conversation_id)
        if conversation is None:
            raise ConversationNotFoundException(conversation_id)
        return conversation.clone()

    def _log_transition(self, conversation: Conversation, from_state: str) -> None:
        logger.info(
            "Conversation advanced",
            extra={
                "conversation_id": conversation.id,
                "from_state": from_state,
                "to_state": conversation.state,
                "request_type": conversation.request_type,
                "question_index": conversation.question_index
            }
        )
