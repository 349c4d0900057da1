"""
Tickets Application Services
============================

Application services for creating, looking up and administering tickets.

Following SOLID principles:
- Single Responsibility: the factory only creates, the service only reads
  and administers
- Dependency Inversion: depend on repository interfaces, not on storage
"""

import uuid
import json
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from config import ConversationState, Priority, TicketStatus
from core import (
    InvalidStateTransitionException,
    StorageException,
    TicketNotFoundException,
)
from intake.domain.catalog import get_request_type
from shared.infrastructure.logging import get_logger
from tickets.domain import Ticket, KnowledgeBaseEntry, TicketNumberGenerator
from tickets.application.dto import TicketStatsResponse

if TYPE_CHECKING:
    from intake.domain import Conversation

logger = get_logger(__name__)

MAX_TICKET_NUMBER_ATTEMPTS = 20


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by internal ID."""

    @abstractmethod
    async def get_by_ticket_number(self, ticket_number: str) -> Optional[Ticket]:
        """Get ticket by its BI- number."""

    @abstractmethod
    async def exists_by_ticket_number(self, ticket_number: str) -> bool:
        """Check if a ticket number is taken."""

    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        """Insert or update a ticket."""

    @abstractmethod
    async def list_open(self) -> List[Ticket]:
        """Tickets whose status is not Closed."""

    @abstractmethod
    async def list_all(self) -> List[Ticket]:
        """All tickets, newest first."""


class IKnowledgeBaseRepository(ABC):
    """Interface for knowledge base access (read-only for the intake flow)."""

    @abstractmethod
    async def list_all(self) -> List[KnowledgeBaseEntry]:
        """Entries in stored order."""

    @abstractmethod
    async def exists_by_title(self, title: str) -> bool:
        """Check if an entry with this title exists."""

    @abstractmethod
    async def add(self, entry: KnowledgeBaseEntry) -> KnowledgeBaseEntry:
        """Store a new entry (seeding only)."""


# ========== Application Services ==========

class TicketFactory:
    """
    Creates the ticket for a confirmed conversation.

    The conversation must still be in `confirmation` and classified; the
    caller moves it to `completed` afterwards, which is what prevents a
    second ticket for the same conversation.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        number_generator: TicketNumberGenerator
    ):
        self._ticket_repo = ticket_repository
        self._numbers = number_generator

    async def create(self, conversation: "Conversation") -> Ticket:
        """
        Build and persist a ticket from a conversation.

        Args:
            conversation: Conversation in `confirmation` state

        Returns:
            The stored Ticket

        Raises:
            InvalidStateTransitionException: Conversation not ready for a ticket
            StorageException: Ticket could not be stored
        """
        if conversation.state != ConversationState.CONFIRMATION or not conversation.is_classified:
            raise InvalidStateTransitionException(
                conversation.id, conversation.state, "create a ticket from"
            )

        ticket = Ticket(
            id=str(uuid.uuid4()),
            ticket_number=await self._allocate_ticket_number(),
            created_date=datetime.now(timezone.utc),
            requester_name=conversation.user_name,
            requester_id=conversation.user_id,
            request_type=get_request_type(conversation.request_type).name,
            summary=conversation.summary,
            impact=conversation.responses.get("impact"),
            priority=conversation.priority,
            difficulty=conversation.difficulty,
            links=conversation.responses.get("links") or "",
            status=TicketStatus.NEW,
            raw_conversation=json.dumps(conversation.to_snapshot(), ensure_ascii=False)
        )

        saved = await self._ticket_repo.save(ticket)

        logger.info(
            "Ticket created",
            extra={
                "conversation_id": conversation.id,
                "ticket_number": saved.ticket_number,
                "priority": saved.priority,
                "difficulty": saved.difficulty
            }
        )
        return saved

    async def _allocate_ticket_number(self) -> str:
        for _ in range(MAX_TICKET_NUMBER_ATTEMPTS):
            candidate = self._numbers.next()
            if not await self._ticket_repo.exists_by_ticket_number(candidate):
                return candidate
        raise StorageException(
            "Could not allocate a free ticket number",
            {"attempts": MAX_TICKET_NUMBER_ATTEMPTS}
        )


class TicketService:
    """
    Ticket lookup for requesters and administration for the BI team.
    """

    def __init__(self, ticket_repository: ITicketRepository):
        self._ticket_repo = ticket_repository

    async def get_by_ticket_number(self, ticket_number: str) -> Ticket:
        ticket = await self._ticket_repo.get_by_ticket_number(ticket_number)
        if ticket is None:
            raise TicketNotFoundException(ticket_number)
        return ticket

    async def list_tickets(self) -> List[Ticket]:
        return await self._ticket_repo.list_all()

    async def list_open_tickets(self) -> List[Ticket]:
        """Tickets not yet Closed, the candidates for duplicate detection."""
        return await self._ticket_repo.list_open()

    async def stats(self) -> TicketStatsResponse:
        """Dashboard counts over all tickets."""
        tickets = await self._ticket_repo.list_all()
        return TicketStatsResponse(
            total=len(tickets),
            new=sum(1 for t in tickets if t.status == TicketStatus.NEW),
            in_progress=sum(1 for t in tickets if t.status == TicketStatus.IN_PROGRESS),
            completed=sum(
                1 for t in tickets
                if t.status in (TicketStatus.COMPLETED, TicketStatus.CLOSED)
            ),
            high_priority=sum(
                1 for t in tickets if t.priority in (Priority.P0, Priority.P1)
            )
        )

    async def admin_update(
        self,
        ticket_id: str,
        status: Optional[str] = None,
        ticket_owner: Optional[str] = None,
        estimated_start_date: Optional[date] = None,
        estimated_end_date: Optional[date] = None
    ) -> Ticket:
        """
        Update the administrative fields of a ticket.

        Each field is applied independently; None leaves the stored value.

        Raises:
            TicketNotFoundException: Unknown ticket id
            ValidationException: Unknown status
        """
        ticket = await self._ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundException(ticket_id)

        ticket.apply_admin_update(
            status=status,
            ticket_owner=ticket_owner,
            estimated_start_date=estimated_start_date,
            estimated_end_date=estimated_end_date
        )
        saved = await self._ticket_repo.save(ticket)

        logger.info(
            "Ticket updated",
            extra={
                "ticket_id": ticket_id,
                "ticket_number": saved.ticket_number,
                "status": saved.status,
                "ticket_owner": saved.ticket_owner
            }
        )
        return saved
