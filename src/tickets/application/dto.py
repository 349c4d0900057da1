"""
Tickets Application DTOs
========================

Pydantic models for ticket lookup and the administrative API.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field

from shared.api.schemas import CamelModel
from tickets.domain import Ticket, KnowledgeBaseEntry


# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal["New", "In Progress", "Completed", "Closed"]


# ========== Request DTOs ==========

class AdminTicketUpdateRequest(CamelModel):
    """
    Administrative update. Omitted (or null) fields keep their stored value.
    """
    status: Optional[TicketStatusStr] = None
    ticket_owner: Optional[str] = Field(None, min_length=1)
    estimated_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None


# ========== Response DTOs ==========

class TicketInfo(CamelModel):
    """Ticket fields returned to the requester on creation."""
    ticket_number: str
    status: str
    priority: str
    difficulty: str

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketInfo":
        return cls(
            ticket_number=ticket.ticket_number,
            status=ticket.status,
            priority=ticket.priority,
            difficulty=ticket.difficulty
        )


class TicketStatusResponse(CamelModel):
    """Public ticket fields for lookup by ticket number."""
    ticket_number: str
    status: str
    priority: str
    difficulty: str
    request_type: str
    summary: str
    created_date: datetime
    estimated_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    ticket_owner: Optional[str] = None

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketStatusResponse":
        return cls(
            ticket_number=ticket.ticket_number,
            status=ticket.status,
            priority=ticket.priority,
            difficulty=ticket.difficulty,
            request_type=ticket.request_type,
            summary=ticket.summary,
            created_date=ticket.created_date,
            estimated_start_date=ticket.estimated_start_date,
            estimated_end_date=ticket.estimated_end_date,
            ticket_owner=ticket.ticket_owner
        )


class AdminTicketDTO(CamelModel):
    """Full ticket record for the admin table."""
    id: str
    ticket_number: str
    created_date: datetime
    requester_name: str
    requester_id: str
    request_type: str
    summary: str
    impact: Optional[str] = None
    priority: str
    difficulty: str
    status: str
    ticket_owner: Optional[str] = None
    estimated_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None
    links: str = ""
    raw_conversation: str

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "AdminTicketDTO":
        return cls(
            id=ticket.id,
            ticket_number=ticket.ticket_number,
            created_date=ticket.created_date,
            requester_name=ticket.requester_name,
            requester_id=ticket.requester_id,
            request_type=ticket.request_type,
            summary=ticket.summary,
            impact=ticket.impact,
            priority=ticket.priority,
            difficulty=ticket.difficulty,
            status=ticket.status,
            ticket_owner=ticket.ticket_owner,
            estimated_start_date=ticket.estimated_start_date,
            estimated_end_date=ticket.estimated_end_date,
            links=ticket.links,
            raw_conversation=ticket.raw_conversation
        )


class AdminUpdateResponse(CamelModel):
    message: str
    ticket: AdminTicketDTO


class TicketStatsResponse(CamelModel):
    """Counts shown on the admin dashboard."""
    total: int
    new: int
    in_progress: int
    completed: int  # Completed or Closed
    high_priority: int  # P0 or P1


class KnowledgeBaseSuggestion(CamelModel):
    title: str
    content: str
    category: str

    @classmethod
    def from_domain(cls, entry: KnowledgeBaseEntry) -> "KnowledgeBaseSuggestion":
        return cls(title=entry.title, content=entry.content, category=entry.category)
