"""
Tickets Application Layer
=========================

Contains:
- Services: ticket factory, lookup and administration
- DTOs: Data transfer objects for API serialization
- Repository interfaces implemented by the infrastructure layer
"""

from tickets.application.dto import (
    AdminTicketUpdateRequest,
    TicketInfo,
    TicketStatusResponse,
    AdminTicketDTO,
    AdminUpdateResponse,
    TicketStatsResponse,
    KnowledgeBaseSuggestion,
)
from tickets.application.services import (
    TicketFactory,
    TicketService,
    ITicketRepository,
    IKnowledgeBaseRepository,
)

__all__ = [
    # DTOs
    "AdminTicketUpdateRequest",
    "TicketInfo",
    "TicketStatusResponse",
    "AdminTicketDTO",
    "AdminUpdateResponse",
    "TicketStatsResponse",
    "KnowledgeBaseSuggestion",
    # Services
    "TicketFactory",
    "TicketService",
    # Repository Interfaces
    "ITicketRepository",
    "IKnowledgeBaseRepository",
]
