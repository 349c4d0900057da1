"""
Tickets Domain Layer
====================

Contains:
- Entities: Ticket, KnowledgeBaseEntry
- Value Objects: ticket number format and generator

Pure Python business logic, no infrastructure dependencies.
"""

from tickets.domain.entities import Ticket, KnowledgeBaseEntry
from tickets.domain.value_objects import (
    TicketNumberGenerator,
    TICKET_NUMBER_PATTERN,
    TICKET_NUMBER_PREFIX,
    format_ticket_number,
    is_ticket_number,
)

__all__ = [
    # Entities
    "Ticket",
    "KnowledgeBaseEntry",
    # Value Objects
    "TicketNumberGenerator",
    "TICKET_NUMBER_PATTERN",
    "TICKET_NUMBER_PREFIX",
    "format_ticket_number",
    "is_ticket_number",
]
