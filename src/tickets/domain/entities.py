"""
Ticket Domain Entities
======================

Pure Python domain entities for confirmed requests and the static
knowledge base used for self-service suggestions.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from config import TicketStatus, VALID_STATUSES
from core import ValidationException


@dataclass
class Ticket:
    """
    Ticket entity created from a confirmed conversation.

    Requester-facing fields are fixed at creation. Only the administrative
    fields (status, owner, estimated dates) change afterwards, through
    `apply_admin_update`.
    """

    # Identity
    id: str
    ticket_number: str
    created_date: datetime

    # Requester
    requester_name: str
    requester_id: str

    # Request
    request_type: str
    summary: str
    impact: Optional[str]
    priority: str
    difficulty: str
    links: str = ""

    # Administration
    status: str = TicketStatus.NEW
    ticket_owner: Optional[str] = None
    estimated_start_date: Optional[date] = None
    estimated_end_date: Optional[date] = None

    # Collected data at confirmation time (JSON), kept for audit
    raw_conversation: str = "{}"

    @property
    def is_open(self) -> bool:
        """Open tickets take part in duplicate detection."""
        return self.status != TicketStatus.CLOSED

    @property
    def conversation_snapshot(self) -> Dict[str, Any]:
        return json.loads(self.raw_conversation)

    def apply_admin_update(
        self,
        status: Optional[str] = None,
        ticket_owner: Optional[str] = None,
        estimated_start_date: Optional[date] = None,
        estimated_end_date: Optional[date] = None,
    ) -> None:
        """Update each given field; fields passed as None are left unchanged."""
        if status is not None:
            if status not in VALID_STATUSES:
                raise ValidationException(
                    f"Invalid ticket status '{status}'",
                    {"status": status, "allowed": VALID_STATUSES}
                )
            self.status = status
        if ticket_owner is not None:
            self.ticket_owner = ticket_owner
        if estimated_start_date is not None:
            self.estimated_start_date = estimated_start_date
        if estimated_end_date is not None:
            self.estimated_end_date = estimated_end_date


@dataclass
class KnowledgeBaseEntry:
    """Reference article suggested when its keywords match a request."""
    title: str
    content: str
    keywords: str  # comma-separated terms
    category: str = "General"
    id: Optional[str] = None
    created_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
