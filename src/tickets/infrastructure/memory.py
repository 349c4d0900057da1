"""
In-Memory Ticket Repositories
=============================

Process-local implementations used with `storage_backend=memory` (local
runs and tests). Entities are copied on the way in and out, so a caller
mutating a loaded ticket changes nothing until it saves.
"""

import copy
import threading
from typing import Dict, List, Optional

from config import TicketStatus
from tickets.application import ITicketRepository, IKnowledgeBaseRepository
from tickets.domain import Ticket, KnowledgeBaseEntry


class InMemoryTicketRepository(ITicketRepository):
    """Dict-backed ticket store keyed by internal id."""

    def __init__(self):
        self._tickets: Dict[str, Ticket] = {}
        self._lock = threading.Lock()

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        with self._lock:
            ticket = self._tickets.get(ticket_id)
            return copy.deepcopy(ticket) if ticket else None

    async def get_by_ticket_number(self, ticket_number: str) -> Optional[Ticket]:
        with self._lock:
            for ticket in self._tickets.values():
                if ticket.ticket_number == ticket_number:
                    return copy.deepcopy(ticket)
        return None

    async def exists_by_ticket_number(self, ticket_number: str) -> bool:
        with self._lock:
            return any(t.ticket_number == ticket_number for t in self._tickets.values())

    async def save(self, ticket: Ticket) -> Ticket:
        with self._lock:
            self._tickets[ticket.id] = copy.deepcopy(ticket)
        return copy.deepcopy(ticket)

    async def list_open(self) -> List[Ticket]:
        return [t for t in await self.list_all() if t.status != TicketStatus.CLOSED]

    async def list_all(self) -> List[Ticket]:
        with self._lock:
            tickets = [copy.deepcopy(t) for t in self._tickets.values()]
        return sorted(tickets, key=lambda t: t.created_date, reverse=True)


class InMemoryKnowledgeBaseRepository(IKnowledgeBaseRepository):
    """List-backed knowledge base keeping insertion order."""

    def __init__(self):
        self._entries: List[KnowledgeBaseEntry] = []
        self._lock = threading.Lock()

    async def list_all(self) -> List[KnowledgeBaseEntry]:
        with self._lock:
            return [copy.deepcopy(e) for e in self._entries]

    async def exists_by_title(self, title: str) -> bool:
        with self._lock:
            return any(e.title == title for e in self._entries)

    async def add(self, entry: KnowledgeBaseEntry) -> KnowledgeBaseEntry:
        with self._lock:
            self._entries.append(copy.deepcopy(entry))
        return entry
