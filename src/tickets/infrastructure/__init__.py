"""
Tickets Infrastructure Layer
============================

Infrastructure implementations for the tickets module.

Contains:
- Models: SQLAlchemy ORM models
- Repositories: SQLAlchemy and in-memory data access
- External: knowledge base YAML seed loader
"""

from tickets.infrastructure.models import TicketModel, KnowledgeBaseModel
from tickets.infrastructure.repositories import (
    SQLAlchemyTicketRepository,
    SQLAlchemyKnowledgeBaseRepository,
)
from tickets.infrastructure.memory import (
    InMemoryTicketRepository,
    InMemoryKnowledgeBaseRepository,
)
from tickets.infrastructure.external import (
    load_knowledge_base,
    seed_knowledge_base,
)

__all__ = [
    "TicketModel",
    "KnowledgeBaseModel",
    "SQLAlchemyTicketRepository",
    "SQLAlchemyKnowledgeBaseRepository",
    "InMemoryTicketRepository",
    "InMemoryKnowledgeBaseRepository",
    "load_knowledge_base",
    "seed_knowledge_base",
]
