"""
Intake Infrastructure Layer
===========================

Contains:
- Models: SQLAlchemy ORM model for conversations
- Repositories: SQLAlchemy and in-memory conversation stores
"""

from intake.infrastructure.models import ConversationModel
from intake.infrastructure.repositories import SQLAlchemyConversationRepository
from intake.infrastructure.memory import InMemoryConversationRepository

__all__ = [
    "ConversationModel",
    "SQLAlchemyConversationRepository",
    "InMemoryConversationRepository",
]
