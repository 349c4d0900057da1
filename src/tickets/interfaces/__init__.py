"""
Tickets Interfaces Layer
========================

Interface adapters (controllers) for the tickets module.

Contains:
- Controllers: FastAPI route handlers and storage dependencies
"""

from tickets.interfaces.controllers import (
    tickets_router,
    get_db_session,
    get_ticket_repository,
    get_knowledge_base_repository,
)

__all__ = [
    "tickets_router",
    "get_db_session",
    "get_ticket_repository",
    "get_knowledge_base_repository",
]
