"""
Intake Interfaces Layer
=======================

Contains:
- Controllers: FastAPI route handlers for the conversation flow
"""

from intake.interfaces.controllers import intake_router, get_conversation_service

__all__ = ["intake_router", "get_conversation_service"]
