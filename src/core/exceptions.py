"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class StorageException(RepositoryException):
    """Persistence gateway failure. Not retried by the core."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConversationNotFoundException(ResourceNotFoundException):
    """Unknown conversation id."""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", conversation_id)


class TicketNotFoundException(ResourceNotFoundException):
    """Unknown ticket number or ticket id."""

    def __init__(self, ticket_ref: str):
        super().__init__("Ticket", ticket_ref)


class InvalidStateTransitionException(DomainException):
    """Event issued while the conversation is in the wrong state."""

    def __init__(
        self,
        conversation_id: str,
        current_state: str,
        operation: str,
        details: Optional[dict] = None
    ):
        self.conversation_id = conversation_id
        self.current_state = current_state
        self.operation = operation
        super().__init__(
            f"Cannot {operation} conversation {conversation_id} in state '{current_state}'",
            details or {
                "conversation_id": conversation_id,
                "current_state": current_state,
                "operation": operation
            }
        )


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""
