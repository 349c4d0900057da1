"""
Intake Infrastructure Repositories
==================================

SQLAlchemy implementation of the conversation repository.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core import StorageException
from intake.application import IConversationRepository
from intake.domain import Conversation
from intake.infrastructure.models import ConversationModel


def _to_domain(model: ConversationModel) -> Conversation:
    return Conversation(
        id=str(model.id),
        user_id=model.user_id,
        session_id=model.session_id,
        user_name=model.user_name,
        state=model.state,
        request_type=model.request_type,
        question_index=model.question_index,
        responses=dict(model.responses or {}),
        summary=model.summary,
        priority=model.priority,
        difficulty=model.difficulty,
        created_at=model.created_at,
        updated_at=model.updated_at
    )


class SQLAlchemyConversationRepository(IConversationRepository):
    """
    SQLAlchemy implementation of conversation repository.

    `get_for_update` takes a row lock, so concurrent transitions on the same
    conversation from different workers are serialized by the database.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, conversation_id: str, for_update: bool = False) -> Optional[ConversationModel]:
        try:
            UUID(conversation_id)
        except ValueError:
            return None

        stmt = select(ConversationModel).where(ConversationModel.id == conversation_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, conversation_id: str) -> Optional[Conversation]:
        """Get conversation by ID."""
        try:
            model = await self._get_model(conversation_id)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to load conversation {conversation_id}: {e}")
        return _to_domain(model) if model else None

    async def get_for_update(self, conversation_id: str) -> Optional[Conversation]:
        """Get conversation by ID with a row lock held until commit."""
        try:
            model = await self._get_model(conversation_id, for_update=True)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to load conversation {conversation_id}: {e}")
        return _to_domain(model) if model else None

    async def save(self, conversation: Conversation) -> Conversation:
        """Insert or update a conversation."""
        try:
            model = await self._get_model(conversation.id)
            if model is None:
                model = ConversationModel(
                    id=conversation.id,
                    user_id=conversation.user_id,
                    user_name=conversation.user_name,
                    session_id=conversation.session_id,
                    created_at=conversation.created_at
                )
                self._session.add(model)

            model.state = conversation.state
            model.request_type = conversation.request_type
            model.question_index = conversation.question_index
            model.responses = dict(conversation.responses)
            model.summary = conversation.summary
            model.priority = conversation.priority
            model.difficulty = conversation.difficulty
            model.updated_at = conversation.updated_at

            await self._session.flush()
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to save conversation {conversation.id}: {e}")

        return conversation
