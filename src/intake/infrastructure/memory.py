"""
In-Memory Conversation Repository
=================================

Process-local conversation store for `storage_backend=memory`. Stores
copies, so only a completed `save` changes what later loads see.
"""

import threading
from typing import Dict, Optional

from intake.application import IConversationRepository
from intake.domain import Conversation


class InMemoryConversationRepository(IConversationRepository):
    """Dict-backed conversation store keyed by id."""

    def __init__(self):
        self._conversations: Dict[str, Conversation] = {}
        self._lock = threading.Lock()

    async def get_by_id(self, conversation_id: str) -> Optional[Conversation]:
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            return conversation.clone() if conversation else None

    async def get_for_update(self, conversation_id: str) -> Optional[Conversation]:
        # Serialization comes from the service's per-id lock
        return await self.get_by_id(conversation_id)

    async def save(self, conversation: Conversation) -> Conversation:
        with self._lock:
            self._conversations[conversation.id] = conversation.clone()
        return conversation

    def __len__(self) -> int:
        return len(self._conversations)
