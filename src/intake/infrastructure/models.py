"""
Intake Infrastructure Models
============================

SQLAlchemy ORM model for intake conversations.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import JSON, String, DateTime, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database import Base
from config import ConversationState


class ConversationModel(Base):
    """
    Database model for the Conversation aggregate.

    Maps to the 'conversations' table.
    """
    __tablename__ = "conversations"

    # Primary key
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid4()))

    # Requester and UI session
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    session_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # State machine
    state: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ConversationState.REQUEST_TYPE_SELECTION
    )
    request_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    question_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    responses: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Classification
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    difficulty: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
