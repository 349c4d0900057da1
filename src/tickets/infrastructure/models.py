"""
Tickets Infrastructure Models
=============================

SQLAlchemy ORM models for tickets and the knowledge base.
"""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import String, DateTime, Date, Text, Uuid, Integer, Identity
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database import Base
from config import TicketStatus


def _new_id() -> str:
    return str(uuid4())


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table.
    """
    __tablename__ = "tickets"

    # Primary key
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_new_id)

    # Human-facing identifier
    ticket_number: Mapped[str] = mapped_column(String(16), unique=True, index=True, nullable=False)
    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    # Requester
    requester_name: Mapped[str] = mapped_column(String(255), nullable=False)
    requester_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Request
    request_type: Mapped[str] = mapped_column(String(100), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(10), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    links: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Administration
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=TicketStatus.NEW, index=True)
    ticket_owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    estimated_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Audit
    raw_conversation: Mapped[str] = mapped_column(Text, nullable=False)


class KnowledgeBaseModel(Base):
    """
    Database model for KnowledgeBaseEntry.

    Maps to the 'knowledge_base' table.
    """
    __tablename__ = "knowledge_base"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_new_id)
    # Insertion sequence; defines the stored order of suggestions
    position: Mapped[int] = mapped_column(Integer, Identity(), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    keywords: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
