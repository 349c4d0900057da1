"""
Tickets Infrastructure Repositories
===================================

SQLAlchemy implementations of the ticket and knowledge base repositories.

Driver errors are wrapped into StorageException so callers only see the
persistence gateway's error kind.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import TicketStatus
from core import StorageException
from tickets.application import ITicketRepository, IKnowledgeBaseRepository
from tickets.domain import Ticket, KnowledgeBaseEntry
from tickets.infrastructure.models import TicketModel, KnowledgeBaseModel


def _ticket_to_domain(model: TicketModel) -> Ticket:
    return Ticket(
        id=str(model.id),
        ticket_number=model.ticket_number,
        created_date=model.created_date,
        requester_name=model.requester_name,
        requester_id=model.requester_id,
        request_type=model.request_type,
        summary=model.summary,
        impact=model.impact,
        priority=model.priority,
        difficulty=model.difficulty,
        links=model.links,
        status=model.status,
        ticket_owner=model.ticket_owner,
        estimated_start_date=model.estimated_start_date,
        estimated_end_date=model.estimated_end_date,
        raw_conversation=model.raw_conversation
    )


def _entry_to_domain(model: KnowledgeBaseModel) -> KnowledgeBaseEntry:
    return KnowledgeBaseEntry(
        id=str(model.id),
        title=model.title,
        content=model.content,
        keywords=model.keywords,
        category=model.category,
        created_date=model.created_date
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, ticket_id: str) -> Optional[TicketModel]:
        try:
            UUID(ticket_id)
        except ValueError:
            return None

        stmt = select(TicketModel).where(TicketModel.id == ticket_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by internal ID."""
        try:
            model = await self._get_model(ticket_id)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to load ticket {ticket_id}: {e}")
        return _ticket_to_domain(model) if model else None

    async def get_by_ticket_number(self, ticket_number: str) -> Optional[Ticket]:
        """Get ticket by its BI- number."""
        stmt = select(TicketModel).where(TicketModel.ticket_number == ticket_number)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to load ticket {ticket_number}: {e}")
        model = result.scalar_one_or_none()
        return _ticket_to_domain(model) if model else None

    async def exists_by_ticket_number(self, ticket_number: str) -> bool:
        """Check if a ticket number is taken."""
        stmt = select(TicketModel.id).where(TicketModel.ticket_number == ticket_number)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to check ticket number {ticket_number}: {e}")
        return result.scalar_one_or_none() is not None

    async def save(self, ticket: Ticket) -> Ticket:
        """Insert a new ticket or update the stored one."""
        try:
            model = await self._get_model(ticket.id)
            if model is None:
                model = TicketModel(
                    id=ticket.id,
                    ticket_number=ticket.ticket_number,
                    created_date=ticket.created_date,
                    requester_name=ticket.requester_name,
                    requester_id=ticket.requester_id,
                    request_type=ticket.request_type,
                    summary=ticket.summary,
                    impact=ticket.impact,
                    priority=ticket.priority,
                    difficulty=ticket.difficulty,
                    links=ticket.links,
                    raw_conversation=ticket.raw_conversation
                )
                self._session.add(model)

            # Only administrative fields change after creation
            model.status = ticket.status
            model.ticket_owner = ticket.ticket_owner
            model.estimated_start_date = ticket.estimated_start_date
            model.estimated_end_date = ticket.estimated_end_date

            await self._session.flush()
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to save ticket {ticket.ticket_number}: {e}")

        return _ticket_to_domain(model)

    async def list_open(self) -> List[Ticket]:
        """Tickets whose status is not Closed."""
        stmt = (
            select(TicketModel)
            .where(TicketModel.status != TicketStatus.CLOSED)
            .order_by(TicketModel.created_date.desc())
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to list open tickets: {e}")
        return [_ticket_to_domain(m) for m in result.scalars().all()]

    async def list_all(self) -> List[Ticket]:
        """All tickets, newest first."""
        stmt = select(TicketModel).order_by(TicketModel.created_date.desc())
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to list tickets: {e}")
        return [_ticket_to_domain(m) for m in result.scalars().all()]


class SQLAlchemyKnowledgeBaseRepository(IKnowledgeBaseRepository):
    """SQLAlchemy implementation for knowledge base entries."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_all(self) -> List[KnowledgeBaseEntry]:
        """Entries in stored order."""
        stmt = select(KnowledgeBaseModel).order_by(KnowledgeBaseModel.position)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to list knowledge base: {e}")
        return [_entry_to_domain(m) for m in result.scalars().all()]

    async def exists_by_title(self, title: str) -> bool:
        stmt = select(KnowledgeBaseModel.id).where(KnowledgeBaseModel.title == title)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to check knowledge base entry: {e}")
        return result.scalar_one_or_none() is not None

    async def add(self, entry: KnowledgeBaseEntry) -> KnowledgeBaseEntry:
        model = KnowledgeBaseModel(
            title=entry.title,
            content=entry.content,
            keywords=entry.keywords,
            category=entry.category,
            created_date=entry.created_date
        )
        if entry.id:
            model.id = entry.id

        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise StorageException(f"Failed to add knowledge base entry '{entry.title}': {e}")

        return _entry_to_domain(model)
