"""
Tickets Controllers (API Routes)
================================

FastAPI routes for ticket lookup and administration, plus the storage
dependencies shared with the intake routes.

Controllers are thin - they delegate to application services.
"""

from typing import AsyncGenerator, List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database import get_session_context
from tickets.application import (
    TicketService,
    ITicketRepository,
    IKnowledgeBaseRepository,
    AdminTicketUpdateRequest,
    TicketStatusResponse,
    AdminTicketDTO,
    AdminUpdateResponse,
    TicketStatsResponse,
)
from tickets.infrastructure import (
    SQLAlchemyTicketRepository,
    SQLAlchemyKnowledgeBaseRepository,
)
from shared.infrastructure.logging import get_context_logger

router = APIRouter(prefix="/api", tags=["Tickets"])


# ========== Example payloads for Swagger ==========

TICKET_STATUS_EXAMPLE = {
    "ticketNumber": "BI-482913",
    "status": "In Progress",
    "priority": "P1",
    "difficulty": "Medium",
    "requestType": "Reporting/Dashboard",
    "summary": "Reporting/Dashboard request: No description provided. Impact: Blocks Monday review. "
               "Timeline: Needed soon. Requirements: None specified.",
    "createdDate": "2024-05-02T09:14:00Z",
    "estimatedStartDate": "2024-05-06",
    "estimatedEndDate": "2024-05-10",
    "ticketOwner": "Dana"
}

TICKET_STATS_EXAMPLE = {
    "total": 12,
    "new": 4,
    "inProgress": 5,
    "completed": 3,
    "highPriority": 6
}


# ========== Dependencies ==========

async def get_db_session(request: Request) -> AsyncGenerator[Optional[AsyncSession], None]:
    """Request-scoped session for the SQL backend, None for the memory backend."""
    if request.app.state.settings.storage_backend != "sql":
        yield None
        return
    async with get_session_context() as session:
        yield session


def get_ticket_repository(
    request: Request,
    session: Optional[AsyncSession] = Depends(get_db_session)
) -> ITicketRepository:
    if session is None:
        return request.app.state.ticket_repository
    return SQLAlchemyTicketRepository(session)


def get_knowledge_base_repository(
    request: Request,
    session: Optional[AsyncSession] = Depends(get_db_session)
) -> IKnowledgeBaseRepository:
    if session is None:
        return request.app.state.knowledge_base_repository
    return SQLAlchemyKnowledgeBaseRepository(session)


def get_ticket_service(
    ticket_repository: ITicketRepository = Depends(get_ticket_repository)
) -> TicketService:
    return TicketService(ticket_repository)


# ========== Route Handlers ==========

@router.get(
    "/ticket/{ticket_number}",
    response_model=TicketStatusResponse,
    summary="Look up a ticket by number",
    responses={
        200: {"content": {"application/json": {"example": TICKET_STATUS_EXAMPLE}}},
        404: {"description": "Ticket not found"}
    }
)
async def get_ticket(
    ticket_number: str,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.get_by_ticket_number(ticket_number)
    return TicketStatusResponse.from_domain(ticket)


@router.get(
    "/admin/tickets",
    response_model=List[AdminTicketDTO],
    summary="List all tickets (newest first)"
)
async def list_tickets(service: TicketService = Depends(get_ticket_service)):
    tickets = await service.list_tickets()
    return [AdminTicketDTO.from_domain(t) for t in tickets]


@router.get(
    "/admin/stats",
    response_model=TicketStatsResponse,
    summary="Ticket counts for the admin dashboard",
    responses={200: {"content": {"application/json": {"example": TICKET_STATS_EXAMPLE}}}}
)
async def ticket_stats(service: TicketService = Depends(get_ticket_service)):
    return await service.stats()


@router.put(
    "/admin/ticket/{ticket_id}",
    response_model=AdminUpdateResponse,
    summary="Update status, owner or estimated dates of a ticket",
    description="""
    Each field is applied independently. Omitted or null fields keep their
    stored value; they are never cleared by this endpoint.

    **Statuses**: `New`, `In Progress`, `Completed`, `Closed`
    """,
    responses={404: {"description": "Ticket not found"}}
)
async def update_ticket(
    request: Request,
    ticket_id: str,
    payload: AdminTicketUpdateRequest,
    service: TicketService = Depends(get_ticket_service)
):
    logger = get_context_logger(__name__, getattr(request.state, "correlation_id", None))
    logger.info(
        "Admin ticket update",
        extra={"ticket_id": ticket_id, "fields": sorted(payload.model_dump(exclude_none=True))}
    )

    ticket = await service.admin_update(
        ticket_id,
        status=payload.status,
        ticket_owner=payload.ticket_owner,
        estimated_start_date=payload.estimated_start_date,
        estimated_end_date=payload.estimated_end_date
    )
    return AdminUpdateResponse(
        message="Ticket updated successfully",
        ticket=AdminTicketDTO.from_domain(ticket)
    )


# Export router for inclusion in main app
tickets_router = router
