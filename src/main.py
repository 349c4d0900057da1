"""
BI Triage Agent - Main Application
==================================

Conversational intake service for Business Intelligence requests.

Modules:
- Intake: Guided conversation that classifies a request
- Tickets: Ticket creation, lookup and administration

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, classification rules and value objects
- Infrastructure: Database, in-memory stores, knowledge base seed
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

# Configuration and Core
from config import settings
from core import ApplicationException, StorageException

# Infrastructure
from infrastructure.database import (
    init_database,
    close_database,
    create_tables,
    get_session_context,
)
from intake.application import ConversationLockRegistry
from intake.infrastructure import InMemoryConversationRepository
from tickets.domain import TicketNumberGenerator
from tickets.infrastructure import (
    InMemoryTicketRepository,
    InMemoryKnowledgeBaseRepository,
    SQLAlchemyKnowledgeBaseRepository,
    seed_knowledge_base,
)

# Module Routers
from intake.interfaces import intake_router
from tickets.interfaces import tickets_router

# Middleware and error handling
from shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    storage_exception_handler,
    global_exception_handler,
)

# Logging
from shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize storage (database tables or in-memory stores)
    3. Seed the knowledge base
    4. Create the conversation lock registry and ticket number generator

    SHUTDOWN:
    1. Close database connections
    """
    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting BI Triage Agent", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend
    })

    app.state.settings = settings
    app.state.conversation_locks = ConversationLockRegistry()
    app.state.ticket_number_generator = TicketNumberGenerator()

    if settings.storage_backend == "sql":
        logger.info("Initializing database")
        init_database()

        # Tables are created on startup for development; production uses migrations.
        # If the database is down the server still starts and storage calls fail with 503.
        logger.info("Creating database tables")
        try:
            await create_tables()
            async with get_session_context() as session:
                await seed_knowledge_base(
                    SQLAlchemyKnowledgeBaseRepository(session),
                    settings.knowledge_base_path
                )
        except (SQLAlchemyError, StorageException, OSError) as e:
            logger.warning(f"Database not available - running in degraded mode: {e}")
            logger.warning("Please start PostgreSQL to enable full functionality")
    else:
        app.state.conversation_repository = InMemoryConversationRepository()
        app.state.ticket_repository = InMemoryTicketRepository()
        app.state.knowledge_base_repository = InMemoryKnowledgeBaseRepository()
        await seed_knowledge_base(
            app.state.knowledge_base_repository,
            settings.knowledge_base_path
        )

    logger.info("BI Triage Agent started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down BI Triage Agent")

    if settings.storage_backend == "sql":
        await close_database()

    logger.info("BI Triage Agent shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="BI Triage Agent API",
    description="""
    ## Conversational intake for Business Intelligence requests

    Guides a requester through a short dialogue, summarizes the request,
    rates its priority and difficulty, and files a ticket for the BI team.

    ---

    ### 💬 Intake Module

    **Endpoints:**
    - `POST /api/conversation/start` - Greet the requester and list request types
    - `POST /api/conversation/select-type` - Choose a request type
    - `POST /api/conversation/respond` - Answer the current detail question
    - `POST /api/conversation/impact-timeline` - Submit impact and timeline answers
    - `POST /api/conversation/confirm` - Confirm (ticket created) or reject

    **Flow:**

    ```
    request_type_selection -> collecting_details -> impact_timeline
        -> confirmation -> completed | restart_option
    ```

    ---

    ### 🎫 Tickets Module

    **Endpoints:**
    - `GET /api/ticket/{ticketNumber}` - Look up a ticket (`BI-` + 6 digits)
    - `GET /api/admin/tickets` - List all tickets, newest first
    - `GET /api/admin/stats` - Ticket counts by status and priority
    - `PUT /api/admin/ticket/{id}` - Update status, owner or estimated dates

    ---

    ### 🔧 Classification

    | Priority | Keywords |
    |----------|----------|
    | P0 | urgent, asap, critical |
    | P1 | soon, important |
    | P3 | whenever, no rush |
    | P2 | (default) |

    | Difficulty | Keywords |
    |------------|----------|
    | High | complex, integration, custom |
    | Low | simple, quick, standard |
    | Medium | (default) |

    ---
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
# Added last runs first: the correlation ID is set before requests are logged
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(intake_router)
app.include_router(tickets_router)

# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "storage_backend": "memory",
                        "active_conversations": 2
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Reports the configured storage backend and the number of conversations
    currently holding a transition lock.
    """
    checks = {
        "storage_backend": settings.storage_backend,
        "active_conversations": len(request.app.state.conversation_locks)
    }

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"], responses={
    200: {
        "description": "API information",
        "content": {
            "application/json": {
                "example": {
                    "service": "BI Triage Agent",
                    "version": "1.0.0",
                    "architecture": "Clean Architecture / Modular Monolith",
                    "docs": "/docs",
                    "health": "/health"
                }
            }
        }
    }
})
async def root():
    """Root endpoint with API information."""
    return {
        "service": "BI Triage Agent",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "intake": {
                "prefix": "/api/conversation",
                "endpoints": [
                    "POST /api/conversation/start - Start a conversation",
                    "POST /api/conversation/select-type - Select request type",
                    "POST /api/conversation/respond - Answer a detail question",
                    "POST /api/conversation/impact-timeline - Submit impact and timeline",
                    "POST /api/conversation/confirm - Confirm or reject"
                ]
            },
            "tickets": {
                "prefix": "/api",
                "endpoints": [
                    "GET /api/ticket/{ticketNumber} - Ticket status",
                    "GET /api/admin/tickets - All tickets",
                    "GET /api/admin/stats - Ticket statistics",
                    "PUT /api/admin/ticket/{id} - Update ticket"
                ]
            }
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
