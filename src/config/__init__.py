"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="bi-triage-agent", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Storage ==========
    storage_backend: str = Field(
        default="sql",
        description="Persistence backend: 'sql' (SQLAlchemy) or 'memory'"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/triage",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Knowledge Base ==========
    knowledge_base_path: Path = Field(
        default=Path("knowledge_base.yaml"),
        description="Path to the knowledge base seed YAML file"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Ensure storage backend is supported."""
        allowed = {"sql", "memory"}
        if v not in allowed:
            raise ValueError(f"storage_backend must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Priority(str):
    """Ticket priority levels, P0 is the most urgent."""
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class Difficulty(str):
    """Estimated implementation difficulty."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TicketStatus(str):
    """Ticket lifecycle statuses (admin-managed)."""
    NEW = "New"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CLOSED = "Closed"


class ConversationState(str):
    """Intake dialogue states."""
    INITIAL = "initial"
    REQUEST_TYPE_SELECTION = "request_type_selection"
    COLLECTING_DETAILS = "collecting_details"
    IMPACT_TIMELINE = "impact_timeline"
    CONFIRMATION = "confirmation"
    COMPLETED = "completed"
    RESTART_OPTION = "restart_option"


# ========== Lists for validation ==========

VALID_STATUSES = [
    TicketStatus.NEW, TicketStatus.IN_PROGRESS,
    TicketStatus.COMPLETED, TicketStatus.CLOSED
]
TERMINAL_CONVERSATION_STATES = [
    ConversationState.COMPLETED, ConversationState.RESTART_OPTION
]
