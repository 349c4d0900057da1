"""
Shared API Schemas
==================

Base model for API payloads. Python attributes stay snake_case, JSON on
the wire is camelCase (conversationId, ticketNumber, ...). Either form is
accepted on input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Pydantic model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
