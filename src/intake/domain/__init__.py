"""
Intake Domain Layer
===================

Contains:
- Catalog: request types and their questions
- Classification: keyword rules for summary, priority, difficulty,
  duplicate detection and knowledge base suggestions
- Entities: the Conversation aggregate

Pure Python, no infrastructure dependencies.
"""

from intake.domain.catalog import (
    RequestType,
    REQUEST_TYPES,
    IMPACT_TIMELINE_FIELDS,
    IMPACT_TIMELINE_QUESTIONS,
    get_request_type,
    list_request_types,
)
from intake.domain.classification import (
    ClassificationResult,
    classify,
    summarize,
    rate_priority,
    rate_difficulty,
    detect_duplicates,
    suggest_knowledge_base,
)
from intake.domain.entities import Conversation

__all__ = [
    # Catalog
    "RequestType",
    "REQUEST_TYPES",
    "IMPACT_TIMELINE_FIELDS",
    "IMPACT_TIMELINE_QUESTIONS",
    "get_request_type",
    "list_request_types",
    # Classification
    "ClassificationResult",
    "classify",
    "summarize",
    "rate_priority",
    "rate_difficulty",
    "detect_duplicates",
    "suggest_knowledge_base",
    # Entities
    "Conversation",
]
