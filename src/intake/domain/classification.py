"""
Classification Engine
=====================

Deterministic, keyword-driven rules that turn the collected answers of an
intake conversation into a summary, a priority and a difficulty, and that
match a new request against open tickets and the knowledge base.

All functions here are pure: no storage access, no I/O. Rule tables are
ordered, the first tier whose keywords appear in the text wins.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from config import Priority, Difficulty


# ========== Rule tables ==========

PRIORITY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (Priority.P0, ("urgent", "asap", "critical")),
    (Priority.P1, ("soon", "important")),
    (Priority.P3, ("whenever", "no rush")),
)
DEFAULT_PRIORITY = Priority.P2

DIFFICULTY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (Difficulty.HIGH, ("complex", "integration", "custom")),
    (Difficulty.LOW, ("simple", "quick", "standard")),
)
DEFAULT_DIFFICULTY = Difficulty.MEDIUM

# Summary placeholders for unanswered slots
NO_DESCRIPTION = "No description provided"
NOT_SPECIFIED = "Not specified"
NONE_SPECIFIED = "None specified"

DUPLICATE_MIN_TOKEN_LENGTH = 3  # tokens must be strictly longer
DUPLICATE_MATCH_THRESHOLD = 3
KNOWLEDGE_BASE_SUGGESTION_LIMIT = 3

T = TypeVar("T")


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a request at the impact/timeline step."""
    summary: str
    priority: str
    difficulty: str


def _responses_text(responses: Mapping[str, Any]) -> str:
    """Lower-cased JSON form of all answers, keys included."""
    return json.dumps(dict(responses), ensure_ascii=False).lower()


def _first_matching_tier(
    text: str,
    rules: Sequence[Tuple[str, Tuple[str, ...]]],
    default: str
) -> str:
    for label, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return label
    return default


def summarize(request_type: str, responses: Mapping[str, Any]) -> str:
    """
    Build the canonical one-paragraph summary of a request.

    Answers are inserted verbatim. An empty or missing slot renders as its
    fixed placeholder; detail answers (`question_N`) are never used here.

    Args:
        request_type: Display name of the request type (e.g. "Automation")
        responses: Collected answers keyed by slot name

    Returns:
        Summary sentence
    """
    description = responses.get("description") or NO_DESCRIPTION
    impact = responses.get("impact") or NOT_SPECIFIED
    timeline = responses.get("timeline") or NOT_SPECIFIED
    requirements = responses.get("requirements") or NONE_SPECIFIED

    return (
        f"{request_type} request: {description}. "
        f"Impact: {impact}. "
        f"Timeline: {timeline}. "
        f"Requirements: {requirements}."
    )


def rate_priority(responses: Mapping[str, Any]) -> str:
    """P0 (urgent) .. P3 (no rush), P2 when no keyword matches."""
    return _first_matching_tier(_responses_text(responses), PRIORITY_RULES, DEFAULT_PRIORITY)


def rate_difficulty(responses: Mapping[str, Any]) -> str:
    """High, Low, or Medium when no keyword matches."""
    return _first_matching_tier(_responses_text(responses), DIFFICULTY_RULES, DEFAULT_DIFFICULTY)


def classify(request_type: str, responses: Mapping[str, Any]) -> ClassificationResult:
    """Summary, priority and difficulty in one pass."""
    return ClassificationResult(
        summary=summarize(request_type, responses),
        priority=rate_priority(responses),
        difficulty=rate_difficulty(responses),
    )


def detect_duplicates(summary: str, candidates: Iterable[T]) -> List[T]:
    """
    Find open tickets that look like the same request.

    The new summary is split on whitespace and tokens longer than three
    characters are kept (repeats included). A candidate is a duplicate when
    at least three of those tokens occur as substrings of its summary,
    compared case-insensitively.

    Args:
        summary: Summary of the new request
        candidates: Objects exposing a `summary` attribute (open tickets)

    Returns:
        All matching candidates, in input order
    """
    tokens = [
        token for token in summary.lower().split()
        if len(token) > DUPLICATE_MIN_TOKEN_LENGTH
    ]

    duplicates = []
    for candidate in candidates:
        existing = (getattr(candidate, "summary", None) or "").lower()
        shared = [token for token in tokens if token in existing]
        if len(shared) >= DUPLICATE_MATCH_THRESHOLD:
            duplicates.append(candidate)
    return duplicates


def suggest_knowledge_base(
    summary: str,
    entries: Iterable[T],
    limit: Optional[int] = KNOWLEDGE_BASE_SUGGESTION_LIMIT
) -> List[T]:
    """
    Knowledge base entries related to a request, in stored order.

    An entry matches when any whitespace token of the summary is a
    substring of one of its comma-separated keywords (trimmed,
    case-insensitive). No ranking is applied.
    """
    tokens = summary.lower().split()

    suggestions = []
    for entry in entries:
        keywords = [k.strip() for k in (getattr(entry, "keywords", None) or "").lower().split(",")]
        if any(token in keyword for token in tokens for keyword in keywords):
            suggestions.append(entry)
            if limit is not None and len(suggestions) >= limit:
                break
    return suggestions
