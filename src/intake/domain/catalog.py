"""
Request Catalog
===============

The fixed set of request types a requester can choose from, each with its
ordered follow-up questions, plus the impact/timeline prompts asked after
the detail questions regardless of type.

Question wording is shown to requesters as-is; do not edit it casually.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from core import ValidationException


@dataclass(frozen=True)
class RequestType:
    """A request category and its detail questions."""
    key: str
    name: str
    questions: Tuple[str, ...]

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def question(self, index: int) -> str:
        return self.questions[index]


REQUEST_TYPES: Dict[str, RequestType] = {
    "troubleshooting": RequestType(
        key="troubleshooting",
        name="Troubleshooting",
        questions=(
            "What specific issue are you experiencing?",
            "What steps have you already tried?",
            "When did this issue first occur?",
            "How is this affecting your daily work?",
        ),
    ),
    "reporting": RequestType(
        key="reporting",
        name="Reporting/Dashboard",
        questions=(
            "What type of report or dashboard do you need?",
            "What data sources should be included?",
            "Who will be using this report?",
            "How often will this report be needed?",
        ),
    ),
    "automation": RequestType(
        key="automation",
        name="Automation",
        questions=(
            "What process would you like to automate?",
            "How is this currently being done manually?",
            "What triggers should start this automation?",
            "What should happen when the automation completes?",
        ),
    ),
    "access": RequestType(
        key="access",
        name="User Access",
        questions=(
            "What system or tool do you need access to?",
            "What level of access do you require?",
            "What is your role and why do you need this access?",
            "Is this temporary or permanent access?",
        ),
    ),
    "tools": RequestType(
        key="tools",
        name="Tool-related Changes",
        questions=(
            "What tool needs to be changed or configured?",
            "What specific changes are required?",
            "Who else might be affected by this change?",
            "Is this related to a new business requirement?",
        ),
    ),
}

# Answer slots, in the order the prompts below are shown.
IMPACT_TIMELINE_FIELDS: Tuple[str, ...] = (
    "impact",
    "timeline",
    "frequency",
    "requirements",
    "links",
)

IMPACT_TIMELINE_QUESTIONS: Tuple[str, ...] = (
    "What happens if this request isn't fulfilled? How does it affect your work or decision-making?",
    "When do you need this completed?",
    "Is this a one-time request or ongoing need?",
    "Are there any specific requirements or constraints I should know about?",
    "Please provide any relevant links, reports, or snapshots that can serve as reference.",
)


def get_request_type(key: str) -> RequestType:
    """
    Look up a request type by key.

    Raises:
        ValidationException: If the key is not in the catalog
    """
    request_type = REQUEST_TYPES.get(key)
    if request_type is None:
        raise ValidationException(
            f"Unknown request type '{key}'",
            {"request_type": key, "allowed": list(REQUEST_TYPES)}
        )
    return request_type


def list_request_types() -> List[Dict[str, str]]:
    """Request types for presentation, in catalog order."""
    return [{"id": rt.key, "name": rt.name} for rt in REQUEST_TYPES.values()]
