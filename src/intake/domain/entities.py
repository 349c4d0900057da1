"""
Intake Domain Entities
======================

The Conversation aggregate: one guided intake dialogue, moving through a
fixed sequence of states.

    initial -> request_type_selection -> collecting_details
            -> impact_timeline -> confirmation -> completed
                                              \\-> restart_option

Every mutating method checks its source state first and raises
InvalidStateTransitionException otherwise. `completed` and
`restart_option` are terminal.
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from config import ConversationState, TERMINAL_CONVERSATION_STATES
from core import InvalidStateTransitionException
from intake.domain.catalog import RequestType, IMPACT_TIMELINE_FIELDS
from intake.domain.classification import ClassificationResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Conversation:
    """
    Conversation entity.

    `request_type` holds the catalog key; it is set once on type selection.
    `summary`, `priority` and `difficulty` are set once, when the
    impact/timeline answers are submitted.
    """

    id: str
    user_id: str
    session_id: str
    user_name: str = ""
    state: str = ConversationState.INITIAL
    request_type: Optional[str] = None
    question_index: int = 0
    responses: Dict[str, Any] = field(default_factory=dict)

    summary: Optional[str] = None
    priority: Optional[str] = None
    difficulty: Optional[str] = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def start(cls, user_id: str, user_name: str) -> "Conversation":
        """Open a new conversation awaiting request type selection."""
        conversation = cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=str(uuid.uuid4()),
            user_name=user_name,
        )
        conversation._move_to(ConversationState.REQUEST_TYPE_SELECTION)
        return conversation

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_CONVERSATION_STATES

    @property
    def is_classified(self) -> bool:
        return None not in (self.summary, self.priority, self.difficulty)

    def clone(self) -> "Conversation":
        """Deep copy to mutate before the store acknowledges a write."""
        return copy.deepcopy(self)

    def require_state(self, expected: str, operation: str) -> None:
        if self.state != expected:
            raise InvalidStateTransitionException(self.id, self.state, operation)

    def _move_to(self, new_state: str) -> None:
        self.state = new_state
        self.updated_at = _utcnow()

    # ========== Transitions ==========

    def select_type(self, request_type: RequestType) -> None:
        self.require_state(ConversationState.REQUEST_TYPE_SELECTION, "select a request type for")
        self.request_type = request_type.key
        self.question_index = 0
        self._move_to(ConversationState.COLLECTING_DETAILS)

    def record_answer(self, answer: str, total_questions: int) -> bool:
        """
        Store the answer for the current detail question.

        Returns:
            True if another detail question follows, False when the
            conversation moved on to impact/timeline.
        """
        self.require_state(ConversationState.COLLECTING_DETAILS, "respond to")
        self.responses[f"question_{self.question_index}"] = answer

        if self.question_index + 1 < total_questions:
            self.question_index += 1
            self.updated_at = _utcnow()
            return True

        self._move_to(ConversationState.IMPACT_TIMELINE)
        return False

    def record_impact_timeline(self, answers: Mapping[str, Any]) -> None:
        self.require_state(ConversationState.IMPACT_TIMELINE, "submit impact and timeline for")
        for slot in IMPACT_TIMELINE_FIELDS:
            self.responses[slot] = answers.get(slot)
        self.updated_at = _utcnow()

    def apply_classification(self, result: ClassificationResult) -> None:
        self.require_state(ConversationState.IMPACT_TIMELINE, "classify")
        self.summary = result.summary
        self.priority = result.priority
        self.difficulty = result.difficulty
        self._move_to(ConversationState.CONFIRMATION)

    def reject(self) -> None:
        self.require_state(ConversationState.CONFIRMATION, "reject")
        self._move_to(ConversationState.RESTART_OPTION)

    def complete(self) -> None:
        self.require_state(ConversationState.CONFIRMATION, "confirm")
        self._move_to(ConversationState.COMPLETED)

    # ========== Serialization ==========

    def to_snapshot(self) -> Dict[str, Any]:
        """Collected data as kept on the ticket for audit."""
        return {
            "conversationId": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "requestType": self.request_type,
            "currentQuestionIndex": self.question_index,
            "responses": dict(self.responses),
            "summary": self.summary,
            "priority": self.priority,
            "difficulty": self.difficulty,
            "currentStep": self.state,
        }
