from datetime import date, datetime, timezone

import pytest

from core import InvalidStateTransitionException, ValidationException
from intake.domain import Conversation, get_request_type
from tickets.domain import Ticket


def _ticket(**overrides):
    fields = dict(
        id="t-1",
        ticket_number="BI-000001",
        created_date=datetime(2024, 5, 2, tzinfo=timezone.utc),
        requester_name="Dana",
        requester_id="u-1",
        request_type="Automation",
        summary="Automation request: nightly export.",
        impact="Saves an hour a day",
        priority="P2",
        difficulty="Medium",
    )
    fields.update(overrides)
    return Ticket(**fields)


def test_new_conversation_waits_for_type():
    conversation = Conversation.start("u-1", "Dana")

    assert conversation.state == "request_type_selection"
    assert conversation.id != conversation.session_id
    assert not conversation.is_terminal
    assert not conversation.is_classified


def test_answers_are_stored_by_question_index():
    conversation = Conversation.start("u-1", "Dana")
    conversation.select_type(get_request_type("tools"))

    assert conversation.record_answer("Tableau", 4) is True
    assert conversation.record_answer("New data source", 4) is True

    assert conversation.responses == {"question_0": "Tableau", "question_1": "New data source"}
    assert conversation.question_index == 2


def test_clone_is_independent():
    conversation = Conversation.start("u-1", "Dana")
    copy = conversation.clone()
    copy.responses["question_0"] = "changed"

    assert conversation.responses == {}


def test_complete_requires_confirmation():
    conversation = Conversation.start("u-1", "Dana")

    with pytest.raises(InvalidStateTransitionException) as exc_info:
        conversation.complete()
    assert exc_info.value.details["current_state"] == "request_type_selection"


def test_snapshot_uses_camel_case_keys():
    conversation = Conversation.start("u-1", "Dana")
    snapshot = conversation.to_snapshot()

    assert snapshot["conversationId"] == conversation.id
    assert snapshot["currentStep"] == "request_type_selection"
    assert snapshot["responses"] == {}


def test_admin_update_is_null_coalescing():
    ticket = _ticket(ticket_owner="Priya")

    ticket.apply_admin_update(status="Completed", estimated_end_date=date(2024, 6, 14))

    assert ticket.status == "Completed"
    assert ticket.ticket_owner == "Priya"
    assert ticket.estimated_start_date is None
    assert ticket.estimated_end_date == date(2024, 6, 14)


def test_admin_update_rejects_unknown_status():
    ticket = _ticket()

    with pytest.raises(ValidationException):
        ticket.apply_admin_update(status="Done")
    assert ticket.status == "New"


def test_closed_ticket_is_not_open():
    assert _ticket().is_open
    assert not _ticket(status="Closed").is_open
