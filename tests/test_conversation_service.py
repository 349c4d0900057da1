import asyncio
import re

import pytest

from core import (
    ConversationNotFoundException,
    InvalidStateTransitionException,
    StorageException,
    ValidationException,
)
from intake.application import (
    CompletedResponse,
    ConversationLockRegistry,
    ConversationService,
    ImpactTimelinePromptResponse,
    QuestionResponse,
    RestartResponse,
)
from intake.domain import REQUEST_TYPES
from intake.infrastructure import InMemoryConversationRepository
from tickets.application import TicketFactory, TicketService
from tickets.domain import KnowledgeBaseEntry, TicketNumberGenerator, is_ticket_number
from tickets.infrastructure import InMemoryKnowledgeBaseRepository, InMemoryTicketRepository

DETAIL_ANSWERS = (
    "Weekly sales dashboard",
    "CRM and billing",
    "Regional managers",
    "Every Monday",
)
IMPACT_TIMELINE = {
    "impact": "Managers cannot review pipeline",
    "timeline": "Needed soon",
    "frequency": "Ongoing",
    "requirements": None,
    "links": "https://wiki.example.com/sales",
}


class FlakyConversationRepository(InMemoryConversationRepository):
    """Conversation store whose writes can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    async def save(self, conversation):
        if self.fail_writes:
            raise StorageException("write failed")
        return await super().save(conversation)


class Harness:
    def __init__(self):
        self.conversations = FlakyConversationRepository()
        self.tickets = InMemoryTicketRepository()
        self.knowledge_base = InMemoryKnowledgeBaseRepository()
        self.locks = ConversationLockRegistry()
        self.service = ConversationService(
            conversation_repository=self.conversations,
            ticket_repository=self.tickets,
            knowledge_base_repository=self.knowledge_base,
            ticket_factory=TicketFactory(self.tickets, TicketNumberGenerator()),
            locks=self.locks,
        )

    async def at_confirmation(self, request_type="reporting"):
        started = await self.service.start("u-1", "Dana")
        conversation_id = started.conversation_id
        await self.service.select_type(conversation_id, request_type)
        for answer in DETAIL_ANSWERS:
            await self.service.respond(conversation_id, answer)
        await self.service.submit_impact_timeline(conversation_id, IMPACT_TIMELINE)
        return conversation_id


@pytest.fixture
def harness():
    return Harness()


def run(coro):
    return asyncio.run(coro)


def test_start_greets_and_lists_types(harness):
    response = run(harness.service.start("u-1", "Dana"))

    assert response.current_step == "request_type_selection"
    assert response.message.startswith("Hi Dana! I'm your BI Triage Agent.")
    assert [rt.id for rt in response.request_types] == list(REQUEST_TYPES)

    conversation = run(harness.service.get_conversation(response.conversation_id))
    assert conversation.state == "request_type_selection"
    assert conversation.user_name == "Dana"


@pytest.mark.parametrize("request_type", list(REQUEST_TYPES))
def test_every_type_reaches_impact_timeline_after_four_answers(harness, request_type):
    async def scenario():
        started = await harness.service.start("u-1", "Dana")
        conversation_id = started.conversation_id
        first = await harness.service.select_type(conversation_id, request_type)
        replies = [await harness.service.respond(conversation_id, a) for a in DETAIL_ANSWERS]
        return conversation_id, first, replies

    conversation_id, first, replies = run(scenario())

    assert first.question == REQUEST_TYPES[request_type].question(0)
    assert first.total_questions == 4
    assert all(isinstance(r, QuestionResponse) for r in replies[:3])
    assert [r.question_index for r in replies[:3]] == [1, 2, 3]
    assert isinstance(replies[3], ImpactTimelinePromptResponse)
    assert len(replies[3].questions) == 5

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.respond(conversation_id, "one answer too many"))


def test_unknown_request_type_keeps_state(harness):
    started = run(harness.service.start("u-1", "Dana"))

    with pytest.raises(ValidationException):
        run(harness.service.select_type(started.conversation_id, "payroll"))

    conversation = run(harness.service.get_conversation(started.conversation_id))
    assert conversation.state == "request_type_selection"
    assert conversation.request_type is None


def test_type_cannot_be_selected_twice(harness):
    started = run(harness.service.start("u-1", "Dana"))
    run(harness.service.select_type(started.conversation_id, "automation"))

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.select_type(started.conversation_id, "reporting"))


def test_blank_answer_is_rejected(harness):
    started = run(harness.service.start("u-1", "Dana"))
    run(harness.service.select_type(started.conversation_id, "troubleshooting"))

    with pytest.raises(ValidationException):
        run(harness.service.respond(started.conversation_id, "   "))

    conversation = run(harness.service.get_conversation(started.conversation_id))
    assert conversation.question_index == 0
    assert conversation.responses == {}


def test_blank_impact_timeline_answers_use_placeholders(harness):
    async def scenario():
        started = await harness.service.start("u-1", "Dana")
        await harness.service.select_type(started.conversation_id, "troubleshooting")
        for answer in DETAIL_ANSWERS:
            await harness.service.respond(started.conversation_id, answer)
        return await harness.service.submit_impact_timeline(
            started.conversation_id, {"impact": "", "frequency": "Daily"}
        )

    response = run(scenario())

    assert response.current_step == "confirmation"
    assert response.summary.summary == (
        "Troubleshooting request: No description provided. "
        "Impact: Not specified. "
        "Timeline: Not specified. "
        "Requirements: None specified."
    )
    assert response.summary.priority == "P2"
    assert response.summary.frequency == "Daily"
    assert response.summary.timeline is None


def test_impact_timeline_classifies_once(harness):
    conversation_id = run(harness.at_confirmation())
    conversation = run(harness.service.get_conversation(conversation_id))

    assert conversation.state == "confirmation"
    assert conversation.priority == "P1"
    assert conversation.difficulty == "Medium"
    assert conversation.summary == (
        "Reporting/Dashboard request: No description provided. "
        "Impact: Managers cannot review pipeline. "
        "Timeline: Needed soon. "
        "Requirements: None specified."
    )

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.submit_impact_timeline(conversation_id, IMPACT_TIMELINE))


def test_impact_timeline_returns_knowledge_base_suggestions(harness):
    run(harness.knowledge_base.add(
        KnowledgeBaseEntry(title="Dashboards 101", content="...", keywords="dashboard, report")
    ))
    run(harness.knowledge_base.add(
        KnowledgeBaseEntry(title="Payroll", content="...", keywords="payroll")
    ))

    async def scenario():
        started = await harness.service.start("u-1", "Dana")
        await harness.service.select_type(started.conversation_id, "reporting")
        for answer in DETAIL_ANSWERS:
            await harness.service.respond(started.conversation_id, answer)
        return await harness.service.submit_impact_timeline(
            started.conversation_id, dict(IMPACT_TIMELINE, impact="Regional dashboard stale")
        )

    response = run(scenario())

    assert response.current_step == "confirmation"
    assert [s.title for s in response.suggestions] == ["Dashboards 101"]


def test_confirm_creates_exactly_one_ticket(harness):
    conversation_id = run(harness.at_confirmation())

    response = run(harness.service.confirm(conversation_id, True))

    assert isinstance(response, CompletedResponse)
    assert is_ticket_number(response.ticket.ticket_number)
    assert response.ticket.status == "New"
    assert response.duplicates == 0
    assert response.ticket.ticket_number in response.message

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.confirm(conversation_id, True))

    tickets = run(harness.tickets.list_all())
    assert len(tickets) == 1
    assert tickets[0].requester_name == "Dana"
    assert tickets[0].links == "https://wiki.example.com/sales"
    assert tickets[0].conversation_snapshot["conversationId"] == conversation_id

    conversation = run(harness.service.get_conversation(conversation_id))
    assert conversation.state == "completed"
    assert len(harness.locks) == 0


def test_concurrent_confirmations_create_one_ticket(harness):
    conversation_id = run(harness.at_confirmation())

    async def scenario():
        return await asyncio.gather(
            harness.service.confirm(conversation_id, True),
            harness.service.confirm(conversation_id, True),
            return_exceptions=True,
        )

    results = run(scenario())

    assert sum(isinstance(r, CompletedResponse) for r in results) == 1
    assert sum(isinstance(r, InvalidStateTransitionException) for r in results) == 1
    assert len(run(harness.tickets.list_all())) == 1


def test_second_similar_request_reports_duplicate(harness):
    first = run(harness.at_confirmation())
    run(harness.service.confirm(first, True))

    second = run(harness.at_confirmation())
    response = run(harness.service.confirm(second, True))

    assert response.duplicates == 1
    assert "similar ticket(s)" in response.message
    assert len(run(harness.tickets.list_all())) == 2


def test_reject_moves_to_restart_option(harness):
    conversation_id = run(harness.at_confirmation())

    response = run(harness.service.confirm(conversation_id, False))

    assert isinstance(response, RestartResponse)
    assert response.current_step == "restart_option"
    assert run(harness.tickets.list_all()) == []

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.confirm(conversation_id, True))


def test_reject_outside_confirmation_fails(harness):
    started = run(harness.service.start("u-1", "Dana"))

    with pytest.raises(InvalidStateTransitionException):
        run(harness.service.confirm(started.conversation_id, False))


def test_unknown_conversation(harness):
    with pytest.raises(ConversationNotFoundException):
        run(harness.service.select_type("does-not-exist", "reporting"))
    with pytest.raises(ConversationNotFoundException):
        run(harness.service.confirm("does-not-exist", True))


def test_failed_write_leaves_stored_state(harness):
    started = run(harness.service.start("u-1", "Dana"))
    run(harness.service.select_type(started.conversation_id, "access"))

    harness.conversations.fail_writes = True
    with pytest.raises(StorageException):
        run(harness.service.respond(started.conversation_id, "Finance workspace"))

    conversation = run(harness.service.get_conversation(started.conversation_id))
    assert conversation.question_index == 0
    assert conversation.responses == {}

    harness.conversations.fail_writes = False
    reply = run(harness.service.respond(started.conversation_id, "Finance workspace"))
    assert reply.question_index == 1


def test_lock_registry_serializes_per_conversation():
    registry = ConversationLockRegistry()

    async def scenario(first_id, second_id):
        order = []

        async def worker(tag, conversation_id):
            async with registry.hold(conversation_id):
                order.append(f"{tag}-in")
                await asyncio.sleep(0)
                order.append(f"{tag}-out")

        await asyncio.gather(worker("a", first_id), worker("b", second_id))
        return order

    assert run(scenario("c-1", "c-1")) == ["a-in", "a-out", "b-in", "b-out"]
    assert run(scenario("c-1", "c-2")) == ["a-in", "b-in", "a-out", "b-out"]
    assert len(registry) == 0


def test_troubleshooting_ticket_is_listed_as_open(harness):
    async def scenario():
        started = await harness.service.start("u-7", "Sam")
        conversation_id = started.conversation_id
        await harness.service.select_type(conversation_id, "troubleshooting")
        for answer in ("Report times out", "Cleared cache", "Yesterday", "Cannot send numbers"):
            await harness.service.respond(conversation_id, answer)
        await harness.service.submit_impact_timeline(conversation_id, {
            "impact": "Finance close is blocked",
            "timeline": "ASAP",
            "frequency": "One-time",
            "requirements": "Keep current filters",
            "links": "https://bi.example.com/report/7",
        })
        completed = await harness.service.confirm(conversation_id, True)
        open_tickets = await TicketService(harness.tickets).list_open_tickets()
        return completed, open_tickets

    completed, open_tickets = run(scenario())

    assert completed.ticket.status == "New"
    assert completed.ticket.priority == "P0"
    assert re.match(r"^BI-\d{6}$", completed.ticket.ticket_number)
    assert [t.ticket_number for t in open_tickets] == [completed.ticket.ticket_number]
    assert open_tickets[0].request_type == "Troubleshooting"
