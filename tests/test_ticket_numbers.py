import asyncio
from datetime import datetime, timezone

import pytest

from core import StorageException
from intake.domain import Conversation, classify, get_request_type
from tickets.application import TicketFactory
from tickets.domain import Ticket, TicketNumberGenerator, format_ticket_number, is_ticket_number
from tickets.infrastructure import InMemoryTicketRepository


class _FixedClock:
    def __init__(self, *values):
        self.values = list(values)

    def __call__(self):
        return self.values.pop(0) if len(self.values) > 1 else self.values[0]


def test_format_pads_to_six_digits():
    assert format_ticket_number(42) == "BI-000042"
    assert format_ticket_number(1_700_000_123_456) == "BI-123456"


@pytest.mark.parametrize(
    "value, expected",
    [("BI-123456", True), ("BI-12345", False), ("bi-123456", False), ("BI-1234567", False)],
)
def test_is_ticket_number(value, expected):
    assert is_ticket_number(value) is expected


def test_generator_uses_last_six_digits_of_clock():
    generator = TicketNumberGenerator(clock=_FixedClock(1_700_000_654_321))
    assert generator.next() == "BI-654321"


def test_generator_never_repeats_within_process():
    generator = TicketNumberGenerator(clock=_FixedClock(1_000_500))
    numbers = [generator.next() for _ in range(3)]
    assert numbers == ["BI-000500", "BI-000501", "BI-000502"]


def test_generator_moves_forward_when_clock_goes_back():
    generator = TicketNumberGenerator(clock=_FixedClock(900, 100))
    assert generator.next() == "BI-000900"
    assert generator.next() == "BI-000901"


def _confirmed_conversation():
    conversation = Conversation.start("u-1", "Dana")
    conversation.select_type(get_request_type("reporting"))
    for answer in ("Sales dashboard", "CRM", "Sales leads", "Weekly"):
        conversation.record_answer(answer, 4)
    conversation.record_impact_timeline({"impact": "Blocks review", "timeline": "soon"})
    conversation.apply_classification(classify("Reporting/Dashboard", conversation.responses))
    return conversation


def _stored_ticket(number):
    return Ticket(
        id=f"id-{number}",
        ticket_number=number,
        created_date=datetime.now(timezone.utc),
        requester_name="Sam",
        requester_id="u-2",
        request_type="Automation",
        summary="Automation request: export.",
        impact=None,
        priority="P2",
        difficulty="Medium",
    )


def test_factory_skips_numbers_already_stored():
    async def scenario():
        repository = InMemoryTicketRepository()
        await repository.save(_stored_ticket("BI-000700"))
        factory = TicketFactory(repository, TicketNumberGenerator(clock=_FixedClock(700)))
        return await factory.create(_confirmed_conversation())

    ticket = asyncio.run(scenario())

    assert ticket.ticket_number == "BI-000701"
    assert ticket.status == "New"
    assert ticket.request_type == "Reporting/Dashboard"
    assert ticket.priority == "P1"


def test_factory_gives_up_after_repeated_collisions():
    async def scenario():
        repository = InMemoryTicketRepository()
        for n in range(100, 130):
            await repository.save(_stored_ticket(format_ticket_number(n)))
        factory = TicketFactory(repository, TicketNumberGenerator(clock=_FixedClock(100)))
        await factory.create(_confirmed_conversation())

    with pytest.raises(StorageException):
        asyncio.run(scenario())
