import pytest

from vaultsim.resources import Ledger, ResourceError
from vaultsim.sporting_event import Section, SportingEvent, Team, Ticket


@pytest.fixture
def setup():
    ledger = Ledger()
    return ledger, SportingEvent.instantiate(ledger)


def _data(event, bucket):
    (nf_id,) = bucket.non_fungible_ids()
    return event._ticket_manager.non_fungible_data(nf_id)


def test_luxury_seats_are_minted(setup):
    _, event = setup
    manager = event._ticket_manager
    seats = {manager.non_fungible_data(i).seat for i in event.tickets.non_fungible_ids()}
    expected = {f"{letter}{number}" for letter in "ABC" for number in range(1, 10)}
    assert seats - {None} == expected
    assert None in seats


def test_all_tickets_start_home(setup):
    _, event = setup
    manager = event._ticket_manager
    assert all(manager.non_fungible_data(i).prediction is Team.HOME for i in event.tickets.non_fungible_ids())


def test_buy_luxury_ticket_home(setup):
    ledger, event = setup
    paid = 150
    ticket, change = event.buy_luxury_ticket("B7", True, ledger.mint_native(paid))
    assert _data(event, ticket) == Ticket(Section.LUXURY, "B7", Team.HOME)
    assert change.amount + event.collected_xrd.amount == paid
    assert event.collected_xrd.amount == event.price_luxury


def test_buy_luxury_ticket_away(setup):
    ledger, event = setup
    ticket, _ = event.buy_luxury_ticket("A1", False, ledger.mint_native(100))
    assert _data(event, ticket) == Ticket(Section.LUXURY, "A1", Team.AWAY)


def test_luxury_seat_sold_once(setup):
    ledger, event = setup
    event.buy_luxury_ticket("C9", True, ledger.mint_native(100))
    with pytest.raises(ResourceError, match="Could not find"):
        event.buy_luxury_ticket("C9", True, ledger.mint_native(100))


def test_unknown_seat(setup):
    ledger, event = setup
    payment = ledger.mint_native(100)
    with pytest.raises(ResourceError, match="Could not find"):
        event.buy_luxury_ticket("D1", True, payment)
    assert payment.amount == 100
    assert event.collected_xrd.amount == 0


def test_buy_field_ticket(setup):
    ledger, event = setup
    before = len(event.tickets.non_fungible_ids())
    ticket, change = event.buy_field_ticket(False, ledger.mint_native(25))
    assert _data(event, ticket) == Ticket(Section.FIELD, None, Team.AWAY)
    assert change.amount + event.collected_xrd.amount == 25
    assert event.collected_xrd.amount == event.price_field
    assert len(event.tickets.non_fungible_ids()) == before - 1


def test_field_tickets_are_distinct(setup):
    ledger, event = setup
    first, _ = event.buy_field_ticket(True, ledger.mint_native(10))
    second, _ = event.buy_field_ticket(True, ledger.mint_native(10))
    assert first.non_fungible_ids() != second.non_fungible_ids()
    assert _data(event, first) == _data(event, second) == Ticket(Section.FIELD, None, Team.HOME)


def test_insufficient_payment_keeps_ticket(setup):
    ledger, event = setup
    before = event.tickets.non_fungible_ids()
    with pytest.raises(ResourceError, match="insufficient"):
        event.buy_luxury_ticket("A2", True, ledger.mint_native(99))
    assert event.tickets.non_fungible_ids() == before


def test_payment_must_be_native(setup):
    ledger, event = setup
    other = ledger.new_fungible(0, None, 100)
    with pytest.raises(ResourceError):
        event.buy_field_ticket(True, other)