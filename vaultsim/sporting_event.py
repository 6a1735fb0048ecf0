"""Tickets to a sporting event, each carrying the buyer's prediction of the winner."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Hashable

from vaultsim.amount import Amount
from vaultsim.resources import (
    DIVISIBILITY_NONE,
    Action,
    Bucket,
    Ledger,
    ResourceError,
    Rule,
    Vault,
)


class Section(enum.Enum):
    FIELD = "Field"
    LUXURY = "Luxury"


class Team(enum.Enum):
    HOME = "Home"
    AWAY = "Away"


@dataclass(frozen=True)
class Ticket:
    """One ticket; only luxury tickets carry a seat."""

    section: Section
    seat: str | None
    prediction: Team


class SportingEvent:
    """Sells field and luxury tickets for the native token."""

    def __init__(self, ledger: Ledger, tickets: Vault, admin_authority: Vault) -> None:
        self.ledger = ledger
        self.tickets = tickets
        self.collected_xrd = Vault(ledger.manager(ledger.native_address))
        self.price_field = Amount(10)
        self.price_luxury = Amount(100)
        self.admin_authority = admin_authority

    @classmethod
    def instantiate(cls, ledger: Ledger) -> "SportingEvent":
        admin = ledger.new_fungible(DIVISIBILITY_NONE, None, 1)
        needs_admin = Rule.require_any(admin.resource_address)
        address = ledger.new_non_fungible(
            {"name": "Ticket to the big game"},
            None,
            {
                Action.MINT: (needs_admin, None),
                Action.UPDATE_NON_FUNGIBLE_DATA: (needs_admin, None),
            },
        )
        manager = ledger.manager(address)
        badges = [admin.create_proof()]
        tickets = Bucket(address, ids=[])
        luxury_seats = (f"{letter}{number}" for letter in "ABC" for number in range(1, 10))
        for nf_id, seat in enumerate(luxury_seats, start=1):
            tickets.put(manager.mint_non_fungible(nf_id, Ticket(Section.LUXURY, seat, Team.HOME), badges))
        for nf_id in range(101, 200):
            tickets.put(manager.mint_non_fungible(nf_id, Ticket(Section.FIELD, None, Team.HOME), badges))
        return cls(ledger, Vault(manager, tickets), Vault(ledger.manager(admin.resource_address), admin))

    @property
    def _ticket_manager(self):
        return self.ledger.manager(self.tickets.resource_address)

    def _find_ticket(self, section: Section, seat: str | None) -> Hashable:
        manager = self._ticket_manager
        for nf_id in sorted(self.tickets.non_fungible_ids()):
            ticket = manager.non_fungible_data(nf_id)
            if ticket.section == section and ticket.seat == seat:
                return nf_id
        raise ResourceError("Could not find an appropriate ticket!")

    def _switch_prediction(self, nft_bucket: Bucket) -> Bucket:
        (nf_id,) = nft_bucket.non_fungible_ids()
        manager = self._ticket_manager
        ticket = manager.non_fungible_data(nf_id)
        manager.update_non_fungible_data(
            nf_id, replace(ticket, prediction=Team.AWAY), [self.admin_authority.create_proof()]
        )
        return nft_bucket

    def _sell(self, section: Section, seat: str | None, price: Amount,
              will_home_team_win: bool, payment: Bucket) -> "tuple[Bucket, Bucket]":
        nf_id = self._find_ticket(section, seat)
        if payment.resource_address != self.collected_xrd.resource_address:
            raise ResourceError("payment must be in the native token")
        if payment.amount < price:
            raise ResourceError("insufficient payment")
        self.collected_xrd.put(payment.take(price))
        ticket = self.tickets.take_non_fungible(nf_id)
        if not will_home_team_win:
            ticket = self._switch_prediction(ticket)
        return ticket, payment

    def buy_field_ticket(self, will_home_team_win: bool, payment: Bucket) -> "tuple[Bucket, Bucket]":
        """Buy a field ticket; return it with the change."""
        return self._sell(Section.FIELD, None, self.price_field, will_home_team_win, payment)

    def buy_luxury_ticket(self, seat: str, will_home_team_win: bool,
                          payment: Bucket) -> "tuple[Bucket, Bucket]":
        """Buy the luxury ticket for ``seat``; return it with the change."""
        return self._sell(Section.LUXURY, seat, self.price_luxury, will_home_team_win, payment)