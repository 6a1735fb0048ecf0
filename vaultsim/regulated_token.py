"""A token that moves through three regulatory stages."""

from __future__ import annotations

from typing import Iterable

from vaultsim.amount import Amount
from vaultsim.resources import (
    DIVISIBILITY_MAXIMUM,
    DIVISIBILITY_NONE,
    Action,
    AuthorizationError,
    Bucket,
    Ledger,
    Proof,
    ResourceError,
    Rule,
    Vault,
)

STAGE_1 = "Stage 1 - Fixed supply, may be restricted transfer"
STAGE_2 = "Stage 2 - Unlimited supply, may be restricted transfer"
STAGE_3 = "Stage 3 - Unregulated token, fixed supply"


def _badge(ledger: Ledger, name: str) -> Bucket:
    return ledger.new_fungible(
        DIVISIBILITY_NONE, {"name": name}, 1, {Action.BURN: (Rule.allow_all(), None)}
    )


class RegulatedToken:
    """Sells REG tokens for the native token while an admin steers the token's rules."""

    def __init__(self, ledger: Ledger, token_supply: Vault, internal_authority: Vault,
                 admin_badge: str, freeze_badge: str) -> None:
        self.ledger = ledger
        self.token_supply = token_supply
        self.internal_authority = internal_authority
        self.collected_xrd = Vault(ledger.manager(ledger.native_address))
        self.current_stage = 1
        self.admin_badge_resource_address = admin_badge
        self.freeze_badge_resource_address = freeze_badge

    @classmethod
    def instantiate(cls, ledger: Ledger) -> "tuple[RegulatedToken, Bucket, Bucket]":
        """Create the component; return it with the general admin and freeze badges."""
        general_admin = _badge(ledger, "RegulatedToken general admin badge")
        freeze_admin = _badge(ledger, "RegulatedToken freeze-only badge")
        internal_admin = _badge(ledger, "RegulatedToken internal authority badge")
        access = Rule.require_any(general_admin.resource_address, internal_admin.resource_address)
        supply = ledger.new_fungible(
            DIVISIBILITY_MAXIMUM,
            {"name": "Regulo", "symbol": "REG", "stage": STAGE_1},
            100,
            {
                Action.UPDATE_METADATA: (access, access),
                Action.WITHDRAW: (access, access),
                Action.MINT: (access, access),
            },
        )
        component = cls(
            ledger,
            Vault(ledger.manager(supply.resource_address), supply),
            Vault(ledger.manager(internal_admin.resource_address), internal_admin),
            general_admin.resource_address,
            freeze_admin.resource_address,
        )
        return component, general_admin, freeze_admin

    @property
    def token_manager(self):
        return self.ledger.manager(self.token_supply.resource_address)

    def _internal(self) -> list[Proof]:
        return [self.internal_authority.create_proof()]

    def _require(self, proofs: Iterable[Proof], *badges: str) -> None:
        if not Rule.require_any(*badges).permits(proofs):
            raise AuthorizationError("missing required badge")

    def toggle_transfer_freeze(self, set_frozen: bool, proofs: Iterable[Proof]) -> None:
        """Restrict or free transfers; allowed for the general admin or freeze badge."""
        self._require(proofs, self.admin_badge_resource_address, self.freeze_badge_resource_address)
        if set_frozen:
            rule = Rule.require_any(self.admin_badge_resource_address, self.internal_authority.resource_address)
        else:
            rule = Rule.allow_all()
        self.token_manager.set_rule(Action.WITHDRAW, rule, self._internal())

    def get_current_stage(self) -> int:
        return self.current_stage

    def collect_payments(self, proofs: Iterable[Proof]) -> Bucket:
        self._require(proofs, self.admin_badge_resource_address)
        return self.collected_xrd.take_all()

    def advance_stage(self, proofs: Iterable[Proof]) -> None:
        self._require(proofs, self.admin_badge_resource_address)
        if self.current_stage > 2:
            raise ResourceError("Already at final stage")
        manager = self.token_manager
        badges = self._internal()
        if self.current_stage == 1:
            manager.update_metadata({**manager.metadata, "stage": STAGE_2}, badges)
            manager.set_rule(Action.MINT, Rule.require_any(self.internal_authority.resource_address), badges)
            self.current_stage = 2
            return
        manager.update_metadata({**manager.metadata, "stage": STAGE_3}, badges)
        manager.set_rule(Action.MINT, Rule.deny_all(), badges)
        manager.set_rule(Action.WITHDRAW, Rule.allow_all(), badges)
        manager.set_rule(Action.UPDATE_METADATA, Rule.deny_all(), badges)
        for action in (Action.MINT, Action.WITHDRAW, Action.UPDATE_METADATA):
            manager.lock(action, badges)
        internal = self.internal_authority.take_all()
        self.ledger.manager(internal.resource_address).burn(internal)
        self.current_stage = 3

    def buy_token(self, quantity: Amount | int, payment: Bucket) -> "tuple[Bucket, Bucket]":
        """Buy tokens from supply, minting any shortfall; return the tokens and the change."""
        quantity = Amount(quantity)
        if quantity <= 0:
            raise ResourceError("Can't sell you nothing or less than nothing")
        price = Amount(50) if self.current_stage == 1 else Amount(100)
        cost = price * quantity
        if payment.resource_address != self.collected_xrd.resource_address:
            raise ResourceError("payment must be in the native token")
        if payment.amount < cost:
            raise ResourceError("insufficient payment")
        badges = self._internal()
        extra_demand = quantity - self.token_supply.amount
        if extra_demand <= 0:
            tokens = self.token_supply.take(quantity, badges)
        else:
            tokens = self.token_manager.mint(extra_demand, badges)
            tokens.put(self.token_supply.take_all(badges))
        self.collected_xrd.put(payment.take(cost))
        return tokens, payment