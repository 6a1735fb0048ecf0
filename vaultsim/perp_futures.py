"""Perpetual futures traded against a virtual constant-product market maker."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from vaultsim.amount import Amount
from vaultsim.resources import (
    DIVISIBILITY_NONE,
    Bucket,
    Ledger,
    Proof,
    ResourceError,
    Vault,
)

_MIN_LEVERAGE = Amount(1)
_MAX_LEVERAGE = Amount(16)


class PositionType(enum.Enum):
    LONG = "Long"
    SHORT = "Short"


@dataclass(frozen=True)
class Position:
    """An open position; ``position_in_base`` is positive for longs and negative for shorts."""

    position_type: PositionType
    margin_in_quote: Amount
    leverage: Amount
    position_in_base: Amount


@dataclass
class AMM:
    """A virtual market holding base and quote supplies whose product is kept constant."""

    base_supply: Amount
    quote_supply: Amount

    def new_position(self, margin_in_quote: Amount, leverage: Amount, position_type: PositionType) -> Position:
        """Open a position, moving the market, and return it."""
        k = self.base_supply * self.quote_supply
        notional = margin_in_quote * leverage
        if position_type is PositionType.LONG:
            new_quote_supply = self.quote_supply + notional
        else:
            new_quote_supply = self.quote_supply - notional
        new_base_supply = k / new_quote_supply

        position_in_base = self.base_supply - new_base_supply
        self.quote_supply = new_quote_supply
        self.base_supply = new_base_supply
        return Position(position_type, margin_in_quote, leverage, position_in_base)

    def settle_position(self, position: Position) -> Amount:
        """Close a position, moving the market back, and return its profit or loss."""
        pnl = self.get_pnl(position)
        k = self.base_supply * self.quote_supply
        self.base_supply = self.base_supply + position.position_in_base
        self.quote_supply = k / self.base_supply
        return pnl

    def get_price(self) -> Amount:
        """The current price of base in quote."""
        return self.quote_supply / self.base_supply

    def get_margin_ratio(self, position: Position) -> Amount:
        return (position.margin_in_quote + self.get_pnl(position)) / (
            self.get_price() * abs(position.position_in_base)
        )

    def get_pnl(self, position: Position) -> Amount:
        k = self.base_supply * self.quote_supply
        new_base_supply = self.base_supply + position.position_in_base
        new_quote_supply = k / new_base_supply
        delta_in_quote = self.quote_supply - new_quote_supply
        notional = position.margin_in_quote * position.leverage
        if position.position_type is PositionType.LONG:
            return delta_in_quote - notional
        return delta_in_quote + notional


class ClearingHouse:
    """Holds traders' margin and positions and settles them against the virtual market."""

    def __init__(self, ledger: Ledger, deposits: Vault, amm: AMM) -> None:
        self.ledger = ledger
        self.trader_positions: dict[str, list[Position]] = {}
        self.deposits_in_quote = deposits
        self.liquidation_threshold = Amount.parse("0.06")
        self.amm = amm

    @classmethod
    def instantiate(
        cls,
        ledger: Ledger,
        quote_address: str,
        base_init_supply: Amount | int | str,
        quote_init_supply: Amount | int | str,
    ) -> "ClearingHouse":
        return cls(
            ledger,
            Vault(ledger.manager(quote_address)),
            AMM(Amount(base_init_supply), Amount(quote_init_supply)),
        )

    def new_position(
        self,
        user_auth: Proof,
        margin: Bucket,
        leverage: Amount | int | str,
        position_type: PositionType | str,
    ) -> None:
        """Open a position funded by ``margin`` with leverage between 1 and 16."""
        leverage = Amount(leverage)
        if not _MIN_LEVERAGE <= leverage <= _MAX_LEVERAGE:
            raise ResourceError("leverage must be between 1 and 16")
        user_id = self._user_id(user_auth)
        try:
            kind = PositionType(position_type)
        except ValueError:
            raise ResourceError("Invalid position type") from None
        if margin.resource_address != self.deposits_in_quote.resource_address:
            raise ResourceError("margin must be in the quote resource")

        position = self.amm.new_position(margin.amount, leverage, kind)
        self.trader_positions.setdefault(user_id, []).append(position)
        self.deposits_in_quote.put(margin)

    def settle_position(self, user_auth: Proof, nth: int) -> Bucket:
        """Close the caller's ``nth`` position and return margin plus profit or loss."""
        return self._settle(self._user_id(user_auth), nth)

    def liquidate(self, user_id: str, nth: int) -> Bucket:
        """Close another trader's position whose margin ratio has fallen to the threshold."""
        if self.get_margin_ratio(user_id, nth) > self.liquidation_threshold:
            raise ResourceError("Position can't be liquidated")
        return self._settle(user_id, nth)

    def get_price(self) -> Amount:
        return self.amm.get_price()

    def get_position(self, user_id: str, nth: int) -> Position:
        positions = self.trader_positions.get(user_id)
        if positions is None:
            raise ResourceError("User has no positions")
        if not 0 <= nth < len(positions):
            raise ResourceError(f"No position at index {nth}")
        return positions[nth]

    def get_margin_ratio(self, user_id: str, nth: int) -> Amount:
        return self.amm.get_margin_ratio(self.get_position(user_id, nth))

    def donate(self, donation: Bucket) -> None:
        self.deposits_in_quote.put(donation)

    def new_user(self) -> Bucket:
        """Issue a fresh user badge."""
        return self.ledger.new_fungible(DIVISIBILITY_NONE, {"name": "xPerpFutures User Badge"}, 1)

    @staticmethod
    def _user_id(user_auth: Proof) -> str:
        if not user_auth.amount > 0:
            raise ResourceError("Invalid user proof")
        return user_auth.resource_address

    def _settle(self, user_id: str, nth: int) -> Bucket:
        position = self.get_position(user_id, nth)
        amm = replace(self.amm)
        pnl = amm.settle_position(position)
        payout = self.deposits_in_quote.take(position.margin_in_quote + pnl)

        self.amm = amm
        positions = self.trader_positions[user_id]
        last = positions.pop()
        if nth < len(positions):
            positions[nth] = last
        return payout