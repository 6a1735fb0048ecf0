"""A pool that mints synthetic assets against staked collateral."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable

from vaultsim.amount import Amount
from vaultsim.resources import (
    DIVISIBILITY_MAXIMUM,
    DIVISIBILITY_NONE,
    Action,
    Bucket,
    Ledger,
    Proof,
    ResourceError,
    ResourceManager,
    Rule,
    Vault,
)


class StaticPriceOracle:
    """Holds prices for pairs of resources, set explicitly."""

    def __init__(self) -> None:
        self._prices: dict[tuple[Hashable, Hashable], Amount] = {}

    def get_price(self, base: Hashable, quote: Hashable) -> Amount | None:
        """Return the price of ``base`` in ``quote``, or None when unknown."""
        return self._prices.get((base, quote))

    def update_price(self, base: Hashable, quote: Hashable, price: Amount | int | str) -> None:
        self._prices[(base, quote)] = Amount(price)


@dataclass(frozen=True)
class SyntheticToken:
    """A synthetic asset: its symbol, the tracked asset and the synth resource."""

    asset_symbol: str
    asset_address: str
    token_resource_address: str


class User:
    """A staker's collateral and share of the global debt."""

    def __init__(self, snx_manager: ResourceManager, debt_manager: ResourceManager) -> None:
        self.snx = Vault(snx_manager)
        self.global_debt_share = Vault(debt_manager)

    def check_collateralization_ratio(
        self,
        snx_price: Amount,
        global_debt: Amount,
        debt_manager: ResourceManager,
        threshold: Amount,
    ) -> None:
        """Raise if the user's collateral falls below ``threshold`` times their debt."""
        total_shares = debt_manager.total_supply
        shares = self.global_debt_share.amount
        if total_shares.is_zero() or shares.is_zero():
            return
        ratio = self.snx.amount * snx_price / (global_debt / total_shares * shares)
        if ratio < threshold:
            raise ResourceError("Under collateralized!")


class SyntheticPool:
    """Lets users stake SNX, mint synthetics as debt, and burn them to repay."""

    def __init__(
        self,
        ledger: Ledger,
        oracle: StaticPriceOracle,
        snx_address: str,
        usd_address: str,
        collateralization_threshold: Amount,
        mint_badge: Vault,
        debt_share_address: str,
    ) -> None:
        self.ledger = ledger
        self.oracle = oracle
        self.snx_resource_address = snx_address
        self.usd_resource_address = usd_address
        self.collateralization_threshold = collateralization_threshold
        self.users: dict[str, User] = {}
        self.synthetics: dict[str, SyntheticToken] = {}
        self.synthetics_mint_badge = mint_badge
        self.synthetics_global_debt_share_resource_address = debt_share_address

    @classmethod
    def instantiate(
        cls,
        ledger: Ledger,
        oracle: StaticPriceOracle,
        snx_address: str,
        usd_address: str,
        collateralization_threshold: Amount | int | str,
    ) -> "SyntheticPool":
        badge = ledger.new_fungible(DIVISIBILITY_NONE, {"name": "Synthetics Mint Badge"}, 1)
        needs_badge = Rule.require_any(badge.resource_address)
        debt_address = ledger.new_fungible(
            DIVISIBILITY_MAXIMUM,
            {"name": "Synthetics Global Debt"},
            None,
            {Action.MINT: (needs_badge, None), Action.BURN: (needs_badge, None)},
        )
        return cls(
            ledger,
            oracle,
            snx_address,
            usd_address,
            Amount(collateralization_threshold),
            Vault(ledger.manager(badge.resource_address), badge),
            debt_address,
        )

    @property
    def _debt_manager(self) -> ResourceManager:
        return self.ledger.manager(self.synthetics_global_debt_share_resource_address)

    def _badges(self) -> list[Proof]:
        return [self.synthetics_mint_badge.create_proof()]

    def add_synthetic_token(self, asset_symbol: str, asset_address: str) -> str:
        """Register a synthetic for an asset; return the synth's resource address."""
        if asset_symbol in self.synthetics:
            raise ResourceError("Asset already exist")
        needs_badge = Rule.require_any(self.synthetics_mint_badge.resource_address)
        token_address = self.ledger.new_fungible(
            DIVISIBILITY_MAXIMUM,
            {"name": f"Synthetic {asset_symbol}", "symbol": f"s{asset_symbol}"},
            None,
            {Action.MINT: (needs_badge, None), Action.BURN: (needs_badge, None)},
        )
        self.synthetics[asset_symbol] = SyntheticToken(asset_symbol, asset_address, token_address)
        return token_address

    def stake(self, user_auth: Proof, stake_in_snx: Bucket) -> None:
        user = self._get_user(self._user_id(user_auth), create_if_missing=True)
        user.snx.put(stake_in_snx)

    def _check(self, user: User) -> None:
        user.check_collateralization_ratio(
            self.get_snx_price(),
            self.get_total_global_debt(),
            self._debt_manager,
            self.collateralization_threshold,
        )

    def unstake(self, user_auth: Proof, amount: Amount | int | str) -> Bucket:
        user = self._get_user(self._user_id(user_auth))
        tokens = user.snx.take(Amount(amount))
        try:
            self._check(user)
        except ResourceError:
            user.snx.put(tokens)
            raise
        return tokens

    def mint(self, user_auth: Proof, amount: Amount | int | str, symbol: str) -> Bucket:
        """Mint ``amount`` of the synthetic ``symbol``, taking on the matching debt."""
        amount = Amount(amount)
        user = self._get_user(self._user_id(user_auth))
        try:
            synth = self.synthetics[symbol]
        except KeyError:
            raise ResourceError(f"unknown synthetic {symbol}") from None
        global_debt = self.get_total_global_debt()
        new_debt = self.get_asset_price(synth.asset_address) * amount
        debt_manager = self._debt_manager
        if global_debt.is_zero():
            share_amount = Amount(100)
        else:
            share_amount = new_debt / (global_debt / debt_manager.total_supply)
        badges = self._badges()
        user.global_debt_share.put(debt_manager.mint(share_amount, badges))
        token_manager = self.ledger.manager(synth.token_resource_address)
        tokens = token_manager.mint(amount, badges)
        try:
            self._check(user)
        except ResourceError:
            token_manager.burn(tokens, badges)
            debt_manager.burn(user.global_debt_share.take(share_amount), badges)
            raise
        return tokens

    def burn(self, user_auth: Proof, bucket: Bucket) -> None:
        """Burn synthetic tokens and retire the matching share of debt."""
        user = self._get_user(self._user_id(user_auth))
        synth = next(
            (s for s in self.synthetics.values() if s.token_resource_address == bucket.resource_address),
            None,
        )
        if synth is None:
            raise ResourceError("bucket does not hold a known synthetic")
        global_debt = self.get_total_global_debt()
        debt_to_remove = self.get_asset_price(synth.asset_address) * bucket.amount
        debt_manager = self._debt_manager
        shares_to_burn = user.global_debt_share.take(debt_manager.total_supply * debt_to_remove / global_debt)
        badges = self._badges()
        debt_manager.burn(shares_to_burn, badges)
        self.ledger.manager(synth.token_resource_address).burn(bucket, badges)

    def get_total_global_debt(self) -> Amount:
        return sum(
            (
                self.get_asset_price(s.asset_address) * self.ledger.manager(s.token_resource_address).total_supply
                for s in self.synthetics.values()
            ),
            Amount(0),
        )

    def get_snx_price(self) -> Amount:
        return self.get_asset_price(self.snx_resource_address)

    def get_asset_price(self, asset_address: str) -> Amount:
        price = self.oracle.get_price(asset_address, self.usd_resource_address)
        if price is None:
            raise ResourceError(f"Failed to obtain price of {asset_address}/{self.usd_resource_address}")
        return price

    def get_user_summary(self, user_id: str) -> str:
        user = self._get_user(user_id)
        return (
            f"SNX balance: {user.snx.amount}, SNX price: {self.get_snx_price()}, "
            f"Debt: {self.get_total_global_debt()} * {user.global_debt_share.amount} / "
            f"{self._debt_manager.total_supply}"
        )

    def new_user(self) -> Bucket:
        """Issue a fresh user badge."""
        return self.ledger.new_fungible(DIVISIBILITY_NONE, {"name": "Synthetic Pool User Badge"}, 1)

    @staticmethod
    def _user_id(user_auth: Proof) -> str:
        if not user_auth.amount > 0:
            raise ResourceError("Invalid user proof")
        return user_auth.resource_address

    def _get_user(self, user_id: str, create_if_missing: bool = False) -> User:
        user = self.users.get(user_id)
        if user is not None:
            return user
        if not create_if_missing:
            raise ResourceError("User not found")
        user = User(self.ledger.manager(self.snx_resource_address), self._debt_manager)
        self.users[user_id] = user
        return user