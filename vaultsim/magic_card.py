"""A shop selling collectible magic cards as non-fungible resources."""

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
    Proof,
    ResourceError,
    Rule,
    Vault,
)

_MAX_LEVEL = 255


class Color(enum.Enum):
    WHITE = "White"
    BLUE = "Blue"
    BLACK = "Black"
    RED = "Red"
    GREEN = "Green"


class Rarity(enum.Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    MYTHIC_RARE = "MythicRare"


@dataclass(frozen=True)
class MagicCard:
    """The data of one card; ``level`` is the only part that may change."""

    color: Color
    rarity: Rarity
    level: int

    def __post_init__(self) -> None:
        if not 0 <= self.level <= _MAX_LEVEL:
            raise ValueError(f"card level {self.level} is out of range 0..{_MAX_LEVEL}")


_COLORS = (Color.WHITE, Color.BLUE, Color.BLACK, Color.RED, Color.GREEN)
_RARITIES = (Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE, Rarity.MYTHIC_RARE)


def random_color(seed: int) -> Color:
    """Pick a color from a seed."""
    return _COLORS[seed % len(_COLORS)]


def random_rarity(seed: int) -> Rarity:
    """Pick a rarity from a seed."""
    return _RARITIES[seed % len(_RARITIES)]


def fuse_magic_cards(card1: MagicCard, card2: MagicCard) -> MagicCard:
    """Combine two cards: the first one's color, the second one's rarity, their levels summed."""
    return MagicCard(card1.color, card2.rarity, card1.level + card2.level)


class HelloNft:
    """Sells a fixed set of special cards and mints random cards on demand."""

    def __init__(
        self,
        ledger: Ledger,
        special_cards: Vault,
        special_card_prices: dict[Hashable, Amount],
        mint_badge: Vault,
        random_card_resource_address: str,
    ) -> None:
        self.ledger = ledger
        self.special_cards = special_cards
        self.special_card_prices = special_card_prices
        self.random_card_mint_badge = mint_badge
        self.random_card_resource_address = random_card_resource_address
        self.random_card_price = Amount(50)
        self.random_card_id_counter = 0
        self.collected_xrd = Vault(ledger.manager(ledger.native_address))

    @classmethod
    def instantiate(cls, ledger: Ledger) -> "HelloNft":
        special = ledger.new_non_fungible(
            {"name": "Russ' Magic Card Collection"},
            {
                1: MagicCard(Color.BLACK, Rarity.MYTHIC_RARE, 3),
                2: MagicCard(Color.GREEN, Rarity.RARE, 5),
                3: MagicCard(Color.RED, Rarity.UNCOMMON, 100),
            },
        )
        badge = ledger.new_fungible(DIVISIBILITY_NONE, {"name": "Random Cards Mint Badge"}, 1)
        needs_badge = Rule.require_any(badge.resource_address)
        random_address = ledger.new_non_fungible(
            {"name": "Random Cards"},
            None,
            {
                Action.MINT: (needs_badge, None),
                Action.BURN: (needs_badge, None),
                Action.UPDATE_NON_FUNGIBLE_DATA: (needs_badge, None),
            },
        )
        return cls(
            ledger,
            Vault(ledger.manager(special.resource_address), special),
            {1: Amount(500), 2: Amount(666), 3: Amount(123)},
            Vault(ledger.manager(badge.resource_address), badge),
            random_address,
        )

    def _badges(self) -> list[Proof]:
        return [self.random_card_mint_badge.create_proof()]

    def _check_payment(self, payment: Bucket, price: Amount) -> None:
        if payment.resource_address != self.collected_xrd.resource_address:
            raise ResourceError("payment must be in the native token")
        if payment.amount < price:
            raise ResourceError("insufficient payment")

    def _mint_card(self, card: MagicCard) -> Bucket:
        manager = self.ledger.manager(self.random_card_resource_address)
        bucket = manager.mint_non_fungible(self.random_card_id_counter, card, self._badges())
        self.random_card_id_counter += 1
        return bucket

    def buy_special_card(self, key: Hashable, payment: Bucket) -> "tuple[Bucket, Bucket]":
        """Buy the special card ``key``; return it with the change."""
        price = self.special_card_prices.get(key)
        if price is None:
            raise ResourceError(f"special card {key!r} is not for sale")
        self._check_payment(payment, price)
        del self.special_card_prices[key]
        self.collected_xrd.put(payment.take(price))
        return self.special_cards.take_non_fungible(key), payment

    def buy_random_card(self, payment: Bucket) -> "tuple[Bucket, Bucket]":
        """Mint a new card for the random-card price; return it with the change."""
        self._check_payment(payment, self.random_card_price)
        self.collected_xrd.put(payment.take(self.random_card_price))
        random_seed = 100
        card = MagicCard(random_color(random_seed), random_rarity(random_seed), random_seed % 8)
        return self._mint_card(card), payment

    def upgrade_my_card(self, nft_bucket: Bucket) -> Bucket:
        """Raise the level of the single card in ``nft_bucket`` by one."""
        if nft_bucket.amount != 1:
            raise ResourceError("We can upgrade only one card each time")
        (nf_id,) = nft_bucket.non_fungible_ids()
        manager = self.ledger.manager(nft_bucket.resource_address)
        card = manager.non_fungible_data(nf_id)
        manager.update_non_fungible_data(nf_id, replace(card, level=card.level + 1), self._badges())
        return nft_bucket

    def fuse_my_cards(self, nft_bucket: Bucket) -> Bucket:
        """Burn two random cards and mint their fusion."""
        if nft_bucket.amount != 2:
            raise ResourceError("You need to pass 2 NFTs for fusion")
        if nft_bucket.resource_address != self.random_card_resource_address:
            raise ResourceError("Only random cards can be fused")
        manager = self.ledger.manager(self.random_card_resource_address)
        first, second = (manager.non_fungible_data(i) for i in sorted(nft_bucket.non_fungible_ids()))
        new_card = fuse_magic_cards(first, second)
        manager.burn(nft_bucket, self._badges())
        return self._mint_card(new_card)