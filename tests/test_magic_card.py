import pytest

from vaultsim.magic_card import (
    Color,
    HelloNft,
    MagicCard,
    Rarity,
    fuse_magic_cards,
    random_color,
    random_rarity,
)
from vaultsim.resources import AuthorizationError, Ledger, ResourceError


@pytest.fixture
def setup():
    ledger = Ledger()
    return ledger, HelloNft.instantiate(ledger)


def _random_card(ledger, shop):
    card, _ = shop.buy_random_card(ledger.mint_native(50))
    return card


def test_magic_card_flow(setup):
    ledger, shop = setup
    nft, change = shop.buy_special_card(2, ledger.mint_native(666))
    assert nft.non_fungible_ids() == [2]
    assert change.amount == 0
    assert ledger.manager(nft.resource_address).non_fungible_data(2) == MagicCard(Color.GREEN, Rarity.RARE, 5)

    card, change = shop.buy_random_card(ledger.mint_native(1000))
    assert card.non_fungible_ids() == [0]
    assert change.amount == 950
    assert shop.collected_xrd.amount == 716
    data = ledger.manager(card.resource_address).non_fungible_data(0)
    assert data == MagicCard(Color.WHITE, Rarity.COMMON, 4)


def test_special_card_sold_once(setup):
    ledger, shop = setup
    shop.buy_special_card(1, ledger.mint_native(500))
    with pytest.raises(ResourceError):
        shop.buy_special_card(1, ledger.mint_native(500))


def test_special_card_insufficient_payment_keeps_card(setup):
    ledger, shop = setup
    with pytest.raises(ResourceError):
        shop.buy_special_card(3, ledger.mint_native(100))
    assert 3 in shop.special_cards.non_fungible_ids()
    assert shop.collected_xrd.amount == 0


def test_random_card_ids_increase(setup):
    ledger, shop = setup
    first = _random_card(ledger, shop)
    second = _random_card(ledger, shop)
    assert first.non_fungible_ids() == [0]
    assert second.non_fungible_ids() == [1]
    assert shop.random_card_id_counter == 2


def test_upgrade_random_card(setup):
    ledger, shop = setup
    card = _random_card(ledger, shop)
    shop.upgrade_my_card(card)
    assert ledger.manager(card.resource_address).non_fungible_data(0).level == 5


def test_upgrade_special_card_not_permitted(setup):
    ledger, shop = setup
    nft, _ = shop.buy_special_card(1, ledger.mint_native(500))
    with pytest.raises(AuthorizationError):
        shop.upgrade_my_card(nft)


def test_upgrade_requires_single_card(setup):
    ledger, shop = setup
    card = _random_card(ledger, shop)
    card.put(_random_card(ledger, shop))
    with pytest.raises(ResourceError, match="only one card"):
        shop.upgrade_my_card(card)


def test_fuse_cards(setup):
    ledger, shop = setup
    cards = _random_card(ledger, shop)
    cards.put(_random_card(ledger, shop))
    fused = shop.fuse_my_cards(cards)
    manager = ledger.manager(shop.random_card_resource_address)
    assert fused.non_fungible_ids() == [2]
    assert manager.non_fungible_data(2) == MagicCard(Color.WHITE, Rarity.COMMON, 8)
    assert manager.total_supply == 1
    with pytest.raises(ResourceError):
        manager.non_fungible_data(0)


def test_fuse_rejects_special_cards(setup):
    ledger, shop = setup
    cards, _ = shop.buy_special_card(1, ledger.mint_native(500))
    other, _ = shop.buy_special_card(2, ledger.mint_native(666))
    cards.put(other)
    with pytest.raises(ResourceError, match="Only random cards"):
        shop.fuse_my_cards(cards)


def test_fuse_requires_two_cards(setup):
    ledger, shop = setup
    with pytest.raises(ResourceError, match="2 NFTs"):
        shop.fuse_my_cards(_random_card(ledger, shop))


@pytest.mark.parametrize(
    "seed, color",
    [(0, Color.WHITE), (1, Color.BLUE), (2, Color.BLACK), (3, Color.RED), (4, Color.GREEN), (5, Color.WHITE)],
)
def test_random_color(seed, color):
    assert random_color(seed) is color


@pytest.mark.parametrize(
    "seed, rarity",
    [(0, Rarity.COMMON), (1, Rarity.UNCOMMON), (2, Rarity.RARE), (3, Rarity.MYTHIC_RARE), (4, Rarity.COMMON)],
)
def test_random_rarity(seed, rarity):
    assert random_rarity(seed) is rarity


def test_fuse_magic_cards():
    fused = fuse_magic_cards(MagicCard(Color.RED, Rarity.COMMON, 3), MagicCard(Color.BLUE, Rarity.RARE, 5))
    assert fused == MagicCard(Color.RED, Rarity.RARE, 8)


def test_level_out_of_range():
    with pytest.raises(ValueError):
        fuse_magic_cards(MagicCard(Color.RED, Rarity.COMMON, 200), MagicCard(Color.RED, Rarity.COMMON, 100))