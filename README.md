# vaultsim

vaultsim is an in-memory model of resource vaults that are guarded by
badges. It also includes a few small financial and collectible components
built on that model. All state lives in a `Ledger` object, which you create
and pass to each component.

## Modules

### `vaultsim.amount`

`Amount` is a signed fixed-point decimal with 18 fractional digits.

- Products and quotients truncate toward zero.
- Parse a value with `Amount.parse("0.06")`.
- Build a value with `Amount(5)`, `Amount("1.5")` or from another `Amount`.
- Amounts mix with plain integers in arithmetic and comparisons.

### `vaultsim.resources`

This module holds the ledger model.

- **`Ledger`**
  - `new_fungible(...)` and `new_non_fungible(...)` create a resource. They
    return a bucket of the initial supply, or the resource's address when no
    supply is given.
  - `manager(address)` returns the `ResourceManager` for an address.
  - `mint_native(amount)` issues the native payment token.
- **`Bucket`** is a transient holder of one resource. Its methods are `take`,
  `take_non_fungible`, `put`, `non_fungible_ids`, `is_empty` and
  `create_proof`.
- **`Vault`** is a persistent holder. Every withdrawal is checked against the
  resource's withdraw rule.
- **`Proof`** is evidence that a quantity of a badge is held. Proofs are
  passed as `badges` or `proofs` arguments.
- **`ResourceManager`** manages supply, metadata and non-fungible data.
  - Each `Action` (mint, burn, withdraw, update metadata, update non-fungible
    data) is guarded by a `Rule`.
  - A `Rule` is one of `Rule.allow_all()`, `Rule.deny_all()` or
    `Rule.require_any(...)`.
  - `set_rule` changes a rule and `lock` fixes it for good.
- **Errors**: a refused action raises `AuthorizationError`. Any other misuse
  raises `ResourceError`, which is the base class of `AuthorizationError`.

### `vaultsim.regulated_token`

`RegulatedToken` sells REG tokens for the native token. It moves through
three stages:

1. A fixed supply of 100 at a price of 50. Transfers can be frozen with
   `toggle_transfer_freeze`.
2. A price of 100, and any shortfall is minted when someone buys.
3. Minting is denied, withdrawal is open, the rules are locked, and the
   internal badge is burned.

`instantiate` returns the component together with a general admin badge and
a freeze badge.

### `vaultsim.synthetics`

`SyntheticPool` lets a user do the following:

- stake SNX;
- mint synthetic assets registered with `add_synthetic_token`, which takes on
  a share of the global debt;
- burn synthetic assets to retire that share.

Prices come from a `StaticPriceOracle`, whose prices you set with
`update_price`. Minting and unstaking are refused with "Under collateralized!"
when the user's ratio falls below the threshold.

### `vaultsim.perp_futures`

`ClearingHouse` opens leveraged `Position`s against a virtual constant-product
`AMM`.

- A position is `PositionType.LONG` or `PositionType.SHORT`, or the string
  `"Long"` or `"Short"`.
- Leverage must be between 1 and 16.
- `settle_position` pays out the margin plus the profit or loss.
- `liquidate` closes a position whose margin ratio is at or below 0.06.

### `vaultsim.magic_card`

`HelloNft` sells three special cards, priced at 500, 666 and 123. It also
mints random cards at 50 each.

- `upgrade_my_card` raises a card's level by one.
- `fuse_my_cards` burns two random cards and mints a new one with the first
  card's color, the second card's rarity and the sum of their levels.

### `vaultsim.sporting_event`

`SportingEvent` sells tickets for the native token:

- 27 luxury seats, A1 to C9, at 100 each;
- 99 field tickets at 10 each.

When the buyer predicts an away win, the ticket's prediction is switched to
`Team.AWAY`.

## Example

```python
from vaultsim.amount import Amount
from vaultsim.resources import Ledger
from vaultsim.perp_futures import ClearingHouse

ledger = Ledger()
usd = ledger.new_fungible(18, {"name": "USD"}, Amount.parse("1000000"), {})
house = ClearingHouse.instantiate(ledger, usd.resource_address, 1, 99999)
house.donate(usd.take(1000))

badge = house.new_user()
house.new_position(badge.create_proof(), usd.take(500), 4, "Long")
position = house.get_position(badge.resource_address, 0)
print(position.position_in_base)   # 0.019608035372895813

payout = house.settle_position(badge.create_proof(), 0)
```

## Errors

Every failure raises an exception, so there are no return codes to check.
Typical failures are:

- advancing past the final stage;
- paying too little;
- missing a badge;
- using an unknown user;
- a mint or unstake that would leave the user under-collateralised.

## What it does not do

vaultsim is a library only.

- It has no command-line tool.
- It has no network access.
- It does not store anything on disk.
- Prices come only from the in-memory `StaticPriceOracle`.
- Random cards are always generated from a fixed seed.
- `SyntheticPool` has no liquidation.

## Tests

```
pip install -e ".[test]"
pytest
```