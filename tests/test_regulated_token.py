import pytest

from vaultsim.amount import Amount
from vaultsim.regulated_token import RegulatedToken
from vaultsim.resources import AuthorizationError, Ledger, ResourceError, Vault


@pytest.fixture
def setup():
    ledger = Ledger()
    component, admin, freeze = RegulatedToken.instantiate(ledger)
    return ledger, component, admin, freeze


def test_initial_state(setup):
    _, component, _, _ = setup
    assert component.get_current_stage() == 1
    assert component.token_supply.amount == 100
    assert component.token_manager.metadata["stage"] == "Stage 1 - Fixed supply, may be restricted transfer"


def test_buy_from_supply_at_stage_one_price(setup):
    ledger, component, admin, _ = setup
    payment = ledger.mint_native(1000)
    tokens, change = component.buy_token(2, payment)
    assert tokens.amount == 2
    assert change.amount + component.collected_xrd.amount == 1000
    assert component.collected_xrd.amount == Amount(50) * 2
    assert component.collect_payments([admin.create_proof()]).amount == 100
    assert component.collected_xrd.amount.is_zero()


def test_buy_rejects_bad_input(setup):
    ledger, component, _, _ = setup
    with pytest.raises(ResourceError):
        component.buy_token(0, ledger.mint_native(10))
    payment = ledger.mint_native(10)
    with pytest.raises(ResourceError):
        component.buy_token(1, payment)
    assert payment.amount == 10


def test_buy_beyond_supply_mints(setup):
    ledger, component, _, _ = setup
    tokens, _ = component.buy_token(150, ledger.mint_native(7500))
    assert tokens.amount == 150
    assert component.token_supply.amount.is_zero()
    assert component.token_manager.total_supply == 150


def test_freeze_controls_withdrawal(setup):
    ledger, component, _, freeze = setup
    tokens, _ = component.buy_token(5, ledger.mint_native(250))
    wallet = Vault(component.token_manager, tokens)
    with pytest.raises(AuthorizationError):
        wallet.take(1)
    with pytest.raises(AuthorizationError):
        component.toggle_transfer_freeze(False, [])
    component.toggle_transfer_freeze(False, [freeze.create_proof()])
    assert wallet.take(1).amount == 1
    component.toggle_transfer_freeze(True, [freeze.create_proof()])
    with pytest.raises(AuthorizationError):
        wallet.take(1)


def test_admin_only_methods(setup):
    _, component, _, freeze = setup
    with pytest.raises(AuthorizationError):
        component.advance_stage([freeze.create_proof()])
    with pytest.raises(AuthorizationError):
        component.collect_payments([])
    assert component.get_current_stage() == 1


def test_stages(setup):
    ledger, component, admin, freeze = setup
    component.advance_stage([admin.create_proof()])
    assert component.get_current_stage() == 2
    assert component.token_manager.metadata["stage"] == "Stage 2 - Unlimited supply, may be restricted transfer"
    tokens, change = component.buy_token(101, ledger.mint_native(10100))
    assert tokens.amount == 101 and change.is_empty()

    component.advance_stage([admin.create_proof()])
    assert component.get_current_stage() == 3
    assert component.token_manager.metadata["stage"] == "Stage 3 - Unregulated token, fixed supply"
    assert component.internal_authority.amount.is_zero()
    assert ledger.manager(component.internal_authority.resource_address).total_supply.is_zero()
    with pytest.raises(ResourceError):
        component.advance_stage([admin.create_proof()])
    with pytest.raises(ResourceError):
        component.toggle_transfer_freeze(True, [freeze.create_proof()])
    payment = ledger.mint_native(100)
    with pytest.raises(AuthorizationError):
        component.buy_token(1, payment)
    assert payment.amount == 100
    wallet = Vault(component.token_manager, tokens)
    assert wallet.take(1).amount == 1