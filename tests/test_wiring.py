import pytest

from frax_deployment.constants import (
    COLLATERAL_FRAX_AND_FXS_OWNER,
    STAKING_OWNER,
    ZERO_ADDRESS,
    ResolutionMode,
)
from frax_deployment.errors import WiringError
from frax_deployment.resolver import ResolvedComponent
from frax_deployment.wiring import (
    ActivateStaking,
    LinkShareToken,
    RegisterPool,
    WiringPhase,
    WiringPlan,
    frax_wiring_plan,
)
from tests.conftest import address


def _component(name, component_address):
    return ResolvedComponent(
        name, "main", name, name, component_address, ResolutionMode.ATTACH
    )


@pytest.fixture
def components(ledger):
    components = {
        "FRAXStablecoin": _component("FRAXStablecoin", address(1)),
        "FRAXShares": _component("FRAXShares", address(2)),
        "Pool_USDC": _component("Pool_USDC", address(3)),
        "UniswapV2Pair_FRAX_WETH": _component("UniswapV2Pair_FRAX_WETH", address(4)),
        "StakingRewards_FRAX_WETH": _component("StakingRewards_FRAX_WETH", address(5)),
    }
    ledger.staking_tokens[address(5)] = address(4)
    return components


def test_frax_plan_order():
    transactions = frax_wiring_plan().order()
    assert len(transactions) == 8
    assert [tx.phase for tx in transactions] == sorted(tx.phase for tx in transactions)
    assert [tx.label for tx in transactions[:4]] == [
        "FRAXStablecoin.addPool(Pool_USDC)",
        "FRAXStablecoin.addPool(Pool_USDT)",
        "FRAXStablecoin.addPool(Pool_6DEC)",
        "FRAXShares.setFRAXAddress(FRAXStablecoin)",
    ]


def test_order_does_not_depend_on_declaration():
    plan = WiringPlan(
        [
            ActivateStaking("StakingRewards_FXS_WETH", "UniswapV2Pair_FXS_WETH"),
            LinkShareToken(),
            ActivateStaking("StakingRewards_FRAX_WETH", "UniswapV2Pair_FRAX_WETH"),
            RegisterPool("Pool_6DEC"),
            RegisterPool("Pool_USDC"),
        ]
    )
    phases = [tx.phase for tx in plan.order()]
    assert phases == [
        WiringPhase.POOL_REGISTRATION,
        WiringPhase.POOL_REGISTRATION,
        WiringPhase.TOKEN_LINKAGE,
        WiringPhase.STAKING_ACTIVATION,
        WiringPhase.STAKING_ACTIVATION,
    ]
    # declaration order is kept within a phase
    assert [tx.label for tx in plan.order()][:2] == [
        "FRAXStablecoin.addPool(Pool_6DEC)",
        "FRAXStablecoin.addPool(Pool_USDC)",
    ]


def test_duplicate_transactions():
    with pytest.raises(ValueError):
        WiringPlan([LinkShareToken(), LinkShareToken()])


def test_register_pool(ledger, components):
    tx = RegisterPool("Pool_USDC")
    tx.check(ledger, components)
    assert not tx.is_applied(ledger, components)

    tx.apply(ledger, components)
    assert tx.is_applied(ledger, components)
    assert ledger.transactions == [
        ("FRAXStablecoin", address(1), "addPool", (address(3),), COLLATERAL_FRAX_AND_FXS_OWNER)
    ]


def test_link_share_token(ledger, components):
    tx = LinkShareToken()
    assert not tx.is_applied(ledger, components)
    tx.apply(ledger, components)
    assert tx.is_applied(ledger, components)
    assert ledger.share_links[address(2)] == address(1)


def test_link_share_token_to_another_stable_token(ledger, components):
    ledger.share_links[address(2)] = address(99)
    assert not LinkShareToken().is_applied(ledger, components)


def test_activate_staking(ledger, components):
    tx = ActivateStaking("StakingRewards_FRAX_WETH", "UniswapV2Pair_FRAX_WETH")
    tx.check(ledger, components)
    assert not tx.is_applied(ledger, components)

    tx.apply(ledger, components)
    assert tx.is_applied(ledger, components)
    assert ledger.transactions[-1][2:] == ("initializeDefault", (), STAKING_OWNER)


def test_activate_staking_for_another_pair(ledger, components):
    ledger.staking_tokens[address(5)] = address(77)
    tx = ActivateStaking("StakingRewards_FRAX_WETH", "UniswapV2Pair_FRAX_WETH")
    with pytest.raises(WiringError, match="does not match") as e:
        tx.check(ledger, components)
    assert e.value.transaction == tx.label


def test_zero_address_target(ledger, components):
    components["Pool_USDC"] = _component("Pool_USDC", ZERO_ADDRESS)
    with pytest.raises(WiringError, match="zero address"):
        RegisterPool("Pool_USDC").check(ledger, components)
    assert ledger.transactions == []


def test_unresolved_target(ledger, components):
    with pytest.raises(WiringError, match="Pool_USDT"):
        RegisterPool("Pool_USDT").check(ledger, components)
