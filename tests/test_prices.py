from decimal import Decimal

import pytest

from frax_deployment.prices import (
    ORACLE_QUERIES,
    PRICE_COMPONENTS,
    collect_prices,
    oracle_prices,
    stable_token_prices,
)


@pytest.fixture
def priced_components(deployed_local, ledger):
    resolved = deployed_local.resolved
    frax = resolved["FRAXStablecoin"].address
    ledger.values[(frax, "frax_price")] = 980000
    ledger.values[(frax, "fxs_price")] = 210000
    for query in ORACLE_QUERIES:
        ledger.values[(resolved[query.oracle].address, "consult")] = 2_500_000
    return {name: resolved[name] for name in PRICE_COMPONENTS}


def test_stable_token_prices(ledger, priced_components):
    quotes = stable_token_prices(ledger, priced_components)
    assert [str(q) for q in quotes] == [
        "frax_price: 0.98 USD = 1 FRAX",
        "fxs_price: 0.21 USD = 1 FXS",
    ]


def test_oracle_prices(ledger, priced_components):
    quotes = {q.label: q for q in oracle_prices(ledger, priced_components)}

    assert quotes["frax_price_from_FRAX_WETH"].price == Decimal("2.5")
    assert quotes["frax_price_from_FRAX_WETH"].unit == "FRAX = 1 WETH"
    assert quotes["fxs_price_from_FXS_WETH"].unit == "FXS = 1 WETH"
    assert quotes["USDC_price_from_USDC_WETH"].price == Decimal("2.5")
    # quoted for 1e12 and not scaled down
    assert quotes["6DEC_price_from_6DEC_WETH"].price == Decimal(2_500_000)


def test_oracles_are_consulted_for_the_quoted_token(ledger, priced_components):
    oracle_prices(ledger, priced_components)
    consults = [read for read in ledger.reads if read[2] == "consult"]
    assert len(consults) == len(ORACLE_QUERIES)

    frax_fxs = priced_components["UniswapPairOracle_FRAX_FXS"]
    fxs = priced_components["FRAXShares"]
    assert (frax_fxs.contract_type, frax_fxs.address, "consult", (fxs.address, 10**6)) in consults


def test_collect_prices(ledger, priced_components):
    assert len(collect_prices(ledger, priced_components)) == 2 + len(ORACLE_QUERIES)
