from typing import List, NamedTuple

from eth_typing import ChecksumAddress

from frax_deployment.constants import COLLATERAL_FRAX_AND_FXS_OWNER, PRODUCTION
from frax_deployment.ledger import Ledger
from frax_deployment.resolver import ResolvedComponents
from frax_deployment.topology import (
    FRAX,
    FXS,
    STAKING_PAIRS,
    collateral_component,
    pair_component,
)


class Transfer(NamedTuple):
    component: str
    amount: int


PROTOCOL_TOKEN_TRANSFERS = [
    Transfer(FXS, 1000 * 10**18),
    Transfer(FRAX, 1000 * 10**18),
]

# never sent on production
COLLATERAL_TRANSFERS = [
    Transfer("WETH", 10000 * 10**18),
    Transfer(collateral_component("USDC"), 200000 * 10**18),
    Transfer(collateral_component("USDT"), 200000 * 10**18),
    Transfer(collateral_component("6DEC"), 200000 * 10**6),
]

_LIQUIDITY_AMOUNTS = {("FRAX", "WETH"): 15 * 10**18}

LIQUIDITY_TOKEN_TRANSFERS = [
    Transfer(pair_component(a, b), _LIQUIDITY_AMOUNTS.get((a, b), 25 * 10**18))
    for a, b in STAKING_PAIRS
]


def funding_transfers(environment: str) -> List[Transfer]:
    """The token transfers funding a test wallet in the given environment."""
    transfers = list(PROTOCOL_TOKEN_TRANSFERS)
    if environment != PRODUCTION:
        transfers.extend(COLLATERAL_TRANSFERS)
    transfers.extend(LIQUIDITY_TOKEN_TRANSFERS)
    return transfers


def fund_wallet(
    ledger: Ledger,
    components: ResolvedComponents,
    wallet: ChecksumAddress,
    environment: str,
    actor: str = COLLATERAL_FRAX_AND_FXS_OWNER,
) -> List[Transfer]:
    """Transfers protocol, collateral and liquidity tokens to 'wallet'."""
    transfers = funding_transfers(environment)
    for transfer in transfers:
        token = components[transfer.component]
        print(f"(i) Sending {transfer.amount} {transfer.component} to {wallet}")
        ledger.transact(
            token.contract_type, token.address, "transfer", wallet, transfer.amount, actor=actor
        )
    return transfers
