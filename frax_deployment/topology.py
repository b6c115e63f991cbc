from typing import Dict, List, NamedTuple, Optional, Tuple

from frax_deployment.constants import (
    COLLATERAL,
    GOVERNANCE,
    MAIN,
    MISC,
    ORACLES,
    POOLS,
    PRICING,
    SCALAR_CATEGORIES,
    STAKE_TOKENS,
    STAKING_CONTRACTS,
    UNISWAP_OTHER,
    WETH,
)

ComponentName = str


class ComponentDescriptor(NamedTuple):
    """Static description of a single protocol component."""

    name: ComponentName
    category: str
    key: Optional[str]
    contract_type: str
    depends_on: Tuple[ComponentName, ...] = ()
    # liquidity pairs only: the two tokens the factory pairs together
    tokens: Tuple[ComponentName, ...] = ()

    @property
    def is_pair(self) -> bool:
        return bool(self.tokens)

    @property
    def location(self) -> str:
        """Human readable position of this component in a manifest."""
        if self.key is None:
            return self.category
        return f"{self.category}.{self.key}"


class Topology:
    """An immutable, ordered set of component descriptors."""

    def __init__(self, descriptors: List[ComponentDescriptor]):
        self._descriptors: Dict[ComponentName, ComponentDescriptor] = dict()
        locations = set()
        for descriptor in descriptors:
            if descriptor.name in self._descriptors:
                raise ValueError(f"Duplicate component name '{descriptor.name}'.")
            if descriptor.location in locations:
                raise ValueError(f"Duplicate manifest location '{descriptor.location}'.")
            if (descriptor.key is None) != (descriptor.category in SCALAR_CATEGORIES):
                raise ValueError(
                    f"Component '{descriptor.name}' has an invalid key for "
                    f"category '{descriptor.category}'."
                )
            locations.add(descriptor.location)
            self._descriptors[descriptor.name] = descriptor

    def __iter__(self):
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: ComponentName) -> bool:
        return name in self._descriptors

    def __getitem__(self, name: ComponentName) -> ComponentDescriptor:
        return self._descriptors[name]

    @property
    def names(self) -> List[ComponentName]:
        return list(self._descriptors)

    def by_category(self, category: str) -> List[ComponentDescriptor]:
        return [d for d in self._descriptors.values() if d.category == category]


#
# FRAX protocol
#

FRAX = "FRAXStablecoin"
FXS = "FRAXShares"
TIMELOCK = "Timelock"
FACTORY = "UniswapV2Factory"
ROUTER = "UniswapV2Router02_Modified"

COLLATERAL_SYMBOLS = ["USDC", "USDT", "6DEC"]

ORACLE_PAIRS = [
    ("FRAX", "WETH"),
    ("FRAX", "USDC"),
    ("FRAX", "USDT"),
    ("FRAX", "6DEC"),
    ("FRAX", "FXS"),
    ("FXS", "WETH"),
    ("FXS", "USDC"),
    ("FXS", "USDT"),
    ("FXS", "6DEC"),
    ("USDC", "WETH"),
    ("USDT", "WETH"),
    ("6DEC", "WETH"),
]

STAKING_PAIRS = [
    ("FRAX", "WETH"),
    ("FRAX", "USDC"),
    ("FRAX", "FXS"),
    ("FXS", "WETH"),
]


def token_component(symbol: str) -> ComponentName:
    """Maps a token symbol (as used in pair names) to its component name."""
    if symbol == "FRAX":
        return FRAX
    if symbol == "FXS":
        return FXS
    if symbol == "WETH":
        return "WETH"
    return collateral_component(symbol)


def collateral_component(symbol: str) -> ComponentName:
    return f"FakeCollateral_{symbol}"


def pool_component(symbol: str) -> ComponentName:
    return f"Pool_{symbol}"


def oracle_component(symbol_a: str, symbol_b: str) -> ComponentName:
    return f"UniswapPairOracle_{symbol_a}_{symbol_b}"


def pair_component(symbol_a: str, symbol_b: str) -> ComponentName:
    return f"UniswapV2Pair_{symbol_a}_{symbol_b}"


def staking_component(symbol_a: str, symbol_b: str) -> ComponentName:
    return f"StakingRewards_{symbol_a}_{symbol_b}"


def stake_token_key(symbol_a: str, symbol_b: str) -> str:
    return f"Uniswap {symbol_a}/{symbol_b}"


def frax_topology() -> Topology:
    descriptors = [
        ComponentDescriptor(TIMELOCK, MISC, "timelock", "Timelock"),
        ComponentDescriptor("MigrationHelper", MISC, "migration_helper", "MigrationHelper"),
        ComponentDescriptor(FXS, MAIN, "FXS", "FRAXShares", (TIMELOCK,)),
        ComponentDescriptor(FRAX, MAIN, "FRAX", "FRAXStablecoin", (TIMELOCK,)),
        ComponentDescriptor("TokenVesting", MAIN, "vesting", "TokenVesting", (FXS, TIMELOCK)),
        ComponentDescriptor("GovernorAlpha", GOVERNANCE, None, "GovernorAlpha", (TIMELOCK, FXS)),
        ComponentDescriptor("WETH", WETH, None, "WETH"),
    ]

    for symbol in COLLATERAL_SYMBOLS:
        descriptors.append(
            ComponentDescriptor(
                collateral_component(symbol), COLLATERAL, symbol, f"FakeCollateral_{symbol}"
            )
        )

    descriptors.extend(
        [
            ComponentDescriptor(FACTORY, UNISWAP_OTHER, "factory", "UniswapV2Factory"),
            ComponentDescriptor(
                ROUTER, UNISWAP_OTHER, "router", "UniswapV2Router02_Modified", (FACTORY, "WETH")
            ),
            ComponentDescriptor(
                "SwapToPrice", PRICING, "swap_to_price", "SwapToPrice", (FACTORY, ROUTER)
            ),
        ]
    )

    for symbol_a, symbol_b in STAKING_PAIRS:
        tokens = (token_component(symbol_a), token_component(symbol_b))
        descriptors.append(
            ComponentDescriptor(
                name=pair_component(symbol_a, symbol_b),
                category=STAKE_TOKENS,
                key=stake_token_key(symbol_a, symbol_b),
                contract_type="UniswapV2Pair",
                depends_on=(FACTORY, *tokens),
                tokens=tokens,
            )
        )

    for symbol_a, symbol_b in ORACLE_PAIRS:
        tokens = (token_component(symbol_a), token_component(symbol_b))
        descriptors.append(
            ComponentDescriptor(
                name=oracle_component(symbol_a, symbol_b),
                category=ORACLES,
                key=f"{symbol_a}_{symbol_b}",
                contract_type=oracle_component(symbol_a, symbol_b),
                depends_on=(FACTORY, TIMELOCK, *tokens),
            )
        )

    for symbol in COLLATERAL_SYMBOLS:
        descriptors.append(
            ComponentDescriptor(
                name=pool_component(symbol),
                category=POOLS,
                key=symbol,
                contract_type=f"Pool_{symbol}",
                depends_on=(FRAX, FXS, collateral_component(symbol), TIMELOCK),
            )
        )

    for symbol_a, symbol_b in STAKING_PAIRS:
        descriptors.append(
            ComponentDescriptor(
                name=staking_component(symbol_a, symbol_b),
                category=STAKING_CONTRACTS,
                key=stake_token_key(symbol_a, symbol_b),
                contract_type=f"Stake_{symbol_a}_{symbol_b}",
                depends_on=(FRAX, FXS, TIMELOCK, pair_component(symbol_a, symbol_b)),
            )
        )

    return Topology(descriptors)
