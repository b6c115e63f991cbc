from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Any, List, Mapping, Tuple

from frax_deployment.constants import COLLATERAL_FRAX_AND_FXS_OWNER, STAKING_OWNER, ZERO_ADDRESS
from frax_deployment.errors import WiringError
from frax_deployment.graph import DependencyGraph
from frax_deployment.ledger import Ledger
from frax_deployment.topology import (
    COLLATERAL_SYMBOLS,
    FRAX,
    FXS,
    STAKING_PAIRS,
    pair_component,
    pool_component,
    staking_component,
)

Components = Mapping[str, Any]  # component name -> ResolvedComponent


class WiringPhase(IntEnum):
    """Every transaction of a phase is confirmed before the next phase starts."""

    POOL_REGISTRATION = 1
    TOKEN_LINKAGE = 2
    STAKING_ACTIVATION = 3


class WiringOutcome(Enum):
    CONFIRMED = "confirmed"
    ALREADY_WIRED = "already wired"


def _same_address(a: str, b: str) -> bool:
    return str(a).lower() == str(b).lower()


class WiringTransaction(ABC):
    """A configuration call establishing a relationship between two components."""

    phase: WiringPhase
    actor: str

    @property
    @abstractmethod
    def label(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def targets(self) -> Tuple[str, ...]:
        """Names of the components this transaction touches."""
        raise NotImplementedError

    @abstractmethod
    def is_applied(self, ledger: Ledger, components: Components) -> bool:
        """Reads chain state to find out whether this transaction already took effect."""
        raise NotImplementedError

    @abstractmethod
    def apply(self, ledger: Ledger, components: Components) -> Any:
        raise NotImplementedError

    def check(self, ledger: Ledger, components: Components) -> None:
        """Validates the targets before anything is read or submitted."""
        for name in self.targets:
            if name not in components:
                raise WiringError(self.label, f"{self.label}: '{name}' was not resolved.")
            if _same_address(components[name].address, ZERO_ADDRESS):
                raise WiringError(
                    self.label, f"{self.label}: '{name}' resolved to the zero address."
                )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.label}>"


class RegisterPool(WiringTransaction):
    """Registers a collateral pool with the stable token."""

    phase = WiringPhase.POOL_REGISTRATION
    actor = COLLATERAL_FRAX_AND_FXS_OWNER

    def __init__(self, pool: str, stable_token: str = FRAX):
        self.pool = pool
        self.stable_token = stable_token

    @property
    def label(self) -> str:
        return f"{self.stable_token}.addPool({self.pool})"

    @property
    def targets(self) -> Tuple[str, ...]:
        return self.stable_token, self.pool

    def is_applied(self, ledger: Ledger, components: Components) -> bool:
        stable, pool = components[self.stable_token], components[self.pool]
        return bool(ledger.read(stable.contract_type, stable.address, "frax_pools", pool.address))

    def apply(self, ledger: Ledger, components: Components) -> Any:
        stable, pool = components[self.stable_token], components[self.pool]
        return ledger.transact(
            stable.contract_type, stable.address, "addPool", pool.address, actor=self.actor
        )


class LinkShareToken(WiringTransaction):
    """Points the share token at the stable token."""

    phase = WiringPhase.TOKEN_LINKAGE
    actor = COLLATERAL_FRAX_AND_FXS_OWNER

    def __init__(self, share_token: str = FXS, stable_token: str = FRAX):
        self.share_token = share_token
        self.stable_token = stable_token

    @property
    def label(self) -> str:
        return f"{self.share_token}.setFRAXAddress({self.stable_token})"

    @property
    def targets(self) -> Tuple[str, ...]:
        return self.share_token, self.stable_token

    def is_applied(self, ledger: Ledger, components: Components) -> bool:
        share, stable = components[self.share_token], components[self.stable_token]
        linked = ledger.read(share.contract_type, share.address, "FRAXStablecoinAdd")
        return _same_address(linked, stable.address)

    def apply(self, ledger: Ledger, components: Components) -> Any:
        share, stable = components[self.share_token], components[self.stable_token]
        return ledger.transact(
            share.contract_type, share.address, "setFRAXAddress", stable.address, actor=self.actor
        )


class ActivateStaking(WiringTransaction):
    """Starts the reward period of a staking contract."""

    phase = WiringPhase.STAKING_ACTIVATION
    actor = STAKING_OWNER

    def __init__(self, staking_contract: str, pair: str):
        self.staking_contract = staking_contract
        self.pair = pair

    @property
    def label(self) -> str:
        return f"{self.staking_contract}.initializeDefault()"

    @property
    def targets(self) -> Tuple[str, ...]:
        return self.staking_contract, self.pair

    def check(self, ledger: Ledger, components: Components) -> None:
        super().check(ledger, components)
        staking, pair = components[self.staking_contract], components[self.pair]
        staking_token = ledger.read(staking.contract_type, staking.address, "stakingToken")
        if not _same_address(staking_token, pair.address):
            raise WiringError(
                self.label,
                f"{self.label}: staking token {staking_token} does not match "
                f"pair {self.pair} at {pair.address}.",
            )

    def is_applied(self, ledger: Ledger, components: Components) -> bool:
        staking = components[self.staking_contract]
        return ledger.read(staking.contract_type, staking.address, "periodFinish") != 0

    def apply(self, ledger: Ledger, components: Components) -> Any:
        staking = components[self.staking_contract]
        return ledger.transact(
            staking.contract_type, staking.address, "initializeDefault", actor=self.actor
        )


class WiringPlan:
    """The wiring transactions of a protocol, ordered through a dependency graph."""

    def __init__(self, transactions: List[WiringTransaction]):
        self.transactions = {tx.label: tx for tx in transactions}
        if len(self.transactions) != len(transactions):
            raise ValueError("Duplicate wiring transaction.")

    def __len__(self) -> int:
        return len(self.transactions)

    def graph(self) -> DependencyGraph:
        graph = DependencyGraph()
        for label, tx in self.transactions.items():
            earlier = [
                other.label for other in self.transactions.values() if other.phase < tx.phase
            ]
            graph.add_node(label, depends_on=earlier)
        return graph

    def order(self) -> List[WiringTransaction]:
        return [self.transactions[label] for label in self.graph().order()]


def frax_wiring_plan() -> WiringPlan:
    transactions = [RegisterPool(pool_component(symbol)) for symbol in COLLATERAL_SYMBOLS]
    transactions.append(LinkShareToken())
    transactions.extend(
        ActivateStaking(staking_component(a, b), pair_component(a, b)) for a, b in STAKING_PAIRS
    )
    return WiringPlan(transactions)
