import json
from collections import OrderedDict
from enum import Enum
from pathlib import Path
from typing import List, Optional

from frax_deployment.config import DeploymentConfig
from frax_deployment.constants import ACTOR_ROLES, ResolutionMode
from frax_deployment.errors import DeploymentConfigError, LedgerError, WiringError
from frax_deployment.graph import DependencyGraph
from frax_deployment.ledger import Ledger
from frax_deployment.manifest import ManifestWriter
from frax_deployment.params import ConstructorParameters
from frax_deployment.registry import STANDARD_REGISTRY_JSON_FORMAT, AddressRegistry, Manifest
from frax_deployment.resolver import ComponentResolver, ResolvedComponents
from frax_deployment.topology import Topology, frax_topology
from frax_deployment.wiring import WiringOutcome, WiringPlan, frax_wiring_plan


class OrchestratorState(Enum):
    RESOLVING = "resolving"
    WIRING = "wiring"
    MANIFESTING = "manifesting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS = {
    None: {OrchestratorState.RESOLVING, OrchestratorState.FAILED},
    OrchestratorState.RESOLVING: {OrchestratorState.WIRING, OrchestratorState.FAILED},
    OrchestratorState.WIRING: {OrchestratorState.MANIFESTING, OrchestratorState.FAILED},
    OrchestratorState.MANIFESTING: {OrchestratorState.DONE, OrchestratorState.FAILED},
    OrchestratorState.DONE: set(),
    OrchestratorState.FAILED: set(),
}


class Orchestrator:
    """
    Brings up (or reattaches to) every component of the protocol, wires them
    together and records the resulting addresses.

    A run is strictly sequential: components are resolved in dependency order,
    then each wiring transaction is confirmed before the next one is submitted,
    then the manifest is written once. Wiring that already took effect on chain
    is detected and skipped, so a run can be repeated against a partially or
    fully wired environment.
    """

    def __init__(
        self,
        environment: str,
        resolver: ComponentResolver,
        ledger: Ledger,
        writer: ManifestWriter,
        topology: Optional[Topology] = None,
        wiring_plan: Optional[WiringPlan] = None,
    ):
        self.environment = environment
        self.resolver = resolver
        self.ledger = ledger
        self.writer = writer
        self.topology = frax_topology() if topology is None else topology
        self.wiring_plan = frax_wiring_plan() if wiring_plan is None else wiring_plan

        self.state: Optional[OrchestratorState] = None
        self.resolved: ResolvedComponents = OrderedDict()
        self.outcomes: "OrderedDict[str, WiringOutcome]" = OrderedDict()
        self.manifest: Optional[Manifest] = None

    @classmethod
    def from_config(
        cls,
        config: DeploymentConfig,
        ledger: Ledger,
        topology: Optional[Topology] = None,
        wiring_plan: Optional[WiringPlan] = None,
    ) -> "Orchestrator":
        topology = frax_topology() if topology is None else topology
        config.validate_components(topology.names)

        registry = AddressRegistry(config.registry_filepath)
        resolver = ComponentResolver(
            ledger=ledger,
            registry=registry,
            environment=config.environment,
            mode=config.mode,
            overrides=config.overrides,
            constructor_parameters=ConstructorParameters.from_config(config, topology.names),
            actors=ledger.actor_addresses(ACTOR_ROLES),
        )
        return cls(
            environment=config.environment,
            resolver=resolver,
            ledger=ledger,
            writer=ManifestWriter(registry),
            topology=topology,
            wiring_plan=wiring_plan,
        )

    @property
    def registry(self) -> AddressRegistry:
        return self.writer.registry

    @property
    def confirmed(self) -> List[str]:
        return [label for label, o in self.outcomes.items() if o is WiringOutcome.CONFIRMED]

    def _transition(self, state: OrchestratorState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid orchestrator transition {self.state} -> {state}.")
        print(f"\n===== {state.value.upper()} =====")
        self.state = state

    def dependency_graph(self) -> DependencyGraph:
        """Wiring dependencies of every component plus the constructor references of fresh ones."""
        graph = DependencyGraph()
        parameters = self.resolver.constructor_parameters
        for descriptor in self.topology:
            dependencies = set(descriptor.depends_on)
            if self.resolver.mode_for(descriptor.name) is ResolutionMode.FRESH:
                dependencies |= parameters.references(descriptor.name)
            graph.add_node(descriptor.name, depends_on=dependencies)
        return graph

    def _check_parameters(self) -> None:
        """Every freshly deployed component needs an entry in the params file."""
        missing = [
            descriptor.name
            for descriptor in self.topology
            if self.resolver.mode_for(descriptor.name) is ResolutionMode.FRESH
            and not descriptor.is_pair
            and descriptor.name not in self.resolver.constructor_parameters
        ]
        if missing:
            raise DeploymentConfigError(
                f"Missing constructor parameters for freshly deployed: {', '.join(missing)}."
            )

    def resolve(self) -> ResolvedComponents:
        self._check_parameters()
        for name in self.dependency_graph().order():
            descriptor = self.topology[name]
            self.resolved[name] = self.resolver.resolve(descriptor, self.resolved)
        return self.resolved

    def wire(self) -> None:
        for tx in self.wiring_plan.order():
            try:
                tx.check(self.ledger, self.resolved)
                if tx.is_applied(self.ledger, self.resolved):
                    print(f"(i) {tx.label} is already wired; skipping.")
                    self.outcomes[tx.label] = WiringOutcome.ALREADY_WIRED
                    continue
                tx.apply(self.ledger, self.resolved)
            except LedgerError as e:
                raise WiringError(tx.label, f"{tx.label} was rejected: {e}") from e
            print(f"(i) {tx.label} confirmed.")
            self.outcomes[tx.label] = WiringOutcome.CONFIRMED

    def write_manifest(self) -> Path:
        prior = self.registry.load(self.environment, required=False)
        self.manifest = self.writer.build(self.resolved.values(), prior)
        return self.writer.write(self.environment, self.manifest)

    def run(self) -> Manifest:
        print(
            f"Environment: {self.environment}",
            f"Mode: {self.resolver.mode.value}",
            f"Registry: {self.registry.filepath}",
            f"Components: {len(self.topology)}",
            f"Wiring transactions: {len(self.wiring_plan)}",
            sep="\n",
        )
        try:
            self._transition(OrchestratorState.RESOLVING)
            self.resolve()
            self._transition(OrchestratorState.WIRING)
            self.wire()
            self._transition(OrchestratorState.MANIFESTING)
            self.write_manifest()
            self._transition(OrchestratorState.DONE)
        except BaseException as e:
            self._fail(e)
            raise
        return self.manifest

    def _fail(self, error: BaseException) -> None:
        failed_in = self.state
        self._transition(OrchestratorState.FAILED)
        print(f"(!) Run failed while {failed_in.value if failed_in else 'starting'}: {error}")
        fresh = [c for c in self.resolved.values() if c.mode is ResolutionMode.FRESH]
        if fresh or self.confirmed:
            self.write_diagnostics(error, failed_in)

    def diagnostics_filepath(self) -> Path:
        filepath = self.registry.filepath
        return filepath.with_name(f"{filepath.stem}.{self.environment}.partial.json")

    def write_diagnostics(
        self, error: BaseException, failed_in: Optional[OrchestratorState]
    ) -> Path:
        """Records what this run changed on chain before it failed."""
        prior = self.registry.load(self.environment, required=False)
        failed_step = getattr(error, "component", None) or getattr(error, "transaction", None)
        already_wired = [
            label for label, o in self.outcomes.items() if o is WiringOutcome.ALREADY_WIRED
        ]
        data = OrderedDict(
            [
                ("environment", self.environment),
                ("failed_while", failed_in.value if failed_in else None),
                ("failed_step", failed_step),
                ("error", str(error)),
                ("confirmed", self.confirmed),
                ("already_wired", already_wired),
                ("manifest", self.writer.build(self.resolved.values(), prior)),
            ]
        )
        filepath = self.diagnostics_filepath()
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as file:
            json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)
        print(f"(i) Partial manifest for diagnostics written to {filepath}")
        return filepath
