from typing import Dict, Iterable, Mapping, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address

from frax_deployment.constants import POOL_CREATOR, ZERO_ADDRESS, ResolutionMode
from frax_deployment.errors import DeploymentError, LedgerError, MissingAddressError
from frax_deployment.ledger import Ledger
from frax_deployment.params import ConstructorParameters, ResolutionScope
from frax_deployment.registry import AddressRegistry, Manifest
from frax_deployment.topology import FACTORY, ComponentDescriptor, Topology


class ResolvedComponent(NamedTuple):
    """A component bound to a live address for the current run."""

    name: str
    category: str
    key: Optional[str]
    contract_type: str
    address: ChecksumAddress
    mode: ResolutionMode


ResolvedComponents = Dict[str, ResolvedComponent]


class ComponentResolver:
    """
    Deploys a component or attaches to its recorded address, depending on the
    resolution mode selected for it.

    The manifest is only loaded the first time a component is attached, so a
    fresh run never depends on a recorded manifest. The resolver never writes
    to the registry.
    """

    def __init__(
        self,
        ledger: Ledger,
        registry: AddressRegistry,
        environment: str,
        mode: ResolutionMode,
        overrides: Optional[Mapping[str, ResolutionMode]] = None,
        constructor_parameters: Optional[ConstructorParameters] = None,
        actors: Optional[Mapping[str, ChecksumAddress]] = None,
    ):
        self.ledger = ledger
        self.registry = registry
        self.environment = environment
        self.mode = mode
        self.overrides = dict(overrides or dict())
        self.constructor_parameters = constructor_parameters or ConstructorParameters(dict())
        self.actors = dict(actors or dict())
        self._manifest: Optional[Manifest] = None

    def mode_for(self, name: str) -> ResolutionMode:
        return self.overrides.get(name, self.mode)

    def resolve(
        self,
        descriptor: ComponentDescriptor,
        resolved: ResolvedComponents,
        mode: Optional[ResolutionMode] = None,
    ) -> ResolvedComponent:
        """Resolves a single component; 'resolved' holds its already resolved dependencies."""
        mode = mode or self.mode_for(descriptor.name)
        if mode is ResolutionMode.ATTACH:
            address = self._lookup(descriptor)
        elif descriptor.is_pair:
            address = self._discover_pair(descriptor, resolved)
        else:
            address = self._deploy(descriptor, resolved)

        print(f"(i) {descriptor.name} ({mode.value}) at {address}")
        return ResolvedComponent(
            name=descriptor.name,
            category=descriptor.category,
            key=descriptor.key,
            contract_type=descriptor.contract_type,
            address=address,
            mode=mode,
        )

    def _get_manifest(self) -> Manifest:
        if self._manifest is None:
            self._manifest = self.registry.load(self.environment, required=True)
        return self._manifest

    def _lookup(self, descriptor: ComponentDescriptor) -> ChecksumAddress:
        entries = self._get_manifest().get(descriptor.category)
        if descriptor.key is None:
            address = entries if isinstance(entries, str) else None
        else:
            address = entries.get(descriptor.key) if isinstance(entries, dict) else None

        if not address:
            raise MissingAddressError(
                descriptor.name,
                f"No address for {descriptor.name} ({descriptor.location}) "
                f"in the '{self.environment}' manifest.",
            )
        if not is_address(address):
            raise MissingAddressError(
                descriptor.name,
                f"Invalid address '{address}' for {descriptor.name} ({descriptor.location}) "
                f"in the '{self.environment}' manifest.",
            )
        # carried forward as recorded
        return address

    def _deploy(
        self, descriptor: ComponentDescriptor, resolved: ResolvedComponents
    ) -> ChecksumAddress:
        scope = ResolutionScope(components=resolved, actors=self.actors)
        params = self.constructor_parameters.resolve(descriptor.name, scope)
        deployer = self.constructor_parameters.deployer(descriptor.name)
        print(f"\nDeploying {descriptor.name} ({descriptor.contract_type}) as {deployer}.")
        try:
            return self.ledger.deploy(descriptor.contract_type, params, actor=deployer)
        except LedgerError as e:
            raise DeploymentError(
                descriptor.name, f"Failed to deploy {descriptor.name}: {e}"
            ) from e

    def _discover_pair(
        self, descriptor: ComponentDescriptor, resolved: ResolvedComponents
    ) -> ChecksumAddress:
        """Returns the factory's pair for the descriptor's tokens, creating it if needed."""
        factory = resolved[FACTORY]
        tokens = [resolved[token].address for token in descriptor.tokens]
        try:
            address = self._get_pair(factory, tokens)
            if address == ZERO_ADDRESS:
                print(f"\nCreating pair {descriptor.key} as {POOL_CREATOR}.")
                self.ledger.transact(
                    factory.contract_type,
                    factory.address,
                    "createPair",
                    *tokens,
                    actor=POOL_CREATOR,
                )
                address = self._get_pair(factory, tokens)
        except LedgerError as e:
            raise DeploymentError(
                descriptor.name, f"Failed to create pair {descriptor.name}: {e}"
            ) from e

        if address == ZERO_ADDRESS:
            raise DeploymentError(
                descriptor.name, f"Factory did not create a pair for {descriptor.name}."
            )
        return address

    def _get_pair(self, factory: ResolvedComponent, tokens) -> ChecksumAddress:
        return self.ledger.read(factory.contract_type, factory.address, "getPair", *tokens)


def attach_components(
    registry: AddressRegistry,
    environment: str,
    topology: Topology,
    names: Optional[Iterable[str]] = None,
) -> ResolvedComponents:
    """Attaches to recorded components (all of them unless 'names' is given)."""
    resolver = ComponentResolver(
        ledger=None, registry=registry, environment=environment, mode=ResolutionMode.ATTACH
    )
    names = topology.names if names is None else list(names)
    return {name: resolver.resolve(topology[name], resolved=dict()) for name in names}
