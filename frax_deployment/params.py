import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, List, Mapping, Set

from eth_typing import ChecksumAddress

from frax_deployment.config import DeploymentConfig
from frax_deployment.constants import ACTOR_ROLES, DEFAULT_DEPLOYER
from frax_deployment.errors import MissingAddressError

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"
CONTRACT_DEPLOYER_KEY = "deployer"


class ResolutionScope(typing.NamedTuple):
    """What a variable may refer to while it is being resolved."""

    components: Mapping[str, Any]  # component name -> ResolvedComponent
    actors: Mapping[str, ChecksumAddress]


class VariableContext:
    def __init__(
        self,
        component_names: List[str],
        component_name: str,
        constants: typing.Dict[str, Any] = None,
    ):
        self.component_names = component_names or list()
        self.component_name = component_name
        self.constants = constants or dict()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, scope: ResolutionScope) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class ActorAccount(Variable):
    ACTOR_PREFIX = "actor:"

    def __init__(self, variable: str):
        self.role = variable[len(self.ACTOR_PREFIX) :]
        if self.role not in ACTOR_ROLES:
            raise ConstructorParameters.Invalid(f"Unknown actor '{self.role}'.")

    @classmethod
    def is_actor(cls, value: str) -> bool:
        """Returns True if the variable refers to one of the protocol's actors."""
        return value.startswith(cls.ACTOR_PREFIX)

    def resolve(self, scope: ResolutionScope) -> Any:
        return scope.actors[self.role]


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ConstructorParameters.Invalid(
                f"Constant '{constant_name}' not found in deployment file."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, scope: ResolutionScope) -> Any:
        return self.constant_value


class ComponentAddress(Variable):
    def __init__(self, component_name: str, context: VariableContext):
        if component_name not in context.component_names:
            raise ConstructorParameters.Invalid(f"Component name {component_name} not found")
        self.component_name = component_name

    def resolve(self, scope: ResolutionScope) -> Any:
        """Resolves the address of an already resolved component."""
        try:
            return scope.components[self.component_name].address
        except KeyError:
            raise MissingAddressError(
                self.component_name,
                f"'{self.component_name}' is referenced before it was resolved.",
            )


def _resolve_param(value: Any, scope: ResolutionScope) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v, scope) for v in value]

    if isinstance(value, Variable):
        return value.resolve(scope)

    return value  # literally a value


def _resolve_params(parameters: OrderedDict, scope: ResolutionScope) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value, scope)

    return resolved_parameters


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if ActorAccount.is_actor(variable):
        return ActorAccount(variable)
    elif variable in context.component_names:
        return ComponentAddress(variable, context)
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ComponentAddress(variable, context)


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _process_raw_values(values: Mapping, variable_context: VariableContext) -> OrderedDict:
    processed_parameters = OrderedDict()
    for name, value in values.items():
        processed_parameters[name] = _process_raw_value(value, variable_context)

    return processed_parameters


def _referenced_components(value: Any) -> Set[str]:
    if isinstance(value, list):
        references = set()
        for v in value:
            references |= _referenced_components(v)
        return references
    if isinstance(value, ComponentAddress):
        return {value.component_name}
    return set()


class ConstructorParameters:
    """Represents the constructor parameters for the freshly deployed components."""

    class Invalid(Exception):
        """Raised when the constructor parameters are invalid"""

    def __init__(
        self,
        parameters: "OrderedDict[str, OrderedDict]",
        deployers: typing.Optional[typing.Dict[str, str]] = None,
    ):
        self.parameters = parameters
        self.deployers = deployers or dict()

    @classmethod
    def from_config(
        cls, config: DeploymentConfig, component_names: List[str]
    ) -> "ConstructorParameters":
        """Processes the 'contracts' section of a deployment parameter file."""
        print("Processing contract constructor parameters...")
        parameters = OrderedDict()
        deployers = dict()
        for contract_info in config.config.get("contracts") or list():
            if isinstance(contract_info, str):
                parameters[contract_info] = OrderedDict()
                continue

            if not isinstance(contract_info, dict) or len(contract_info) != 1:
                raise cls.Invalid("Malformed constructor parameters YAML.")

            component_name = list(contract_info.keys())[0]  # only one entry
            contract_data = contract_info[component_name] or dict()
            context = VariableContext(
                component_names=component_names,
                component_name=component_name,
                constants=config.constants,
            )
            parameters[component_name] = _process_raw_values(
                contract_data.get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict(), context
            )

            deployer = contract_data.get(CONTRACT_DEPLOYER_KEY)
            if deployer is not None:
                if deployer not in ACTOR_ROLES:
                    raise cls.Invalid(f"Unknown deployer '{deployer}' for {component_name}.")
                deployers[component_name] = deployer

        return cls(parameters=parameters, deployers=deployers)

    def __contains__(self, component_name: str) -> bool:
        return component_name in self.parameters

    def deployer(self, component_name: str) -> str:
        """Returns the actor deploying a component."""
        return self.deployers.get(component_name, DEFAULT_DEPLOYER)

    def references(self, component_name: str) -> Set[str]:
        """Returns the components a component's constructor refers to."""
        references = set()
        for value in self.parameters.get(component_name, dict()).values():
            references |= _referenced_components(value)
        return references

    def resolve(self, component_name: str, scope: ResolutionScope) -> OrderedDict:
        """Resolves the constructor parameters for a single component."""
        try:
            parameters = self.parameters[component_name]
        except KeyError:
            raise self.Invalid(f"No constructor parameters for '{component_name}'.")
        return _resolve_params(parameters, scope)
