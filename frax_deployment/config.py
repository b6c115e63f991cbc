import typing
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from frax_deployment.constants import (
    ACTOR_ROLES,
    ARTIFACTS_DIR,
    CONSTRUCTOR_PARAMS_DIR,
    DEFAULT_RESOLUTION_MODES,
    REGISTRY_FILENAME,
    SUPPORTED_ENVIRONMENTS,
    ResolutionMode,
)
from frax_deployment.errors import DeploymentConfigError, UnknownEnvironmentError
from frax_deployment.utils import _load_yaml

ActorReference = Union[int, str]


def get_environment(name: Optional[str]) -> str:
    """Validates the environment selector of a run."""
    if name not in SUPPORTED_ENVIRONMENTS:
        raise UnknownEnvironmentError(
            f"Unknown environment '{name}'; expected one of {', '.join(SUPPORTED_ENVIRONMENTS)}."
        )
    return name


def params_filepath_from_environment(environment: str) -> Path:
    p = CONSTRUCTOR_PARAMS_DIR / f"{get_environment(environment)}.yml"
    if not p.exists():
        raise DeploymentConfigError(f"No parameter file found for environment '{environment}'")
    return p


def _parse_mode(value: Any) -> ResolutionMode:
    try:
        return ResolutionMode(value)
    except ValueError:
        modes = ", ".join(m.value for m in ResolutionMode)
        raise DeploymentConfigError(f"Invalid resolution mode '{value}'; expected one of {modes}.")


def get_contract_names(config: typing.Dict) -> List[str]:
    """Returns the names of the components listed under 'contracts'."""
    contract_names = list()
    for contract_info in config.get("contracts") or list():
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict):
            contract_names.extend(list(contract_info.keys()))
        else:
            raise DeploymentConfigError("Malformed constructor parameters YAML.")

    return contract_names


def validate_config(config: typing.Dict, environment: str) -> None:
    print("Validating parameters YAML...")

    deployment = config.get("deployment")
    if not deployment:
        raise DeploymentConfigError("deployment is not set in params file.")

    config_environment = deployment.get("environment")
    if not config_environment:
        raise DeploymentConfigError("environment is not set in params file.")
    get_environment(config_environment)
    if config_environment != environment:
        raise DeploymentConfigError(
            f"params file is for environment '{config_environment}', not '{environment}'."
        )

    if deployment.get("chain_id") is None:
        raise DeploymentConfigError("chain_id is not set in params file.")

    actors = config.get("actors") or dict()
    missing_roles = [role for role in ACTOR_ROLES if role not in actors]
    if missing_roles:
        raise DeploymentConfigError(f"Missing actor(s) in params file: {', '.join(missing_roles)}.")
    unknown_roles = [role for role in actors if role not in ACTOR_ROLES]
    if unknown_roles:
        raise DeploymentConfigError(f"Unknown actor(s) in params file: {', '.join(unknown_roles)}.")


class DeploymentConfig:
    """Parsed and validated contents of a deployment parameter file."""

    def __init__(self, config: typing.Dict, environment: str, path: Optional[Path] = None):
        environment = get_environment(environment)
        validate_config(config=config, environment=environment)

        deployment = config["deployment"]
        self.config = config
        self.path = path
        self.environment = environment
        self.chain_id = int(deployment["chain_id"])
        self.required_confirmations = deployment.get("required_confirmations")

        mode = deployment.get("mode")
        self.mode = _parse_mode(mode) if mode else DEFAULT_RESOLUTION_MODES[environment]
        overrides = deployment.get("overrides") or dict()
        self.overrides = {name: _parse_mode(value) for name, value in overrides.items()}

        self.actors: Dict[str, ActorReference] = dict(config["actors"])
        self.constants: Dict[str, Any] = dict(config.get("constants") or dict())
        self.contract_names = get_contract_names(config)
        self.registry_filepath = self._get_registry_filepath()

    @classmethod
    def from_yaml(cls, filepath: Path, environment: str) -> "DeploymentConfig":
        config = _load_yaml(filepath)
        if not isinstance(config, dict):
            raise DeploymentConfigError(f"Malformed params file at {filepath}.")
        return cls(config=config, environment=environment, path=filepath)

    def _get_registry_filepath(self) -> Path:
        artifact_config = self.config.get("artifacts") or dict()
        artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
        filename = artifact_config.get("filename", REGISTRY_FILENAME)
        return artifact_dir / filename

    def mode_for(self, component_name: str) -> ResolutionMode:
        """Returns the resolution mode of a single component."""
        return self.overrides.get(component_name, self.mode)

    def validate_components(self, component_names: List[str]) -> None:
        """Checks the params file against the components of a topology."""
        unknown = [name for name in self.overrides if name not in component_names]
        unknown.extend(name for name in self.contract_names if name not in component_names)
        if unknown:
            raise DeploymentConfigError(
                f"Unknown component(s) in params file: {', '.join(unknown)}."
            )
