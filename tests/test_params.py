from collections import OrderedDict

import pytest

from frax_deployment.config import DeploymentConfig
from frax_deployment.constants import ACTOR_ROLES, DEFAULT_DEPLOYER, ResolutionMode
from frax_deployment.errors import MissingAddressError
from frax_deployment.params import ConstructorParameters, ResolutionScope
from frax_deployment.resolver import ResolvedComponent
from tests.conftest import address

COMPONENT_NAMES = ["Timelock", "FRAXShares", "WETH", "GovernorAlpha"]


def _config(contracts, constants=None):
    config = {
        "deployment": {"environment": "local", "chain_id": 1337},
        "actors": {role: index for index, role in enumerate(ACTOR_ROLES, start=1)},
        "constants": constants or {"TIMELOCK_DELAY": 172800},
        "contracts": contracts,
    }
    return DeploymentConfig(config=config, environment="local")


def _resolved(name, n):
    return ResolvedComponent(name, "misc", name, name, address(n), ResolutionMode.FRESH)


@pytest.fixture
def scope():
    return ResolutionScope(
        components={"Timelock": _resolved("Timelock", 1), "WETH": _resolved("WETH", 2)},
        actors={role: address(0xA0 + i) for i, role in enumerate(ACTOR_ROLES)},
    )


def test_variables(scope):
    contracts = [
        {
            "GovernorAlpha": {
                "deployer": "governor_guardian",
                "constructor": {
                    "timelock_": "$Timelock",
                    "guardian_": "$actor:governor_guardian",
                    "delay_": "$TIMELOCK_DELAY",
                    "tokens_": ["$WETH", "$Timelock"],
                    "name_": "Governor",
                },
            }
        }
    ]
    parameters = ConstructorParameters.from_config(_config(contracts), COMPONENT_NAMES)

    resolved = parameters.resolve("GovernorAlpha", scope)
    assert resolved == OrderedDict(
        [
            ("timelock_", address(1)),
            ("guardian_", scope.actors["governor_guardian"]),
            ("delay_", 172800),
            ("tokens_", [address(2), address(1)]),
            ("name_", "Governor"),
        ]
    )
    assert parameters.references("GovernorAlpha") == {"Timelock", "WETH"}
    assert parameters.deployer("GovernorAlpha") == "governor_guardian"


def test_component_names_win_over_constants(scope):
    # 'WETH' is both upper case and a component name
    contracts = [{"FRAXShares": {"constructor": {"_weth": "$WETH"}}}]
    parameters = ConstructorParameters.from_config(_config(contracts), COMPONENT_NAMES)
    assert parameters.resolve("FRAXShares", scope)["_weth"] == address(2)


def test_default_deployer():
    parameters = ConstructorParameters.from_config(_config(["WETH"]), COMPONENT_NAMES)
    assert "WETH" in parameters
    assert parameters.deployer("WETH") == DEFAULT_DEPLOYER
    assert parameters.references("WETH") == set()


def test_unresolved_reference(scope):
    contracts = [{"GovernorAlpha": {"constructor": {"fxs_": "$FRAXShares"}}}]
    parameters = ConstructorParameters.from_config(_config(contracts), COMPONENT_NAMES)
    with pytest.raises(MissingAddressError) as e:
        parameters.resolve("GovernorAlpha", scope)
    assert e.value.component == "FRAXShares"


@pytest.mark.parametrize(
    "contracts",
    [
        [{"Timelock": {"constructor": {"delay_": "$MISSING_DELAY"}}}],
        [{"Timelock": {"constructor": {"admin_": "$NotAComponent"}}}],
        [{"Timelock": {"constructor": {"admin_": "$actor:janitor"}}}],
        [{"Timelock": {"deployer": "janitor"}}],
        [{"Timelock": {}, "WETH": {}}],
    ],
)
def test_invalid_parameters(contracts):
    with pytest.raises(ConstructorParameters.Invalid):
        ConstructorParameters.from_config(_config(contracts), COMPONENT_NAMES)


def test_no_parameters_for_component(scope):
    parameters = ConstructorParameters.from_config(_config([]), COMPONENT_NAMES)
    with pytest.raises(ConstructorParameters.Invalid):
        parameters.resolve("Timelock", scope)
