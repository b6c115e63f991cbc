import os
from pathlib import Path

import yaml
from ape import networks, project
from ape.contracts import ContractContainer

from frax_deployment.networks import is_local_network


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def check_chain_id(chain_id: int) -> None:
    """Checks that the params file targets the network ape is connected to."""
    network_chain_id = networks.provider.network.chain_id
    if chain_id != network_chain_id and not is_local_network():
        raise ValueError(
            f"chain_id in params file ({chain_id}) does not match "
            f"chain_id of current network ({network_chain_id})."
        )


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to verify contracts.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    if not os.environ.get(explorer_envvar):
        raise ValueError(f"{explorer_envvar} is not set.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        return getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")
