#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand

from frax_deployment.config import DeploymentConfig, params_filepath_from_environment
from frax_deployment.ledger import ApeLedger
from frax_deployment.options import (
    autosign_option,
    environment_option,
    params_option,
    verify_option,
)
from frax_deployment.orchestrator import Orchestrator
from frax_deployment.utils import check_chain_id, check_etherscan_plugin


@click.command(cls=ConnectedProviderCommand, name="deploy-protocol")
@environment_option
@params_option
@autosign_option
@verify_option
def cli(environment, params, autosign, verify):
    """
    Deploys (or attaches to) every FRAX component, wires them together and
    records their addresses in the registry.

    ape run deploy_protocol --environment local --network ethereum:local:test
    """
    filepath = params or params_filepath_from_environment(environment)
    config = DeploymentConfig.from_yaml(filepath=filepath, environment=environment)
    print(f"Network: {networks.provider.network.name}")
    check_chain_id(config.chain_id)
    if verify:
        check_etherscan_plugin()

    ledger = ApeLedger(
        actors=config.actors,
        autosign=autosign,
        publish=verify,
        required_confirmations=config.required_confirmations,
    )
    orchestrator = Orchestrator.from_config(config=config, ledger=ledger)
    orchestrator.run()

    click.secho(f"\nResolved {len(orchestrator.resolved)} components:", fg="green")
    for component in orchestrator.resolved.values():
        click.secho(
            f"    {component.name} ({component.mode.value}) {component.address}", fg="cyan"
        )
    click.secho(
        f"Wiring: {len(orchestrator.confirmed)} confirmed, "
        f"{len(orchestrator.outcomes) - len(orchestrator.confirmed)} already wired",
        fg="yellow",
    )
    click.secho(f"Registry written to {orchestrator.registry.filepath}", fg="green")


if __name__ == "__main__":
    cli()
