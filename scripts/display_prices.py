#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand

from frax_deployment.config import DeploymentConfig, params_filepath_from_environment
from frax_deployment.ledger import ApeLedger
from frax_deployment.options import environment_option, params_option
from frax_deployment.prices import PRICE_COMPONENTS, collect_prices
from frax_deployment.registry import AddressRegistry
from frax_deployment.resolver import attach_components
from frax_deployment.topology import frax_topology


@click.command(cls=ConnectedProviderCommand, name="display-prices")
@environment_option
@params_option
def cli(environment, params):
    """Display the current FRAX and FXS prices and the pair oracle quotes."""
    filepath = params or params_filepath_from_environment(environment)
    config = DeploymentConfig.from_yaml(filepath=filepath, environment=environment)

    components = attach_components(
        registry=AddressRegistry(config.registry_filepath),
        environment=environment,
        topology=frax_topology(),
        names=PRICE_COMPONENTS,
    )
    ledger = ApeLedger(actors=dict())

    click.secho("===== DISPLAY PRICES =====", fg="yellow")
    for quote in collect_prices(ledger, components):
        click.secho(str(quote), fg="cyan")


if __name__ == "__main__":
    cli()
