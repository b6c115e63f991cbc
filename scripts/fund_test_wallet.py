#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand

from frax_deployment.config import DeploymentConfig, params_filepath_from_environment
from frax_deployment.constants import COLLATERAL_FRAX_AND_FXS_OWNER
from frax_deployment.funding import fund_wallet, funding_transfers
from frax_deployment.ledger import ApeLedger
from frax_deployment.options import (
    autosign_option,
    environment_option,
    params_option,
    wallet_option,
)
from frax_deployment.registry import AddressRegistry
from frax_deployment.resolver import attach_components
from frax_deployment.topology import frax_topology
from frax_deployment.utils import check_chain_id


@click.command(cls=ConnectedProviderCommand, name="fund-test-wallet")
@environment_option
@params_option
@wallet_option
@autosign_option
def cli(environment, params, wallet, autosign):
    """Transfer protocol, collateral and liquidity tokens to a test wallet."""
    filepath = params or params_filepath_from_environment(environment)
    config = DeploymentConfig.from_yaml(filepath=filepath, environment=environment)
    check_chain_id(config.chain_id)

    components = attach_components(
        registry=AddressRegistry(config.registry_filepath),
        environment=environment,
        topology=frax_topology(),
        names=[transfer.component for transfer in funding_transfers(environment)],
    )
    ledger = ApeLedger(
        actors={COLLATERAL_FRAX_AND_FXS_OWNER: config.actors[COLLATERAL_FRAX_AND_FXS_OWNER]},
        autosign=autosign,
        required_confirmations=config.required_confirmations,
    )

    click.secho("===== TRANSFER SOME TOKENS AND ETH TO THE TEST WALLET =====", fg="yellow")
    transfers = fund_wallet(ledger, components, wallet=wallet, environment=environment)
    click.secho(f"Sent {len(transfers)} transfers to {wallet}", fg="green")


if __name__ == "__main__":
    cli()
