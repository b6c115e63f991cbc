import click

from frax_deployment.types import ChecksumAddress, Environment

environment_option = click.option(
    "--environment",
    "-e",
    help="Environment whose address set is used (local, testnet or production).",
    type=Environment(),
    envvar="FRAX_ENVIRONMENT",
    required=True,
)

params_option = click.option(
    "--params",
    "-p",
    help="Path to the deployment parameter file; defaults to the environment's file.",
    type=click.Path(exists=True, dir_okay=False),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Automatically sign transactions.",
    is_flag=True,
)

verify_option = click.option(
    "--verify",
    help="Publish freshly deployed contracts to the block explorer.",
    is_flag=True,
)

wallet_option = click.option(
    "--wallet",
    "-w",
    help="Address of the wallet receiving test funds.",
    type=ChecksumAddress(),
    envvar="METAMASK_ADDRESS",
    required=True,
)
