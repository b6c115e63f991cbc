#!/usr/bin/python3

from pathlib import Path
from typing import List, Optional, Tuple

import click

from frax_deployment.constants import ARTIFACTS_DIR, REGISTRY_FILENAME, SUPPORTED_ENVIRONMENTS
from frax_deployment.registry import AddressRegistry, Manifest


def _get_manifests(
    registry: AddressRegistry, environment: Optional[str] = None
) -> List[Tuple[str, Manifest]]:
    """Loads the manifests of every recorded environment, or of a single one."""
    manifests = list()
    for env in registry.environments():
        if environment and environment != env:
            continue
        manifests.append((env, registry.load(env)))
    return manifests


def _display_manifests(manifests: List[Tuple[str, Manifest]]) -> None:
    for environment, manifest in manifests:
        click.secho(f"\n{environment.capitalize()} Environment", fg="green")
        for category, entries in manifest.items():
            if isinstance(entries, str):
                click.secho(f"    {category} {entries}", fg="yellow")
                continue
            click.secho(f"    {category}", fg="yellow")
            for index, (key, address) in enumerate(entries.items(), start=1):
                click.secho(f"        {index}. {key} {address or '-'}", fg="cyan")


@click.command(name="list-addresses")
@click.option(
    "--environment",
    "-e",
    help="Only list the addresses of this environment.",
    type=click.Choice(SUPPORTED_ENVIRONMENTS),
)
@click.option(
    "--registry-filepath",
    "-f",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=ARTIFACTS_DIR / REGISTRY_FILENAME,
    help="Registry filepath; defaults to the bundled registry.",
)
def cli(environment, registry_filepath):
    """List all recorded component addresses, grouped by environment and category."""
    registry = AddressRegistry(registry_filepath)
    _display_manifests(_get_manifests(registry, environment))


if __name__ == "__main__":
    cli()
