import sys
from collections import OrderedDict

from frax_deployment.constants import ZERO_ADDRESS


def _ask(question: str) -> None:
    """Aborts the run unless the operator agrees."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        sys.exit(-1)


def _continue() -> None:
    """Asks the user to continue."""
    _ask("Continue")


def _confirm_resolution(resolved_params: OrderedDict, component_name: str, actor: str) -> None:
    """Asks the user to confirm the resolved constructor parameters for a single component."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {component_name}")
        _ask(f"Deploy {component_name} as {actor}")
        return

    print(f"\nConstructor parameters for {component_name}")
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
    _ask(f"Deploy {component_name} as {actor}")
    if ZERO_ADDRESS in resolved_params.values():
        _ask("Zero Address detected for deployment parameter; Continue?")
