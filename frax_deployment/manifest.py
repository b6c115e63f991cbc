from collections import OrderedDict
from pathlib import Path
from typing import Iterable, List

from frax_deployment.constants import LIBRARIES, LIBRARY_NAMES, MANIFEST_CATEGORIES
from frax_deployment.registry import AddressRegistry, Manifest, merge_manifests


def _resolved_entries(resolved_components: Iterable) -> Manifest:
    """Groups resolved components into manifest categories."""
    entries = OrderedDict()
    for component in resolved_components:
        if component.key is None:
            entries[component.category] = component.address
        else:
            entries.setdefault(component.category, OrderedDict())[component.key] = component.address
    return entries


def _ordered(manifest: Manifest) -> Manifest:
    """Known categories first, in their standard order, followed by anything else."""
    ordered = OrderedDict()
    for category in MANIFEST_CATEGORIES:
        if category in manifest:
            ordered[category] = manifest[category]
    for category, entries in manifest.items():
        if category not in ordered:
            ordered[category] = entries
    return ordered


class ManifestWriter:
    """Turns the components resolved by a run into a durable manifest."""

    def __init__(self, registry: AddressRegistry, library_names: List[str] = None):
        self.registry = registry
        self.library_names = LIBRARY_NAMES if library_names is None else library_names

    def build(self, resolved_components: Iterable, prior_manifest: Manifest) -> Manifest:
        """
        Builds the manifest of a run. Entries resolved this run overwrite the
        prior ones; everything else is carried forward from the prior manifest
        (libraries included), never reset.
        """
        manifest = merge_manifests(prior_manifest, _resolved_entries(resolved_components))

        libraries = manifest.get(LIBRARIES)
        if libraries is None or isinstance(libraries, dict):
            libraries = OrderedDict(libraries or dict())
            for name in self.library_names:
                libraries.setdefault(name, "")
            if libraries:
                manifest[LIBRARIES] = libraries

        return manifest if prior_manifest else _ordered(manifest)

    def write(self, environment: str, manifest: Manifest) -> Path:
        return self.registry.persist(environment, manifest)
