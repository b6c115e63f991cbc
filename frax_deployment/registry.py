import copy
import json
import os
import stat
import tempfile
from collections import OrderedDict
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List

from frax_deployment.errors import OrchestrationError

Environment = str
Manifest = Dict[str, Any]

STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


def _read_registry(filepath: Path) -> "OrderedDict[Environment, Manifest]":
    with open(filepath, "r") as file:
        data = json.load(file, object_pairs_hook=OrderedDict)
    if not isinstance(data, dict):
        raise ValueError(f"Malformed address registry at {filepath}.")
    for environment, manifest in data.items():
        _validate_manifest(environment, manifest)
    return data


def _validate_manifest(environment: Environment, manifest: Any) -> None:
    if not isinstance(manifest, dict):
        raise ValueError(f"Malformed manifest for environment '{environment}'.")
    for category, entries in manifest.items():
        if isinstance(entries, str):
            continue
        if not isinstance(entries, dict) or not all(
            isinstance(value, str) for value in entries.values()
        ):
            raise ValueError(
                f"Malformed category '{category}' in manifest for environment '{environment}'."
            )


def _serialize(data: Dict[Environment, Manifest]) -> str:
    return json.dumps(data, **STANDARD_REGISTRY_JSON_FORMAT) + "\n"


def _destination_mode(filepath: Path) -> int:
    """Mode of the existing file, or the umask default for a new one."""
    if filepath.exists():
        return stat.S_IMODE(filepath.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@contextmanager
def _atomic_destination(filepath: Path) -> Iterator[Path]:
    """
    Yields a temporary file next to 'filepath' which replaces it once the
    block exits cleanly. On any failure the temporary file is discarded and
    the existing file is left untouched.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent
    )
    os.close(handle)
    temp_filepath = Path(temp_name)
    try:
        yield temp_filepath
        os.chmod(temp_filepath, _destination_mode(filepath))
        os.replace(temp_filepath, filepath)
    finally:
        if temp_filepath.exists():
            temp_filepath.unlink()


def merge_manifests(prior: Manifest, partial: Manifest) -> Manifest:
    """
    Category-aware merge: entries in 'partial' overwrite those in 'prior',
    while categories and entries that 'partial' does not mention are preserved.
    """
    merged = copy.deepcopy(OrderedDict(prior))
    for category, entries in partial.items():
        existing = merged.get(category)
        if isinstance(entries, dict) and isinstance(existing, dict):
            existing.update(copy.deepcopy(entries))
        else:
            merged[category] = copy.deepcopy(entries)
    return merged


class AddressRegistry:
    """Environment-keyed, durable store of address manifests."""

    class NotFound(OrchestrationError):
        """Raised when no manifest is recorded for an environment."""

    def __init__(self, filepath: Path):
        self.filepath = Path(filepath)

    def _read(self) -> "OrderedDict[Environment, Manifest]":
        if not self.filepath.exists():
            return OrderedDict()
        return _read_registry(self.filepath)

    def environments(self) -> List[Environment]:
        return list(self._read())

    def load(self, environment: Environment, required: bool = True) -> Manifest:
        """
        Returns a copy of the manifest recorded for 'environment'. A missing
        manifest is an error when 'required', otherwise an empty one is returned.
        """
        data = self._read()
        if environment not in data:
            if required:
                raise self.NotFound(
                    f"No manifest recorded for environment '{environment}' at {self.filepath}."
                )
            return OrderedDict()
        return copy.deepcopy(data[environment])

    def merge(self, environment: Environment, partial: Manifest) -> Manifest:
        """Merges 'partial' over the recorded manifest without persisting the result."""
        prior = self.load(environment, required=False)
        return merge_manifests(prior, partial)

    def persist(self, environment: Environment, manifest: Manifest) -> Path:
        """Atomically records 'manifest' for 'environment', leaving other environments as is."""
        _validate_manifest(environment, manifest)
        data = self._read()
        if self.filepath.exists() and data.get(environment) == manifest:
            print(f"(i) Registry at {self.filepath} is unchanged.")
            return self.filepath

        data[environment] = manifest
        content = _serialize(data)
        with _atomic_destination(self.filepath) as temp_filepath:
            temp_filepath.write_text(content)
        print(f"(i) Registry for '{environment}' written to {self.filepath}.")
        return self.filepath
