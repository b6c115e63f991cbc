import json
import stat
from collections import OrderedDict

import pytest

from frax_deployment.errors import OrchestrationError
from frax_deployment.registry import AddressRegistry, _atomic_destination, merge_manifests
from tests.conftest import address, write_registry

LOCAL_MANIFEST = OrderedDict(
    [
        ("main", OrderedDict([("FRAX", address(1)), ("FXS", address(2))])),
        ("weth", address(3)),
        ("libraries", OrderedDict([("UniswapV2Library", address(4)), ("FraxPoolLibrary", "")])),
    ]
)


@pytest.fixture
def populated_registry(registry_filepath):
    write_registry(
        registry_filepath,
        OrderedDict([("local", LOCAL_MANIFEST), ("testnet", {"weth": address(9)})]),
    )
    return AddressRegistry(registry_filepath)


def test_load_then_persist_is_a_noop(populated_registry, registry_filepath, capsys):
    original = registry_filepath.read_text()
    for environment in populated_registry.environments():
        manifest = populated_registry.load(environment)
        populated_registry.persist(environment, manifest)
        assert registry_filepath.read_text() == original

    assert "unchanged" in capsys.readouterr().out


def test_load_missing_environment(populated_registry):
    with pytest.raises(AddressRegistry.NotFound):
        populated_registry.load("production")

    assert populated_registry.load("production", required=False) == dict()
    assert issubclass(AddressRegistry.NotFound, OrchestrationError)


def test_load_without_registry_file(registry):
    assert registry.environments() == []
    with pytest.raises(AddressRegistry.NotFound):
        registry.load("local")


def test_load_returns_a_copy(populated_registry):
    manifest = populated_registry.load("local")
    manifest["main"]["FRAX"] = address(100)
    assert populated_registry.load("local")["main"]["FRAX"] == address(1)


def test_merge_preserves_untouched_categories(populated_registry):
    merged = populated_registry.merge("local", {"main": {"FRAX": address(10)}})

    assert merged["main"] == {"FRAX": address(10), "FXS": address(2)}
    assert merged["weth"] == address(3)
    assert merged["libraries"] == LOCAL_MANIFEST["libraries"]

    # nothing is written by a merge
    assert populated_registry.load("local") == LOCAL_MANIFEST


def test_merge_manifests_replaces_scalar_entries():
    merged = merge_manifests({"weth": address(1), "governance": address(2)}, {"weth": address(3)})
    assert merged == {"weth": address(3), "governance": address(2)}


def test_persist_keeps_other_environments(populated_registry):
    populated_registry.persist("production", {"weth": address(7)})

    assert populated_registry.environments() == ["local", "testnet", "production"]
    assert populated_registry.load("local") == LOCAL_MANIFEST
    assert populated_registry.load("testnet") == {"weth": address(9)}


def test_persist_creates_registry(registry, registry_filepath):
    registry.persist("local", LOCAL_MANIFEST)
    assert registry_filepath.exists()
    assert registry.load("local") == LOCAL_MANIFEST


def test_persist_rejects_malformed_manifest(populated_registry, registry_filepath):
    original = registry_filepath.read_text()
    with pytest.raises(ValueError):
        populated_registry.persist("local", {"main": {"FRAX": 1}})
    assert registry_filepath.read_text() == original


def test_failed_write_leaves_registry_intact(populated_registry, registry_filepath, tmp_path):
    original = registry_filepath.read_text()

    with pytest.raises(RuntimeError):
        with _atomic_destination(registry_filepath) as temp_filepath:
            temp_filepath.write_text("{ partial")
            raise RuntimeError("interrupted")

    assert registry_filepath.read_text() == original
    assert list(tmp_path.iterdir()) == [registry_filepath]


def test_persist_unchanged_manifest_keeps_foreign_formatting(registry_filepath):
    data = OrderedDict([("local", LOCAL_MANIFEST), ("testnet", {"weth": address(9)})])
    registry_filepath.write_text(json.dumps(data, indent=2))
    original = registry_filepath.read_text()
    registry = AddressRegistry(registry_filepath)

    for environment in registry.environments():
        registry.persist(environment, registry.load(environment))
        assert registry_filepath.read_text() == original


def test_persist_keeps_registry_file_mode(populated_registry, registry_filepath):
    registry_filepath.chmod(0o644)
    manifest = populated_registry.merge("testnet", {"weth": address(10)})

    populated_registry.persist("testnet", manifest)

    assert populated_registry.load("testnet")["weth"] == address(10)
    assert stat.S_IMODE(registry_filepath.stat().st_mode) == 0o644
