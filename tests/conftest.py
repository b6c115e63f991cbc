import copy
import json
from collections import OrderedDict

import pytest
from eth_utils import to_checksum_address

from frax_deployment.config import DeploymentConfig, params_filepath_from_environment
from frax_deployment.constants import ACTOR_ROLES, ZERO_ADDRESS
from frax_deployment.errors import LedgerError
from frax_deployment.ledger import Ledger
from frax_deployment.orchestrator import Orchestrator
from frax_deployment.registry import AddressRegistry
from frax_deployment.utils import _load_yaml

STAKING_TOKEN_PARAMETER = "_stakingToken"
PERIOD_FINISH = 1_700_000_000


def address(n: int) -> str:
    return to_checksum_address(f"0x{n:040x}")


class FakeLedger(Ledger):
    """
    In-memory ledger simulating the parts of the FRAX contracts that
    deployment and wiring touch.
    """

    def __init__(self):
        self._counter = 0x1000
        self.actors = {role: address(0xA0 + i) for i, role in enumerate(ACTOR_ROLES)}
        self.revert_on = set()

        self.deployments = list()  # (contract_type, params, actor, address)
        self.transactions = list()  # (contract_type, address, method, args, actor)
        self.reads = list()  # (contract_type, address, method, args)

        self.contract_types = dict()
        self.frax_pools = dict()
        self.share_links = dict()
        self.period_finish = dict()
        self.staking_tokens = dict()
        self.pairs = dict()
        self.balances = dict()
        self.values = dict()  # (address, method) -> value, for plain reads

    def _new_address(self, contract_type: str) -> str:
        self._counter += 1
        new_address = address(self._counter)
        self.contract_types[new_address] = contract_type
        return new_address

    def _check_revert(self, name: str) -> None:
        if name in self.revert_on:
            raise LedgerError(f"execution reverted: {name}")

    def actor_address(self, role):
        return self.actors[role]

    def deploy(self, contract_type, params, actor):
        self._check_revert(contract_type)
        new_address = self._new_address(contract_type)
        if STAKING_TOKEN_PARAMETER in params:
            self.staking_tokens[new_address] = params[STAKING_TOKEN_PARAMETER]
        self.deployments.append((contract_type, OrderedDict(params), actor, new_address))
        return new_address

    def transact(self, contract_type, address, method, *args, actor):
        self.transactions.append((contract_type, address, method, args, actor))
        self._check_revert(method)
        if method == "addPool":
            pools = self.frax_pools.setdefault(address, set())
            if args[0] in pools:
                raise LedgerError("execution reverted: pool already exists")
            pools.add(args[0])
        elif method == "setFRAXAddress":
            self.share_links[address] = args[0]
        elif method == "initializeDefault":
            self.period_finish[address] = PERIOD_FINISH
        elif method == "createPair":
            self.pairs[frozenset(args)] = self._new_address("UniswapV2Pair")
        elif method == "transfer":
            recipient, amount = args
            key = (address, recipient)
            self.balances[key] = self.balances.get(key, 0) + amount
        return True

    def read(self, contract_type, address, method, *args):
        self.reads.append((contract_type, address, method, args))
        self._check_revert(method)
        if method == "frax_pools":
            return args[0] in self.frax_pools.get(address, set())
        if method == "FRAXStablecoinAdd":
            return self.share_links.get(address, ZERO_ADDRESS)
        if method == "periodFinish":
            return self.period_finish.get(address, 0)
        if method == "stakingToken":
            return self.staking_tokens[address]
        if method == "getPair":
            return self.pairs.get(frozenset(args), ZERO_ADDRESS)
        return self.values[(address, method)]

    def methods(self, name=None):
        """Names of the submitted transactions, optionally only those calling 'name'."""
        return [tx[2] for tx in self.transactions if name is None or tx[2] == name]


def make_config(tmp_path, environment="local", **deployment):
    """Loads the bundled parameter file for 'environment', writing its registry to tmp_path."""
    config = copy.deepcopy(_load_yaml(params_filepath_from_environment(environment)))
    config["artifacts"] = {"dir": str(tmp_path), "filename": "addresses.json"}
    config["deployment"].update(deployment)
    return DeploymentConfig(config=config, environment=environment)


def write_registry(filepath, data):
    filepath.write_text(json.dumps(data, indent=4) + "\n")


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def registry_filepath(tmp_path):
    return tmp_path / "addresses.json"


@pytest.fixture
def registry(registry_filepath):
    return AddressRegistry(registry_filepath)


@pytest.fixture
def local_config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def deployed_local(local_config, ledger):
    """A local environment brought up from scratch."""
    orchestrator = Orchestrator.from_config(config=local_config, ledger=ledger)
    orchestrator.run()
    return orchestrator
