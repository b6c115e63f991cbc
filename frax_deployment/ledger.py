import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from ape import accounts
from ape.api import AccountAPI
from ape.exceptions import ApeException
from ape_accounts import KeyfileAccount
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from web3 import Web3

from frax_deployment.config import ActorReference
from frax_deployment.confirm import _confirm_resolution, _continue
from frax_deployment.errors import DeploymentConfigError, LedgerError
from frax_deployment.utils import get_contract_container

w3 = Web3()


class Ledger(ABC):
    """
    The network the protocol lives on, as seen by the orchestrator.

    Every method blocks until the operation is confirmed (or fails) and
    raises LedgerError when the network rejects it.
    """

    @abstractmethod
    def actor_address(self, role: str) -> ChecksumAddress:
        """Returns the address of the account acting as 'role'."""
        raise NotImplementedError

    @abstractmethod
    def deploy(self, contract_type: str, params: OrderedDict, actor: str) -> ChecksumAddress:
        """Instantiates a new component and returns its address."""
        raise NotImplementedError

    @abstractmethod
    def transact(
        self, contract_type: str, address: ChecksumAddress, method: str, *args, actor: str
    ) -> Any:
        """Submits a state-mutating call on behalf of 'actor'."""
        raise NotImplementedError

    @abstractmethod
    def read(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> Any:
        """Performs a read-only call."""
        raise NotImplementedError

    def actor_addresses(self, roles: List[str]) -> Dict[str, ChecksumAddress]:
        return {role: self.actor_address(role) for role in roles}


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_abi_inputs(
    contract_type: str,
    abi_inputs: List[Any],
    resolved_parameters: OrderedDict,
) -> None:
    """Validates the constructor parameters against the constructor ABI."""
    if len(resolved_parameters) != len(abi_inputs):
        raise ValueError(
            f"Constructor parameters length mismatch - "
            f"{contract_type} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()), start=0)
    for position, (abi_input, resolved_input) in codex:
        name, value = resolved_input
        if abi_input.name != name:
            raise ValueError(
                f"{contract_type} constructor parameter '{name}' at position {position} does not "
                f"match the expected ABI name '{abi_input.name}'."
            )
        if not w3.is_encodable(abi_input.type, value):
            raise ValueError(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


def _load_account(reference: ActorReference) -> AccountAPI:
    """Test accounts are referenced by index, everything else by ape account alias."""
    if isinstance(reference, int):
        return accounts.test_accounts[reference]
    return accounts.load(reference)


class ApeLedger(Ledger):
    """Ledger backed by ape's connected provider and the project's contract types."""

    def __init__(
        self,
        actors: Dict[str, ActorReference],
        autosign: bool = False,
        publish: bool = False,
        required_confirmations: Optional[int] = None,
    ):
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._publish = publish
        self._required_confirmations = required_confirmations
        self._accounts: Dict[str, AccountAPI] = dict()
        for role, reference in actors.items():
            account = _load_account(reference)
            if isinstance(account, KeyfileAccount):
                account.set_autosign(autosign)
            self._accounts[role] = account

    def _get_account(self, role: str) -> AccountAPI:
        try:
            return self._accounts[role]
        except KeyError:
            raise DeploymentConfigError(f"No account configured for actor '{role}'.")

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        if self._required_confirmations is None:
            return dict()
        return {"required_confirmations": self._required_confirmations}

    def actor_address(self, role: str) -> ChecksumAddress:
        return self._get_account(role).address

    @staticmethod
    def _get_container(contract_type: str):
        try:
            return get_contract_container(contract_type)
        except ValueError as e:
            raise LedgerError(str(e)) from e

    def _get_handler(self, contract_type: str, address: ChecksumAddress, method: str):
        container = self._get_container(contract_type)
        try:
            instance = container.at(address)
        except ApeException as e:
            raise LedgerError(f"No {contract_type} found at {address}: {e}") from e
        try:
            return getattr(instance, method)
        except AttributeError as e:
            raise LedgerError(f"{contract_type} has no method '{method}'") from e

    def deploy(self, contract_type: str, params: OrderedDict, actor: str) -> ChecksumAddress:
        container = self._get_container(contract_type)
        try:
            _validate_constructor_abi_inputs(
                contract_type=contract_type,
                abi_inputs=container.constructor.abi.inputs,
                resolved_parameters=params,
            )
        except ValueError as e:
            raise LedgerError(str(e)) from e
        if not self._autosign:
            _confirm_resolution(params, contract_type, actor)

        account = self._get_account(actor)
        try:
            instance = account.deploy(
                container, *params.values(), publish=self._publish, **self._get_kwargs()
            )
        except ApeException as e:
            raise LedgerError(f"Deployment of {contract_type} failed: {e}") from e
        return to_checksum_address(instance.address)

    def transact(
        self, contract_type: str, address: ChecksumAddress, method: str, *args, actor: str
    ) -> Any:
        handler = self._get_handler(contract_type, address, method)
        try:
            named_args = _validate_method_args(method_abis=handler.abis, args=args)
        except ValueError as e:
            raise LedgerError(str(e)) from e

        base_message = f"\nTransacting {contract_type}[{address[:10]}].{method} as {actor}"
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        try:
            return handler(*args, sender=self._get_account(actor), **self._get_kwargs())
        except ApeException as e:
            raise LedgerError(f"{contract_type}.{method} failed: {e}") from e

    def read(self, contract_type: str, address: ChecksumAddress, method: str, *args) -> Any:
        handler = self._get_handler(contract_type, address, method)
        try:
            return handler(*args)
        except ApeException as e:
            raise LedgerError(f"{contract_type}.{method} call failed: {e}") from e
