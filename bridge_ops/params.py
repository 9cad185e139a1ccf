import typing
from collections import OrderedDict
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from eth_abi import is_encodable
from eth_typing import ChecksumAddress
from eth_utils import to_hex

from bridge_ops.confirm import _confirm_transaction
from bridge_ops.constants import UINT256_MAX, ContractMethod
from bridge_ops.errors import (
    InvalidParameter,
    MissingRequiredParameter,
    TaskError,
    TransactionAborted,
    TransactionFailed,
)
from bridge_ops.utils import format_ether

INT = "int"
STRING = "string"
BOOLEAN = "boolean"

PARAMETER_TYPES = (INT, STRING, BOOLEAN)

_TRUE_STRINGS = ("true", "yes", "y", "1")
_FALSE_STRINGS = ("false", "no", "n", "0")


#
# Task parameters
#


class TaskParameter(NamedTuple):
    """A named, typed task argument with an optional default."""

    name: str
    description: str
    default: Any = None
    type: str = STRING
    optional: bool = False

    def convert(self, value: Any) -> Any:
        """Converts a supplied value to the declared type."""
        if value is None:
            return None
        if self.type == INT:
            if isinstance(value, bool):
                raise InvalidParameter(self.name, value, "expected an integer")
            try:
                return int(value)
            except (TypeError, ValueError):
                raise InvalidParameter(self.name, value, "expected an integer")
        if self.type == BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower().strip() in _TRUE_STRINGS:
                return True
            if isinstance(value, str) and value.lower().strip() in _FALSE_STRINGS:
                return False
            raise InvalidParameter(self.name, value, "expected a boolean")
        if self.type == STRING:
            return str(value)
        raise ValueError(f"Unknown type '{self.type}' for parameter '{self.name}'")


def resolve_parameters(
    declared: Sequence[TaskParameter], supplied: typing.Dict[str, Any]
) -> OrderedDict:
    """
    Validates supplied values against the declared parameters.
    Optional parameters fall back to their default; a required parameter with
    neither a value nor a default is fatal.
    """
    supplied = supplied or dict()
    declared_names = [parameter.name for parameter in declared]
    for name, value in supplied.items():
        if name not in declared_names:
            raise InvalidParameter(name, value, "unknown parameter")

    resolved = OrderedDict()
    for parameter in declared:
        value = supplied.get(parameter.name)
        if value is None:
            value = parameter.default
        if value is None and not parameter.optional:
            raise MissingRequiredParameter(parameter.name)
        resolved[parameter.name] = parameter.convert(value)
    return resolved


#
# Transactions
#


class ChainTransactionRequest(NamedTuple):
    """One contract call, built once per invocation and submitted once."""

    contract_address: ChecksumAddress
    signer: ChecksumAddress
    method: ContractMethod
    args: Tuple[Any, ...]
    value: int = 0

    @property
    def calldata(self) -> str:
        return to_hex(self.method.encode_call(self.args))

    def named_args(self) -> Dict[str, Any]:
        return OrderedDict(zip(self.method.arg_names, self.args))


def build_request(
    contract_address: ChecksumAddress,
    signer: ChecksumAddress,
    method: ContractMethod,
    args: Sequence[Any],
    value: int = 0,
) -> ChainTransactionRequest:
    """Validates the transaction arguments against the method ABI types."""
    args = tuple(args)
    if len(args) != len(method.inputs):
        raise ValueError(
            f"'{method.name}' takes {len(method.inputs)} arg(s), got {len(args)}"
        )
    for (name, abi_type), arg in zip(method.inputs, args):
        if not is_encodable(abi_type, arg):
            raise ValueError(
                f"Argument '{name}' of '{method.name}' has a value '{arg}' "
                f"whose type does not match expected ABI type '{abi_type}'"
            )
    if not 0 <= value <= UINT256_MAX:
        raise ValueError(f"Transaction value {value} does not fit a uint256")
    return ChainTransactionRequest(
        contract_address=contract_address,
        signer=signer,
        method=method,
        args=args,
        value=value,
    )


class TransactionReceipt(NamedTuple):
    tx_hash: str
    succeeded: bool
    block_number: Optional[int] = None


class Signer(typing.Protocol):
    """The chain provider/signer a task transacts through."""

    @property
    def address(self) -> ChecksumAddress:
        ...

    def get_balance(self) -> int:
        ...

    def send(self, request: ChainTransactionRequest) -> str:
        ...

    def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        ...


class Transactor:
    """
    Represents a signer plus validated/annotated transaction execution.
    """

    def __init__(self, signer: Signer, autosign: bool = False):
        self._signer = signer
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign

    def get_signer(self) -> Signer:
        """Returns the transactor signer."""
        return self._signer

    def transact(self, request: ChainTransactionRequest, label: str = "") -> TransactionReceipt:
        base_message = f"\nTransacting {label}[{request.contract_address[:10]}].{request.method.name}"
        named_args = request.named_args()
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        if request.value:
            message += f"\n\tvalue={format_ether(request.value)} ether"
        print(message)
        if not self._autosign and not _confirm_transaction():
            raise TransactionAborted(f"{label}.{request.method.name}")

        tx_hash = self._signer.send(request)
        print(f"The tx hash: {tx_hash}, waiting confirm...")

        try:
            receipt = self._signer.wait_for_receipt(tx_hash)
        except TaskError:
            raise
        except Exception as e:
            raise TransactionFailed(tx_hash=tx_hash, cause=str(e)) from e
        if not receipt.succeeded:
            raise TransactionFailed(tx_hash=tx_hash, cause="transaction reverted")
        print("The tx confirmed")
        return receipt
