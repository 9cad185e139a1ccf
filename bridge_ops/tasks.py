import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from eth_abi import encode
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from bridge_ops.bridge import BridgeOracle, MessageStatusWatcher, call_oracle, call_service
from bridge_ops.checkpoint import Checkpoint, CheckpointStore
from bridge_ops.config import OperationsConfig
from bridge_ops.constants import (
    CLAIM_MESSAGE_CALLBACK,
    DEFAULT_FINALIZE_MESSAGE_GAS_LIMIT,
    DEFAULT_L2_FEE_WEI,
    DEPLOY_ARBITRATOR_LOG_PREFIX,
    DEPLOY_GATEWAY,
    DEPLOY_L1_GATEWAY_LOG_PREFIX,
    DEPLOY_L2_GATEWAY_LOG_PREFIX,
    DEPLOY_LOG_ARBITRATOR,
    DEPLOY_LOG_ZKLINK_PROXY,
    DEPLOY_ZKLINK_LOG_PREFIX,
    SET_VALIDATOR,
    SYNC_L2_REQUESTS,
    UINT256_MAX,
    ZKLINK_SET_VALIDATOR,
    ContractMethod,
    MessageStatus,
)
from bridge_ops.errors import (
    ExternalServiceUnavailable,
    InvalidParameter,
    UnresolvedDeploymentAddress,
)
from bridge_ops.logs import DeployLogResolver, get_log_name
from bridge_ops.params import (
    BOOLEAN,
    INT,
    STRING,
    ChainTransactionRequest,
    Signer,
    TaskParameter,
    Transactor,
    build_request,
    resolve_parameters,
)
from bridge_ops.scroll import ESTIMATOR_SERVICE, GasEstimator, add_gas_limit_margin
from bridge_ops.utils import format_ether, is_transaction_hash


class RequiredAddress(NamedTuple):
    """A deployed contract a task cannot run without."""

    label: str
    log_prefix: str
    entry_name: str
    network: str


class ExecutionContext(NamedTuple):
    config: OperationsConfig
    signer: Signer
    resolver: DeployLogResolver
    oracle: Optional[BridgeOracle] = None
    gas_estimator: Optional[GasEstimator] = None
    checkpoints: Optional[CheckpointStore] = None
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_config(
        cls,
        config: OperationsConfig,
        signer: Signer,
        oracle: Optional[BridgeOracle] = None,
        gas_estimator: Optional[GasEstimator] = None,
    ) -> "ExecutionContext":
        return cls(
            config=config,
            signer=signer,
            resolver=DeployLogResolver(log_dir=config.deploy_log_dir),
            oracle=oracle,
            gas_estimator=gas_estimator,
            checkpoints=CheckpointStore(directory=config.checkpoint_dir),
        )


class TaskOutcome(NamedTuple):
    task: str
    tx_hash: Optional[str] = None
    status: Optional[MessageStatus] = None
    message: Any = None
    receipt: Any = None
    calldata: Optional[str] = None


class ChainTask(ABC):
    """
    A named, parameterized operation bound to a signer.

    Parameters are validated and every required deployment address is resolved
    before anything is sent, so a missing address never costs gas.
    """

    NAME: str = NotImplemented
    DESCRIPTION: str = ""
    PARAMETERS: Tuple[TaskParameter, ...] = ()

    def run(self, parameters: Dict[str, Any], context: ExecutionContext) -> TaskOutcome:
        values = resolve_parameters(self.PARAMETERS, parameters)
        values = self.validate(values)
        self.describe(values)
        addresses = self.resolve_addresses(context)
        return self.execute(values, addresses, context)

    def validate(self, values: OrderedDict) -> OrderedDict:
        return values

    def describe(self, values: OrderedDict) -> None:
        pretty_values = ", ".join(f"{k}: {v}" for k, v in values.items())
        print(f"(i) {self.NAME}: {pretty_values}")

    @abstractmethod
    def required_addresses(self, config: OperationsConfig) -> List[RequiredAddress]:
        raise NotImplementedError

    @abstractmethod
    def execute(
        self,
        values: OrderedDict,
        addresses: Dict[str, ChecksumAddress],
        context: ExecutionContext,
    ) -> TaskOutcome:
        raise NotImplementedError

    def resolve_addresses(self, context: ExecutionContext) -> Dict[str, ChecksumAddress]:
        addresses = OrderedDict()
        for required in self.required_addresses(context.config):
            address = context.resolver.resolve(
                log_prefix=required.log_prefix,
                entry_name=required.entry_name,
                network=required.network,
            )
            if address is None:
                print(f"The {required.label} address not exist")
                raise UnresolvedDeploymentAddress(
                    artifact=required.label, network=required.network
                )
            print(f"The {required.label} address: {address}")
            addresses[required.label] = address
        return addresses

    @staticmethod
    def build_request(
        contract_address: ChecksumAddress,
        signer: ChecksumAddress,
        method: ContractMethod,
        args: List[Any],
        value: int = 0,
    ) -> ChainTransactionRequest:
        try:
            return build_request(contract_address, signer, method, args, value=value)
        except ValueError as e:
            raise InvalidParameter(method.name, args, str(e)) from e

    @staticmethod
    def print_balance(context: ExecutionContext, chain: str) -> None:
        signer = context.signer
        balance = format_ether(signer.get_balance())
        print(f"{signer.address} balance on {chain}: {balance} ether")


def _validate_uint256(values: OrderedDict, name: str, min_value: int = 0) -> None:
    value = values[name]
    if value is not None and not min_value <= value <= UINT256_MAX:
        raise InvalidParameter(name, value, f"must be between {min_value} and 2**256 - 1")


#
# Optimism
#

L2_GATEWAY = "optimism l2 gateway"
ZKLINK = "zkLink"


class SyncL2RequestsTask(ChainTask):
    """
    Sends a sync point from the OP-stack chain to the arbitrator and relays the
    resulting withdrawal through the official bridge: prove once the message
    is ready to prove, finalize once the challenge period is over.

    The relay may take days on mainnet. Progress is checkpointed after every
    status change, so an interrupted run can continue with `tx_hash` or
    `resume` instead of sending a second sync point.
    """

    NAME = "syncL2Requests"
    DESCRIPTION = "Send sync point to arbitrator"
    PARAMETERS = (
        TaskParameter("txs", "New sync point", default=100, type=INT, optional=True),
        TaskParameter(
            "tx_hash", "Resume the message of an already sent sync point", type=STRING, optional=True
        ),
        TaskParameter(
            "resume", "Resume from the stored checkpoint", default=False, type=BOOLEAN, optional=True
        ),
    )

    def validate(self, values: OrderedDict) -> OrderedDict:
        _validate_uint256(values, "txs")
        tx_hash = values["tx_hash"]
        if tx_hash is not None:
            if not is_transaction_hash(tx_hash):
                raise InvalidParameter("tx_hash", tx_hash, "expected a 32 byte 0x-prefixed hash")
            values["tx_hash"] = tx_hash.lower()
        return values

    def required_addresses(self, config: OperationsConfig) -> List[RequiredAddress]:
        return [
            RequiredAddress(
                L2_GATEWAY, DEPLOY_L2_GATEWAY_LOG_PREFIX, DEPLOY_GATEWAY, config.optimism_name
            ),
            RequiredAddress(
                ZKLINK, DEPLOY_ZKLINK_LOG_PREFIX, DEPLOY_LOG_ZKLINK_PROXY, config.optimism_name
            ),
        ]

    def _resume_point(
        self, values: OrderedDict, context: ExecutionContext
    ) -> Tuple[Optional[str], MessageStatus]:
        network = context.config.optimism_name
        stored = None
        if context.checkpoints is not None:
            stored = context.checkpoints.load(task=self.NAME, network=network)

        tx_hash = values["tx_hash"]
        if tx_hash is not None:
            if stored is not None and stored.tx_hash == tx_hash:
                return tx_hash, stored.status
            return tx_hash, MessageStatus.SENT
        if values["resume"]:
            if stored is None:
                raise InvalidParameter(
                    "resume", True, f"no checkpoint for {self.NAME} on {network}"
                )
            return stored.tx_hash, stored.status
        return None, MessageStatus.SENT

    def execute(
        self,
        values: OrderedDict,
        addresses: Dict[str, ChecksumAddress],
        context: ExecutionContext,
    ) -> TaskOutcome:
        oracle = context.oracle
        if oracle is None:
            raise ExternalServiceUnavailable(
                service="bridge message-status oracle", cause="no oracle configured"
            )
        config = context.config
        network = config.optimism_name

        tx_hash, status = self._resume_point(values, context)
        if tx_hash is None:
            self.print_balance(context, chain="l2")
            request = self.build_request(
                contract_address=addresses[ZKLINK],
                signer=context.signer.address,
                method=SYNC_L2_REQUESTS,
                args=[values["txs"]],
            )
            print("Send a l2 message to l1...")
            transactor = Transactor(context.signer, autosign=config.autosign)
            receipt = transactor.transact(request, label="ZkLink")
            tx_hash = receipt.tx_hash
            print("The transaction has been executed on L2")
        else:
            print(f"Resuming the message of {tx_hash} from {status.name}")

        on_advance = None
        if context.checkpoints is not None:
            checkpoints = context.checkpoints
            checkpoints.save(
                Checkpoint(task=self.NAME, network=network, tx_hash=tx_hash, status=status)
            )

            def on_advance(new_status: MessageStatus) -> None:
                checkpoints.update(task=self.NAME, network=network, status=new_status)

        watcher = MessageStatusWatcher(
            oracle=oracle,
            tx_hash=tx_hash,
            status=status,
            poll_interval=config.poll_interval,
            timeout=config.status_timeout,
            sleep=context.sleep,
            on_advance=on_advance,
        )
        watcher.poll()

        if watcher.status < MessageStatus.PROVEN:
            watcher.wait_for(MessageStatus.READY_TO_PROVE)
            print("Proving the message...")
            prove_tx_hash = call_oracle(oracle.prove_message, tx_hash)
            print(f"The prove tx hash: {prove_tx_hash}")
            watcher.advance(MessageStatus.PROVEN)
            print("The message has been proven")

        if watcher.status < MessageStatus.RELAYED:
            # only possible once the fault proof period has elapsed (7 days on OP Mainnet)
            watcher.wait_for(MessageStatus.READY_FOR_RELAY)
            print("Relaying the message...")
            relay_tx_hash = call_oracle(oracle.finalize_message, tx_hash)
            print(f"The relay tx hash: {relay_tx_hash}")
            watcher.wait_for(MessageStatus.RELAYED)
            print("The message has been relayed")

        messages = call_oracle(oracle.get_messages_by_transaction, tx_hash)
        if not messages:
            raise ExternalServiceUnavailable(
                service="bridge message-status oracle",
                cause=f"no message found for transaction {tx_hash}",
            )
        message = messages[-1]
        receipt = call_oracle(oracle.get_message_receipt, message)
        print(f"The tx receipt: {receipt}")
        print("Done! Your transaction is executed")
        return TaskOutcome(
            task=self.NAME,
            tx_hash=tx_hash,
            status=watcher.status,
            message=message,
            receipt=receipt,
        )


#
# Scroll
#

ARBITRATOR = "arbitrator"
L1_GATEWAY = "scroll l1 gateway"
SCROLL_L2_GATEWAY = "scroll l2 gateway"


def encode_adapter_params(finalize_message_gas_limit: int) -> bytes:
    """Adapter params of the Scroll gateway: the gas limit for the L2 to finalize the message."""
    return encode(["uint256"], [finalize_message_gas_limit])


def encode_l2_gateway_message(validator: ChecksumAddress, active: bool) -> bytes:
    """The call the L2 gateway receives: `claimMessageCallback(0, zkLink.setValidator(...))`."""
    zklink_calldata = ZKLINK_SET_VALIDATOR.encode_call([validator, active])
    return CLAIM_MESSAGE_CALLBACK.encode_call([0, zklink_calldata])


class SetValidatorTask(ChainTask):
    """
    Sets a zkLink validator through the arbitrator on L1. The official Scroll
    bridge forwards the message to L2; no user action is required afterwards.

    Unless given, the L2 gas limit is estimated (plus a margin) and the L2 fee
    is quoted by the Scroll message queue. Without a gas estimator the
    defaults are used.
    """

    NAME = "setValidator"
    DESCRIPTION = "Set validator for zkLink"
    PARAMETERS = (
        TaskParameter("validator", "Validator Address", type=STRING),
        TaskParameter(
            "active",
            "Whether to activate the validator address",
            default=True,
            type=BOOLEAN,
            optional=True,
        ),
        TaskParameter(
            "finalize_gas_limit",
            "Gas limit for the L2 to finalize the message",
            type=INT,
            optional=True,
        ),
        TaskParameter("fee", "L2 fee in wei", type=INT, optional=True),
        TaskParameter(
            "calldata_only",
            "Only print the calldata of the arbitrator call",
            default=False,
            type=BOOLEAN,
            optional=True,
        ),
    )

    def validate(self, values: OrderedDict) -> OrderedDict:
        try:
            values["validator"] = to_checksum_address(values["validator"])
        except ValueError:
            raise InvalidParameter("validator", values["validator"], "invalid ethereum address")
        _validate_uint256(values, "finalize_gas_limit", min_value=1)
        _validate_uint256(values, "fee")
        return values

    def required_addresses(self, config: OperationsConfig) -> List[RequiredAddress]:
        l1_gateway_log_name = get_log_name(DEPLOY_L1_GATEWAY_LOG_PREFIX, config.scroll_name)
        return [
            RequiredAddress(
                ARBITRATOR,
                DEPLOY_ARBITRATOR_LOG_PREFIX,
                DEPLOY_LOG_ARBITRATOR,
                config.ethereum_name,
            ),
            RequiredAddress(L1_GATEWAY, l1_gateway_log_name, DEPLOY_GATEWAY, config.ethereum_name),
            RequiredAddress(
                SCROLL_L2_GATEWAY, DEPLOY_L2_GATEWAY_LOG_PREFIX, DEPLOY_GATEWAY, config.scroll_name
            ),
        ]

    def estimate_finalize_gas_limit(
        self,
        values: OrderedDict,
        addresses: Dict[str, ChecksumAddress],
        context: ExecutionContext,
    ) -> int:
        if values["finalize_gas_limit"] is not None:
            return values["finalize_gas_limit"]
        estimator = context.gas_estimator
        if estimator is None:
            print("(i) No gas estimator, using the default l1 to l2 gas limit")
            return DEFAULT_FINALIZE_MESSAGE_GAS_LIMIT
        relay_gas = call_service(
            ESTIMATOR_SERVICE,
            estimator.estimate_relay_gas,
            addresses[L1_GATEWAY],
            addresses[SCROLL_L2_GATEWAY],
            0,
            encode_l2_gateway_message(values["validator"], values["active"]),
        )
        return add_gas_limit_margin(relay_gas)

    def estimate_fee(self, values: OrderedDict, gas_limit: int, context: ExecutionContext) -> int:
        if values["fee"] is not None:
            return values["fee"]
        estimator = context.gas_estimator
        if estimator is None:
            print("(i) No gas estimator, using the default l2 fee")
            return DEFAULT_L2_FEE_WEI
        return call_service(ESTIMATOR_SERVICE, estimator.estimate_l2_fee, gas_limit)

    def execute(
        self,
        values: OrderedDict,
        addresses: Dict[str, ChecksumAddress],
        context: ExecutionContext,
    ) -> TaskOutcome:
        gas_limit = self.estimate_finalize_gas_limit(values, addresses, context)
        print(f"The l1 to l2 gas limit: {gas_limit}")
        args = [
            addresses[L1_GATEWAY],
            values["validator"],
            values["active"],
            encode_adapter_params(gas_limit),
        ]
        if values["calldata_only"]:
            request = self.build_request(
                contract_address=addresses[ARBITRATOR],
                signer=context.signer.address,
                method=SET_VALIDATOR,
                args=args,
            )
            print(f"The setValidator calldata: {request.calldata}")
            return TaskOutcome(task=self.NAME, calldata=request.calldata)

        self.print_balance(context, chain="l1")
        fee = self.estimate_fee(values, gas_limit, context)
        print(f"The fee: {format_ether(fee)} ether")
        request = self.build_request(
            contract_address=addresses[ARBITRATOR],
            signer=context.signer.address,
            method=SET_VALIDATOR,
            args=args,
            value=fee,
        )
        transactor = Transactor(context.signer, autosign=context.config.autosign)
        receipt = transactor.transact(request, label="Arbitrator")
        print("Waiting for the official Scroll bridge to forward the message to L2")
        return TaskOutcome(task=self.NAME, tx_hash=receipt.tx_hash, calldata=request.calldata)
