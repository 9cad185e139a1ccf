import json

import pytest
from eth_utils import to_checksum_address

from bridge_ops.checkpoint import CheckpointStore
from bridge_ops.config import OperationsConfig
from bridge_ops.constants import (
    DEPLOY_ARBITRATOR_LOG_PREFIX,
    DEPLOY_GATEWAY,
    DEPLOY_L1_GATEWAY_LOG_PREFIX,
    DEPLOY_L2_GATEWAY_LOG_PREFIX,
    DEPLOY_LOG_ARBITRATOR,
    DEPLOY_LOG_ZKLINK_PROXY,
    DEPLOY_ZKLINK_LOG_PREFIX,
    MessageStatus,
)
from bridge_ops.errors import TransactionFailed
from bridge_ops.logs import DeployLogResolver, get_log_filepath, get_log_name
from bridge_ops.params import TransactionReceipt
from bridge_ops.tasks import ExecutionContext

# Common constants
SIGNER_ADDRESS = to_checksum_address("0x1111111111111111111111111111111111111111")
ZKLINK_ADDRESS = to_checksum_address("0x2222222222222222222222222222222222222222")
L2_GATEWAY_ADDRESS = to_checksum_address("0x3333333333333333333333333333333333333333")
ARBITRATOR_ADDRESS = to_checksum_address("0x4444444444444444444444444444444444444444")
L1_GATEWAY_ADDRESS = to_checksum_address("0x5555555555555555555555555555555555555555")
VALIDATOR_ADDRESS = to_checksum_address("0x6666666666666666666666666666666666666666")
SCROLL_L2_GATEWAY_ADDRESS = to_checksum_address("0x7777777777777777777777777777777777777777")

TX_HASH = "0xabc" + "0" * 61
PROVE_TX_HASH = "0x" + "1" * 64
RELAY_TX_HASH = "0x" + "2" * 64

ONE_ETHER = 10**18


# Fakes
class SpySigner:
    """Records every call; the chain is simulated by the given receipt status."""

    def __init__(self, tx_hash=TX_HASH, succeeded=True, wait_error=None, balance=ONE_ETHER):
        self.address = SIGNER_ADDRESS
        self.tx_hash = tx_hash
        self.succeeded = succeeded
        self.wait_error = wait_error
        self.balance = balance
        self.sent = []
        self.waited = []

    @property
    def calls(self):
        return self.sent + self.waited

    def get_balance(self):
        return self.balance

    def send(self, request):
        self.sent.append(request)
        return self.tx_hash

    def wait_for_receipt(self, tx_hash):
        self.waited.append(tx_hash)
        if self.wait_error is not None:
            raise self.wait_error
        return TransactionReceipt(tx_hash=tx_hash, succeeded=self.succeeded, block_number=1)


class ScriptedOracle:
    """
    Reports the scripted statuses one poll at a time, repeating the last one.
    Prove and finalize calls remember the status that was last reported.
    """

    def __init__(self, statuses, messages=None, receipt=None, error=None):
        self.statuses = list(statuses)
        self.reported = []
        self.proved = []
        self.finalized = []
        self.messages = messages if messages is not None else [{"nonce": 1}, {"nonce": 2}]
        self.receipt = receipt if receipt is not None else {"status": MessageStatus.RELAYED.name}
        self.error = error

    @property
    def last_reported(self):
        return self.reported[-1] if self.reported else None

    def get_message_status(self, tx_hash):
        if self.error is not None:
            raise self.error
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        self.reported.append(status)
        return status

    def prove_message(self, tx_hash):
        self.proved.append((tx_hash, self.last_reported))
        return PROVE_TX_HASH

    def finalize_message(self, tx_hash):
        self.finalized.append((tx_hash, self.last_reported))
        return RELAY_TX_HASH

    def get_messages_by_transaction(self, tx_hash):
        return self.messages

    def get_message_receipt(self, message):
        return self.receipt


class FixedGasEstimator:
    def __init__(self, relay_gas=150_000, fee=2 * 10**14, error=None):
        self.relay_gas = relay_gas
        self.fee = fee
        self.error = error
        self.relay_calls = []
        self.fee_calls = []

    def estimate_relay_gas(self, sender, target, value, message):
        self.relay_calls.append((sender, target, value, message))
        if self.error is not None:
            raise self.error
        return self.relay_gas

    def estimate_l2_fee(self, gas_limit):
        self.fee_calls.append(gas_limit)
        return self.fee


# Utility functions
def write_deploy_log(log_dir, log_prefix, network, entries):
    filepath = get_log_filepath(log_dir, log_prefix, network)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(entries, file)
    return filepath


# Fixtures
@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "log"


@pytest.fixture
def config(tmp_path, log_dir):
    return OperationsConfig(
        deploy_log_dir=log_dir,
        checkpoint_dir=tmp_path / "checkpoints",
        poll_interval=0,
        autosign=True,
    )


@pytest.fixture
def optimism_logs(config):
    write_deploy_log(
        config.deploy_log_dir,
        DEPLOY_L2_GATEWAY_LOG_PREFIX,
        config.optimism_name,
        {DEPLOY_GATEWAY: L2_GATEWAY_ADDRESS},
    )
    write_deploy_log(
        config.deploy_log_dir,
        DEPLOY_ZKLINK_LOG_PREFIX,
        config.optimism_name,
        {DEPLOY_LOG_ZKLINK_PROXY: ZKLINK_ADDRESS},
    )


@pytest.fixture
def scroll_logs(config):
    write_deploy_log(
        config.deploy_log_dir,
        DEPLOY_ARBITRATOR_LOG_PREFIX,
        config.ethereum_name,
        {DEPLOY_LOG_ARBITRATOR: ARBITRATOR_ADDRESS},
    )
    write_deploy_log(
        config.deploy_log_dir,
        get_log_name(DEPLOY_L1_GATEWAY_LOG_PREFIX, config.scroll_name),
        config.ethereum_name,
        {DEPLOY_GATEWAY: L1_GATEWAY_ADDRESS},
    )
    write_deploy_log(
        config.deploy_log_dir,
        DEPLOY_L2_GATEWAY_LOG_PREFIX,
        config.scroll_name,
        {DEPLOY_GATEWAY: SCROLL_L2_GATEWAY_ADDRESS},
    )


@pytest.fixture
def signer():
    return SpySigner()


@pytest.fixture
def reverting_signer():
    return SpySigner(succeeded=False)


@pytest.fixture
def dropping_signer():
    return SpySigner(wait_error=TransactionFailed(TX_HASH, "dropped"))


@pytest.fixture
def oracle():
    return ScriptedOracle(
        [
            MessageStatus.SENT,
            MessageStatus.READY_TO_PROVE,
            MessageStatus.READY_FOR_RELAY,
            MessageStatus.RELAYED,
        ]
    )


@pytest.fixture
def checkpoints(config):
    return CheckpointStore(directory=config.checkpoint_dir)


@pytest.fixture
def make_context(config, checkpoints):
    def _make_context(signer, oracle=None, **kwargs):
        return ExecutionContext(
            config=kwargs.pop("config", config),
            signer=signer,
            resolver=DeployLogResolver(log_dir=config.deploy_log_dir),
            oracle=oracle,
            gas_estimator=kwargs.pop("gas_estimator", None),
            checkpoints=kwargs.pop("checkpoints", checkpoints),
            sleep=lambda seconds: None,
        )

    return _make_context
