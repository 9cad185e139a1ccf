from types import SimpleNamespace

import pytest
from eth_abi import decode, encode
from eth_utils import to_bytes, to_checksum_address

from bridge_ops.constants import (
    ESTIMATE_CROSS_DOMAIN_MESSAGE_FEE,
    RELAY_MESSAGE,
    SCROLL_CONTRACTS,
)
from bridge_ops.scroll import ScrollGasEstimator, add_gas_limit_margin, apply_l1_to_l2_alias
from tests.conftest import L1_GATEWAY_ADDRESS, SCROLL_L2_GATEWAY_ADDRESS

MAINNET = SCROLL_CONTRACTS["ETHEREUM"]


class FakeEth:
    def __init__(self, gas=123_456, fee=10**14):
        self.gas = gas
        self.fee = fee
        self.estimated = []
        self.called = []

    def estimate_gas(self, txn):
        self.estimated.append(txn)
        return self.gas

    def call(self, txn):
        self.called.append(txn)
        return encode(["uint256"], [self.fee])


@pytest.fixture
def l1_eth():
    return FakeEth()


@pytest.fixture
def l2_eth():
    return FakeEth()


@pytest.fixture
def estimator(l1_eth, l2_eth):
    return ScrollGasEstimator(
        l1_web3=SimpleNamespace(eth=l1_eth),
        l2_web3=SimpleNamespace(eth=l2_eth),
        contracts=MAINNET,
    )


def test_l1_to_l2_alias():
    assert apply_l1_to_l2_alias(MAINNET["L1ScrollMessenger"]) == to_checksum_address(
        "0x7885bcbd5cecef1336b5300fb5186a12ddd8c478"
    )
    # wraps around the address space
    assert apply_l1_to_l2_alias("0x" + "f" * 40) == to_checksum_address(
        "0x1111000000000000000000000000000000001110"
    )


def test_gas_limit_margin():
    assert add_gas_limit_margin(150_000) == 180_000
    assert add_gas_limit_margin(100, margin=0) == 100


def test_estimate_relay_gas(estimator, l1_eth, l2_eth):
    message = b"\x01\x02"
    assert (
        estimator.estimate_relay_gas(L1_GATEWAY_ADDRESS, SCROLL_L2_GATEWAY_ADDRESS, 0, message)
        == 123_456
    )
    assert l1_eth.estimated == []

    (txn,) = l2_eth.estimated
    assert txn["from"] == apply_l1_to_l2_alias(MAINNET["L1ScrollMessenger"])
    assert txn["to"] == to_checksum_address(MAINNET["L2ScrollMessenger"])
    data = to_bytes(hexstr=txn["data"])
    assert data[:4] == RELAY_MESSAGE.selector
    sender, target, value, nonce, relayed = decode(list(RELAY_MESSAGE.arg_types), data[4:])
    assert to_checksum_address(sender) == L1_GATEWAY_ADDRESS
    assert to_checksum_address(target) == SCROLL_L2_GATEWAY_ADDRESS
    assert (value, nonce, relayed) == (0, 0, message)


def test_estimate_l2_fee(estimator, l1_eth, l2_eth):
    assert estimator.estimate_l2_fee(180_000) == 10**14
    assert l2_eth.called == []

    (txn,) = l1_eth.called
    assert txn["to"] == to_checksum_address(MAINNET["L1MessageQueue"])
    data = to_bytes(hexstr=txn["data"])
    assert data == ESTIMATE_CROSS_DOMAIN_MESSAGE_FEE.encode_call([180_000])


def test_unknown_network():
    with pytest.raises(ValueError, match="HOLESKY"):
        ScrollGasEstimator.from_network(
            l1_web3=None, l2_rpc="http://localhost:8545", network="HOLESKY"
        )


def test_from_network():
    estimator = ScrollGasEstimator.from_network(
        l1_web3=None, l2_rpc="http://localhost:8545", network="SEPOLIA"
    )
    assert estimator.l1_message_queue == to_checksum_address(
        SCROLL_CONTRACTS["SEPOLIA"]["L1MessageQueue"]
    )
    assert estimator.l2_web3 is not None
