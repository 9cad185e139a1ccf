import typing
from typing import Dict

from eth_abi import decode
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address, to_hex
from web3 import Web3

from bridge_ops.constants import (
    ESTIMATE_CROSS_DOMAIN_MESSAGE_FEE,
    FINALIZE_GAS_LIMIT_MARGIN,
    L1_TO_L2_ALIAS_OFFSET,
    RELAY_MESSAGE,
    SCROLL_CONTRACTS,
)

ESTIMATOR_SERVICE = "scroll gas estimator"


def apply_l1_to_l2_alias(address: str) -> ChecksumAddress:
    """The sender address an L1 contract has when its message executes on L2."""
    aliased = (int(address, 16) + L1_TO_L2_ALIAS_OFFSET) % 2**160
    return to_checksum_address("0x" + aliased.to_bytes(20, "big").hex())


def add_gas_limit_margin(gas_limit: int, margin: int = FINALIZE_GAS_LIMIT_MARGIN) -> int:
    return gas_limit * (100 + margin) // 100


class GasEstimator(typing.Protocol):
    def estimate_relay_gas(
        self, sender: ChecksumAddress, target: ChecksumAddress, value: int, message: bytes
    ) -> int:
        ...

    def estimate_l2_fee(self, gas_limit: int) -> int:
        ...


class ScrollGasEstimator:
    """
    Prices an L1 to L2 message on the official Scroll bridge.

    The relay gas is estimated on L2 as if the aliased L1 messenger called
    the L2 messenger; the fee is quoted by the L1 message queue.
    """

    def __init__(self, l1_web3: Web3, l2_web3: Web3, contracts: Dict[str, str]):
        self.l1_web3 = l1_web3
        self.l2_web3 = l2_web3
        self.l1_messenger = to_checksum_address(contracts["L1ScrollMessenger"])
        self.l1_message_queue = to_checksum_address(contracts["L1MessageQueue"])
        self.l2_messenger = to_checksum_address(contracts["L2ScrollMessenger"])

    @classmethod
    def from_network(cls, l1_web3: Web3, l2_rpc: str, network: str) -> "ScrollGasEstimator":
        try:
            contracts = SCROLL_CONTRACTS[network]
        except KeyError:
            raise ValueError(f"No Scroll bridge contracts known for network '{network}'")
        return cls(l1_web3, Web3(Web3.HTTPProvider(l2_rpc)), contracts)

    def estimate_relay_gas(
        self, sender: ChecksumAddress, target: ChecksumAddress, value: int, message: bytes
    ) -> int:
        nonce = 0
        data = RELAY_MESSAGE.encode_call([sender, target, value, nonce, message])
        return self.l2_web3.eth.estimate_gas(
            {
                "from": apply_l1_to_l2_alias(self.l1_messenger),
                "to": self.l2_messenger,
                "data": to_hex(data),
            }
        )

    def estimate_l2_fee(self, gas_limit: int) -> int:
        data = ESTIMATE_CROSS_DOMAIN_MESSAGE_FEE.encode_call([gas_limit])
        result = self.l1_web3.eth.call({"to": self.l1_message_queue, "data": to_hex(data)})
        (fee,) = decode(["uint256"], bytes(result))
        return fee
