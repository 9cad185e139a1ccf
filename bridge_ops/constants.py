from enum import IntEnum
from pathlib import Path
from typing import NamedTuple, Tuple

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

import bridge_ops

#
# Filesystem
#

PROJECT_ROOT = Path(bridge_ops.__file__).parent.parent
DEPLOY_LOG_DIR = PROJECT_ROOT / "log"
CHECKPOINT_DIR = PROJECT_ROOT / "checkpoints"

DEPLOY_LOG_SUFFIX = ".log"

#
# Deploy logs
#

DEPLOY_ZKLINK_LOG_PREFIX = "deploy_zklink"
DEPLOY_LOG_ZKLINK_PROXY = "zkLinkProxy"

DEPLOY_ARBITRATOR_LOG_PREFIX = "deploy_arbitrator"
DEPLOY_LOG_ARBITRATOR = "arbitrator"

DEPLOY_L1_GATEWAY_LOG_PREFIX = "deploy_l1_gateway"
DEPLOY_L2_GATEWAY_LOG_PREFIX = "deploy_l2_gateway"
DEPLOY_GATEWAY = "gateway"

#
# Networks (deploy log names, not ape network choices)
#

ETHEREUM = "ETHEREUM"
OPTIMISM = "OPTIMISM"
SCROLL = "SCROLL"

#
# Contract methods
#


class ContractMethod(NamedTuple):
    """Name and ordered (arg name, ABI type) inputs of a contract method."""

    name: str
    inputs: Tuple[Tuple[str, str], ...]

    @property
    def arg_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.inputs)

    @property
    def arg_types(self) -> Tuple[str, ...]:
        return tuple(abi_type for _, abi_type in self.inputs)

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.arg_types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, args) -> bytes:
        return self.selector + encode(list(self.arg_types), list(args))


SYNC_L2_REQUESTS = ContractMethod(
    name="syncL2Requests",
    inputs=(("_newTotalSyncedPriorityTxs", "uint256"),),
)

SET_VALIDATOR = ContractMethod(
    name="setValidator",
    inputs=(
        ("_gateway", "address"),
        ("_validator", "address"),
        ("_active", "bool"),
        ("_adapterParams", "bytes"),
    ),
)

# L2 side of a forwarded setValidator
ZKLINK_SET_VALIDATOR = ContractMethod(
    name="setValidator",
    inputs=(("_validator", "address"), ("_active", "bool")),
)

CLAIM_MESSAGE_CALLBACK = ContractMethod(
    name="claimMessageCallback",
    inputs=(("_value", "uint256"), ("_callData", "bytes")),
)

UINT256_MAX = 2**256 - 1

#
# Scroll message forwarding
#

# gas limit for the L2 to finalize the message
DEFAULT_FINALIZE_MESSAGE_GAS_LIMIT = 1_000_000
DEFAULT_L2_FEE_WEI = 10**15  # 0.001 ether

# margin added to the estimated L2 gas limit, in percent
FINALIZE_GAS_LIMIT_MARGIN = 20

RELAY_MESSAGE = ContractMethod(
    name="relayMessage",
    inputs=(
        ("_from", "address"),
        ("_to", "address"),
        ("_value", "uint256"),
        ("_nonce", "uint256"),
        ("_message", "bytes"),
    ),
)

ESTIMATE_CROSS_DOMAIN_MESSAGE_FEE = ContractMethod(
    name="estimateCrossDomainMessageFee",
    inputs=(("_gasLimit", "uint256"),),
)

# official Scroll bridge contracts, by L1 network name
SCROLL_CONTRACTS = {
    "ETHEREUM": {
        "L1ScrollMessenger": "0x6774Bcbd5ceCeF1336b5300fb5186a12DDD8b367",
        "L1MessageQueue": "0x0d7E906BD9cAFa154b048cFa766Cc1E54E39AF9B",
        "L2ScrollMessenger": "0x781e90f1c8Fc4611c9b7497C3B47F99Ef6969CbC",
    },
    "SEPOLIA": {
        "L1ScrollMessenger": "0x50c7d3e7f7c656493D1D76aaa1a836CedfCBB16A",
        "L1MessageQueue": "0xF0B2293F5D834eAe920c6974D50957A1732de763",
        "L2ScrollMessenger": "0xBa50f5340FB9F3Bd074bD638c9BE13eCB36E603d",
    },
}

L1_TO_L2_ALIAS_OFFSET = 0x1111000000000000000000000000000000001111

#
# Bridge message states, in lifecycle order
#


class MessageStatus(IntEnum):
    SENT = 0
    READY_TO_PROVE = 1
    PROVEN = 2
    READY_FOR_RELAY = 3
    RELAYED = 4


DEFAULT_POLL_INTERVAL = 15  # seconds
