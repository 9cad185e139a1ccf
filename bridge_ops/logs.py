from pathlib import Path
from typing import NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from bridge_ops.constants import DEPLOY_LOG_DIR, DEPLOY_LOG_SUFFIX
from bridge_ops.utils import _load_json


class DeploymentRecord(NamedTuple):
    """A single deployed address looked up from a deploy log."""

    log_prefix: str
    entry_name: str
    network: str
    address: Optional[ChecksumAddress]

    @property
    def exists(self) -> bool:
        return self.address is not None


def get_log_name(log_prefix: str, chain_name: str) -> str:
    """
    Returns the log name of a deployment made for another chain,
    e.g. the Scroll L1 gateway lives under 'deploy_l1_gateway_SCROLL'.
    """
    return f"{log_prefix}_{chain_name}"


def get_log_filepath(log_dir: Path, log_prefix: str, network: str) -> Path:
    return Path(log_dir) / f"{log_prefix}_{network}{DEPLOY_LOG_SUFFIX}"


class DeployLogResolver:
    """
    Read-only view over the deploy logs written by the deployment tasks.
    Every lookup re-reads the log file; a missing file or entry is not an error.
    """

    def __init__(self, log_dir: Path = DEPLOY_LOG_DIR):
        self.log_dir = Path(log_dir)

    def record(self, log_prefix: str, entry_name: str, network: str) -> DeploymentRecord:
        filepath = get_log_filepath(self.log_dir, log_prefix, network)
        address = None
        if filepath.exists():
            deploy_log = _load_json(filepath=filepath)
            if not isinstance(deploy_log, dict):
                raise ValueError(f"Malformed deploy log at {filepath}.")
            value = deploy_log.get(entry_name)
            if value:
                address = to_checksum_address(value)
        return DeploymentRecord(
            log_prefix=log_prefix,
            entry_name=entry_name,
            network=network,
            address=address,
        )

    def resolve(self, log_prefix: str, entry_name: str, network: str) -> Optional[ChecksumAddress]:
        return self.record(log_prefix, entry_name, network).address
