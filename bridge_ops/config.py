import os
from pathlib import Path
from typing import Mapping, NamedTuple, Optional

from bridge_ops.constants import (
    CHECKPOINT_DIR,
    DEFAULT_POLL_INTERVAL,
    DEPLOY_LOG_DIR,
    ETHEREUM,
    OPTIMISM,
    SCROLL,
)
from bridge_ops.utils import _load_yaml

ENVIRONMENT_VARIABLES = {
    "ethereum_name": "ETHEREUM",
    "optimism_name": "OPTIMISM",
    "scroll_name": "SCROLL",
    "deploy_log_dir": "ZKLINK_DEPLOY_LOG_DIR",
    "checkpoint_dir": "ZKLINK_CHECKPOINT_DIR",
    "poll_interval": "ZKLINK_POLL_INTERVAL",
    "status_timeout": "ZKLINK_STATUS_TIMEOUT",
    "autosign": "ZKLINK_AUTOSIGN",
    "scroll_rpc": "ZKLINK_SCROLL_RPC",
}


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).lower().strip()
    if normalized in ("1", "true", "yes"):
        return True
    if normalized in ("0", "false", "no", ""):
        return False
    raise ValueError(f"'{value}' is not a boolean")


class OperationsConfig(NamedTuple):
    """
    Settings shared by all tasks, built once at process start.
    Network names select the deploy logs; keys and the L1 RPC endpoint belong to ape.
    The Scroll RPC endpoint is only used to estimate L2 gas.
    """

    ethereum_name: str = ETHEREUM
    optimism_name: str = OPTIMISM
    scroll_name: str = SCROLL
    deploy_log_dir: Path = DEPLOY_LOG_DIR
    checkpoint_dir: Path = CHECKPOINT_DIR
    poll_interval: float = DEFAULT_POLL_INTERVAL
    status_timeout: Optional[float] = None
    autosign: bool = False
    scroll_rpc: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping) -> "OperationsConfig":
        unknown = set(values) - set(cls._fields)
        if unknown:
            raise ValueError(f"Unknown configuration field(s): {', '.join(sorted(unknown))}")

        kwargs = dict()
        for field, value in values.items():
            if value is None:
                continue
            if field in ("deploy_log_dir", "checkpoint_dir"):
                value = Path(value)
            elif field == "poll_interval":
                value = float(value)
                if value < 0:
                    raise ValueError("poll_interval cannot be negative")
            elif field == "status_timeout":
                value = float(value) if value != "" else None
            elif field == "autosign":
                value = _parse_bool(value)
            elif field == "scroll_rpc":
                value = str(value) or None
            kwargs[field] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OperationsConfig":
        environ = os.environ if environ is None else environ
        values = dict()
        for field, envvar in ENVIRONMENT_VARIABLES.items():
            if envvar in environ:
                values[field] = environ[envvar]
        return cls.from_mapping(values)

    @classmethod
    def from_yaml(cls, filepath: Path) -> "OperationsConfig":
        data = _load_yaml(filepath) or dict()
        if not isinstance(data, dict):
            raise ValueError(f"Malformed configuration YAML at {filepath}.")
        return cls.from_mapping(data)


def load_config(filepath: Optional[Path] = None, **overrides) -> OperationsConfig:
    """Loads the configuration from a YAML file, or from the environment if none is given."""
    if filepath is not None:
        print(f"Loading configuration from {filepath}...")
        config = OperationsConfig.from_yaml(filepath)
    else:
        config = OperationsConfig.from_env()
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return config._replace(**overrides)
