from pathlib import Path

import pytest
import yaml

from bridge_ops.config import OperationsConfig, load_config
from bridge_ops.constants import DEFAULT_POLL_INTERVAL, DEPLOY_LOG_DIR


def test_defaults():
    config = OperationsConfig.from_env(environ={})
    assert config.ethereum_name == "ETHEREUM"
    assert config.optimism_name == "OPTIMISM"
    assert config.scroll_name == "SCROLL"
    assert config.deploy_log_dir == DEPLOY_LOG_DIR
    assert config.poll_interval == DEFAULT_POLL_INTERVAL
    assert config.status_timeout is None
    assert config.autosign is False


def test_from_env():
    config = OperationsConfig.from_env(
        environ={
            "ETHEREUM": "SEPOLIA",
            "OPTIMISM": "OPTIMISM_SEPOLIA",
            "SCROLL": "SCROLL_SEPOLIA",
            "ZKLINK_DEPLOY_LOG_DIR": "/tmp/log",
            "ZKLINK_POLL_INTERVAL": "60",
            "ZKLINK_STATUS_TIMEOUT": "3600",
            "ZKLINK_AUTOSIGN": "true",
            "UNRELATED": "ignored",
        }
    )
    assert config.ethereum_name == "SEPOLIA"
    assert config.optimism_name == "OPTIMISM_SEPOLIA"
    assert config.scroll_name == "SCROLL_SEPOLIA"
    assert config.deploy_log_dir == Path("/tmp/log")
    assert config.poll_interval == 60
    assert config.status_timeout == 3600
    assert config.autosign is True


def test_from_yaml(tmp_path):
    filepath = tmp_path / "operations.yml"
    filepath.write_text(
        yaml.safe_dump(
            {
                "ethereum_name": "SEPOLIA",
                "checkpoint_dir": str(tmp_path / "checkpoints"),
                "autosign": False,
            }
        )
    )
    config = OperationsConfig.from_yaml(filepath)
    assert config.ethereum_name == "SEPOLIA"
    assert config.checkpoint_dir == tmp_path / "checkpoints"
    assert config.autosign is False


def test_empty_yaml(tmp_path):
    filepath = tmp_path / "operations.yml"
    filepath.write_text("")
    assert OperationsConfig.from_yaml(filepath) == OperationsConfig()


@pytest.mark.parametrize(
    "values",
    [
        {"optimism": "OPTIMISM"},  # unknown field
        {"poll_interval": -1},
        {"poll_interval": "soon"},
        {"autosign": "sometimes"},
    ],
)
def test_invalid_config(values):
    with pytest.raises(ValueError):
        OperationsConfig.from_mapping(values)


def test_malformed_yaml(tmp_path):
    filepath = tmp_path / "operations.yml"
    filepath.write_text("- a\n- list\n")
    with pytest.raises(ValueError, match="Malformed"):
        OperationsConfig.from_yaml(filepath)


def test_load_config_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("OPTIMISM", "BASE")
    monkeypatch.delenv("ZKLINK_AUTOSIGN", raising=False)
    monkeypatch.delenv("ZKLINK_POLL_INTERVAL", raising=False)
    config = load_config(autosign=True, poll_interval=None)
    assert config.optimism_name == "BASE"
    assert config.autosign is True
    assert config.poll_interval == DEFAULT_POLL_INTERVAL

    filepath = tmp_path / "operations.yml"
    filepath.write_text(yaml.safe_dump({"optimism_name": "OPTIMISM"}))
    assert load_config(filepath).optimism_name == "OPTIMISM"


def test_scroll_rpc():
    assert OperationsConfig.from_env(environ={}).scroll_rpc is None
    config = OperationsConfig.from_env(environ={"ZKLINK_SCROLL_RPC": "https://rpc.scroll.io"})
    assert config.scroll_rpc == "https://rpc.scroll.io"
    assert OperationsConfig.from_env(environ={"ZKLINK_SCROLL_RPC": ""}).scroll_rpc is None
