import json
from pathlib import Path

import yaml
from eth_utils import is_hex
from web3 import Web3

STANDARD_JSON_FORMAT = {"indent": 2, "separators": (",", ": ")}


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def _write_json(data: dict, filepath: Path) -> Path:
    """Writes a JSON file, creating the parent directory if needed."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_JSON_FORMAT)
    return filepath


def format_ether(amount_wei: int) -> str:
    return str(Web3.from_wei(amount_wei, "ether"))


def is_transaction_hash(value) -> bool:
    """True for a 0x-prefixed, 32 byte hex string."""
    if not isinstance(value, str):
        return False
    return value.startswith("0x") and len(value) == 66 and is_hex(value)
