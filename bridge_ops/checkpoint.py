from pathlib import Path
from typing import NamedTuple, Optional

from bridge_ops.constants import CHECKPOINT_DIR, MessageStatus
from bridge_ops.utils import _load_json, _write_json


class Checkpoint(NamedTuple):
    """Last known progress of a bridge message, keyed by task and network."""

    task: str
    network: str
    tx_hash: str
    status: MessageStatus

    def to_dict(self) -> dict:
        return {
            "task": self.task,
            "network": self.network,
            "tx_hash": self.tx_hash,
            "status": self.status.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Checkpoint":
        return cls(
            task=data["task"],
            network=data["network"],
            tx_hash=data["tx_hash"],
            status=MessageStatus[data["status"]],
        )


class CheckpointStore:
    """Persists checkpoints as one JSON file per (task, network)."""

    def __init__(self, directory: Path = CHECKPOINT_DIR):
        self.directory = Path(directory)

    def filepath(self, task: str, network: str) -> Path:
        return self.directory / f"{task}_{network}.json"

    def load(self, task: str, network: str) -> Optional[Checkpoint]:
        filepath = self.filepath(task, network)
        if not filepath.exists():
            return None
        return Checkpoint.from_dict(_load_json(filepath))

    def save(self, checkpoint: Checkpoint) -> Path:
        filepath = self.filepath(checkpoint.task, checkpoint.network)
        return _write_json(checkpoint.to_dict(), filepath)

    def update(self, task: str, network: str, status: MessageStatus) -> Checkpoint:
        """Moves a stored checkpoint forward; a lower status is never written."""
        checkpoint = self.load(task, network)
        if checkpoint is None:
            raise ValueError(f"No checkpoint for {task} on {network}")
        if status > checkpoint.status:
            checkpoint = checkpoint._replace(status=status)
            self.save(checkpoint)
        return checkpoint

    def clear(self, task: str, network: str) -> None:
        filepath = self.filepath(task, network)
        if filepath.exists():
            filepath.unlink()
