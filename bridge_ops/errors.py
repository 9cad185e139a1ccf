from typing import Any, Optional


class TaskError(Exception):
    """Base class for failures that terminate a task invocation."""

    exit_code = 1


class MissingRequiredParameter(TaskError):
    exit_code = 2

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required parameter '{name}'")


class InvalidParameter(TaskError):
    exit_code = 2

    def __init__(self, name: str, value: Any, reason: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value {value!r} for parameter '{name}': {reason}")


class UnresolvedDeploymentAddress(TaskError):
    exit_code = 3

    def __init__(self, artifact: str, network: str):
        self.artifact = artifact
        self.network = network
        super().__init__(f"The {artifact} address does not exist for network {network}")


class TransactionFailed(TaskError):
    exit_code = 4

    def __init__(self, tx_hash: str, cause: str):
        self.tx_hash = tx_hash
        self.cause = cause
        super().__init__(f"Transaction {tx_hash} failed: {cause}")


class TransactionAborted(TaskError):
    """Raised when the operator declines to sign a transaction."""

    exit_code = 5

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"Aborted transaction {description}")


class BridgeStatusTimeout(TaskError):
    exit_code = 6

    def __init__(self, tx_hash: str, target: Any, last_status: Optional[Any]):
        self.tx_hash = tx_hash
        self.target = target
        self.last_status = last_status
        last = getattr(last_status, "name", last_status)
        super().__init__(
            f"Timed out waiting for message of {tx_hash} to reach {target.name} "
            f"(last status: {last})"
        )


class ExternalServiceUnavailable(TaskError):
    exit_code = 7

    def __init__(self, service: str, cause: str):
        self.service = service
        self.cause = cause
        super().__init__(f"{service} is unavailable: {cause}")
