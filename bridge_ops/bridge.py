import importlib
import time
import typing
from typing import Any, Callable, List, Optional

from bridge_ops.constants import DEFAULT_POLL_INTERVAL, MessageStatus
from bridge_ops.errors import BridgeStatusTimeout, ExternalServiceUnavailable, TaskError

ORACLE_SERVICE = "bridge message-status oracle"


class BridgeOracle(typing.Protocol):
    """
    Vendor specific view of cross-chain messages (e.g. an OP-stack messenger).
    Prove and finalize submit their own L1 transactions and return the hash.
    """

    def get_message_status(self, tx_hash: str) -> MessageStatus:
        ...

    def prove_message(self, tx_hash: str) -> str:
        ...

    def finalize_message(self, tx_hash: str) -> str:
        ...

    def get_messages_by_transaction(self, tx_hash: str) -> List[Any]:
        ...

    def get_message_receipt(self, message: Any) -> Any:
        ...


def call_service(service: str, method: Callable, *args) -> Any:
    """Calls an external service, reporting anything but a task error as an outage."""
    try:
        return method(*args)
    except TaskError:
        raise
    except Exception as e:
        raise ExternalServiceUnavailable(service=service, cause=str(e)) from e


def call_oracle(method: Callable, *args) -> Any:
    return call_service(ORACLE_SERVICE, method, *args)


def load_oracle(import_path: str, *args, **kwargs) -> BridgeOracle:
    """
    Builds an oracle from an import path of the form 'package.module:factory'.
    """
    module_name, _, factory_name = import_path.partition(":")
    if not module_name or not factory_name:
        raise ValueError(f"Oracle import path '{import_path}' must look like 'module:factory'")
    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, factory_name)
    except AttributeError:
        raise ValueError(f"No oracle factory '{factory_name}' in module '{module_name}'")
    return factory(*args, **kwargs)


class MessageStatusWatcher:
    """
    Tracks the status of the message sent by one transaction.

    The status seen by the task only moves forward: a lower status
    reported by the oracle is ignored.
    """

    def __init__(
        self,
        oracle: BridgeOracle,
        tx_hash: str,
        status: MessageStatus = MessageStatus.SENT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_advance: Optional[Callable[[MessageStatus], None]] = None,
    ):
        self.oracle = oracle
        self.tx_hash = tx_hash
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._status = MessageStatus(status)
        self._sleep = sleep
        self._clock = clock
        self._on_advance = on_advance
        self.history = [self._status]

    @property
    def status(self) -> MessageStatus:
        return self._status

    def advance(self, status: MessageStatus) -> MessageStatus:
        """Moves the local status forward (e.g. after a prove call was confirmed)."""
        status = MessageStatus(status)
        if status > self._status:
            self._status = status
            print(f"The message status update to: {status.name}")
            if self._on_advance:
                self._on_advance(status)
        self.history.append(self._status)
        return self._status

    def poll(self) -> MessageStatus:
        reported = call_oracle(self.oracle.get_message_status, self.tx_hash)
        try:
            observed = MessageStatus(reported)
        except (TypeError, ValueError):
            raise ExternalServiceUnavailable(
                service=ORACLE_SERVICE, cause=f"unknown message status {reported!r}"
            )
        if observed < self._status:
            print(
                f"(i) Ignoring reported status {observed.name}, "
                f"message is already {self._status.name}"
            )
        return self.advance(observed)

    def wait_for(self, target: MessageStatus) -> MessageStatus:
        """Polls until the message reaches the target status (or later)."""
        started = self._clock()
        print(f"Waiting for the message to be {target.name}...")
        while self.poll() < target:
            if self.timeout is not None and self._clock() - started >= self.timeout:
                raise BridgeStatusTimeout(
                    tx_hash=self.tx_hash, target=target, last_status=self._status
                )
            self._sleep(self.poll_interval)
        return self._status
