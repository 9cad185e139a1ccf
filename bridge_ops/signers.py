from ape import networks
from ape.api import AccountAPI
from ape.exceptions import ApeException, SignatureError
from eth_typing import ChecksumAddress
from eth_utils import to_hex
from web3.exceptions import Web3Exception

from bridge_ops.errors import ExternalServiceUnavailable, TransactionAborted, TransactionFailed
from bridge_ops.params import ChainTransactionRequest, TransactionReceipt

CHAIN_PROVIDER_SERVICE = "chain provider"


def _normalize_hash(txn_hash) -> str:
    if isinstance(txn_hash, str):
        return txn_hash
    return to_hex(txn_hash)


class ApeSigner:
    """
    Signs with an ape account and sends through the connected ape provider.
    The transaction hash is known before the transaction is broadcast.
    """

    def __init__(self, account: AccountAPI, autosign: bool = False):
        self._account = account
        if autosign and hasattr(account, "set_autosign"):
            account.set_autosign(True)

    @property
    def address(self) -> ChecksumAddress:
        return self._account.address

    def get_balance(self) -> int:
        return self._account.balance

    def send(self, request: ChainTransactionRequest) -> str:
        try:
            ecosystem = networks.provider.network.ecosystem
            txn = ecosystem.create_transaction(
                receiver=request.contract_address,
                sender=self._account.address,
                data=request.calldata,
                value=request.value,
            )
            txn = self._account.prepare_transaction(txn)
            signed_txn = self._account.sign_transaction(txn)
        except SignatureError as e:
            raise TransactionAborted(f"{request.method.name} ({e})") from e
        except (ApeException, Web3Exception) as e:
            # nothing was broadcast, e.g. insufficient funds or a failed gas estimate
            raise ExternalServiceUnavailable(service=CHAIN_PROVIDER_SERVICE, cause=str(e)) from e
        if signed_txn is None:
            raise TransactionAborted(request.method.name)

        tx_hash = _normalize_hash(signed_txn.txn_hash)
        try:
            networks.provider.web3.eth.send_raw_transaction(signed_txn.serialize_transaction())
        except (ApeException, Web3Exception, ValueError) as e:
            # no resubmission: a dropped transaction is reported, never re-sent
            raise TransactionFailed(tx_hash=tx_hash, cause=str(e)) from e
        return tx_hash

    def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        try:
            receipt = networks.provider.get_receipt(tx_hash)
        except (ApeException, Web3Exception) as e:
            raise TransactionFailed(tx_hash=tx_hash, cause=str(e)) from e
        return TransactionReceipt(
            tx_hash=tx_hash,
            succeeded=not receipt.failed,
            block_number=receipt.block_number,
        )
