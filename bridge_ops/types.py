import click
from eth_utils import to_checksum_address

from bridge_ops.constants import UINT256_MAX
from bridge_ops.utils import is_transaction_hash


class Uint256(click.ParamType):
    """An integer that fits a uint256 contract argument, at least `min_value`."""

    name = "uint256"

    def __init__(self, min_value: int = 0):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            number = value
        else:
            try:
                number = int(value)
            except ValueError:
                self.fail(f"{value} is not a valid integer", param, ctx)
        if not self.min_value <= number <= UINT256_MAX:
            self.fail(f"{value} is not between {self.min_value} and 2**256 - 1", param, ctx)
        return number


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            return to_checksum_address(value)
        except ValueError:
            self.fail(f"{value} is not a valid ethereum address", param, ctx)


class TransactionHash(click.ParamType):
    name = "tx_hash"

    def convert(self, value, param, ctx):
        if not is_transaction_hash(value):
            self.fail(f"{value} is not a valid transaction hash", param, ctx)
        return value.lower()
