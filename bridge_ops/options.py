from pathlib import Path

import click

from bridge_ops.types import ChecksumAddress, TransactionHash, Uint256

config_option = click.option(
    "--config",
    "-c",
    "config_filepath",
    help="YAML file with operation settings (defaults to environment variables).",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=False,
)

autosign_option = click.option(
    "--autosign",
    help="Automatically sign transactions.",
    is_flag=True,
    default=None,
)

oracle_option = click.option(
    "--oracle",
    "-o",
    help="Bridge message-status oracle factory, as 'package.module:factory'.",
    required=True,
)

txs_option = click.option(
    "--txs",
    help="New sync point",
    type=Uint256(0),
    default=100,
    show_default=True,
)

scroll_rpc_option = click.option(
    "--scroll-rpc",
    help="Scroll RPC endpoint used to estimate the L2 gas limit and fee.",
    required=False,
)

tx_hash_option = click.option(
    "--tx-hash",
    help="Continue relaying the message of an already sent sync point.",
    type=TransactionHash(),
    required=False,
)

resume_option = click.option(
    "--resume",
    help="Continue relaying from the stored checkpoint.",
    is_flag=True,
    default=False,
)

validator_option = click.option(
    "--validator",
    "-v",
    help="Validator Address",
    type=ChecksumAddress(),
    required=True,
)

active_option = click.option(
    "--active/--inactive",
    help="Whether to activate the validator address",
    default=True,
    show_default=True,
)

finalize_gas_limit_option = click.option(
    "--finalize-gas-limit",
    help="Gas limit for the L2 to finalize the message (estimated when omitted).",
    type=Uint256(1),
    required=False,
)

fee_option = click.option(
    "--fee",
    help="L2 fee in wei attached to the transaction (estimated when omitted).",
    type=Uint256(0),
    required=False,
)

calldata_only_option = click.option(
    "--calldata-only",
    help="Print the arbitrator calldata instead of sending a transaction.",
    is_flag=True,
    default=False,
)
