#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from bridge_ops.bridge import load_oracle
from bridge_ops.cli import run_task
from bridge_ops.config import load_config
from bridge_ops.options import (
    autosign_option,
    config_option,
    oracle_option,
    resume_option,
    tx_hash_option,
    txs_option,
)
from bridge_ops.signers import ApeSigner
from bridge_ops.tasks import ExecutionContext, SyncL2RequestsTask


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@config_option
@autosign_option
@oracle_option
@txs_option
@tx_hash_option
@resume_option
def cli(network, account, config_filepath, autosign, oracle, txs, tx_hash, resume):
    """Send a sync point to the arbitrator and relay it through the OP-stack bridge."""
    click.echo(f"Connected to {network.name} network.")
    config = load_config(config_filepath, autosign=autosign)
    signer = ApeSigner(account=account, autosign=config.autosign)
    context = ExecutionContext.from_config(
        config=config, signer=signer, oracle=load_oracle(oracle, config)
    )
    outcome = run_task(
        SyncL2RequestsTask(),
        parameters=dict(txs=txs, tx_hash=tx_hash, resume=resume),
        context=context,
    )
    click.secho(f"Message of {outcome.tx_hash} is {outcome.status.name}", fg="green")


if __name__ == "__main__":
    cli()
