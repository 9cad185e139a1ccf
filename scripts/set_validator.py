#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from bridge_ops.cli import run_task
from bridge_ops.config import load_config
from bridge_ops.options import (
    active_option,
    autosign_option,
    calldata_only_option,
    config_option,
    fee_option,
    finalize_gas_limit_option,
    scroll_rpc_option,
    validator_option,
)
from bridge_ops.scroll import ScrollGasEstimator
from bridge_ops.signers import ApeSigner
from bridge_ops.tasks import ExecutionContext, SetValidatorTask


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@config_option
@autosign_option
@validator_option
@active_option
@finalize_gas_limit_option
@fee_option
@calldata_only_option
@scroll_rpc_option
def cli(
    network,
    account,
    config_filepath,
    autosign,
    validator,
    active,
    finalize_gas_limit,
    fee,
    calldata_only,
    scroll_rpc,
):
    """Set a zkLink validator through the arbitrator and the Scroll gateway."""
    click.echo(f"Connected to {network.name} network.")
    config = load_config(config_filepath, autosign=autosign, scroll_rpc=scroll_rpc)
    signer = ApeSigner(account=account, autosign=config.autosign)

    gas_estimator = None
    if config.scroll_rpc:
        gas_estimator = ScrollGasEstimator.from_network(
            l1_web3=networks.provider.web3,
            l2_rpc=config.scroll_rpc,
            network=config.ethereum_name,
        )
    else:
        click.secho("(i) No Scroll RPC configured, L2 gas and fee are not estimated", fg="yellow")
    context = ExecutionContext.from_config(
        config=config, signer=signer, gas_estimator=gas_estimator
    )
    outcome = run_task(
        SetValidatorTask(),
        parameters=dict(
            validator=validator,
            active=active,
            finalize_gas_limit=finalize_gas_limit,
            fee=fee,
            calldata_only=calldata_only,
        ),
        context=context,
    )
    if outcome.tx_hash:
        click.secho(f"Validator {validator} set in {outcome.tx_hash}", fg="green")


if __name__ == "__main__":
    cli()
