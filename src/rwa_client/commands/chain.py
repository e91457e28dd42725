"""
Chain commands - talk to a Concordium node.

Commands:
- tx status:       one-shot transaction status query
- tx wait:         block until a transaction is finalized
- tx link:         print the CCDScan link of a transaction
- contract invoke: read-only entrypoint call with decoded result
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Optional

import click
import httpx

from ..codec.address import ContractAddress
from ..codec.errors import CodecError
from ..config import transaction_link
from ..contracts import rwa_sponsor
from ..contracts.descriptor import ReceiveMethod
from ..contracts.invoke import InvokeSuccess, invoke_method
from ..contracts.registry import ArtifactValidationError, load_artifact
from ..node.models import BlockItemSummary
from ..node.rpc import HttpNodeClient, NodeRpcError
from ..tx.outcome import parse_finalized_update
from ..tx.state import Rejected

_NODE_ERRORS = (NodeRpcError, httpx.HTTPError, TimeoutError)


def _fail(message: str) -> None:
    click.secho(f"ERROR: {message}", fg="red", err=True)
    sys.exit(1)


def _print_summary(outcome: BlockItemSummary) -> None:
    summary = outcome.summary
    click.echo(click.style("  Block:    ", dim=True) + outcome.block_hash)
    click.echo(click.style("  Type:     ", dim=True) + (summary.transaction_type or "-"))
    if summary.sender:
        click.echo(click.style("  Sender:   ", dim=True) + summary.sender)
    click.echo(click.style("  Cost:     ", dim=True) + f"{summary.cost} microCCD")
    click.echo(click.style("  Energy:   ", dim=True) + str(summary.energy_cost))

    result = parse_finalized_update(outcome)
    if isinstance(result, Rejected):
        click.echo(click.style("  Outcome:  ", dim=True) + click.style(result.message, fg="red"))
    else:
        click.echo(click.style("  Outcome:  ", dim=True) + click.style("success", fg="green"))


# ============ tx ============


@click.group()
@click.option("--node-url", envvar="CONCORDIUM_NODE_URL", default=None, help="Node JSON-RPC URL")
@click.pass_context
def tx(ctx: click.Context, node_url: Optional[str]) -> None:
    """Transaction status queries."""
    ctx.ensure_object(dict)
    ctx.obj["node_url"] = node_url


@tx.command("status")
@click.argument("txn_hash")
@click.pass_context
def tx_status(ctx: click.Context, txn_hash: str) -> None:
    """Show the current status of a transaction."""

    async def _query():
        async with HttpNodeClient(ctx.obj["node_url"]) as node:
            return await node.get_block_item_status(txn_hash)

    try:
        status = asyncio.run(_query())
    except _NODE_ERRORS as exc:
        _fail(str(exc))

    click.echo(click.style("  Hash:     ", dim=True) + txn_hash)
    click.echo(click.style("  Status:   ", dim=True) + status.status.value)
    if status.outcome is not None:
        _print_summary(status.outcome)


@tx.command("wait")
@click.argument("txn_hash")
@click.option("--timeout", default=120.0, show_default=True, type=float, help="Seconds to wait")
@click.pass_context
def tx_wait(ctx: click.Context, txn_hash: str, timeout: float) -> None:
    """Wait for a transaction to be finalized."""

    async def _wait():
        async with HttpNodeClient(ctx.obj["node_url"]) as node:
            return await node.wait_for_transaction_finalization(txn_hash, timeout=timeout)

    click.echo(f"Waiting for {txn_hash}...")
    try:
        outcome = asyncio.run(_wait())
    except _NODE_ERRORS as exc:
        _fail(str(exc))

    click.secho("Finalized.", fg="green")
    _print_summary(outcome)
    click.echo(click.style("  Explorer: ", dim=True) + transaction_link(txn_hash))


@tx.command("link")
@click.argument("txn_hash")
def tx_link(txn_hash: str) -> None:
    """Print the explorer link of a transaction."""
    click.echo(transaction_link(txn_hash))


# ============ contract ============


def _resolve_method(contract_name: str, entrypoint: str) -> ReceiveMethod:
    if contract_name == rwa_sponsor.CONTRACT_NAME:
        methods: dict[str, ReceiveMethod] = rwa_sponsor.METHODS
    else:
        methods = load_artifact(contract_name).entrypoints
    if entrypoint not in methods:
        raise click.ClickException(
            f"{contract_name} has no entrypoint {entrypoint!r}. Known: {', '.join(sorted(methods))}"
        )
    return methods[entrypoint]


@click.group()
def contract() -> None:
    """Contract entrypoint calls."""


@contract.command("invoke")
@click.option("--contract", "address", required=True, help="Contract address, e.g. '<7,0>' or 7")
@click.option("--name", "contract_name", default=rwa_sponsor.CONTRACT_NAME, show_default=True,
              help="Contract name (bindings or artifact)")
@click.option("--entrypoint", required=True, help="Entrypoint name, e.g. nonce")
@click.option("--params", "params_json", default=None, help="Parameter as JSON")
@click.option("--invoker", default=None, help="Invoking account address")
@click.option("--amount", default=0, show_default=True, type=int, help="Amount in microCCD")
@click.option("--node-url", envvar="CONCORDIUM_NODE_URL", default=None, help="Node JSON-RPC URL")
def contract_invoke(
    address: str,
    contract_name: str,
    entrypoint: str,
    params_json: Optional[str],
    invoker: Optional[str],
    amount: int,
    node_url: Optional[str],
) -> None:
    """Invoke an entrypoint without sending a transaction.

    \b
    Examples:
      rwa contract invoke --contract '<7,0>' --entrypoint nonce \\
          --params '{"account": "3kBx..."}'
    """
    try:
        contract_address = ContractAddress.parse(address)
        params: Any = json.loads(params_json) if params_json is not None else None
        method = _resolve_method(contract_name, entrypoint)
    except ArtifactValidationError as exc:
        _fail(f"{exc} " + "; ".join(exc.errors))
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))

    async def _invoke():
        async with HttpNodeClient(node_url) as node:
            return await invoke_method(node, method, contract_address, params, invoker, amount)

    try:
        result = asyncio.run(_invoke())
    except CodecError as exc:
        _fail(str(exc))
    except _NODE_ERRORS as exc:
        _fail(str(exc))

    if isinstance(result, InvokeSuccess):
        click.echo(json.dumps(result.value, indent=2))
        return
    click.secho(f"Rejected: {result.message}", fg="red", err=True)
    if result.error is not None:
        click.echo(json.dumps(result.error, indent=2), err=True)
    sys.exit(1)
