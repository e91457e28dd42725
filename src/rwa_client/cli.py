"""
rwa CLI

Command-line access to the contract codecs and to transaction tracking on a
Concordium node.

Commands:
  token-id  - Encode / decode fixed-width token ids
  amount    - Render fixed-point amounts and rates
  schema    - Inspect schemas, encode / decode values
  tx        - Query, wait for and link transactions
  contract  - Invoke contract entrypoints read-only
"""

from __future__ import annotations

import logging

import click

from .config import load_env

# ============ Constants ============

VERSION = "0.1.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="rwa")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Concordium RWA contract client."""
    load_env()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============ Command Groups ============

from .commands.codec import amount, schema, token_id
from .commands.chain import contract, tx

cli.add_command(token_id)
cli.add_command(amount)
cli.add_command(schema)
cli.add_command(tx)
cli.add_command(contract)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
