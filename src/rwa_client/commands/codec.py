"""
Codec commands - offline encoding helpers.

Commands:
- token-id encode / decode: fixed-width little-endian token ids
- amount display / rate:    fixed-point display strings
- schema show / encode / decode: binary type schemas and values
"""

from __future__ import annotations

import json
import sys

import click

from ..codec.amount import to_display_amount, to_display_rate
from ..codec.errors import CodecError
from ..codec.schema import parse_schema_base64, schema_to_json
from ..codec.token_id import decode_token_id, encode_token_id
from ..codec.values import deserialize_value, serialize_value
from ..utils import hex_to_bytes


def _fail(exc: Exception) -> None:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(1)


# ============ token-id ============


@click.group("token-id")
def token_id() -> None:
    """Fixed-width token id encoding."""


@token_id.command("encode")
@click.argument("value", type=int)
@click.option("--size", "byte_size", required=True, type=int, help="Token id size in bytes (0-32)")
def token_id_encode(value: int, byte_size: int) -> None:
    """Encode an integer token id as little-endian hex."""
    try:
        click.echo(encode_token_id(value, byte_size))
    except CodecError as exc:
        _fail(exc)


@token_id.command("decode")
@click.argument("token_hex")
@click.option("--size", "byte_size", required=True, type=int, help="Token id size in bytes (0-32)")
def token_id_decode(token_hex: str, byte_size: int) -> None:
    """Decode a little-endian hex token id."""
    try:
        click.echo(decode_token_id(token_hex, byte_size))
    except CodecError as exc:
        _fail(exc)


# ============ amount ============


@click.group()
def amount() -> None:
    """Fixed-point amount display."""


@amount.command("display")
@click.argument("raw")
@click.option("--decimals", required=True, type=int, help="Token decimals")
@click.option("--round-to", default=2, show_default=True, type=int)
def amount_display(raw: str, decimals: int, round_to: int) -> None:
    """Render a raw integer amount, e.g. 1234567 with 6 decimals -> 1.23."""
    try:
        click.echo(to_display_amount(raw, decimals, round_to))
    except CodecError as exc:
        _fail(exc)


@amount.command("rate")
@click.argument("numerator")
@click.argument("denominator")
@click.option("--token-decimals", required=True, type=int)
@click.option("--currency-decimals", required=True, type=int)
@click.option("--round-to", default=2, show_default=True, type=int)
def amount_rate(
    numerator: str,
    denominator: str,
    token_decimals: int,
    currency_decimals: int,
    round_to: int,
) -> None:
    """Render a rate as currency per whole token."""
    try:
        click.echo(to_display_rate(numerator, denominator, token_decimals, currency_decimals, round_to))
    except CodecError as exc:
        _fail(exc)


# ============ schema ============


@click.group()
def schema() -> None:
    """Binary type schema tools.

    \b
    Examples:
      rwa schema show BQ==
      rwa schema encode FAABAAAABwAAAGFjY291bnQL '{"account": "3kBx..."}'
      rwa schema decode BQ== 0500000000000000
    """


@schema.command("show")
@click.argument("schema_b64")
def schema_show(schema_b64: str) -> None:
    """Print the type tree of a base64 schema."""
    try:
        click.echo(json.dumps(schema_to_json(parse_schema_base64(schema_b64)), indent=2))
    except CodecError as exc:
        _fail(exc)


@schema.command("encode")
@click.argument("schema_b64")
@click.argument("value_json")
def schema_encode(schema_b64: str, value_json: str) -> None:
    """Serialize a JSON value to hex."""
    try:
        value = json.loads(value_json)
    except json.JSONDecodeError as exc:
        _fail(ValueError(f"Invalid JSON value: {exc}"))
    try:
        click.echo(serialize_value(value, parse_schema_base64(schema_b64)).hex())
    except CodecError as exc:
        _fail(exc)


@schema.command("decode")
@click.argument("schema_b64")
@click.argument("data_hex")
def schema_decode(schema_b64: str, data_hex: str) -> None:
    """Deserialize hex bytes to JSON."""
    try:
        data = hex_to_bytes(data_hex)
        value = deserialize_value(data, parse_schema_base64(schema_b64))
    except ValueError as exc:
        _fail(exc)
    click.echo(json.dumps(value, indent=2))
