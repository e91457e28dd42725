"""
Token id encoding.

CIS-2 contracts identify token kinds with a fixed-width byte string whose
size is a per-contract constant. Integers are written little-endian, so the
hex form of token id ``1`` in a 4 byte contract is ``01000000``.
"""

from __future__ import annotations

import re

from .errors import EncodingError

MAX_TOKEN_ID_SIZE = 32

_HEX = re.compile(r"[0-9a-fA-F]*")


def _check_size(byte_size: int) -> None:
    if not 0 <= byte_size <= MAX_TOKEN_ID_SIZE:
        raise EncodingError(
            f"Token id size must be between 0 and {MAX_TOKEN_ID_SIZE} bytes, got {byte_size}"
        )


def encode_token_id(value: int, byte_size: int) -> str:
    """
    Encode an integer token id as little-endian hex.

    Args:
        value: Non-negative token id
        byte_size: Contract token id width in bytes (0..32)

    Returns:
        Hex string of exactly ``2 * byte_size`` characters. Size 0 is the
        unit token id and always encodes to ``""``.

    Raises:
        EncodingError: If the value is negative or does not fit
    """
    _check_size(byte_size)
    if byte_size == 0:
        return ""
    if value < 0:
        raise EncodingError(f"Token id must be non-negative, got {value}")
    try:
        return value.to_bytes(byte_size, "little").hex()
    except OverflowError as exc:
        raise EncodingError(
            f"Token id {value} does not fit in {byte_size} bytes"
        ) from exc


def decode_token_id(token_id: str, byte_size: int) -> int:
    """Decode a little-endian hex token id back to its integer value."""
    _check_size(byte_size)
    if len(token_id) != 2 * byte_size:
        raise EncodingError(
            f"Token id must be {2 * byte_size} hex characters, got {len(token_id)}"
        )
    if not _HEX.fullmatch(token_id):
        raise EncodingError(f"Token id is not valid hex: {token_id!r}")
    raw = bytes.fromhex(token_id)
    return int.from_bytes(raw, "little")
