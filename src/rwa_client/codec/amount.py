"""
Fixed-point amount display.

On-chain amounts are integers in minor units; a token with 6 decimals stores
``1.5`` as ``1500000``. Everything here works on exact decimals so amounts
beyond 2**53 keep every digit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal

from .errors import InvalidAmount

_INTEGER_LITERAL = re.compile(r"^[0-9]+$")


def _parse_integer(value: str | int, what: str = "amount") -> str:
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid {what}: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(f"Invalid {what}: {value} is negative")
        return str(value)
    text = value.strip() if isinstance(value, str) else value
    if not isinstance(text, str) or not _INTEGER_LITERAL.match(text):
        raise InvalidAmount(f"Invalid {what}: {value!r}")
    return text


def _check_decimals(decimals: int, name: str) -> None:
    if decimals < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {decimals}")


def _round(value: Decimal, round_to: int) -> str:
    _check_decimals(round_to, "round_to")
    quantum = Decimal(1).scaleb(-round_to)
    context = Context(prec=max(value.adjusted() + 1, 1) + round_to + 2)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP, context=context):f}"


def to_display_amount(amount: str | int, decimals: int, round_to: int = 2) -> str:
    """
    Render a minor-unit integer amount as a decimal string.

    Args:
        amount: Integer literal in minor units (e.g. ``"1500000"``)
        decimals: Number of decimals of the token or currency
        round_to: Fractional digits in the output

    Returns:
        Display string, e.g. ``to_display_amount("1500000", 6) == "1.50"``

    Raises:
        InvalidAmount: If ``amount`` is not a non-negative integer literal
    """
    digits = _parse_integer(amount)
    _check_decimals(decimals, "decimals")
    padded = digits.rjust(decimals + 1, "0")
    split = len(padded) - decimals
    literal = f"{padded[:split]}.{padded[split:]}" if decimals else padded
    return _round(Decimal(literal), round_to)


def to_display_rate(
    numerator: str | int,
    denominator: str | int,
    token_decimals: int,
    currency_decimals: int,
    round_to: int = 2,
) -> str:
    """
    Render an exchange rate as currency per whole token.

    The numerator is a currency amount and the denominator a token amount,
    each rescaled by its own decimals before dividing.
    """
    num = Decimal(_parse_integer(numerator, "rate numerator"))
    den = Decimal(_parse_integer(denominator, "rate denominator"))
    _check_decimals(token_decimals, "token_decimals")
    _check_decimals(currency_decimals, "currency_decimals")
    if den == 0:
        raise InvalidAmount("Rate denominator must be non-zero")
    precision = len(str(num)) + len(str(den)) + token_decimals + currency_decimals + round_to + 8
    context = Context(prec=precision)
    scaled = context.divide(num.scaleb(-currency_decimals), den.scaleb(-token_decimals))
    return _round(scaled, round_to)


@dataclass(frozen=True)
class Rate:
    numerator: int
    denominator: int

    def __post_init__(self) -> None:
        if self.numerator < 0:
            raise InvalidAmount(f"Rate numerator must be non-negative, got {self.numerator}")
        if self.denominator <= 0:
            raise InvalidAmount("Rate denominator must be non-zero")

    @classmethod
    def from_dict(cls, payload: dict) -> "Rate":
        return cls(
            numerator=int(_parse_integer(payload["numerator"], "rate numerator")),
            denominator=int(_parse_integer(payload["denominator"], "rate denominator")),
        )

    def to_dict(self) -> dict[str, int]:
        return {"numerator": self.numerator, "denominator": self.denominator}

    def to_display(self, token_decimals: int, currency_decimals: int, round_to: int = 2) -> str:
        return to_display_rate(
            self.numerator, self.denominator, token_decimals, currency_decimals, round_to
        )
