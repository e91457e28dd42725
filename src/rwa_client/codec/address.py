from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

from .values import decode_account_address

_CONTRACT_PAIR = re.compile(r"^<\s*(\d+)\s*,\s*(\d+)\s*>$")
_CONTRACT_INDEX = re.compile(r"^\s*(\d+)\s*$")

ACCOUNT_ADDRESS_LENGTH = 50


@dataclass(frozen=True)
class ContractAddress:
    index: int
    subindex: int = 0

    @classmethod
    def parse(cls, value: Union[str, int, dict]) -> "ContractAddress":
        """
        Parse a contract address.

        Accepts ``"<index,subindex>"``, a bare index (``"42"`` or ``42``)
        or a ``{"index": ..., "subindex": ...}`` mapping.

        Raises:
            ValueError: If the value has none of these forms
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid contract address: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, dict):
            return cls(int(value["index"]), int(value.get("subindex", 0)))
        if isinstance(value, str):
            match = _CONTRACT_PAIR.match(value.strip())
            if match:
                return cls(int(match.group(1)), int(match.group(2)))
            match = _CONTRACT_INDEX.match(value)
            if match:
                return cls(int(match.group(1)))
        raise ValueError(f"Invalid contract address format: {value!r}")

    def to_dict(self) -> dict[str, int]:
        return {"index": self.index, "subindex": self.subindex}

    def __str__(self) -> str:
        return f"<{self.index},{self.subindex}>"


def is_account_address(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != ACCOUNT_ADDRESS_LENGTH:
        return False
    try:
        decode_account_address(value)
    except ValueError:
        return False
    return True


def to_params_address(value: Union[str, int]) -> dict[str, list[Any]]:
    """
    Build the ``Address`` enum value contracts expect.

    Returns ``{"Account": [address]}`` for base58 account addresses and
    ``{"Contract": [{"index": ..., "subindex": ...}]}`` otherwise.
    """
    if is_account_address(value):
        return {"Account": [value]}
    return {"Contract": [ContractAddress.parse(value).to_dict()]}
