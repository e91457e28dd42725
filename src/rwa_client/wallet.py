"""
Wallet provider interface.

The browser wallet (or any signer) is an external capability: it receives a
transaction payload, asks the user to approve it, signs it and returns the
transaction hash. This module only defines the shapes exchanged with it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from .codec.address import ContractAddress


class TransactionKind(str, Enum):
    INIT_CONTRACT = "initContract"
    UPDATE = "update"


@dataclass(frozen=True)
class SchemaSource:
    """Schema handed to the wallet so it can display the parameter."""

    value: str  # base64 type schema
    type: str = "parameter"


@dataclass(frozen=True)
class UpdateContractPayload:
    address: ContractAddress
    receive_name: str
    max_energy: int
    amount: int = 0  # micro CCD
    parameter: bytes = b""


@dataclass(frozen=True)
class InitContractPayload:
    module_ref: str
    init_name: str
    max_energy: int
    amount: int = 0
    parameter: bytes = b""


@dataclass(frozen=True)
class SignMessage:
    data: str  # hex encoded bytes
    schema: str  # base64 type schema of ``data``


class WalletProvider(Protocol):
    async def send_transaction(
        self,
        account: str,
        kind: TransactionKind,
        payload: UpdateContractPayload | InitContractPayload,
        parameters: Optional[Any] = None,
        schema: Optional[SchemaSource] = None,
    ) -> str: ...

    async def sign_message(self, account: str, message: SignMessage) -> dict[str, Any]: ...


def sigs_api_to_contract(sigs_api: dict[str, Any]) -> list[list[Any]]:
    """
    Convert a wallet signature map into the contract parameter shape.

    The wallet returns ``{"sigs": {cred: {"sigs": {key: {"signature": hex}}}}}``
    (or the inner credential map directly); contracts expect
    ``[[cred, [[key, {"Ed25519": [hex]}], ...]], ...]`` with integer indices.
    """
    credentials = sigs_api.get("sigs", sigs_api)
    result: list[list[Any]] = []
    for cred_index, cred in credentials.items():
        keys = cred.get("sigs", cred)
        entries = [
            [int(key_index), {"Ed25519": [sig["signature"] if isinstance(sig, dict) else sig]}]
            for key_index, sig in keys.items()
        ]
        result.append([int(cred_index), entries])
    return result
