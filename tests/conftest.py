"""Shared fixtures: fake node / wallet providers and node payload builders."""

from __future__ import annotations

import base64
import struct
from typing import Any, Optional, Union

import pytest

from rwa_client.codec.values import encode_account_address
from rwa_client.node.models import BlockItemStatus

TXN_HASH = "a1" * 32
BLOCK_HASH = "b2" * 32


# ============ Schema builders ============


def _string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def enum_schema(*names: str) -> str:
    """Base64 schema of an enum whose variants carry no fields."""
    body = b"\x15" + struct.pack("<I", len(names))
    for name in names:
        body += _string(name) + b"\x02"
    return base64.b64encode(body).decode("ascii")


def account(seed: int = 1) -> str:
    return encode_account_address(bytes([seed]) * 32)


# ============ Node payload builders ============


def summary_json(
    *,
    transaction_type: str = "update",
    reject_reason: Optional[dict[str, Any]] = None,
    events: tuple[dict[str, Any], ...] = (),
) -> dict[str, Any]:
    if reject_reason is not None:
        result: dict[str, Any] = {"outcome": "reject", "rejectReason": reject_reason}
    else:
        result = {"outcome": "success", "events": list(events)}
    return {
        "hash": TXN_HASH,
        "sender": account(9),
        "cost": "1200",
        "energyCost": 810,
        "type": {"type": "accountTransaction", "contents": transaction_type},
        "result": result,
    }


def status_json(status: str, summary: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": status, "outcomes": {}}
    if summary is not None:
        payload["outcomes"] = {BLOCK_HASH: summary}
    return payload


def rejected_receive(code: int) -> dict[str, Any]:
    return {
        "tag": "RejectedReceive",
        "contractAddress": {"index": 7, "subindex": 0},
        "receiveName": "rwa_sponsor.permit",
        "rejectReason": code,
        "parameter": "",
    }


# ============ Fake providers ============


class FakeNode:
    """NodeProvider returning scripted statuses; exceptions are raised instead."""

    def __init__(self, statuses: list[Union[dict[str, Any], Exception]] = ()) -> None:
        self.statuses = list(statuses)
        self.calls: list[str] = []
        self.invocations: list[Any] = []
        self.invoke_results: list[Any] = []

    async def get_block_item_status(self, txn_hash: str) -> BlockItemStatus:
        self.calls.append(txn_hash)
        # repeat the last scripted status once the script runs out
        index = min(len(self.calls), len(self.statuses)) - 1
        item = self.statuses[index]
        if isinstance(item, Exception):
            raise item
        return BlockItemStatus.from_json(item)

    async def wait_for_transaction_finalization(self, txn_hash: str):
        while True:
            status = await self.get_block_item_status(txn_hash)
            if status.outcome is not None:
                return status.outcome

    async def invoke_contract(self, request):
        self.invocations.append(request)
        return self.invoke_results.pop(0)


class FakeWallet:
    def __init__(self, txn_hash: str = TXN_HASH, error: Optional[Exception] = None) -> None:
        self.txn_hash = txn_hash
        self.error = error
        self.sent: list[tuple] = []

    async def send_transaction(self, account, kind, payload, parameters=None, schema=None) -> str:
        self.sent.append((account, kind, payload, parameters, schema))
        if self.error is not None:
            raise self.error
        return self.txn_hash

    async def sign_message(self, account, message):
        return {"0": {"0": "ff" * 64}}


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet()
