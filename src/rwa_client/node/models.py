"""
Node response models.

Typed views over the JSON returned by the node's ``getTransactionStatus`` and
``invokeContract`` methods. Only the fields the transaction tracking and the
contract codecs need are lifted out; the raw payload stays available.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from ..codec.address import ContractAddress
from ..utils import hex_to_bytes


class TransactionStatus(str, Enum):
    RECEIVED = "received"
    COMMITTED = "committed"
    FINALIZED = "finalized"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [TransactionStatus.RECEIVED, TransactionStatus.COMMITTED, TransactionStatus.FINALIZED]


class TransactionType(str, Enum):
    UPDATE = "update"
    INIT_CONTRACT = "initContract"
    FAILED = "failed"
    TRANSFER = "transfer"
    DEPLOY_MODULE = "deployModule"


class RejectReasonTag(str, Enum):
    REJECTED_RECEIVE = "RejectedReceive"
    REJECTED_INIT = "RejectedInit"


ACCOUNT_TRANSACTION = "accountTransaction"


def _optional_bytes(value: Optional[str]) -> Optional[bytes]:
    if value is None:
        return None
    return hex_to_bytes(value)


@dataclass(frozen=True)
class RejectReason:
    tag: str
    reject_reason: Optional[int] = None
    contract_address: Optional[ContractAddress] = None
    receive_name: Optional[str] = None
    parameter: bytes = b""
    # serialized contract error, only present for invoke failures
    return_value: Optional[bytes] = None

    @classmethod
    def from_json(cls, payload: dict[str, Any], return_value: Optional[str] = None) -> "RejectReason":
        contents = payload.get("contents") if isinstance(payload.get("contents"), dict) else payload
        address = contents.get("contractAddress") or contents.get("address")
        code = contents.get("rejectReason")
        return cls(
            tag=payload["tag"],
            reject_reason=int(code) if code is not None else None,
            contract_address=ContractAddress.parse(address) if address else None,
            receive_name=contents.get("receiveName"),
            parameter=_optional_bytes(contents.get("parameter")) or b"",
            return_value=_optional_bytes(return_value),
        )


@dataclass(frozen=True)
class AccountTransactionSummary:
    hash: str
    transaction_type: str
    sender: Optional[str] = None
    cost: int = 0
    energy_cost: int = 0
    reject_reason: Optional[RejectReason] = None
    events: tuple[dict[str, Any], ...] = ()
    summary_type: str = ACCOUNT_TRANSACTION

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "AccountTransactionSummary":
        type_info = payload.get("type") or {}
        result = payload.get("result") or {}
        reject_reason = None
        if result.get("outcome") == "reject":
            transaction_type = TransactionType.FAILED.value
            reject_reason = RejectReason.from_json(result["rejectReason"])
        else:
            transaction_type = type_info.get("contents") or ""
        return cls(
            hash=payload.get("hash", ""),
            transaction_type=transaction_type,
            sender=payload.get("sender"),
            cost=int(payload.get("cost", 0)),
            energy_cost=int(payload.get("energyCost", 0)),
            reject_reason=reject_reason,
            events=tuple(result.get("events") or ()),
            summary_type=type_info.get("type", ACCOUNT_TRANSACTION),
        )

    @property
    def contract_initialized(self) -> Optional[ContractAddress]:
        for event in self.events:
            if event.get("tag") == "ContractInitialized":
                return ContractAddress.parse(event["address"])
        return None


@dataclass(frozen=True)
class BlockItemSummary:
    block_hash: str
    summary: AccountTransactionSummary


@dataclass(frozen=True)
class BlockItemStatus:
    status: TransactionStatus
    outcome: Optional[BlockItemSummary] = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "BlockItemStatus":
        """
        Parse a ``getTransactionStatus`` result.

        Finalized transactions carry exactly one entry in ``outcomes``,
        keyed by block hash.
        """
        status = TransactionStatus(payload["status"])
        outcome = None
        if status is TransactionStatus.FINALIZED:
            outcomes = payload.get("outcomes") or {}
            if len(outcomes) != 1:
                raise ValueError(f"Finalized transaction must have one outcome, got {len(outcomes)}")
            block_hash, summary = next(iter(outcomes.items()))
            outcome = BlockItemSummary(block_hash, AccountTransactionSummary.from_json(summary))
        return cls(status=status, outcome=outcome)


@dataclass(frozen=True)
class InvokeContractRequest:
    contract: ContractAddress
    method: str
    parameter: bytes = b""
    invoker: Optional[Union[str, ContractAddress]] = None
    amount: int = 0
    energy: Optional[int] = None

    def to_json(self) -> dict[str, Any]:
        context: dict[str, Any] = {
            "contract": self.contract.to_dict(),
            "method": self.method,
            "amount": str(self.amount),
            "parameter": self.parameter.hex(),
        }
        if self.energy is not None:
            context["energy"] = self.energy
        if isinstance(self.invoker, ContractAddress):
            context["invoker"] = {"type": "AddressContract", "address": self.invoker.to_dict()}
        elif self.invoker is not None:
            context["invoker"] = {"type": "AddressAccount", "address": self.invoker}
        return context


@dataclass(frozen=True)
class InvokeContractResult:
    tag: str
    used_energy: int = 0
    return_value: Optional[bytes] = None
    reason: Optional[RejectReason] = None
    events: tuple[dict[str, Any], ...] = field(default=())

    @property
    def succeeded(self) -> bool:
        return self.tag == "success"

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "InvokeContractResult":
        tag = payload["tag"]
        return_value = payload.get("returnValue")
        reason = None
        if tag == "failure":
            reason = RejectReason.from_json(payload["reason"], return_value=return_value)
        return cls(
            tag=tag,
            used_energy=int(payload.get("usedEnergy", 0)),
            return_value=_optional_bytes(return_value),
            reason=reason,
            events=tuple(payload.get("events") or ()),
        )
