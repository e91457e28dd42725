"""
Transaction lifecycle states.

A submitter holds exactly one of these at a time::

    Init --submit--> Sent(received) --> Sent(committed) --> Finalized --ack--> Init

Errors do not get their own state: a failed wallet call leaves ``InitState``
with ``error`` set, a failed poll leaves ``SentState`` with ``error`` set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ..node.models import BlockItemSummary, TransactionStatus


class Phase(str, Enum):
    INIT = "init"
    SENT = "sent"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class Success:
    summary: BlockItemSummary
    value: Any = None


@dataclass(frozen=True)
class Rejected:
    message: str
    error: Any = None


Outcome = Union[Success, Rejected]


@dataclass(frozen=True)
class InitState:
    error: Optional[str] = None

    @property
    def phase(self) -> Phase:
        return Phase.INIT


@dataclass(frozen=True)
class SentState:
    txn_hash: str
    status: TransactionStatus = TransactionStatus.RECEIVED
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status is TransactionStatus.FINALIZED:
            raise ValueError("SentState cannot hold a finalized status")

    @property
    def phase(self) -> Phase:
        return Phase.SENT


@dataclass(frozen=True)
class FinalizedState:
    txn_hash: str
    outcome: Outcome
    error: Optional[str] = None

    @property
    def phase(self) -> Phase:
        return Phase.FINALIZED

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Success)


TransactionState = Union[InitState, SentState, FinalizedState]
