"""
Finalized transaction outcome classification.

Turns a finalized block item summary into ``Success`` or ``Rejected``. An
on-chain rejection is data, not an exception; decode failures while reading
the rejection are reported as an unstructured ``Rejected`` message.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..codec.address import ContractAddress
from ..node.models import (
    ACCOUNT_TRANSACTION,
    BlockItemSummary,
    RejectReasonTag,
    TransactionType,
)
from ..wallet import TransactionKind
from .state import Outcome, Rejected, Success

logger = logging.getLogger("rwa_client.tx")


def contract_address_from_summary(outcome: BlockItemSummary) -> ContractAddress:
    """
    Extract the new contract address from a successful init transaction.

    Raises:
        ValueError: If the summary is not a successful contract initialization
    """
    summary = outcome.summary
    if summary.transaction_type != TransactionType.INIT_CONTRACT.value:
        raise ValueError(f"Not an init transaction: {summary.transaction_type or 'unknown'}")
    address = summary.contract_initialized
    if address is None:
        raise ValueError(f"Init transaction {summary.hash} has no ContractInitialized event")
    return address


def _rejection(outcome: BlockItemSummary, method=None) -> Optional[Rejected]:
    summary = outcome.summary
    if summary.summary_type != ACCOUNT_TRANSACTION:
        return None
    if summary.transaction_type != TransactionType.FAILED.value:
        return None

    reason = summary.reject_reason
    if reason is None:
        return Rejected(message=TransactionType.FAILED.value)
    if reason.tag == RejectReasonTag.REJECTED_RECEIVE.value:
        if method is None:
            return Rejected(message=f"{reason.tag}: {reason.reject_reason}")
        parsed = method.parse_error(reason)
        return Rejected(message=parsed.message, error=parsed.error)
    if reason.tag == RejectReasonTag.REJECTED_INIT.value:
        return Rejected(message=f"Rejected init: {reason.reject_reason}")
    return Rejected(message=reason.tag)


def parse_finalized_update(outcome: BlockItemSummary, method=None) -> Outcome:
    """
    Classify a finalized update transaction.

    Args:
        outcome: Finalized block item summary
        method: ReceiveMethod used to decode a ``RejectedReceive`` error

    Raises:
        DecodeError: If the rejection carries error bytes the schema can't read
    """
    rejected = _rejection(outcome, method)
    if rejected is not None:
        return rejected
    return Success(summary=outcome)


def parse_finalized_init(outcome: BlockItemSummary) -> Outcome:
    """Classify a finalized init transaction; success carries the new address."""
    rejected = _rejection(outcome)
    if rejected is not None:
        return rejected
    return Success(summary=outcome, value=contract_address_from_summary(outcome))


def classify_outcome(
    outcome: BlockItemSummary,
    method=None,
    kind: TransactionKind = TransactionKind.UPDATE,
) -> Outcome:
    """
    Classify a finalized outcome without raising.

    Decode faults are distinct from on-chain rejection: they come back as a
    ``Rejected`` with a message and no structured error.
    """
    try:
        if kind is TransactionKind.INIT_CONTRACT:
            return parse_finalized_init(outcome)
        return parse_finalized_update(outcome, method)
    except ValueError as exc:
        logger.warning("could not decode outcome of %s: %s", outcome.summary.hash, exc)
        return Rejected(message=f"Failed to decode transaction outcome: {exc}")
