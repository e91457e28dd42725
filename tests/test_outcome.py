"""Tests for finalized outcome classification."""

from __future__ import annotations

import pytest

from conftest import rejected_receive, summary_json
from rwa_client.codec.address import ContractAddress
from rwa_client.contracts import rwa_sponsor
from rwa_client.node.models import AccountTransactionSummary, BlockItemSummary
from rwa_client.tx.outcome import (
    classify_outcome,
    contract_address_from_summary,
    parse_finalized_init,
    parse_finalized_update,
)
from rwa_client.tx.state import Rejected, Success
from rwa_client.wallet import TransactionKind


def _outcome(**kwargs) -> BlockItemSummary:
    return BlockItemSummary("b2" * 32, AccountTransactionSummary.from_json(summary_json(**kwargs)))


INITIALIZED = {"tag": "ContractInitialized", "address": {"index": 42, "subindex": 0}, "ref": "ab" * 32}


class TestUpdate:
    def test_success(self) -> None:
        outcome = _outcome()
        assert parse_finalized_update(outcome) == Success(summary=outcome)

    def test_rejected_receive_with_schema(self) -> None:
        result = parse_finalized_update(_outcome(reject_reason=rejected_receive(-5)), rwa_sponsor.permit)
        assert result == Rejected(message="Error Code: -5", error={"NonceMismatch": {}})

    def test_rejected_receive_without_method(self) -> None:
        result = parse_finalized_update(_outcome(reject_reason=rejected_receive(-5)))
        assert result == Rejected(message="RejectedReceive: -5")

    def test_rejected_init(self) -> None:
        result = parse_finalized_update(_outcome(reject_reason={"tag": "RejectedInit", "rejectReason": -3}))
        assert result == Rejected(message="Rejected init: -3")

    def test_other_reject_tag(self) -> None:
        result = parse_finalized_update(_outcome(reject_reason={"tag": "OutOfEnergy"}))
        assert result == Rejected(message="OutOfEnergy")


class TestInit:
    def test_contract_address(self) -> None:
        outcome = _outcome(transaction_type="initContract", events=(INITIALIZED,))
        assert contract_address_from_summary(outcome) == ContractAddress(42, 0)
        result = parse_finalized_init(outcome)
        assert isinstance(result, Success)
        assert result.value == ContractAddress(42, 0)

    def test_not_an_init(self) -> None:
        with pytest.raises(ValueError, match="Not an init transaction"):
            contract_address_from_summary(_outcome())

    def test_missing_event(self) -> None:
        with pytest.raises(ValueError, match="ContractInitialized"):
            contract_address_from_summary(_outcome(transaction_type="initContract"))


class TestClassify:
    def test_init_kind(self) -> None:
        outcome = _outcome(transaction_type="initContract", events=(INITIALIZED,))
        result = classify_outcome(outcome, kind=TransactionKind.INIT_CONTRACT)
        assert result.value == ContractAddress(42, 0)

    def test_decode_fault_becomes_message(self) -> None:
        outcome = _outcome(transaction_type="initContract")
        result = classify_outcome(outcome, kind=TransactionKind.INIT_CONTRACT)
        assert isinstance(result, Rejected)
        assert result.error is None
        assert result.message.startswith("Failed to decode transaction outcome")
