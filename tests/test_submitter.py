"""Tests for the transaction submitter state machine."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from conftest import TXN_HASH, FakeNode, FakeWallet, account, enum_schema, rejected_receive, status_json, summary_json
from rwa_client.codec.address import ContractAddress
from rwa_client.contracts import rwa_sponsor
from rwa_client.contracts.descriptor import ReceiveMethod
from rwa_client.node.models import TransactionStatus
from rwa_client.tx import TransactionStateError
from rwa_client.tx.state import FinalizedState, InitState, Phase, Rejected, SentState, Success
from rwa_client.tx.submitter import TransactionSubmitter, submit_and_wait
from rwa_client.wallet import TransactionKind

CONTRACT = ContractAddress(7, 0)
RECEIVED = status_json("received")
COMMITTED = status_json("committed")
FINALIZED_OK = status_json("finalized", summary_json())


def _send(wallet: FakeWallet, method=rwa_sponsor.nonce, params=None):
    params = params if params is not None else {"account": account(2)}
    return lambda: method.update(wallet, account(1), CONTRACT, params)


def _record(submitter: TransactionSubmitter) -> list:
    states: list = []
    submitter.subscribe(states.append)
    return states


class TestProgression:
    @pytest.mark.asyncio
    async def test_received_then_finalized(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED, FINALIZED_OK])
        submitter = TransactionSubmitter(node, method=rwa_sponsor.nonce, poll_interval=0)
        assert submitter.state == InitState()
        states = _record(submitter)

        await submitter.run(_send(wallet))

        assert [s.phase for s in states] == [Phase.SENT, Phase.FINALIZED]
        assert states[0] == SentState(TXN_HASH, TransactionStatus.RECEIVED)
        final = states[1]
        assert isinstance(final, FinalizedState)
        assert isinstance(final.outcome, Success)
        assert final.succeeded
        assert len(node.calls) == 2

        await asyncio.sleep(0.01)
        assert len(node.calls) == 2
        assert not submitter.polling

    @pytest.mark.asyncio
    async def test_committed_is_reported(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED, COMMITTED, COMMITTED, FINALIZED_OK])
        submitter = TransactionSubmitter(node, poll_interval=0)
        states = _record(submitter)

        await submitter.run(_send(wallet))

        assert [getattr(s, "status", None) for s in states] == [
            TransactionStatus.RECEIVED,
            TransactionStatus.COMMITTED,
            None,
        ]
        assert len(node.calls) == 4

    @pytest.mark.asyncio
    async def test_status_never_regresses(self, wallet: FakeWallet) -> None:
        node = FakeNode([COMMITTED, RECEIVED, FINALIZED_OK])
        submitter = TransactionSubmitter(node, poll_interval=0)
        states = _record(submitter)

        await submitter.run(_send(wallet))

        statuses = [s.status for s in states if isinstance(s, SentState)]
        assert statuses == [TransactionStatus.RECEIVED, TransactionStatus.COMMITTED]

    @pytest.mark.asyncio
    async def test_acknowledge_resets(self, wallet: FakeWallet) -> None:
        submitter = TransactionSubmitter(FakeNode([FINALIZED_OK]), poll_interval=0)
        await submitter.run(_send(wallet))
        submitter.acknowledge()
        assert submitter.state == InitState()
        await submitter.run(_send(wallet))
        assert submitter.state.phase is Phase.FINALIZED


class TestRejection:
    @pytest.mark.asyncio
    async def test_code_maps_to_error_variant(self, wallet: FakeWallet) -> None:
        method = ReceiveMethod(
            "token",
            "transfer",
            error_schema=enum_schema("Unauthorized", "InsufficientFunds"),
            error_codes={7: "InsufficientFunds"},
        )
        node = FakeNode([status_json("finalized", summary_json(reject_reason=rejected_receive(7)))])
        submitter = TransactionSubmitter(node, method=method, poll_interval=0)

        await submitter.run(lambda: wallet.send_transaction(account(1), TransactionKind.UPDATE, None))

        state = submitter.state
        assert isinstance(state, FinalizedState)
        assert state.outcome == Rejected(message="Error Code: 7", error={"InsufficientFunds": {}})

    @pytest.mark.asyncio
    async def test_sponsor_permit_rejection(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED, status_json("finalized", summary_json(reject_reason=rejected_receive(-6)))])
        submitter = TransactionSubmitter(node, method=rwa_sponsor.permit, poll_interval=0)

        await submitter.run(lambda: wallet.send_transaction(account(1), TransactionKind.UPDATE, None))

        assert submitter.state.outcome.error == {"WrongSignature": {}}


class TestFailures:
    @pytest.mark.asyncio
    async def test_wallet_error_stays_init(self) -> None:
        node = FakeNode([FINALIZED_OK])
        wallet = FakeWallet(error=RuntimeError("User rejected the request"))
        submitter = TransactionSubmitter(node, poll_interval=0)

        state = await submitter.run(_send(wallet))

        assert state == InitState(error="User rejected the request")
        assert node.calls == []
        assert not submitter.polling

    @pytest.mark.asyncio
    async def test_retry_after_wallet_error(self) -> None:
        wallet = FakeWallet(error=RuntimeError("declined"))
        submitter = TransactionSubmitter(FakeNode([FINALIZED_OK]), poll_interval=0)
        await submitter.submit(_send(wallet))
        wallet.error = None
        await submitter.run(_send(wallet))
        assert submitter.state.phase is Phase.FINALIZED
        assert submitter.state.error is None

    @pytest.mark.asyncio
    async def test_poll_error_is_terminal(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED, httpx.ConnectError("node unreachable"), FINALIZED_OK])
        submitter = TransactionSubmitter(node, poll_interval=0)

        await submitter.run(_send(wallet))

        assert submitter.state == SentState(TXN_HASH, TransactionStatus.RECEIVED, error="node unreachable")
        assert len(node.calls) == 2
        await asyncio.sleep(0.01)
        assert len(node.calls) == 2

    @pytest.mark.asyncio
    async def test_success_handler_error_is_reported(self, wallet: FakeWallet) -> None:
        def handler(summary, txn_hash):
            raise RuntimeError("backend down")

        submitter = TransactionSubmitter(FakeNode([FINALIZED_OK]), on_success=handler, poll_interval=0)
        await submitter.run(_send(wallet))
        assert submitter.state.succeeded
        assert submitter.state.error == "backend down"


class TestTransitions:
    @pytest.mark.asyncio
    async def test_submit_while_sent_raises(self, wallet: FakeWallet) -> None:
        submitter = TransactionSubmitter(FakeNode([RECEIVED]), poll_interval=0.05)
        await submitter.submit(_send(wallet))
        with pytest.raises(TransactionStateError):
            await submitter.submit(_send(wallet))
        await submitter.close()

    @pytest.mark.asyncio
    async def test_close_stops_polling(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED])
        submitter = TransactionSubmitter(node, poll_interval=0.001)
        await submitter.submit(_send(wallet))
        await asyncio.sleep(0.02)
        await submitter.close()
        calls = len(node.calls)
        await asyncio.sleep(0.02)
        assert len(node.calls) == calls
        assert not submitter.polling

    @pytest.mark.asyncio
    async def test_unsubscribe(self, wallet: FakeWallet) -> None:
        submitter = TransactionSubmitter(FakeNode([FINALIZED_OK]), poll_interval=0)
        states: list = []
        unsubscribe = submitter.subscribe(states.append)
        unsubscribe()
        await submitter.run(_send(wallet))
        assert states == []


class TestInitTransactions:
    @pytest.mark.asyncio
    async def test_success_value_is_address(self, wallet: FakeWallet) -> None:
        event = {"tag": "ContractInitialized", "address": {"index": 42, "subindex": 0}}
        node = FakeNode([status_json("finalized", summary_json(transaction_type="initContract", events=(event,)))])
        submitter = TransactionSubmitter(node, kind=TransactionKind.INIT_CONTRACT, poll_interval=0)

        await submitter.run(lambda: rwa_sponsor.init.init(wallet, account(1)))

        assert submitter.state.outcome.value == ContractAddress(42, 0)

    @pytest.mark.asyncio
    async def test_on_success_replaces_value(self, wallet: FakeWallet) -> None:
        seen = []

        async def handler(summary, txn_hash):
            seen.append(txn_hash)
            return "registered"

        submitter = TransactionSubmitter(FakeNode([FINALIZED_OK]), on_success=handler, poll_interval=0)
        await submitter.run(_send(wallet))
        assert submitter.state.outcome.value == "registered"
        assert seen == [TXN_HASH]


class TestSubmitAndWait:
    @pytest.mark.asyncio
    async def test_update(self, wallet: FakeWallet) -> None:
        node = FakeNode([RECEIVED, FINALIZED_OK])
        txn_hash, outcome = await submit_and_wait(_send(wallet), node, rwa_sponsor.nonce)
        assert txn_hash == TXN_HASH
        assert isinstance(outcome, Success)

    @pytest.mark.asyncio
    async def test_wallet_error_propagates(self) -> None:
        wallet = FakeWallet(error=RuntimeError("declined"))
        with pytest.raises(RuntimeError, match="declined"):
            await submit_and_wait(_send(wallet), FakeNode([FINALIZED_OK]))
