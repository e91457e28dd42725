"""
Transaction submitter.

Drives one contract transaction from wallet signature to finalization:

1. ``submit(send)`` awaits the wallet. A wallet failure leaves the submitter
   in ``InitState`` with the error attached.
2. On success the submitter enters ``SentState`` and starts a poll task that
   queries the node every ``poll_interval`` seconds, strictly sequentially.
3. A finalized status is classified into ``Success`` or ``Rejected`` and the
   poll task ends. A failed poll attaches the error to ``SentState`` and also
   ends the task; nothing is retried.
4. ``acknowledge()`` returns to ``InitState`` so the submitter can be reused.

All failures surface as data on the state. Only programming errors (calling
``submit`` outside ``InitState``) raise.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional

from ..config import get_poll_interval
from ..node.models import BlockItemSummary, TransactionStatus
from ..wallet import TransactionKind
from . import TransactionStateError
from .outcome import classify_outcome, parse_finalized_init, parse_finalized_update
from .state import FinalizedState, InitState, Outcome, SentState, Success, TransactionState

SendFn = Callable[[], Awaitable[str]]
SuccessHandler = Callable[[BlockItemSummary, str], Any]
Subscriber = Callable[[TransactionState], None]


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class TransactionSubmitter:
    """
    State machine for a single in-flight transaction.

    Args:
        node: NodeProvider used for status polling
        method: Descriptor used to decode contract errors on rejection
        kind: ``TransactionKind.INIT_CONTRACT`` makes success carry the new
            contract address
        on_success: Optional ``(summary, txn_hash)`` handler; a non-None
            return value (or awaited value) replaces ``Success.value``
        poll_interval: Seconds between polls (default: RWA_POLL_INTERVAL)
        logger: Logger override
    """

    def __init__(
        self,
        node,
        *,
        method=None,
        kind: TransactionKind = TransactionKind.UPDATE,
        on_success: Optional[SuccessHandler] = None,
        poll_interval: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._node = node
        self._method = method
        self._kind = kind
        self._on_success = on_success
        self.poll_interval = poll_interval if poll_interval is not None else get_poll_interval()
        self._logger = logger or logging.getLogger("rwa_client.tx")
        self._state: TransactionState = InitState()
        self._task: Optional[asyncio.Task] = None
        self._sending = False
        self._subscribers: list[Subscriber] = []

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a state-change callback. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, state: TransactionState) -> None:
        if state == self._state:
            return
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                self._logger.exception("state subscriber %r failed", callback)

    # ============ Transitions ============

    async def submit(self, send: SendFn) -> TransactionState:
        """
        Ask the wallet to sign and send, then start polling.

        Args:
            send: Zero-argument coroutine function returning the transaction
                hash, typically ``lambda: method.update(wallet, ...)``

        Returns:
            The state after the wallet call (``InitState`` with ``error`` on
            failure, ``SentState`` otherwise)

        Raises:
            TransactionStateError: If a transaction is already in flight
        """
        if self._sending or not isinstance(self._state, InitState):
            raise TransactionStateError(
                f"submit() requires the init state, current phase is {self._state.phase.value}"
            )
        self._sending = True
        self._set_state(InitState())
        try:
            txn_hash = await send()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._logger.warning("wallet rejected transaction: %s", _describe(exc))
            self._set_state(InitState(error=_describe(exc)))
            return self._state
        finally:
            self._sending = False

        self._logger.info("transaction %s sent", txn_hash)
        self._set_state(SentState(txn_hash=txn_hash))
        self._task = asyncio.create_task(self._poll(txn_hash))
        return self._state

    async def wait(self) -> TransactionState:
        """Wait for the poll task to stop (finalized, failed or cancelled)."""
        task = self._task
        if task is not None:
            await asyncio.wait([task])
        return self._state

    async def run(self, send: SendFn) -> TransactionState:
        await self.submit(send)
        return await self.wait()

    def acknowledge(self) -> None:
        """Stop polling and reset to ``InitState``."""
        self._cancel()
        self._set_state(InitState())

    async def close(self) -> None:
        """Stop polling and wait for the poll task to unwind."""
        task = self._task
        self._cancel()
        if task is not None:
            await asyncio.wait([task])

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    # ============ Polling ============

    async def _poll(self, txn_hash: str) -> None:
        polls = 0
        while True:
            await asyncio.sleep(self.poll_interval)
            polls += 1
            try:
                status = await self._node.get_block_item_status(txn_hash)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._logger.warning("status poll %d for %s failed: %s", polls, txn_hash, _describe(exc))
                if isinstance(self._state, SentState):
                    self._set_state(replace(self._state, error=_describe(exc)))
                return

            self._logger.debug("poll %d for %s: %s", polls, txn_hash, status.status.value)
            if status.status is TransactionStatus.FINALIZED:
                await self._finalize(txn_hash, status.outcome)
                return

            current = self._state
            if isinstance(current, SentState) and status.status.rank > current.status.rank:
                self._set_state(SentState(txn_hash=txn_hash, status=status.status))

    async def _finalize(self, txn_hash: str, summary: Optional[BlockItemSummary]) -> None:
        if summary is None:
            if isinstance(self._state, SentState):
                self._set_state(replace(self._state, error="finalized status without an outcome"))
            return

        outcome: Outcome = classify_outcome(summary, self._method, self._kind)
        error = None
        if isinstance(outcome, Success) and self._on_success is not None:
            try:
                value = self._on_success(summary, txn_hash)
                if inspect.isawaitable(value):
                    value = await value
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._logger.warning("success handler for %s failed: %s", txn_hash, _describe(exc))
                error = _describe(exc)
            else:
                if value is not None:
                    outcome = Success(summary=outcome.summary, value=value)

        self._logger.info("transaction %s finalized: %s", txn_hash, type(outcome).__name__)
        self._set_state(FinalizedState(txn_hash=txn_hash, outcome=outcome, error=error))


async def submit_and_wait(
    send: SendFn,
    node,
    method=None,
    kind: TransactionKind = TransactionKind.UPDATE,
) -> tuple[str, Outcome]:
    """
    Send a transaction and block until it is finalized.

    For call sites that do not need intermediate states. Unlike
    ``TransactionSubmitter`` this raises wallet and network errors directly.

    Returns:
        ``(txn_hash, outcome)``

    Raises:
        DecodeError: If a rejection's error bytes do not match the schema
    """
    txn_hash = await send()
    summary = await node.wait_for_transaction_finalization(txn_hash)
    if kind is TransactionKind.INIT_CONTRACT:
        return txn_hash, parse_finalized_init(summary)
    return txn_hash, parse_finalized_update(summary, method)
