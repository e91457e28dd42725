"""
JSON-RPC Client for a Concordium node.

Lightweight async client: uses httpx for HTTP against the node's JSON-RPC
gateway. Supports transaction status queries, finalization polling and
read-only contract invocation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional, Protocol

import httpx

from ..config import get_node_url, get_poll_interval, get_rpc_timeout
from .models import (
    BlockItemStatus,
    BlockItemSummary,
    InvokeContractRequest,
    InvokeContractResult,
    TransactionStatus,
)

logger = logging.getLogger("rwa_client.node")


class NodeRpcError(RuntimeError):
    def __init__(self, method: str, error: Any) -> None:
        super().__init__(f"RPC error in {method}: {error}")
        self.method = method
        self.error = error


class NodeProvider(Protocol):
    """What the transaction tracking and contract invocation need from a node."""

    async def get_block_item_status(self, txn_hash: str) -> BlockItemStatus: ...

    async def wait_for_transaction_finalization(self, txn_hash: str) -> BlockItemSummary: ...

    async def invoke_contract(self, request: InvokeContractRequest) -> InvokeContractResult: ...


class HttpNodeClient:
    """
    NodeProvider backed by the node JSON-RPC gateway.

    Args:
        url: JSON-RPC endpoint (default: CONCORDIUM_NODE_URL or testnet)
        timeout: Per-request timeout in seconds
        poll_interval: Interval for ``wait_for_transaction_finalization``
        client: Pre-built ``httpx.AsyncClient`` (tests inject a mock transport)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url or get_node_url()
        self.poll_interval = poll_interval if poll_interval is not None else get_poll_interval()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else get_rpc_timeout()
        )
        self._request_id = 0

    async def __aenter__(self) -> "HttpNodeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _rpc_call(self, method: str, params: Any) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            NodeRpcError: If the response carries an error object
            httpx.HTTPError: On transport failures or non-2xx responses
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }
        logger.debug("rpc %s -> %s", method, self.url)

        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()
        data = response.json()

        if data.get("error") is not None:
            raise NodeRpcError(method, data["error"])

        return data.get("result")

    async def get_block_item_status(self, txn_hash: str) -> BlockItemStatus:
        result = await self._rpc_call("getTransactionStatus", {"transactionHash": txn_hash})
        if result is None:
            raise NodeRpcError("getTransactionStatus", f"transaction {txn_hash} not found")
        return BlockItemStatus.from_json(result)

    async def wait_for_transaction_finalization(
        self,
        txn_hash: str,
        timeout: Optional[float] = None,
    ) -> BlockItemSummary:
        """
        Poll until the transaction is finalized.

        Args:
            txn_hash: Transaction hash
            timeout: Maximum wait time in seconds (default: no limit)

        Raises:
            TimeoutError: If not finalized within ``timeout``
        """
        start = time.monotonic()
        while True:
            status = await self.get_block_item_status(txn_hash)
            if status.status is TransactionStatus.FINALIZED and status.outcome is not None:
                return status.outcome
            if timeout is not None and time.monotonic() - start >= timeout:
                raise TimeoutError(f"Transaction {txn_hash} not finalized within {timeout}s")
            await asyncio.sleep(self.poll_interval)

    async def invoke_contract(self, request: InvokeContractRequest) -> InvokeContractResult:
        result = await self._rpc_call(
            "invokeContract",
            {"blockHash": None, "context": request.to_json()},
        )
        return InvokeContractResult.from_json(result)
