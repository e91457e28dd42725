from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..codec.address import ContractAddress
from .descriptor import ReceiveMethod

logger = logging.getLogger("rwa_client.contracts")


@dataclass(frozen=True)
class InvokeSuccess:
    value: Any = None
    used_energy: int = 0


@dataclass(frozen=True)
class InvokeFailure:
    message: str
    error: Any = None
    used_energy: int = 0


InvokeResult = Union[InvokeSuccess, InvokeFailure]


async def invoke_method(
    node,
    method: ReceiveMethod,
    contract: ContractAddress,
    params: Any = None,
    invoker: Optional[Union[str, ContractAddress]] = None,
    amount: int = 0,
) -> InvokeResult:
    """
    Call an entrypoint read-only and decode its outcome.

    Returns:
        InvokeSuccess with the decoded return value, or InvokeFailure with
        the decoded contract error (if the method has an error schema)

    Raises:
        SchemaMissing / SerializationError: If ``params`` cannot be serialized
        DecodeError: If the node's return value does not match the schema
    """
    result = await method.invoke(node, contract, params, invoker=invoker, amount=amount)
    if result.succeeded:
        return InvokeSuccess(
            value=method.parse_return_value(result.return_value),
            used_energy=result.used_energy,
        )

    if result.reason is None or result.reason.reject_reason is None:
        tag = result.reason.tag if result.reason else "unknown"
        logger.warning("invoke %s failed: %s", method.receive_name, tag)
        return InvokeFailure(message=tag, used_energy=result.used_energy)

    parsed = method.parse_error(result.reason)
    logger.info("invoke %s rejected: %s", method.receive_name, parsed.message)
    return InvokeFailure(message=parsed.message, error=parsed.error, used_energy=result.used_energy)
