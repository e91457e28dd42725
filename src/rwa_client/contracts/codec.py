"""
Contract call codec.

Serializes entrypoint parameters and decodes return values and contract
errors using the schemas a method descriptor carries. The runtime behaviour
is entirely schema-driven; the descriptor's type parameters only document
what callers should expect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar, Union

from ..codec.errors import SchemaMissing
from ..codec.schema import EnumType, FieldsKind
from ..codec.values import deserialize_value, serialize_value
from ..node.models import RejectReason
from ..utils import hex_to_bytes

if TYPE_CHECKING:
    from .descriptor import InitMethod, ReceiveMethod

TErr = TypeVar("TErr")


@dataclass(frozen=True)
class ParsedError(Generic[TErr]):
    message: str
    error: Optional[TErr] = None


def serialize_params(method: "ReceiveMethod | InitMethod", value: Any) -> bytes:
    """
    Serialize a parameter value for a method.

    ``None`` means "no parameter" and always yields ``b""``.

    Raises:
        SchemaMissing: If a value is given but the method has no params schema
        SerializationError: If the value does not match the schema
    """
    if value is None:
        return b""
    if method.params_type is None:
        raise SchemaMissing(
            f"{method.name} has no parameter schema, cannot serialize {type(value).__name__}"
        )
    return serialize_value(value, method.params_type)


def deserialize_return(method: "ReceiveMethod", data: Union[bytes, str, None]) -> Any:
    """
    Decode a return value.

    Returns None when the method declares no return schema.

    Raises:
        DecodeError: On malformed bytes or a schema mismatch
    """
    if method.return_type is None or data is None:
        return None
    return deserialize_value(hex_to_bytes(data), method.return_type)


def _error_from_code(method: "ReceiveMethod", code: int) -> Any:
    error_type = method.error_type
    if not isinstance(error_type, EnumType):
        return None
    name = method.error_codes.get(code)
    variant = error_type.variant(name) if name else error_type.by_index(-code - 1)
    if variant is None or variant.fields.kind is not FieldsKind.NONE:
        return None
    return {variant.name: {}}


def deserialize_error(method: "ReceiveMethod", rejection: RejectReason) -> Any:
    """
    Decode a contract error from a rejection.

    A serialized error in the rejection is decoded against the error schema.
    Otherwise the numeric reject code is mapped to a field-less error
    variant, using the method's ``error_codes`` table or, failing that, the
    derive convention ``code == -(variant_index + 1)``.

    Returns:
        The error value (``{"Variant": {...}}``), or None if the method has
        no error schema or the code does not map to a variant

    Raises:
        DecodeError: If serialized error bytes do not match the schema
    """
    if method.error_type is None:
        return None
    if rejection.return_value:
        return deserialize_value(rejection.return_value, method.error_type)
    if rejection.reject_reason is None:
        return None
    return _error_from_code(method, rejection.reject_reason)


def parse_error(method: "ReceiveMethod", rejection: RejectReason) -> ParsedError[Any]:
    return ParsedError(
        message=f"Error Code: {rejection.reject_reason}",
        error=deserialize_error(method, rejection),
    )
