"""
Generated bindings for the ``rwa_sponsor`` contract.

The sponsor contract verifies CIS-3 permit messages so a sponsor account can
pay for transactions signed by another account.
"""

from __future__ import annotations

from typing import Any, Union

from ..codec.schema import parse_schema_base64
from ..codec.values import deserialize_value
from ..utils import hex_to_bytes
from .descriptor import InitMethod, ReceiveMethod

CONTRACT_NAME = "rwa_sponsor"
MODULE_REF = "918ae7df77db838f4c085ade260adc162ebc5576c9d83bbfb6c9ffe89db2a916"

_CONTRACT_ERROR_SCHEMA = (
    "FQUAAAAKAAAAUGFyc2VFcnJvcgIIAAAATG9nRXJyb3ICEgAAAFNlcmlhbGl6YXRpb25FcnJvcgIRAAAAQ2FsbENvbnRyYWN0"
    "RXJyb3ICDgAAAENJUzNDaGVja0Vycm9yAg=="
)

INIT_ERROR_SCHEMA = _CONTRACT_ERROR_SCHEMA

BYTES_TO_SIGN_ERROR_SCHEMA = _CONTRACT_ERROR_SCHEMA
BYTES_TO_SIGN_REQUEST_SCHEMA = (
    "FAAFAAAAEAAAAGNvbnRyYWN0X2FkZHJlc3MMBQAAAG5vbmNlBQkAAAB0aW1lc3RhbXANCwAAAGVudHJ5X3BvaW50FgEHAAAA"
    "cGF5bG9hZBABAg=="
)
BYTES_TO_SIGN_RESPONSE_SCHEMA = "EyAAAAAC"

NONCE_ERROR_SCHEMA = _CONTRACT_ERROR_SCHEMA
NONCE_REQUEST_SCHEMA = "FAABAAAABwAAAGFjY291bnQL"
NONCE_RESPONSE_SCHEMA = "BQ=="

PERMIT_ERROR_SCHEMA = (
    "FQ8AAAAFAAAAUGFyc2UCAwAAAExvZwINAAAAV3JvbmdDb250cmFjdAIHAAAARXhwaXJlZAINAAAATm9uY2VNaXNtYXRjaAIO"
    "AAAAV3JvbmdTaWduYXR1cmUCDQAAAFNlcmlhbGl6YXRpb24CDgAAAEFjY291bnRNaXNzaW5nAhoAAABDYWxsQ29udHJhY3RB"
    "bW91bnRUb29MYXJnZQIaAAAAQ2FsbENvbnRyYWN0TWlzc2luZ0FjY291bnQCGwAAAENhbGxDb250cmFjdE1pc3NpbmdDb250"
    "cmFjdAIdAAAAQ2FsbENvbnRyYWN0TWlzc2luZ0VudHJ5cG9pbnQCGQAAAENhbGxDb250cmFjdE1lc3NhZ2VGYWlsZWQCEAAA"
    "AENhbGxDb250cmFjdFRyYXACFwAAAENhbGxDb250cmFjdExvZ2ljUmVqZWN0AQEAAAAI"
)
PERMIT_REQUEST_SCHEMA = (
    "FAADAAAACQAAAHNpZ25hdHVyZRIAAhIAAhUBAAAABwAAAEVkMjU1MTkBAQAAAB5AAAAABgAAAHNpZ25lcgsHAAAAbWVzc2Fn"
    "ZRQABQAAABAAAABjb250cmFjdF9hZGRyZXNzDAUAAABub25jZQUJAAAAdGltZXN0YW1wDQsAAABlbnRyeV9wb2ludBYBBwAA"
    "AHBheWxvYWQQAQI="
)

SUPPORTS_PERMIT_ERROR_SCHEMA = _CONTRACT_ERROR_SCHEMA
SUPPORTS_PERMIT_REQUEST_SCHEMA = "FAABAAAABwAAAHF1ZXJpZXMQARYB"
SUPPORTS_PERMIT_RESPONSE_SCHEMA = "EAEB"

EVENT_SCHEMA = "FQEAAAAFAAAATm9uY2UBAQAAABQAAgAAAAcAAABhY2NvdW50CwUAAABub25jZQU="

ENTRYPOINTS = ("bytesToSign", "nonce", "permit", "supportsPermit")

ENTRYPOINT_DISPLAY_NAMES = {
    "bytesToSign": "Bytes To Sign",
    "nonce": "Nonce",
    "permit": "Permit",
    "supportsPermit": "Supports Permit",
}

init: InitMethod[None] = InitMethod(
    module_ref=MODULE_REF,
    contract_name=CONTRACT_NAME,
    error_schema=INIT_ERROR_SCHEMA,
)

bytes_to_sign: ReceiveMethod[dict, list, dict] = ReceiveMethod(
    contract_name=CONTRACT_NAME,
    entrypoint="bytesToSign",
    params_schema=BYTES_TO_SIGN_REQUEST_SCHEMA,
    return_schema=BYTES_TO_SIGN_RESPONSE_SCHEMA,
    error_schema=BYTES_TO_SIGN_ERROR_SCHEMA,
)

nonce: ReceiveMethod[dict, int, dict] = ReceiveMethod(
    contract_name=CONTRACT_NAME,
    entrypoint="nonce",
    params_schema=NONCE_REQUEST_SCHEMA,
    return_schema=NONCE_RESPONSE_SCHEMA,
    error_schema=NONCE_ERROR_SCHEMA,
)

permit: ReceiveMethod[dict, None, dict] = ReceiveMethod(
    contract_name=CONTRACT_NAME,
    entrypoint="permit",
    params_schema=PERMIT_REQUEST_SCHEMA,
    error_schema=PERMIT_ERROR_SCHEMA,
)

supports_permit: ReceiveMethod[dict, list, dict] = ReceiveMethod(
    contract_name=CONTRACT_NAME,
    entrypoint="supportsPermit",
    params_schema=SUPPORTS_PERMIT_REQUEST_SCHEMA,
    return_schema=SUPPORTS_PERMIT_RESPONSE_SCHEMA,
    error_schema=SUPPORTS_PERMIT_ERROR_SCHEMA,
)

METHODS = {
    "bytesToSign": bytes_to_sign,
    "nonce": nonce,
    "permit": permit,
    "supportsPermit": supports_permit,
}

_EVENT_TYPE = parse_schema_base64(EVENT_SCHEMA)


def deserialize_event(event: Union[bytes, str]) -> dict[str, Any]:
    """Decode a logged contract event, e.g. ``{"Nonce": [{"account": ..., "nonce": 3}]}``."""
    return deserialize_value(hex_to_bytes(event), _EVENT_TYPE)
