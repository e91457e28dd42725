from __future__ import annotations

import base64
import binascii
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def hex_to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(value.removeprefix("0x"))


def base64_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.b64decode(value + padding, validate=True)


def base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def is_base64(value: str) -> bool:
    try:
        base64_decode(value)
    except (binascii.Error, ValueError):
        return False
    return True


def millis_to_rfc3339(millis: int) -> str:
    moment = _EPOCH + timedelta(milliseconds=millis)
    timespec = "milliseconds" if millis % 1000 else "seconds"
    return moment.isoformat(timespec=timespec).replace("+00:00", "Z")


def rfc3339_to_millis(value: str) -> int:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        raise ValueError(f"Timestamp must carry a timezone: {value}")
    delta = moment - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
