"""
Schema-driven value codec.

Values use the JSON shapes the Concordium tooling uses for contract
parameters: enums are single-key objects (``{"Variant": fields}``), named
structs are objects, unnamed structs and pairs are arrays, 128-bit and LEB128
integers are decimal strings, byte lists are hex.
"""

from __future__ import annotations

import re
from typing import Any

import base58

from ..utils import millis_to_rfc3339, rfc3339_to_millis
from .errors import DecodeError, SerializationError
from .schema import (
    INTEGER_TAGS,
    ArrayType,
    ByteArrayType,
    EnumType,
    Fields,
    FieldsKind,
    LebType,
    ListType,
    MapType,
    PairType,
    Primitive,
    SchemaType,
    SizedType,
    SizeLength,
    StructType,
    TypeTag,
)

ACCOUNT_ADDRESS_VERSION = 1
ACCOUNT_ADDRESS_SIZE = 32

_DURATION_UNITS = (("d", 86_400_000), ("h", 3_600_000), ("m", 60_000), ("s", 1000), ("ms", 1))
_DURATION_TOKEN = re.compile(r"(\d+)\s*(ms|d|h|m|s)")
_HEX = re.compile(r"^(?:[0-9a-fA-F]{2})*$")

Path = tuple[str, ...]


# ============ Shared helpers ============


def encode_account_address(raw: bytes) -> str:
    return base58.b58encode_check(bytes([ACCOUNT_ADDRESS_VERSION]) + raw).decode("ascii")


def decode_account_address(address: str) -> bytes:
    """Decode a base58check account address to its 32 raw bytes."""
    try:
        payload = base58.b58decode_check(address)
    except ValueError as exc:
        raise ValueError(f"Invalid account address: {address}") from exc
    if len(payload) != ACCOUNT_ADDRESS_SIZE + 1 or payload[0] != ACCOUNT_ADDRESS_VERSION:
        raise ValueError(f"Invalid account address: {address}")
    return payload[1:]


def parse_duration(value: str) -> int:
    text = value.strip()
    total = 0
    pos = 0
    for match in _DURATION_TOKEN.finditer(text):
        if text[pos:match.start()].strip():
            break
        total += int(match.group(1)) * dict(_DURATION_UNITS)[match.group(2)]
        pos = match.end()
    if not text or text[pos:].strip():
        raise ValueError(f"Invalid duration: {value!r}")
    return total


def format_duration(millis: int) -> str:
    parts = []
    for unit, size in _DURATION_UNITS:
        count, millis = divmod(millis, size)
        if count:
            parts.append(f"{count}{unit}")
    return " ".join(parts) or "0ms"


def _as_int(value: Any, path: Path) -> int:
    if isinstance(value, bool):
        raise SerializationError(f"Expected an integer, got {value!r}", path)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise SerializationError(f"Expected an integer, got {value!r}", path)


# ============ Serialization ============


class _Writer:
    def __init__(self) -> None:
        self.buf = bytearray()

    def int(self, value: int, width: int, signed: bool, path: Path) -> None:
        try:
            self.buf += value.to_bytes(width, "little", signed=signed)
        except OverflowError as exc:
            raise SerializationError(
                f"Integer {value} out of range for {'i' if signed else 'u'}{width * 8}", path
            ) from exc

    def length(self, size_length: SizeLength, value: int, path: Path) -> None:
        self.int(value, size_length.width, False, path)

    def value(self, value: Any, schema_type: SchemaType, path: Path) -> None:
        if isinstance(schema_type, Primitive):
            self.primitive(value, schema_type.tag, path)
        elif isinstance(schema_type, PairType):
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise SerializationError("Expected a pair [first, second]", path)
            self.value(value[0], schema_type.first, path + ("0",))
            self.value(value[1], schema_type.second, path + ("1",))
        elif isinstance(schema_type, ListType):
            if not isinstance(value, (list, tuple, set, frozenset)):
                raise SerializationError("Expected a list", path)
            items = list(value)
            self.length(schema_type.size_length, len(items), path)
            for index, item in enumerate(items):
                self.value(item, schema_type.item, path + (str(index),))
        elif isinstance(schema_type, MapType):
            entries = list(value.items()) if isinstance(value, dict) else value
            if not isinstance(entries, (list, tuple)):
                raise SerializationError("Expected a map as [[key, value], ...]", path)
            self.length(schema_type.size_length, len(entries), path)
            for index, entry in enumerate(entries):
                if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                    raise SerializationError("Map entries must be [key, value]", path + (str(index),))
                self.value(entry[0], schema_type.key, path + (str(index), "key"))
                self.value(entry[1], schema_type.value, path + (str(index), "value"))
        elif isinstance(schema_type, ArrayType):
            if not isinstance(value, (list, tuple)) or len(value) != schema_type.length:
                raise SerializationError(f"Expected an array of {schema_type.length} items", path)
            for index, item in enumerate(value):
                self.value(item, schema_type.item, path + (str(index),))
        elif isinstance(schema_type, StructType):
            self.fields(value, schema_type.fields, path)
        elif isinstance(schema_type, EnumType):
            self.enum(value, schema_type, path)
        elif isinstance(schema_type, SizedType):
            self.sized(value, schema_type, path)
        elif isinstance(schema_type, ByteArrayType):
            raw = self.hex(value, path)
            if len(raw) != schema_type.length:
                raise SerializationError(f"Expected {schema_type.length} bytes, got {len(raw)}", path)
            self.buf += raw
        elif isinstance(schema_type, LebType):
            self.leb(_as_int(value, path), schema_type, path)
        else:
            raise SerializationError(f"Unsupported schema type {schema_type!r}", path)

    def primitive(self, value: Any, tag: TypeTag, path: Path) -> None:
        if tag in INTEGER_TAGS:
            signed, width = INTEGER_TAGS[tag]
            self.int(_as_int(value, path), width, signed, path)
        elif tag is TypeTag.UNIT:
            if value not in (None, [], {}, ()):
                raise SerializationError(f"Expected unit, got {value!r}", path)
        elif tag is TypeTag.BOOL:
            if not isinstance(value, bool):
                raise SerializationError(f"Expected a bool, got {value!r}", path)
            self.buf.append(1 if value else 0)
        elif tag is TypeTag.AMOUNT:
            self.int(_as_int(value, path), 8, False, path)
        elif tag is TypeTag.ACCOUNT_ADDRESS:
            if not isinstance(value, str):
                raise SerializationError("Expected a base58 account address", path)
            try:
                self.buf += decode_account_address(value)
            except ValueError as exc:
                raise SerializationError(str(exc), path) from exc
        elif tag is TypeTag.CONTRACT_ADDRESS:
            if not isinstance(value, dict) or "index" not in value:
                raise SerializationError("Expected {'index': ..., 'subindex': ...}", path)
            self.int(_as_int(value["index"], path), 8, False, path + ("index",))
            self.int(_as_int(value.get("subindex", 0), path), 8, False, path + ("subindex",))
        elif tag is TypeTag.TIMESTAMP:
            if isinstance(value, str):
                try:
                    value = rfc3339_to_millis(value)
                except ValueError as exc:
                    raise SerializationError(f"Invalid timestamp {value!r}", path) from exc
            self.int(_as_int(value, path), 8, False, path)
        elif tag is TypeTag.DURATION:
            if isinstance(value, str) and not value.strip().isdigit():
                try:
                    value = parse_duration(value)
                except ValueError as exc:
                    raise SerializationError(str(exc), path) from exc
            self.int(_as_int(value, path), 8, False, path)
        else:
            raise SerializationError(f"Unsupported primitive {tag.name}", path)

    def fields(self, value: Any, fields: Fields, path: Path) -> None:
        if fields.kind is FieldsKind.NONE:
            if value not in (None, [], {}, ()):
                raise SerializationError(f"Expected no fields, got {value!r}", path)
        elif fields.kind is FieldsKind.NAMED:
            if not isinstance(value, dict):
                raise SerializationError(f"Expected an object with fields {fields.names}", path)
            for name, field_type in fields.items:
                if name not in value:
                    raise SerializationError(f"Missing field {name!r}", path)
                self.value(value[name], field_type, path + (name,))
        else:
            if not isinstance(value, (list, tuple)) or len(value) != len(fields.items):
                raise SerializationError(f"Expected {len(fields.items)} unnamed fields", path)
            for index, (item, (_, field_type)) in enumerate(zip(value, fields.items)):
                self.value(item, field_type, path + (str(index),))

    def enum(self, value: Any, schema_type: EnumType, path: Path) -> None:
        if not isinstance(value, dict) or len(value) != 1:
            raise SerializationError("Expected an enum object with exactly one variant key", path)
        name, payload = next(iter(value.items()))
        variant = schema_type.variant(name)
        if variant is None:
            raise SerializationError(f"Unknown enum variant {name!r}", path)
        self.int(variant.index, schema_type.tag_width, False, path)
        self.fields(payload, variant.fields, path + (name,))

    def sized(self, value: Any, schema_type: SizedType, path: Path) -> None:
        tag = schema_type.tag
        if tag is TypeTag.BYTE_LIST:
            raw = self.hex(value, path)
        elif tag is TypeTag.STRING:
            if not isinstance(value, str):
                raise SerializationError("Expected a string", path)
            raw = value.encode("utf-8")
        elif tag is TypeTag.CONTRACT_NAME:
            if not isinstance(value, dict) or not isinstance(value.get("contract"), str):
                raise SerializationError("Expected {'contract': name}", path)
            raw = f"init_{value['contract']}".encode("utf-8")
        else:
            if not isinstance(value, dict) or not all(
                isinstance(value.get(key), str) for key in ("contract", "func")
            ):
                raise SerializationError("Expected {'contract': name, 'func': entrypoint}", path)
            raw = f"{value['contract']}.{value['func']}".encode("utf-8")
        self.length(schema_type.size_length, len(raw), path)
        self.buf += raw

    def hex(self, value: Any, path: Path) -> bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str) and _HEX.match(value):
            return bytes.fromhex(value)
        if isinstance(value, list) and all(isinstance(b, int) and 0 <= b < 256 for b in value):
            return bytes(value)
        raise SerializationError("Expected a hex string", path)

    def leb(self, value: int, schema_type: LebType, path: Path) -> None:
        out = bytearray()
        if schema_type.tag is TypeTag.ULEB128:
            if value < 0:
                raise SerializationError("ULeb128 value must be non-negative", path)
            while True:
                byte = value & 0x7F
                value >>= 7
                if value:
                    out.append(byte | 0x80)
                else:
                    out.append(byte)
                    break
        else:
            while True:
                byte = value & 0x7F
                value >>= 7
                done = (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40)
                out.append(byte if done else byte | 0x80)
                if done:
                    break
        if len(out) > schema_type.constraint:
            raise SerializationError(
                f"LEB128 value needs {len(out)} bytes, limit is {schema_type.constraint}", path
            )
        self.buf += out


def serialize_value(value: Any, schema_type: SchemaType) -> bytes:
    """
    Serialize a JSON-shaped value according to a schema type.

    Raises:
        SerializationError: If the value does not match the schema
    """
    writer = _Writer()
    writer.value(value, schema_type, ())
    return bytes(writer.buf)


# ============ Deserialization ============


# upper bound on items of a type that encodes to zero bytes (e.g. a list of Unit)
MAX_EMPTY_ITEMS = 1 << 16

_FIXED_WIDTHS = {
    TypeTag.UNIT: 0,
    TypeTag.BOOL: 1,
    TypeTag.AMOUNT: 8,
    TypeTag.ACCOUNT_ADDRESS: ACCOUNT_ADDRESS_SIZE,
    TypeTag.CONTRACT_ADDRESS: 16,
    TypeTag.TIMESTAMP: 8,
    TypeTag.DURATION: 8,
}


def _min_width(schema_type: SchemaType) -> int:
    """Fewest bytes any value of ``schema_type`` can encode to."""
    if isinstance(schema_type, Primitive):
        if schema_type.tag in INTEGER_TAGS:
            return INTEGER_TAGS[schema_type.tag][1]
        return _FIXED_WIDTHS.get(schema_type.tag, 0)
    if isinstance(schema_type, PairType):
        return _min_width(schema_type.first) + _min_width(schema_type.second)
    if isinstance(schema_type, (ListType, MapType, SizedType)):
        return schema_type.size_length.width
    if isinstance(schema_type, ArrayType):
        return schema_type.length * _min_width(schema_type.item)
    if isinstance(schema_type, StructType):
        return sum(_min_width(item) for _, item in schema_type.fields.items)
    if isinstance(schema_type, EnumType):
        return schema_type.tag_width
    if isinstance(schema_type, ByteArrayType):
        return schema_type.length
    if isinstance(schema_type, LebType):
        return 1
    return 0


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, size: int, path: Path) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            location = "/".join(path) or "<root>"
            raise DecodeError(f"{location}: unexpected end of data at offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def int(self, width: int, signed: bool, path: Path) -> int:
        return int.from_bytes(self.take(width, path), "little", signed=signed)

    def check_count(self, count: int, item_width: int, path: Path) -> None:
        location = "/".join(path) or "<root>"
        if item_width == 0:
            if count > MAX_EMPTY_ITEMS:
                raise DecodeError(f"{location}: {count} empty items exceeds limit of {MAX_EMPTY_ITEMS}")
        elif count * item_width > len(self.data) - self.pos:
            raise DecodeError(
                f"{location}: {count} items need at least {count * item_width} bytes, "
                f"{len(self.data) - self.pos} left"
            )

    def value(self, schema_type: SchemaType, path: Path) -> Any:
        if isinstance(schema_type, Primitive):
            return self.primitive(schema_type.tag, path)
        if isinstance(schema_type, PairType):
            return [self.value(schema_type.first, path + ("0",)), self.value(schema_type.second, path + ("1",))]
        if isinstance(schema_type, ListType):
            count = self.int(schema_type.size_length.width, False, path)
            self.check_count(count, _min_width(schema_type.item), path)
            return [self.value(schema_type.item, path + (str(i),)) for i in range(count)]
        if isinstance(schema_type, MapType):
            count = self.int(schema_type.size_length.width, False, path)
            self.check_count(count, _min_width(schema_type.key) + _min_width(schema_type.value), path)
            return [
                [self.value(schema_type.key, path + (str(i), "key")), self.value(schema_type.value, path + (str(i), "value"))]
                for i in range(count)
            ]
        if isinstance(schema_type, ArrayType):
            self.check_count(schema_type.length, _min_width(schema_type.item), path)
            return [self.value(schema_type.item, path + (str(i),)) for i in range(schema_type.length)]
        if isinstance(schema_type, StructType):
            return self.fields(schema_type.fields, path)
        if isinstance(schema_type, EnumType):
            index = self.int(schema_type.tag_width, False, path)
            variant = schema_type.by_index(index)
            if variant is None:
                raise DecodeError(f"{'/'.join(path) or '<root>'}: unknown enum tag {index}")
            return {variant.name: self.fields(variant.fields, path + (variant.name,))}
        if isinstance(schema_type, SizedType):
            return self.sized(schema_type, path)
        if isinstance(schema_type, ByteArrayType):
            return self.take(schema_type.length, path).hex()
        if isinstance(schema_type, LebType):
            return str(self.leb(schema_type, path))
        raise DecodeError(f"Unsupported schema type {schema_type!r}")

    def primitive(self, tag: TypeTag, path: Path) -> Any:
        if tag in INTEGER_TAGS:
            signed, width = INTEGER_TAGS[tag]
            value = self.int(width, signed, path)
            return str(value) if width == 16 else value
        if tag is TypeTag.UNIT:
            return []
        if tag is TypeTag.BOOL:
            byte = self.take(1, path)[0]
            if byte > 1:
                raise DecodeError(f"{'/'.join(path) or '<root>'}: invalid bool byte {byte}")
            return byte == 1
        if tag is TypeTag.AMOUNT:
            return str(self.int(8, False, path))
        if tag is TypeTag.ACCOUNT_ADDRESS:
            return encode_account_address(self.take(ACCOUNT_ADDRESS_SIZE, path))
        if tag is TypeTag.CONTRACT_ADDRESS:
            return {"index": self.int(8, False, path), "subindex": self.int(8, False, path)}
        if tag is TypeTag.TIMESTAMP:
            millis = self.int(8, False, path)
            try:
                return millis_to_rfc3339(millis)
            except (OverflowError, ValueError) as exc:
                raise DecodeError(f"{'/'.join(path) or '<root>'}: timestamp {millis} out of range") from exc
        if tag is TypeTag.DURATION:
            return format_duration(self.int(8, False, path))
        raise DecodeError(f"Unsupported primitive {tag.name}")

    def fields(self, fields: Fields, path: Path) -> Any:
        if fields.kind is FieldsKind.NAMED:
            return {name: self.value(field_type, path + (name,)) for name, field_type in fields.items}
        if fields.kind is FieldsKind.UNNAMED:
            return [self.value(field_type, path + (str(i),)) for i, (_, field_type) in enumerate(fields.items)]
        return {}

    def sized(self, schema_type: SizedType, path: Path) -> Any:
        raw = self.take(self.int(schema_type.size_length.width, False, path), path)
        if schema_type.tag is TypeTag.BYTE_LIST:
            return raw.hex()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{'/'.join(path) or '<root>'}: invalid UTF-8") from exc
        if schema_type.tag is TypeTag.STRING:
            return text
        if schema_type.tag is TypeTag.CONTRACT_NAME:
            if not text.startswith("init_"):
                raise DecodeError(f"Invalid contract name {text!r}")
            return {"contract": text[len("init_"):]}
        contract, sep, func = text.partition(".")
        if not sep:
            raise DecodeError(f"Invalid receive name {text!r}")
        return {"contract": contract, "func": func}

    def leb(self, schema_type: LebType, path: Path) -> int:
        result = 0
        shift = 0
        for _ in range(schema_type.constraint):
            byte = self.take(1, path)[0]
            result |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                if schema_type.tag is TypeTag.ILEB128 and byte & 0x40:
                    result -= 1 << shift
                return result
        raise DecodeError(
            f"{'/'.join(path) or '<root>'}: LEB128 value exceeds {schema_type.constraint} bytes"
        )


def deserialize_value(data: bytes, schema_type: SchemaType) -> Any:
    """
    Deserialize bytes according to a schema type.

    Raises:
        DecodeError: On truncated input, unknown enum tags or trailing bytes
    """
    reader = _Reader(bytes(data))
    value = reader.value(schema_type, ())
    if reader.pos != len(reader.data):
        raise DecodeError(f"{len(reader.data) - reader.pos} trailing bytes after value")
    return value


__all__ = [
    "deserialize_value",
    "serialize_value",
    "encode_account_address",
    "decode_account_address",
    "parse_duration",
    "format_duration",
]
