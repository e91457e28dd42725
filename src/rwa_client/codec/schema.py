"""
Concordium type schema parser.

Contract build tooling emits a binary description of each parameter, return
and error type. This module turns those bytes into an immutable type tree
that :mod:`rwa_client.codec.values` walks to (de)serialize values.

Schema encoding summary:
- One tag byte per type (see ``TypeTag``), followed by the type's arguments
- Size lengths are one byte (``SizeLength``)
- Vectors and strings inside the schema carry a u32 little-endian length
"""

from __future__ import annotations

import binascii
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Union

from ..utils import base64_decode
from .errors import SchemaError


class TypeTag(IntEnum):
    UNIT = 0
    BOOL = 1
    U8 = 2
    U16 = 3
    U32 = 4
    U64 = 5
    I8 = 6
    I16 = 7
    I32 = 8
    I64 = 9
    AMOUNT = 10
    ACCOUNT_ADDRESS = 11
    CONTRACT_ADDRESS = 12
    TIMESTAMP = 13
    DURATION = 14
    PAIR = 15
    LIST = 16
    SET = 17
    MAP = 18
    ARRAY = 19
    STRUCT = 20
    ENUM = 21
    STRING = 22
    U128 = 23
    I128 = 24
    CONTRACT_NAME = 25
    RECEIVE_NAME = 26
    ULEB128 = 27
    ILEB128 = 28
    BYTE_LIST = 29
    BYTE_ARRAY = 30
    TAGGED_ENUM = 31


class SizeLength(IntEnum):
    U8 = 0
    U16 = 1
    U32 = 2
    U64 = 3

    @property
    def width(self) -> int:
        return 1 << self.value


class FieldsKind(IntEnum):
    NAMED = 0
    UNNAMED = 1
    NONE = 2


# (signed, byte width) for the fixed-size integer tags
INTEGER_TAGS: dict[TypeTag, tuple[bool, int]] = {
    TypeTag.U8: (False, 1),
    TypeTag.U16: (False, 2),
    TypeTag.U32: (False, 4),
    TypeTag.U64: (False, 8),
    TypeTag.U128: (False, 16),
    TypeTag.I8: (True, 1),
    TypeTag.I16: (True, 2),
    TypeTag.I32: (True, 4),
    TypeTag.I64: (True, 8),
    TypeTag.I128: (True, 16),
}

PRIMITIVE_TAGS = frozenset(
    {
        TypeTag.UNIT,
        TypeTag.BOOL,
        TypeTag.AMOUNT,
        TypeTag.ACCOUNT_ADDRESS,
        TypeTag.CONTRACT_ADDRESS,
        TypeTag.TIMESTAMP,
        TypeTag.DURATION,
        *INTEGER_TAGS,
    }
)


@dataclass(frozen=True)
class Primitive:
    tag: TypeTag


@dataclass(frozen=True)
class PairType:
    first: "SchemaType"
    second: "SchemaType"
    tag: TypeTag = TypeTag.PAIR


@dataclass(frozen=True)
class ListType:
    """List or Set (same wire form)."""

    size_length: SizeLength
    item: "SchemaType"
    tag: TypeTag = TypeTag.LIST


@dataclass(frozen=True)
class MapType:
    size_length: SizeLength
    key: "SchemaType"
    value: "SchemaType"
    tag: TypeTag = TypeTag.MAP


@dataclass(frozen=True)
class ArrayType:
    length: int
    item: "SchemaType"
    tag: TypeTag = TypeTag.ARRAY


@dataclass(frozen=True)
class Fields:
    kind: FieldsKind
    # (name, type) pairs; name is None for unnamed fields
    items: tuple[tuple[Optional[str], "SchemaType"], ...] = ()

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.items if name is not None]


@dataclass(frozen=True)
class StructType:
    fields: Fields
    tag: TypeTag = TypeTag.STRUCT


@dataclass(frozen=True)
class Variant:
    name: str
    fields: Fields
    index: int


@dataclass(frozen=True)
class EnumType:
    variants: tuple[Variant, ...]
    tag: TypeTag = TypeTag.ENUM

    def variant(self, name: str) -> Optional[Variant]:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None

    def by_index(self, index: int) -> Optional[Variant]:
        for variant in self.variants:
            if variant.index == index:
                return variant
        return None

    @property
    def tag_width(self) -> int:
        if self.tag is TypeTag.TAGGED_ENUM:
            return 1
        count = len(self.variants)
        if count <= 0x100:
            return 1
        if count <= 0x10000:
            return 2
        return 4


@dataclass(frozen=True)
class SizedType:
    """String, ContractName, ReceiveName and ByteList: length-prefixed bytes."""

    tag: TypeTag
    size_length: SizeLength


@dataclass(frozen=True)
class ByteArrayType:
    length: int
    tag: TypeTag = TypeTag.BYTE_ARRAY


@dataclass(frozen=True)
class LebType:
    tag: TypeTag
    # maximum number of encoded bytes
    constraint: int


SchemaType = Union[
    Primitive,
    PairType,
    ListType,
    MapType,
    ArrayType,
    StructType,
    EnumType,
    SizedType,
    ByteArrayType,
    LebType,
]


class _SchemaReader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise SchemaError(
                f"Schema truncated: needed {size} bytes at offset {self.pos}"
            )
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def string(self) -> str:
        raw = self.take(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SchemaError("Schema contains an invalid UTF-8 name") from exc

    def size_length(self) -> SizeLength:
        value = self.u8()
        try:
            return SizeLength(value)
        except ValueError as exc:
            raise SchemaError(f"Unknown size length {value}") from exc

    def fields(self) -> Fields:
        value = self.u8()
        if value == FieldsKind.NAMED:
            count = self.u32()
            return Fields(
                FieldsKind.NAMED,
                tuple((self.string(), self.type()) for _ in range(count)),
            )
        if value == FieldsKind.UNNAMED:
            count = self.u32()
            return Fields(
                FieldsKind.UNNAMED,
                tuple((None, self.type()) for _ in range(count)),
            )
        if value == FieldsKind.NONE:
            return Fields(FieldsKind.NONE)
        raise SchemaError(f"Unknown fields kind {value}")

    def type(self) -> SchemaType:
        value = self.u8()
        try:
            tag = TypeTag(value)
        except ValueError as exc:
            raise SchemaError(f"Unknown type tag {value} at offset {self.pos - 1}") from exc

        if tag in PRIMITIVE_TAGS:
            return Primitive(tag)
        if tag is TypeTag.PAIR:
            return PairType(self.type(), self.type())
        if tag in (TypeTag.LIST, TypeTag.SET):
            return ListType(self.size_length(), self.type(), tag=tag)
        if tag is TypeTag.MAP:
            return MapType(self.size_length(), self.type(), self.type())
        if tag is TypeTag.ARRAY:
            return ArrayType(self.u32(), self.type())
        if tag is TypeTag.STRUCT:
            return StructType(self.fields())
        if tag is TypeTag.ENUM:
            count = self.u32()
            return EnumType(
                tuple(Variant(self.string(), self.fields(), index) for index in range(count))
            )
        if tag is TypeTag.TAGGED_ENUM:
            count = self.u32()
            variants = []
            for _ in range(count):
                index = self.u8()
                variants.append(Variant(self.string(), self.fields(), index))
            return EnumType(tuple(variants), tag=TypeTag.TAGGED_ENUM)
        if tag in (TypeTag.STRING, TypeTag.CONTRACT_NAME, TypeTag.RECEIVE_NAME, TypeTag.BYTE_LIST):
            return SizedType(tag, self.size_length())
        if tag is TypeTag.BYTE_ARRAY:
            return ByteArrayType(self.u32())
        # ULEB128 / ILEB128
        return LebType(tag, self.u32())


def parse_schema_type(data: bytes) -> SchemaType:
    """
    Parse a binary type schema.

    Args:
        data: Raw schema bytes

    Returns:
        Root of the type tree

    Raises:
        SchemaError: If the bytes are truncated, contain unknown tags,
            are nested too deeply or have trailing data
    """
    reader = _SchemaReader(bytes(data))
    try:
        schema_type = reader.type()
    except RecursionError as exc:
        raise SchemaError("Schema is nested too deeply") from exc
    if reader.pos != len(reader.data):
        raise SchemaError(
            f"Schema has {len(reader.data) - reader.pos} trailing bytes"
        )
    return schema_type


def parse_schema_base64(value: str) -> SchemaType:
    """Parse a base64 encoded type schema as emitted by contract builds."""
    try:
        data = base64_decode(value)
    except (binascii.Error, ValueError) as exc:
        raise SchemaError("Schema is not valid base64") from exc
    return parse_schema_type(data)


def _fields_to_json(fields: Fields) -> Any:
    if fields.kind is FieldsKind.NAMED:
        return {name: schema_to_json(field) for name, field in fields.items}
    if fields.kind is FieldsKind.UNNAMED:
        return [schema_to_json(field) for _, field in fields.items]
    return []


def schema_to_json(schema_type: SchemaType) -> Any:
    """Render a type tree as a JSON-friendly template, e.g. for the CLI."""
    if isinstance(schema_type, Primitive):
        return schema_type.tag.name
    if isinstance(schema_type, PairType):
        return [schema_to_json(schema_type.first), schema_to_json(schema_type.second)]
    if isinstance(schema_type, ListType):
        return {schema_type.tag.name: schema_to_json(schema_type.item)}
    if isinstance(schema_type, MapType):
        return {"MAP": [schema_to_json(schema_type.key), schema_to_json(schema_type.value)]}
    if isinstance(schema_type, ArrayType):
        return {f"ARRAY[{schema_type.length}]": schema_to_json(schema_type.item)}
    if isinstance(schema_type, StructType):
        return _fields_to_json(schema_type.fields)
    if isinstance(schema_type, EnumType):
        return {"ENUM": [{v.name: _fields_to_json(v.fields)} for v in schema_type.variants]}
    if isinstance(schema_type, ByteArrayType):
        return f"BYTE_ARRAY[{schema_type.length}]"
    return schema_type.tag.name
