"""
Conversion between form-friendly values and contract JSON values.

Forms cannot express single-key enum objects, so UI values carry the
selected variant in a ``tag`` key: ``{"tag": "Account", "Account": [...]}``.
Contract JSON drops the tag: ``{"Account": [...]}``. Both directions walk the
schema so nested enums are converted too.
"""

from __future__ import annotations

from typing import Any

from .errors import SerializationError
from .schema import (
    ArrayType,
    EnumType,
    Fields,
    FieldsKind,
    LebType,
    ListType,
    MapType,
    PairType,
    Primitive,
    SchemaType,
    StructType,
    TypeTag,
)

_NUMBER_TAGS = frozenset(
    {
        TypeTag.U8,
        TypeTag.U16,
        TypeTag.U32,
        TypeTag.U64,
        TypeTag.I8,
        TypeTag.I16,
        TypeTag.I32,
        TypeTag.I64,
        TypeTag.U128,
        TypeTag.I128,
    }
)


def _fields_to_contract(value: Any, fields: Fields) -> Any:
    if fields.kind is FieldsKind.NONE:
        return {}
    if fields.kind is FieldsKind.NAMED:
        return {name: to_contract_json((value or {}).get(name), field) for name, field in fields.items}
    return [to_contract_json(item, field) for item, (_, field) in zip(value or [], fields.items)]


def to_contract_json(value: Any, schema_type: SchemaType) -> Any:
    """Convert a UI value (tagged enums) into contract JSON."""
    if isinstance(schema_type, StructType):
        return _fields_to_contract(value, schema_type.fields)
    if isinstance(schema_type, EnumType):
        if not isinstance(value, dict) or "tag" not in value:
            raise SerializationError("Expected a tagged enum value with a 'tag' key")
        variant = schema_type.variant(value["tag"])
        if variant is None:
            raise SerializationError(f"Unknown enum variant {value['tag']!r}")
        return {variant.name: _fields_to_contract(value.get(variant.name), variant.fields)}
    if isinstance(schema_type, PairType):
        return [to_contract_json(value[0], schema_type.first), to_contract_json(value[1], schema_type.second)]
    if isinstance(schema_type, (ListType, ArrayType)):
        return [to_contract_json(item, schema_type.item) for item in value]
    if isinstance(schema_type, MapType):
        return [[to_contract_json(k, schema_type.key), to_contract_json(v, schema_type.value)] for k, v in value]
    return value


def _fields_to_ui(value: Any, fields: Fields) -> Any:
    if fields.kind is FieldsKind.NONE:
        return None
    if fields.kind is FieldsKind.NAMED:
        return {name: to_ui_json(value[name], field) for name, field in fields.items}
    return [to_ui_json(item, field) for item, (_, field) in zip(value, fields.items)]


def to_ui_json(value: Any, schema_type: SchemaType) -> Any:
    """Convert contract JSON into a UI value (tagged enums, plain numbers)."""
    if isinstance(schema_type, Primitive):
        if schema_type.tag in _NUMBER_TAGS:
            return int(value)
        if schema_type.tag is TypeTag.CONTRACT_ADDRESS:
            return {"index": int(value["index"]), "subindex": int(value["subindex"])}
        return value
    if isinstance(schema_type, LebType):
        return str(value)
    if isinstance(schema_type, StructType):
        return _fields_to_ui(value, schema_type.fields)
    if isinstance(schema_type, EnumType):
        for variant in schema_type.variants:
            if variant.name in value:
                return {"tag": variant.name, variant.name: _fields_to_ui(value[variant.name], variant.fields)}
        raise SerializationError(f"No variant of {[v.name for v in schema_type.variants]} found in {value!r}")
    if isinstance(schema_type, PairType):
        return [to_ui_json(value[0], schema_type.first), to_ui_json(value[1], schema_type.second)]
    if isinstance(schema_type, (ListType, ArrayType)):
        return [to_ui_json(item, schema_type.item) for item in value]
    if isinstance(schema_type, MapType):
        return [[to_ui_json(k, schema_type.key), to_ui_json(v, schema_type.value)] for k, v in value]
    return value
