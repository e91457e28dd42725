from __future__ import annotations


class CodecError(ValueError):
    pass


class EncodingError(CodecError):
    """A value cannot be represented in the requested wire form."""


class InvalidAmount(CodecError):
    """An amount or rate is not a valid non-negative integer literal."""


class SchemaError(CodecError):
    """Schema bytes are not a well-formed type schema."""


class SchemaMissing(CodecError):
    """A value was supplied for a method that has no schema for it."""


class SerializationError(CodecError):
    def __init__(self, message: str, path: tuple[str, ...] = ()) -> None:
        location = "/".join(path) or "<root>"
        super().__init__(f"{location}: {message}")
        self.path = path


class DecodeError(CodecError):
    """Bytes do not match the schema they are decoded against."""
