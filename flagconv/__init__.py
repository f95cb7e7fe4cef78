"""flagconv: value/text conversion for command-line option binding."""

from __future__ import annotations

from flagconv.codec import CodecRegistry, Direction, TextMarshaler, TextUnmarshaler, default_registry
from flagconv.config import FlagconvConfig
from flagconv.decode import decode, decode_value
from flagconv.dispatch import Kind, classify
from flagconv.encode import encode, encode_value
from flagconv.errors import ConversionError, MarshalError
from flagconv.options import Option, flag, options_from
from flagconv.storage import AttrRef, Cell, Ref
from flagconv.tag import Tag, TagConfig
from flagconv.types import (
    Duration,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
)

__version__ = "1.0.0"
__all__ = [
    "AttrRef",
    "Cell",
    "CodecRegistry",
    "ConversionError",
    "Direction",
    "Duration",
    "FlagconvConfig",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "MarshalError",
    "Option",
    "Ref",
    "Tag",
    "TagConfig",
    "TextMarshaler",
    "TextUnmarshaler",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "classify",
    "decode",
    "decode_value",
    "default_registry",
    "encode",
    "encode_value",
    "flag",
    "options_from",
]
