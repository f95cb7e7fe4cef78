"""Type dispatcher: turn a declared type into one conversion rule.

:func:`classify` inspects an annotation once and returns a node of a small
tagged union. The encoder and decoder branch on the node instead of repeating
type tests. Precedence, highest first: custom codec, duration, bool, signed
int, unsigned int, float, str, optional, dynamic, sequence, mapping,
unsupported.
"""

from __future__ import annotations

import collections.abc
import inspect
import types
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from flagconv.codec import Codec, CodecRegistry, Direction, find_codec
from flagconv.types import Duration, FloatKind, IntKind


class Kind(str, Enum):
    CODEC = "codec"
    DURATION = "duration"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    POINTER = "pointer"
    DYNAMIC = "dynamic"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class CodecNode:
    kind: ClassVar[Kind] = Kind.CODEC
    tp: type
    codec: Codec[Any]


@dataclass(frozen=True)
class DurationNode:
    kind: ClassVar[Kind] = Kind.DURATION
    tp: type = Duration


@dataclass(frozen=True)
class BoolNode:
    kind: ClassVar[Kind] = Kind.BOOL


@dataclass(frozen=True)
class IntNode:
    int_kind: IntKind = IntKind()
    tp: type = int

    @property
    def kind(self) -> Kind:
        return Kind.INT if self.int_kind.signed else Kind.UINT


@dataclass(frozen=True)
class FloatNode:
    kind: ClassVar[Kind] = Kind.FLOAT
    float_kind: FloatKind = FloatKind()
    tp: type = float


@dataclass(frozen=True)
class StringNode:
    kind: ClassVar[Kind] = Kind.STRING
    tp: type = str


@dataclass(frozen=True)
class PointerNode:
    kind: ClassVar[Kind] = Kind.POINTER
    inner: Node


@dataclass(frozen=True)
class DynamicNode:
    kind: ClassVar[Kind] = Kind.DYNAMIC


@dataclass(frozen=True)
class SequenceNode:
    kind: ClassVar[Kind] = Kind.SEQUENCE
    element: Node
    container: type = list


@dataclass(frozen=True)
class MappingNode:
    kind: ClassVar[Kind] = Kind.MAPPING
    key: Node
    value: Node


@dataclass(frozen=True)
class UnsupportedNode:
    kind: ClassVar[Kind] = Kind.UNSUPPORTED
    type_name: str


Node = Union[
    CodecNode,
    DurationNode,
    BoolNode,
    IntNode,
    FloatNode,
    StringNode,
    PointerNode,
    DynamicNode,
    SequenceNode,
    MappingNode,
    UnsupportedNode,
]

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], args[1:]
    return annotation, ()


def type_name(annotation: Any) -> str:
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def _find_meta(metadata: tuple[Any, ...], marker: type) -> Any:
    for extra in metadata:
        if isinstance(extra, marker):
            return extra
    return None


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is getattr(types, "UnionType", None)


def classify(
    annotation: Any,
    registry: CodecRegistry | None = None,
    direction: Direction | None = None,
) -> Node:
    """Return the conversion rule for a declared type.

    ``direction`` selects which custom codec half counts: the encoder asks for
    ``Direction.MARSHAL`` and the decoder for ``Direction.UNMARSHAL``. Without it a
    type implementing either half classifies as a codec.
    """
    base, metadata = strip_annotated(annotation)
    return _classify(base, metadata, registry, direction)


def _classify(
    base: Any,
    metadata: tuple[Any, ...],
    registry: CodecRegistry | None,
    direction: Direction | None,
) -> Node:
    if base is Any or base is object or base is inspect.Parameter.empty:
        return DynamicNode()

    origin = get_origin(base)
    if _is_union(origin):
        args = get_args(base)
        present = [arg for arg in args if arg is not type(None)]
        if len(present) == 1 and len(args) == 2:
            inner, inner_meta = strip_annotated(present[0])
            return PointerNode(_classify(inner, metadata + inner_meta, registry, direction))
        return UnsupportedNode(type_name(base))

    tp = origin if origin is not None else base
    if not isinstance(tp, type):
        return UnsupportedNode(type_name(base))

    codec = find_codec(tp, registry, direction)
    if codec is not None:
        return CodecNode(tp, codec)
    if issubclass(tp, (Duration, timedelta)):
        return DurationNode(tp)
    if issubclass(tp, bool):
        return BoolNode()
    if issubclass(tp, int):
        return IntNode(_find_meta(metadata, IntKind) or IntKind(), tp)
    if issubclass(tp, float):
        return FloatNode(_find_meta(metadata, FloatKind) or FloatKind(), tp)
    if issubclass(tp, str):
        return StringNode(tp)

    args = get_args(base)
    if tp in _SEQUENCE_ORIGINS:
        if tp is tuple:
            # only homogeneous tuple[T, ...]
            if args and (len(args) != 2 or args[1] is not Ellipsis):
                return UnsupportedNode(type_name(base))
            return SequenceNode(classify(args[0], registry, direction) if args else DynamicNode(), tuple)
        return SequenceNode(classify(args[0], registry, direction) if args else DynamicNode(), list)
    if tp in _MAPPING_ORIGINS:
        if args:
            return MappingNode(classify(args[0], registry, direction), classify(args[1], registry, direction))
        return MappingNode(DynamicNode(), DynamicNode())

    return UnsupportedNode(type_name(base))


def classify_value(
    value: Any,
    registry: CodecRegistry | None = None,
    direction: Direction | None = None,
) -> Node:
    """Classify the concrete runtime type of a held value."""
    if value is None:
        return DynamicNode()
    return classify(type(value), registry, direction)
