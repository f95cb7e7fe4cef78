"""Encoder: stored value -> canonical text."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from flagconv.codec import Codec, CodecRegistry, Direction, call_codec, find_codec
from flagconv.dispatch import (
    BoolNode,
    CodecNode,
    DurationNode,
    DynamicNode,
    FloatNode,
    IntNode,
    MappingNode,
    Node,
    PointerNode,
    SequenceNode,
    StringNode,
    UnsupportedNode,
    classify,
    classify_value,
)
from flagconv.duration import format_duration, timedelta_nanos
from flagconv.errors import MarshalError, element_error, unsupported_type
from flagconv.numeric import format_float, format_int
from flagconv.tag import TagConfig, as_tag_config

if TYPE_CHECKING:
    from flagconv.config import FlagconvConfig
    from flagconv.storage import Ref

_MAX_NANOS = (1 << 63) - 1


def _mismatch(value: Any, node: Node) -> MarshalError:
    return MarshalError(
        f"cannot encode {type(value).__name__} value as {node.kind.value}",
        code="E1004",
        details={"type": type(value).__name__, "kind": node.kind.value},
    )


class Encoder:
    """Walks a dispatch node and the value stored under it."""

    def __init__(self, tags: TagConfig, registry: CodecRegistry | None = None) -> None:
        self.tags = tags
        self.registry = registry

    def encode(self, node: Node, value: Any) -> str:
        if value is None:
            return ""

        if not isinstance(node, CodecNode):
            # the held value may carry a codec its declared type does not
            codec = find_codec(type(value), self.registry, Direction.MARSHAL)
            if codec is not None:
                return self._codec(codec, value)

        if isinstance(node, CodecNode):
            return self._codec(node.codec, value)
        if isinstance(node, DurationNode):
            return self._duration(node, value)
        if isinstance(node, BoolNode):
            if not isinstance(value, bool):
                raise _mismatch(value, node)
            return "true" if value else "false"
        if isinstance(node, IntNode):
            if isinstance(value, bool) or not isinstance(value, int):
                raise _mismatch(value, node)
            return format_int(int(value), self.tags.base(), node.int_kind)
        if isinstance(node, FloatNode):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise _mismatch(value, node)
            return format_float(float(value), node.float_kind)
        if isinstance(node, StringNode):
            if not isinstance(value, str):
                raise _mismatch(value, node)
            return str.__str__(value)
        if isinstance(node, PointerNode):
            return self.encode(node.inner, value)
        if isinstance(node, DynamicNode):
            return self.encode(classify_value(value, self.registry, Direction.MARSHAL), value)
        if isinstance(node, SequenceNode):
            return self._sequence(node, value)
        if isinstance(node, MappingNode):
            return self._mapping(node, value)
        if isinstance(node, UnsupportedNode):
            raise unsupported_type(node.type_name)
        raise AssertionError(f"unhandled dispatch node {node!r}")

    def _codec(self, codec: Codec[Any], value: Any) -> str:
        text = call_codec(f"cannot marshal {type(value).__name__}", codec.to_text, value)
        if isinstance(text, bytes):
            return text.decode("utf-8")
        return str(text)

    def _duration(self, node: DurationNode, value: Any) -> str:
        if isinstance(value, timedelta):
            nanos = timedelta_nanos(value)
        elif isinstance(value, int) and not isinstance(value, bool):
            nanos = int(value)
        else:
            raise _mismatch(value, node)
        if not -_MAX_NANOS - 1 <= nanos <= _MAX_NANOS:
            raise MarshalError(f"duration {value!r} out of range", code="E1002")
        return format_duration(nanos)

    def _sequence(self, node: SequenceNode, value: Any) -> str:
        if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
            raise _mismatch(value, node)
        parts = []
        for index, item in enumerate(value):
            try:
                parts.append(self.encode(node.element, item))
            except MarshalError as exc:
                raise element_error(exc, position=f"element {index}") from exc
        separator = self.tags.element_delimiter() + " "
        return "[" + separator.join(parts) + "]"

    def _mapping(self, node: MappingNode, value: Any) -> str:
        if not isinstance(value, Mapping):
            raise _mismatch(value, node)
        entries = []
        for key, item in value.items():
            try:
                key_text = self.encode(node.key, key)
                item_text = self.encode(node.value, item)
            except MarshalError as exc:
                raise element_error(exc, position=f"entry {key!r}") from exc
            entries.append((key, key_text, item_text))
        try:
            entries.sort(key=lambda entry: entry[0])
        except TypeError:
            entries.sort(key=lambda entry: entry[1])

        delimiter = self.tags.key_value_delimiter()
        separator = self.tags.element_delimiter() + " "
        return "{" + separator.join(f"{k}{delimiter}{v}" for _, k, v in entries) + "}"


def encode_value(
    value: Any,
    annotation: Any = None,
    tag: Mapping[str, str] | TagConfig | None = None,
    *,
    registry: CodecRegistry | None = None,
    config: FlagconvConfig | None = None,
) -> str:
    """Encode ``value`` declared as ``annotation`` (runtime type when omitted)."""
    node = classify(annotation, registry, Direction.MARSHAL) if annotation is not None else DynamicNode()
    return Encoder(as_tag_config(tag, config), registry).encode(node, value)


def encode(
    ref: Ref[Any],
    tag: Mapping[str, str] | TagConfig | None = None,
    *,
    registry: CodecRegistry | None = None,
    config: FlagconvConfig | None = None,
) -> str:
    """Encode the value held by ``ref``; never modifies it."""
    return encode_value(ref.get(), ref.annotation, tag, registry=registry, config=config)
