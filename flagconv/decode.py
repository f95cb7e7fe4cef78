"""Decoder: argument text -> stored value.

Composite values are built in a temporary and only published once every
element converted, so a failed decode leaves the storage as it was.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from flagconv.codec import CodecRegistry, Direction, call_codec
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
from flagconv.duration import nanos_timedelta, parse_duration
from flagconv.errors import MarshalError, element_error, unsupported_type
from flagconv.numeric import parse_float, parse_int
from flagconv.tag import TagConfig, as_tag_config

if TYPE_CHECKING:
    from flagconv.config import FlagconvConfig
    from flagconv.storage import Ref

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def split_elements(text: str, opening: str, closing: str, delimiter: str) -> list[str]:
    """Split a sequence or mapping literal into its element texts.

    ``[a, b]`` and ``a,b`` both give ``["a", "b"]``: inside the bracketed
    form the single space written after each delimiter is dropped.
    """
    bracketed = len(text) >= 2 and text[0] == opening and text[-1] == closing
    if bracketed:
        text = text[1:-1]
    if not text:
        return []
    pieces = text.split(delimiter)
    if bracketed:
        pieces = pieces[:1] + [piece[1:] if piece.startswith(" ") else piece for piece in pieces[1:]]
    return pieces


def _construct(tp: type, value: Any, text: str) -> Any:
    if type(value) is tp:
        return value
    try:
        return tp(value)
    except (ValueError, TypeError) as exc:
        raise MarshalError(
            f"invalid value {text!r} for {tp.__name__}: {exc}",
            code="E1001",
            details={"value": text, "type": tp.__name__},
        ) from exc


class Decoder:
    """Converts text according to a dispatch node."""

    def __init__(self, tags: TagConfig, registry: CodecRegistry | None = None) -> None:
        self.tags = tags
        self.registry = registry

    def decode(self, node: Node, text: str, current: Any = None) -> Any:
        if isinstance(node, CodecNode):
            return call_codec(f"cannot unmarshal {text!r} into {node.tp.__name__}", node.codec.from_text, text)
        if isinstance(node, DurationNode):
            nanos = parse_duration(text)
            if issubclass(node.tp, timedelta):
                return nanos_timedelta(nanos)
            return node.tp(nanos)
        if isinstance(node, BoolNode):
            return self._bool(text)
        if isinstance(node, IntNode):
            value = parse_int(text, self.tags.base(), node.int_kind)
            return _construct(node.tp, value, text)
        if isinstance(node, FloatNode):
            return _construct(node.tp, parse_float(text, node.float_kind), text)
        if isinstance(node, StringNode):
            return _construct(node.tp, text, text)
        if isinstance(node, PointerNode):
            return self.decode(node.inner, text, current)
        if isinstance(node, DynamicNode):
            if current is None:
                return text
            return self.decode(classify_value(current, self.registry, Direction.UNMARSHAL), text, current)
        if isinstance(node, SequenceNode):
            return self._sequence(node, text)
        if isinstance(node, MappingNode):
            return self._mapping(node, text, current)
        if isinstance(node, UnsupportedNode):
            raise unsupported_type(node.type_name)
        raise AssertionError(f"unhandled dispatch node {node!r}")

    def _bool(self, text: str) -> bool:
        # a bare flag carries no argument text
        if text == "" or text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise MarshalError(f"invalid boolean literal {text!r}", code="E1001", details={"value": text})

    def _sequence(self, node: SequenceNode, text: str) -> Any:
        items = []
        pieces = split_elements(text, "[", "]", self.tags.element_delimiter())
        for index, piece in enumerate(pieces):
            try:
                items.append(self.decode(node.element, piece))
            except MarshalError as exc:
                raise element_error(exc, position=f"element {index}") from exc
        return node.container(items)

    def _mapping(self, node: MappingNode, text: str, current: Any) -> Any:
        delimiter = self.tags.key_value_delimiter()
        entries: dict[Any, Any] = {}
        for piece in split_elements(text, "{", "}", self.tags.element_delimiter()):
            key_text, _, value_text = piece.partition(delimiter)
            try:
                key = self.decode(node.key, key_text)
                value = self.decode(node.value, value_text)
            except MarshalError as exc:
                raise element_error(exc, position=f"entry {key_text!r}") from exc
            try:
                entries[key] = value
            except TypeError as exc:
                raise MarshalError(
                    f"unhashable mapping key {key_text!r}", code="E1004", details={"key": key_text}
                ) from exc
        if isinstance(current, MutableMapping):
            current.update(entries)
            return current
        if isinstance(current, Mapping):
            return {**current, **entries}
        return entries


def decode_value(
    text: str,
    annotation: Any,
    tag: Mapping[str, str] | TagConfig | None = None,
    *,
    current: Any = None,
    registry: CodecRegistry | None = None,
    config: FlagconvConfig | None = None,
) -> Any:
    """Convert ``text`` to a value of ``annotation`` and return it.

    ``current`` is the value presently stored; mappings merge into it and a
    dynamically typed holder takes its type from it.
    """
    node = classify(annotation, registry, Direction.UNMARSHAL) if annotation is not None else DynamicNode()
    return Decoder(as_tag_config(tag, config), registry).decode(node, text, current)


def decode(
    text: str,
    ref: Ref[Any],
    tag: Mapping[str, str] | TagConfig | None = None,
    *,
    registry: CodecRegistry | None = None,
    config: FlagconvConfig | None = None,
) -> None:
    """Decode ``text`` into the storage behind ``ref``."""
    value = decode_value(text, ref.annotation, tag, current=ref.get(), registry=registry, config=config)
    ref.set(value)
