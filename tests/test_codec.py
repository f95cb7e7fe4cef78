"""Tests for custom text codecs and their precedence over structural rules."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

import pytest

from flagconv import Cell, Duration, MarshalError, decode, decode_value, encode, encode_value
from flagconv.codec import CodecRegistry, Direction, TextMarshaler, find_codec, has_text_methods
from flagconv.dispatch import Kind, classify
from tests.support import Number, Point


class PointCodec:
    def to_text(self, value: Point) -> str:
        return f"{value.x}x{value.y}"

    def from_text(self, text: str) -> Point:
        x, y = text.split("x")
        return Point(int(x), int(y))


class Timeout(Duration):
    """A duration with named values."""

    def marshal_text(self) -> str:
        return "forever" if self < 0 else str(Duration(self))

    @classmethod
    def unmarshal_text(cls, text: str) -> Timeout:
        if text == "forever":
            return cls(-1)
        return cls(Duration.parse(text))


class ParseOnly(IntEnum):
    A = 1
    B = 2

    @classmethod
    def unmarshal_text(cls, text: str) -> ParseOnly:
        return cls[text.upper()]


class FormatOnly(IntEnum):
    A = 1
    B = 2

    def marshal_text(self) -> str:
        return self.name.lower()


class Broken:
    def marshal_text(self) -> str:
        raise ValueError("no text for you")

    @classmethod
    def unmarshal_text(cls, text: str) -> Broken:
        raise TypeError(f"cannot build from {text}")


def test_codec_vocabulary_is_used() -> None:
    cell = Cell(Number, Number.ONE)
    decode("three", cell)
    assert cell.value is Number.THREE
    assert encode(cell) == "three"


def test_codec_rejects_numeric_text() -> None:
    with pytest.raises(MarshalError) as exc_info:
        decode_value("2", Number)
    assert exc_info.value.message == "invalid value '2'"


def test_codec_error_propagates_unchanged() -> None:
    original = MarshalError("boom", code="E1999")

    class Raising:
        @classmethod
        def unmarshal_text(cls, text: str) -> Raising:
            raise original

    with pytest.raises(MarshalError) as exc_info:
        decode_value("x", Raising)
    assert exc_info.value is original


def test_codec_python_errors_are_wrapped() -> None:
    with pytest.raises(MarshalError) as exc_info:
        encode_value(Broken(), Broken)
    assert exc_info.value.code == "E1005"
    assert exc_info.value.message.endswith("no text for you")
    assert isinstance(exc_info.value.__cause__, ValueError)

    with pytest.raises(MarshalError, match="cannot build from x"):
        decode_value("x", Broken)


def test_codec_beats_duration() -> None:
    assert classify(Timeout).kind is Kind.CODEC
    assert encode_value(Timeout(-1), Timeout) == "forever"
    assert encode_value(Timeout(90 * 10**9), Timeout) == "1m30s"
    assert decode_value("forever", Timeout) == -1


def test_registry_codec(registry: CodecRegistry) -> None:
    registry.register(Point, PointCodec())

    assert encode_value(Point(3, 4), Point, registry=registry) == "3x4"
    assert decode_value("5x6", Point, registry=registry) == Point(5, 6)
    assert encode_value([Point(1, 2)], list[Point], registry=registry) == "[1x2]"
    assert decode_value("[1x2, 3x4]", list[Point], registry=registry) == [Point(1, 2), Point(3, 4)]


def test_registry_lookup_follows_mro(registry: CodecRegistry) -> None:
    class SubPoint(Point):
        pass

    registry.register(Point, PointCodec())
    assert encode_value(SubPoint(1, 1), SubPoint, registry=registry) == "1x1"


def test_registry_entry_beats_own_methods(registry: CodecRegistry) -> None:
    class Shout:
        def to_text(self, value: Number) -> str:
            return value.name

        def from_text(self, text: str) -> Number:
            return Number[text]

    registry.register(Number, Shout())
    assert encode_value(Number.TWO, Number, registry=registry) == "TWO"
    registry.unregister(Number)
    assert encode_value(Number.TWO, Number, registry=registry) == "two"


def test_registry_codec_failure_is_wrapped(registry: CodecRegistry) -> None:
    registry.register(Point, PointCodec())
    with pytest.raises(MarshalError) as exc_info:
        decode_value("5", Point, registry=registry)
    assert exc_info.value.code == "E1005"


def test_find_codec_without_capability() -> None:
    assert find_codec(int) is None
    assert find_codec(Point) is None


def test_protocol_runtime_check() -> None:
    assert isinstance(Number.ONE, TextMarshaler)
    assert not isinstance(Point(0, 0), TextMarshaler)


def test_unmarshal_only_type_encodes_structurally() -> None:
    assert classify(ParseOnly, direction=Direction.MARSHAL).kind is Kind.INT
    assert classify(ParseOnly, direction=Direction.UNMARSHAL).kind is Kind.CODEC
    assert encode_value(ParseOnly.B, ParseOnly) == "2"
    assert encode_value(ParseOnly.B, Any) == "2"
    assert decode_value("b", ParseOnly) is ParseOnly.B


def test_marshal_only_type_decodes_structurally() -> None:
    assert encode_value(FormatOnly.B, FormatOnly) == "b"
    assert encode_value(FormatOnly.B, int) == "b"
    assert decode_value("2", FormatOnly) is FormatOnly.B
    assert decode_value("[1, 2]", list[FormatOnly]) == [FormatOnly.A, FormatOnly.B]

    cell = Cell(Any, FormatOnly.A)
    decode("2", cell)
    assert cell.value is FormatOnly.B


def test_text_methods_by_direction() -> None:
    assert has_text_methods(ParseOnly)
    assert not has_text_methods(ParseOnly, Direction.MARSHAL)
    assert has_text_methods(FormatOnly, Direction.MARSHAL)
    assert find_codec(FormatOnly, direction=Direction.UNMARSHAL) is None
