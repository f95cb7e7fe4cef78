"""Tests for the decoder: argument text written into typed storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Sequence

import pytest

from flagconv import (
    Cell,
    Duration,
    Float32,
    Int8,
    Int32,
    MarshalError,
    Tag,
    Uint,
    Uint8,
    decode,
    decode_value,
    encode_value,
    flag,
    options_from,
)
from flagconv.numeric import to_float32
from tests.support import Color, Level, Number, Point


@dataclass
class MapOptions:
    string_string_map: dict[str, str] = flag(default_factory=dict, key_value_delimiter="=")


def test_convert_to_map_with_delimiter() -> None:
    opts = MapOptions()
    (option,) = options_from(opts)

    option.set("key=value")

    assert opts.string_string_map["key"] == "value"


def test_sequence_round_trip() -> None:
    cell = Cell(list[int], [])
    decode("[-3, 4, -2]", cell)
    assert cell.value == [-3, 4, -2]
    assert encode_value(cell.value, list[int]) == "[-3, 4, -2]"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1,2,3", [1, 2, 3]),
        ("7", [7]),
        ("", []),
        ("[]", []),
    ],
)
def test_sequence_forms(text: str, expected: list[int]) -> None:
    assert decode_value(text, list[int]) == expected


def test_sequence_replaces_previous_contents() -> None:
    cell = Cell(list[int], [9, 9])
    decode("1,2", cell)
    assert cell.value == [1, 2]


def test_sequence_containers() -> None:
    assert decode_value("[1, 2]", tuple[int, ...]) == (1, 2)
    assert decode_value("[1, 2]", Sequence[int]) == [1, 2]
    assert decode_value("a,b", list) == ["a", "b"]


def test_string_elements_keep_inner_spaces() -> None:
    value = [" a", "b "]
    text = encode_value(value, list[str])
    assert text == "[ a, b ]"
    assert decode_value(text, list[str]) == value


def test_sequence_with_custom_element_delimiter() -> None:
    assert decode_value("[1; 2]", list[int], Tag(element_delimiter=";")) == [1, 2]


def test_sequence_element_failure_is_atomic() -> None:
    cell = Cell(list[int], [9])
    with pytest.raises(MarshalError) as exc_info:
        decode("[1, x]", cell)
    assert exc_info.value.code == "E1006"
    assert exc_info.value.message == "element 1: invalid int64 literal 'x'"
    assert cell.value == [9]


def test_mapping_round_trip() -> None:
    assert decode_value("{-2:4.5}", dict[int, float]) == {-2: 4.5}


def test_mapping_merges_into_existing() -> None:
    existing = {"a": "1"}
    cell = Cell(dict[str, str], existing)
    decode("b:2", cell)
    assert cell.value is existing
    assert existing == {"a": "1", "b": "2"}


def test_mapping_later_duplicates_win() -> None:
    assert decode_value("a:1,a:2", dict[str, int]) == {"a": 2}


def test_mapping_entry_without_delimiter_has_empty_value() -> None:
    assert decode_value("flag", dict[str, str]) == {"flag": ""}


def test_mapping_splits_on_first_delimiter() -> None:
    assert decode_value("url:http://x", dict[str, str]) == {"url": "http://x"}


def test_mapping_failure_is_atomic() -> None:
    existing = {"x": 1}
    cell = Cell(dict[str, int], existing)
    with pytest.raises(MarshalError) as exc_info:
        decode("y:1,z:bad", cell)
    assert exc_info.value.code == "E1006"
    assert "entry 'z'" in exc_info.value.message
    assert existing == {"x": 1}


def test_mapping_key_uses_base() -> None:
    assert decode_value("ff:1", dict[int, int], Tag(base="16")) == {255: 1}


@pytest.mark.parametrize(
    ("text", "expected"),
    [("", True), ("1", True), ("t", True), ("TRUE", True), ("True", True), ("0", False), ("F", False), ("false", False)],
)
def test_bool_literals(text: str, expected: bool) -> None:
    assert decode_value(text, bool) is expected


def test_bool_rejects_other_words() -> None:
    with pytest.raises(MarshalError, match="invalid boolean literal 'yes'"):
        decode_value("yes", bool)


@pytest.mark.parametrize(
    ("text", "annotation", "base", "expected"),
    [
        ("42", int, None, 42),
        ("+5", int, None, 5),
        ("-128", Int8, None, -128),
        ("ff", int, "16", 255),
        ("FF", int, "16", 255),
        ("-16bf", Int32, "16", -5823),
        ("1088", Uint, "16", 4232),
        ("101", Uint8, "2", 5),
        ("z", int, "36", 35),
        ("0x1f", int, "0", 31),
        ("0o17", int, "0", 15),
        ("017", int, "0", 15),
        ("0b101", int, "0", 5),
        ("1_000", int, "0", 1000),
        ("-0x10", int, "0", -16),
    ],
)
def test_integer_literals(text: str, annotation: Any, base: str | None, expected: int) -> None:
    assert decode_value(text, annotation, Tag(base=base)) == expected


@pytest.mark.parametrize(
    ("text", "annotation", "base", "code"),
    [
        ("", int, None, "E1001"),
        (" 5", int, None, "E1001"),
        ("1_000", int, None, "E1001"),
        ("0x10", int, "16", "E1001"),
        ("08", int, "0", "E1001"),
        ("2", Uint8, "2", "E1001"),
        ("-1", Uint, None, "E1001"),
        ("+1", Uint, None, "E1001"),
        ("128", Int8, None, "E1002"),
        ("256", Uint8, None, "E1002"),
        ("9223372036854775808", int, None, "E1002"),
    ],
)
def test_integer_failures(text: str, annotation: Any, base: str | None, code: str) -> None:
    with pytest.raises(MarshalError) as exc_info:
        decode_value(text, annotation, Tag(base=base))
    assert exc_info.value.code == code


@pytest.mark.parametrize("annotation", [int, Uint])
def test_invalid_base_fails_decode(annotation: Any) -> None:
    with pytest.raises(MarshalError) as exc_info:
        decode_value("2", annotation, Tag(base="no"))
    assert exc_info.value.code == "E1003"
    assert "'no'" in exc_info.value.message


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1.5", 1.5),
        ("-3.4", -3.4),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e+06", 1e6),
        ("2E-3", 2e-3),
        ("0x1p-2", 0.25),
        ("-Inf", float("-inf")),
        ("infinity", float("inf")),
    ],
)
def test_float_literals(text: str, expected: float) -> None:
    assert decode_value(text, float) == expected


def test_float_nan() -> None:
    value = decode_value("NaN", float)
    assert value != value


@pytest.mark.parametrize(("text", "code"), [("", "E1001"), (" 1", "E1001"), ("1_0", "E1001"), ("abc", "E1001"), ("1e400", "E1002")])
def test_float_failures(text: str, code: str) -> None:
    with pytest.raises(MarshalError) as exc_info:
        decode_value(text, float)
    assert exc_info.value.code == code


def test_float32_rounds_and_overflows() -> None:
    assert decode_value("5.2", Float32) == to_float32(5.2)
    with pytest.raises(MarshalError) as exc_info:
        decode_value("1e39", Float32)
    assert exc_info.value.code == "E1002"


def test_durations() -> None:
    assert decode_value("1h2m4s", Duration) == Duration(3724 * 10**9)
    assert isinstance(decode_value("1s", Duration), Duration)
    assert decode_value("1h30m", timedelta) == timedelta(hours=1, minutes=30)
    assert decode_value("-1.5us", timedelta) == timedelta(microseconds=-1)


def test_duration_failure() -> None:
    with pytest.raises(MarshalError, match="missing unit"):
        decode_value("10", Duration)


def test_pointer_allocates_fresh_pointee() -> None:
    cell = Cell(Optional[int], None)
    decode("5", cell)
    assert cell.value == 5

    mapping = Cell(Optional[dict[str, str]], None)
    decode("a:b", mapping)
    assert mapping.value == {"a": "b"}


def test_dynamic_holder_uses_held_type() -> None:
    cell = Cell(Any, 1.5)
    decode("2.5", cell)
    assert cell.value == 2.5

    flag_cell = Cell(Any, True)
    decode("false", flag_cell)
    assert flag_cell.value is False

    enum_cell = Cell(Any, Number.ONE)
    decode("three", enum_cell)
    assert enum_cell.value is Number.THREE


def test_empty_dynamic_holder_stores_text() -> None:
    cell = Cell(Any, None)
    decode("raw", cell)
    assert cell.value == "raw"


def test_subclass_construction() -> None:
    assert decode_value("2", Level) is Level.HIGH
    assert decode_value("red", Color) is Color.RED
    with pytest.raises(MarshalError, match="Level"):
        decode_value("7", Level)
    with pytest.raises(MarshalError):
        decode_value("blue", Color)


def test_unsupported_kind_fails() -> None:
    with pytest.raises(MarshalError) as exc_info:
        decode_value("1,2", Point)
    assert exc_info.value.code == "E1004"
    assert "Point" in exc_info.value.message


def test_non_optional_union_is_unsupported() -> None:
    with pytest.raises(MarshalError, match="unsupported type"):
        decode_value("1", int | str)


def test_round_trip_primitives() -> None:
    cases: list[tuple[Any, Any]] = [
        ("text", str),
        (True, bool),
        (-(2**63), int),
        (2**64 - 1, Uint),
        (-5823, Int32),
        (0.1, float),
        (1.0e-320, float),
        (to_float32(0.3), Float32),
        (Duration(-1234567890123), Duration),
        (Number.TWO, Number),
    ]
    for tag in (Tag(), Tag(base="16"), Tag(base="36")):
        for value, annotation in cases:
            text = encode_value(value, annotation, tag)
            assert decode_value(text, annotation, tag) == value, (value, text)


def test_single_empty_element_is_not_preserved() -> None:
    # "[]" is shared by the empty list and a list holding one empty string
    assert encode_value([""], list[str]) == "[]"
    assert decode_value("[]", list[str]) == []
    assert decode_value("[, ]", list[str]) == ["", ""]
