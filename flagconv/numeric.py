"""Numeral parsing and formatting for integer and floating point kinds."""

from __future__ import annotations

import math
import re
import struct

from flagconv.errors import MarshalError
from flagconv.types import FloatKind, IntKind

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_DECIMAL_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)
_HEX_FLOAT = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+", re.ASCII)
_SPECIAL_FLOAT = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE | re.ASCII)
_PREFIXED_INT = re.compile(
    r"0[xX]_?[0-9a-fA-F]+(?:_[0-9a-fA-F]+)*"
    r"|0[bB]_?[01]+(?:_[01]+)*"
    r"|0[oO]_?[0-7]+(?:_[0-7]+)*"
    r"|0_?[0-7]+(?:_[0-7]+)*"
    r"|[1-9][0-9]*(?:_[0-9]+)*|0",
    re.ASCII,
)


def _invalid_syntax(text: str, kind: str) -> MarshalError:
    return MarshalError(f"invalid {kind} literal {text!r}", code="E1001", details={"value": text})


def _out_of_range(text: str, kind: str) -> MarshalError:
    return MarshalError(f"value {text!r} out of range for {kind}", code="E1002", details={"value": text})


def _digit_value(char: str) -> int:
    index = _DIGITS.find(char.lower())
    return index if index >= 0 and char.isascii() else 99


def _parse_magnitude(body: str, base: int, original: str, kind: str) -> int:
    if not body:
        raise _invalid_syntax(original, kind)
    if base == 0:
        if not _PREFIXED_INT.fullmatch(body):
            raise _invalid_syntax(original, kind)
        cleaned = body.replace("_", "")
        if len(cleaned) > 1 and cleaned[0] == "0" and cleaned[1] in "01234567":
            return int(cleaned[1:], 8)
        return int(cleaned, 0)
    if any(_digit_value(char) >= base for char in body):
        raise _invalid_syntax(original, kind)
    return int(body, base)


def parse_int(text: str, base: int, kind: IntKind) -> int:
    """Parse an integer literal in ``base`` and check it fits ``kind``.

    Base 0 infers the base from a ``0x``, ``0o``, ``0b`` or ``0`` prefix and
    accepts ``_`` between digits. Unsigned kinds reject any sign.
    """
    body = text
    negative = False
    if kind.signed and body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    value = _parse_magnitude(body, base, text, kind.name)
    if negative:
        value = -value
    if not kind.min <= value <= kind.max:
        raise _out_of_range(text, kind.name)
    return value


def format_int(value: int, base: int, kind: IntKind) -> str:
    """Format ``value`` in ``base`` with lowercase digits and a leading ``-``."""
    if not kind.min <= value <= kind.max:
        raise _out_of_range(str(value), kind.name)
    if base in (0, 10):
        return str(value)
    magnitude = -value if value < 0 else value
    digits = []
    while True:
        magnitude, rem = divmod(magnitude, base)
        digits.append(_DIGITS[rem])
        if not magnitude:
            break
    sign = "-" if value < 0 else ""
    return sign + "".join(reversed(digits))


def to_float32(value: float) -> float:
    """Round a double to the nearest single-precision value."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def parse_float(text: str, kind: FloatKind) -> float:
    """Parse a decimal, exponent, hexadecimal or inf/nan float literal."""
    if _SPECIAL_FLOAT.fullmatch(text):
        return float(text)
    if _HEX_FLOAT.fullmatch(text):
        value = float.fromhex(text)
    elif _DECIMAL_FLOAT.fullmatch(text):
        value = float(text)
    else:
        raise _invalid_syntax(text, kind.name)
    if math.isinf(value):
        raise _out_of_range(text, kind.name)
    if kind.bits == 32:
        try:
            value = to_float32(value)
        except OverflowError as exc:
            raise _out_of_range(text, kind.name) from exc
    return value


def _shortest_digits(value: float, bits: int) -> tuple[str, int]:
    """Return the shortest digit string and decimal exponent that round-trip.

    ``value`` must be finite and positive; the result reads as
    ``d1.d2d3... * 10**exponent``.
    """
    limit = 9 if bits == 32 else 17
    for precision in range(1, limit + 1):
        text = f"{value:.{precision - 1}e}"
        candidate = float(text)
        if bits == 32:
            candidate = to_float32(candidate)
        if candidate == value:
            break
    mantissa, _, exponent = text.partition("e")
    digits = mantissa.replace(".", "").rstrip("0") or "0"
    return digits, int(exponent)


def format_float(value: float, kind: FloatKind) -> str:
    """Shortest round-trip text in ``%g`` layout: ``5.2``, ``1e+06``, ``-Inf``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if kind.bits == 32:
        try:
            value = to_float32(value)
        except OverflowError as exc:
            raise _out_of_range(repr(value), kind.name) from exc
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    magnitude = abs(value)
    if magnitude == 0:
        return f"{sign}0"

    digits, exponent = _shortest_digits(magnitude, kind.bits)
    if exponent < -4 or exponent >= 6:
        body = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{body}e{exp_sign}{abs(exponent):02d}"

    point = exponent + 1
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{sign}{digits}{'0' * (point - len(digits))}"
    return f"{sign}{digits[:point]}.{digits[point:]}"
