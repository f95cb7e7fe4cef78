"""Elapsed-time syntax: ``300ms``, ``-1.5h``, ``2h45m``.

A duration is a signed 64-bit count of nanoseconds. Formatting always emits
the largest units first and drops zero fractions, so ``3724000000000``
becomes ``1h2m4s`` and parsing that text gives back the same count.
"""

from __future__ import annotations

import re
from datetime import timedelta

from flagconv.errors import MarshalError

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

_MAX_NANOS = (1 << 63) - 1

_UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # micro sign
    "μs": MICROSECOND,  # greek small letter mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)", re.ASCII)


def timedelta_nanos(value: timedelta) -> int:
    return ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000


def nanos_timedelta(nanos: int) -> timedelta:
    """Whole-microsecond ``timedelta``, truncating toward zero."""
    micros = nanos // 1000 if nanos >= 0 else -(-nanos // 1000)
    return timedelta(microseconds=micros)


def _with_fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    if not frac:
        return str(whole)
    digits = f"{frac:0{precision}d}".rstrip("0")
    return f"{whole}.{digits}"


def format_duration(nanos: int) -> str:
    """Render a nanosecond count in ``72h3m0.5s`` form."""
    negative = nanos < 0
    u = -nanos if negative else nanos

    if u < SECOND:
        if u == 0:
            return "0s"
        if u < MICROSECOND:
            text = f"{u}ns"
        elif u < MILLISECOND:
            text = _with_fraction(u, 3) + "µs"
        else:
            text = _with_fraction(u, 6) + "ms"
    else:
        seconds, frac = divmod(u, SECOND)
        text = _with_fraction((seconds % 60) * SECOND + frac, 9) + "s"
        minutes = seconds // 60
        if minutes:
            text = f"{minutes % 60}m{text}"
            hours = minutes // 60
            if hours:
                text = f"{hours}h{text}"

    return f"-{text}" if negative else text


def _invalid(orig: str, reason: str = "invalid duration") -> MarshalError:
    return MarshalError(f"{reason} {orig!r}", code="E1001", details={"value": orig})


def parse_duration(text: str) -> int:
    """Parse a signed sequence of decimal numbers with unit suffixes.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``;
    the bare literal ``0`` needs no unit.
    """
    orig = text
    negative = False
    if text and text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return 0
    if not text:
        raise _invalid(orig)

    total = 0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None or match.end() == pos:
            raise _invalid(orig)
        whole, frac, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not frac:
            raise _invalid(orig)
        if not unit:
            raise _invalid(orig, "missing unit in duration")
        if unit not in _UNITS:
            raise MarshalError(f"unknown unit {unit!r} in duration {orig!r}", code="E1001", details={"value": orig})
        scale = _UNITS[unit]
        value = int(whole or "0") * scale
        if frac:
            value += int(frac) * scale // 10 ** len(frac)
        total += value
        if total > _MAX_NANOS + 1:
            raise _invalid(orig)
        pos = match.end()

    if negative:
        return -total
    if total > _MAX_NANOS:
        raise _invalid(orig)
    return total
