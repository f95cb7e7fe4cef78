"""Primitive kinds that plain Python types do not distinguish on their own.

``int`` is a signed 64-bit integer and ``float`` a 64-bit float. Narrower or
unsigned storage is declared with the ``Annotated`` aliases below, e.g.::

    @dataclass
    class Opts:
        port: Uint16 = 8080
        ratio: Float32 = 0.5
        timeout: Duration = Duration.parse("1m30s")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated


@dataclass(frozen=True)
class IntKind:
    """Width and signedness of an integer storage location."""

    bits: int = 64
    signed: bool = True

    @property
    def name(self) -> str:
        return f"{'int' if self.signed else 'uint'}{self.bits}"

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


@dataclass(frozen=True)
class FloatKind:
    """Precision of a floating point storage location."""

    bits: int = 64

    @property
    def name(self) -> str:
        return f"float{self.bits}"


Int8 = Annotated[int, IntKind(8)]
Int16 = Annotated[int, IntKind(16)]
Int32 = Annotated[int, IntKind(32)]
Int64 = Annotated[int, IntKind(64)]
Uint = Annotated[int, IntKind(64, signed=False)]
Uint8 = Annotated[int, IntKind(8, signed=False)]
Uint16 = Annotated[int, IntKind(16, signed=False)]
Uint32 = Annotated[int, IntKind(32, signed=False)]
Uint64 = Annotated[int, IntKind(64, signed=False)]
Float32 = Annotated[float, FloatKind(32)]
Float64 = Annotated[float, FloatKind(64)]


class Duration(int):
    """Elapsed time counted in nanoseconds, rendered as ``1h2m4s``."""

    def __repr__(self) -> str:
        return f"Duration({self})"

    def __str__(self) -> str:
        from flagconv.duration import format_duration

        return format_duration(int(self))

    @classmethod
    def parse(cls, text: str) -> Duration:
        from flagconv.duration import parse_duration

        return cls(parse_duration(text))
