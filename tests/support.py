"""Types shared by several test modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from flagconv.errors import MarshalError


class Number(IntEnum):
    ONE = 0
    TWO = 1
    THREE = 2

    def marshal_text(self) -> str:
        return self.name.lower()

    @classmethod
    def unmarshal_text(cls, text: str) -> Number:
        try:
            return cls[text.upper()]
        except KeyError:
            raise MarshalError(f"invalid value {text!r}") from None


class Level(IntEnum):
    LOW = 1
    HIGH = 2


class Color(str, Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Point:
    x: int
    y: int
