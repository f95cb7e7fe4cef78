"""Custom text codecs that take priority over structural conversion.

A type opts in either by implementing the protocol methods itself::

    class Level(IntEnum):
        LOW = 0
        HIGH = 1

        def marshal_text(self) -> str:
            return self.name.lower()

        @classmethod
        def unmarshal_text(cls, text: str) -> Level:
            return cls[text.upper()]

or, for types it cannot edit, through :meth:`CodecRegistry.register`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from flagconv.errors import MarshalError

T = TypeVar("T")


@runtime_checkable
class TextMarshaler(Protocol):
    """A value that renders itself as text."""

    def marshal_text(self) -> str: ...


@runtime_checkable
class TextUnmarshaler(Protocol):
    """A type that builds an instance from text."""

    @classmethod
    def unmarshal_text(cls, text: str) -> Any: ...


class Codec(Protocol[T]):
    """Codec protocol for converting values of one type to and from text."""

    def to_text(self, value: T) -> str:
        """Format a typed value into its text form."""
        ...

    def from_text(self, text: str) -> T:
        """Parse text into a typed value."""
        ...


class _MethodCodec:
    """Adapts the protocol methods of ``tp`` to the :class:`Codec` shape."""

    def __init__(self, tp: type) -> None:
        self.tp = tp

    def to_text(self, value: Any) -> str:
        if not isinstance(value, TextMarshaler):
            raise TypeError(f"{type(value).__name__} does not implement marshal_text")
        return value.marshal_text()

    def from_text(self, text: str) -> Any:
        unmarshal = getattr(self.tp, "unmarshal_text", None)
        if not callable(unmarshal):
            raise TypeError(f"{self.tp.__name__} does not implement unmarshal_text")
        return unmarshal(text)


class CodecRegistry:
    """Converters keyed by type identity, looked up along the MRO."""

    def __init__(self) -> None:
        self._codecs: dict[type, Codec[Any]] = {}

    def register(self, tp: type[T], codec: Codec[T]) -> None:
        self._codecs[tp] = codec

    def unregister(self, tp: type) -> None:
        self._codecs.pop(tp, None)

    def lookup(self, tp: type) -> Codec[Any] | None:
        for klass in getattr(tp, "__mro__", (tp,)):
            codec = self._codecs.get(klass)
            if codec is not None:
                return codec
        return None


default_registry = CodecRegistry()


class Direction(str, Enum):
    """Which half of the text capability a conversion needs."""

    MARSHAL = "marshal"
    UNMARSHAL = "unmarshal"


_METHOD_NAMES = {Direction.MARSHAL: "marshal_text", Direction.UNMARSHAL: "unmarshal_text"}


def has_text_methods(tp: type, direction: Direction | None = None) -> bool:
    """True when ``tp`` itself provides the requested half of the text capability.

    With no ``direction`` either half counts.
    """
    directions = (direction,) if direction is not None else tuple(Direction)
    return any(callable(getattr(tp, _METHOD_NAMES[d], None)) for d in directions)


def find_codec(
    tp: type,
    registry: CodecRegistry | None = None,
    direction: Direction | None = None,
) -> Codec[Any] | None:
    """Return the codec for ``tp``: a registry entry first, then its own methods.

    A type implementing only one protocol method has a codec in that direction
    only; the other direction falls through to the structural rules.
    """
    codec = (registry or default_registry).lookup(tp)
    if codec is not None:
        return codec
    if isinstance(tp, type) and has_text_methods(tp, direction):
        return _MethodCodec(tp)
    return None


def call_codec(action: str, func: Any, arg: Any) -> Any:
    """Run one half of a custom codec, normalising its failures.

    A :class:`MarshalError` raised by the codec propagates unchanged; the usual
    Python parsing failures are wrapped into one carrying the same message.
    """
    try:
        return func(arg)
    except MarshalError:
        raise
    except (ValueError, TypeError, KeyError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
        raise MarshalError(f"{action}: {message}", code="E1005") from exc
