"""Handles to typed, mutable storage locations."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Ref(Generic[T]):
    """A storage location with a declared type.

    The encoder only calls :meth:`get`; the decoder reads the current value
    and publishes the converted one through :meth:`set`.
    """

    annotation: Any = Any

    def get(self) -> T:
        raise NotImplementedError

    def set(self, value: T) -> None:
        raise NotImplementedError


class Cell(Ref[T]):
    """A standalone storage location that owns its value."""

    def __init__(self, annotation: Any, value: T | None = None) -> None:
        self.annotation = annotation
        self.value = value

    def get(self) -> T:
        return self.value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Cell({self.annotation!r}, {self.value!r})"


class AttrRef(Ref[T]):
    """An attribute of another object, typically a dataclass field."""

    def __init__(self, obj: Any, name: str, annotation: Any) -> None:
        self.obj = obj
        self.name = name
        self.annotation = annotation

    def get(self) -> T:
        return getattr(self.obj, self.name)  # type: ignore[no-any-return]

    def set(self, value: T) -> None:
        setattr(self.obj, self.name, value)

    def __repr__(self) -> str:
        return f"AttrRef({type(self.obj).__name__}.{self.name})"
