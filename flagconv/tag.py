"""Declarative option tags and the typed reader the engine consumes."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from flagconv.errors import MarshalError, Suggestion

if TYPE_CHECKING:
    from flagconv.config import FlagconvConfig

DEFAULT_BASE = 10
DEFAULT_KEY_VALUE_DELIMITER = ":"
DEFAULT_ELEMENT_DELIMITER = ","

_BASE_LITERAL = re.compile(r"[+-]?[0-9]+", re.ASCII)

_BASE_SUGGESTION = Suggestion(
    action="fix base tag",
    fix="Set base to 0 (prefix detection) or a decimal number between 2 and 36.",
    example="flag(0, base=16)",
)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Tag(Mapping[str, str]):
    """Immutable key -> string mapping attached to one option.

    Keyword names use underscores and are stored with dashes, so
    ``Tag(key_value_delimiter="=")`` carries the ``key-value-delimiter`` key.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        merged: dict[str, str] = {}
        for key, value in (items or {}).items():
            if value is not None:
                merged[str(key)] = _render(value)
        for key, value in kwargs.items():
            if value is not None:
                merged[key.replace("_", "-")] = _render(value)
        self._items = merged

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(frozenset(self._items.items()))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._items.items())
        return f"Tag({body})"


EMPTY_TAG = Tag()


class TagConfig:
    """Typed accessors over a :class:`Tag`.

    Absent keys fall back to defaults; present values are only validated when
    read, so an invalid ``base`` surfaces from the conversion that needs it.
    """

    def __init__(self, tag: Mapping[str, str] | None = None, config: FlagconvConfig | None = None) -> None:
        self.tag = tag if tag is not None else EMPTY_TAG
        self.config = config

    def _default(self, key: str, fallback: str) -> str:
        if self.config is None:
            return fallback
        return str(self.config.get(key, fallback)) or fallback

    def base(self) -> int:
        raw = self.tag.get("base") or self._default("base", str(DEFAULT_BASE))
        if not _BASE_LITERAL.fullmatch(raw):
            raise MarshalError(
                f"invalid base {raw!r}: not a base-10 integer",
                code="E1003",
                suggestion=_BASE_SUGGESTION,
                details={"base": raw},
            )
        base = int(raw)
        if base != 0 and not 2 <= base <= 36:
            raise MarshalError(
                f"invalid base {base}: must be 0 or between 2 and 36",
                code="E1003",
                suggestion=_BASE_SUGGESTION,
                details={"base": raw},
            )
        return base

    def key_value_delimiter(self) -> str:
        return self.tag.get("key-value-delimiter") or self._default("key_value_delimiter", DEFAULT_KEY_VALUE_DELIMITER)

    def element_delimiter(self) -> str:
        return self.tag.get("element-delimiter") or self._default("element_delimiter", DEFAULT_ELEMENT_DELIMITER)


def as_tag_config(tag: Mapping[str, str] | TagConfig | None, config: FlagconvConfig | None = None) -> TagConfig:
    if isinstance(tag, TagConfig):
        return tag
    return TagConfig(tag, config)
