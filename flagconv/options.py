"""Bind dataclass fields as options.

Tags are declared with :func:`flag` field metadata or as ``Annotated``
metadata::

    @dataclass
    class Opts:
        mask: Annotated[Uint32, Tag(base="16")] = 0xFF
        env: dict[str, str] = flag(default_factory=dict, long="env", key_value_delimiter="=")
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, get_type_hints

from flagconv.codec import CodecRegistry
from flagconv.config import FlagconvConfig
from flagconv.decode import decode
from flagconv.dispatch import strip_annotated
from flagconv.encode import encode
from flagconv.storage import AttrRef, Ref
from flagconv.tag import EMPTY_TAG, Tag

logger = logging.getLogger(__name__)

FLAG_METADATA_KEY = "flagconv"


def flag(
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Any = dataclasses.MISSING,
    long: str | None = None,
    short: str | None = None,
    description: str | None = None,
    base: int | str | None = None,
    key_value_delimiter: str | None = None,
    element_delimiter: str | None = None,
    **extra: Any,
) -> Any:
    """A dataclass field carrying an option :class:`Tag`."""
    tag = Tag(
        long=long,
        short=short,
        description=description,
        base=base,
        key_value_delimiter=key_value_delimiter,
        element_delimiter=element_delimiter,
        **extra,
    )
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={FLAG_METADATA_KEY: tag},
    )


@dataclass
class Option:
    """One bound command-line field: a storage handle plus its tag."""

    name: str
    value: Ref[Any]
    tag: Tag = EMPTY_TAG
    registry: CodecRegistry | None = None
    config: FlagconvConfig | None = None

    @property
    def long_name(self) -> str:
        return self.tag.get("long") or self.name.replace("_", "-")

    @property
    def short_name(self) -> str | None:
        return self.tag.get("short") or None

    @property
    def description(self) -> str:
        return self.tag.get("description", "")

    @property
    def annotation(self) -> Any:
        return self.value.annotation

    def text(self) -> str:
        """Canonical text of the stored value."""
        return encode(self.value, self.tag, registry=self.registry, config=self.config)

    def set(self, text: str) -> None:
        """Decode ``text`` into the stored value."""
        decode(text, self.value, self.tag, registry=self.registry, config=self.config)


def _annotated_tag(annotation: Any) -> Tag | None:
    _, metadata = strip_annotated(annotation)
    for extra in metadata:
        if isinstance(extra, Tag):
            return extra
    return None


def options_from(
    obj: Any,
    *,
    registry: CodecRegistry | None = None,
    config: FlagconvConfig | None = None,
) -> list[Option]:
    """Bind every field of the dataclass instance ``obj`` as an option."""
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"expected a dataclass instance, got {obj!r}")

    hints = get_type_hints(type(obj), include_extras=True)
    options: list[Option] = []
    for field in dataclasses.fields(obj):
        annotation = hints.get(field.name, Any)
        tag = Tag({**(_annotated_tag(annotation) or {}), **field.metadata.get(FLAG_METADATA_KEY, {})})
        option = Option(
            name=field.name,
            value=AttrRef(obj, field.name, annotation),
            tag=tag,
            registry=registry,
            config=config,
        )
        logger.debug("bound option --%s to %s.%s", option.long_name, type(obj).__name__, field.name)
        options.append(option)
    return options


def lookup_option(options: list[Option], name: str) -> Option:
    """Find an option by long name, short name or field name."""
    wanted = name.lstrip("-")
    for option in options:
        if wanted in (option.long_name, option.name, option.short_name):
            return option
    raise KeyError(name)
