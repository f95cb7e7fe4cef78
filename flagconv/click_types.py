"""click integration: parameter types and options backed by the engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import click

from flagconv.codec import CodecRegistry, Direction
from flagconv.config import FlagconvConfig
from flagconv.decode import decode_value
from flagconv.dispatch import Kind, classify
from flagconv.errors import MarshalError
from flagconv.options import Option, options_from

logger = logging.getLogger(__name__)


class FlagParamType(click.ParamType):
    """Click ParamType that decodes argument text for a declared type."""

    def __init__(
        self,
        annotation: Any,
        tag: Mapping[str, str] | None = None,
        *,
        registry: CodecRegistry | None = None,
        config: FlagconvConfig | None = None,
    ) -> None:
        self.annotation = annotation
        self.tag = tag
        self.registry = registry
        self.config = config
        self.name = classify(annotation, registry, Direction.UNMARSHAL).kind.value

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        # defaults arrive already typed
        if not isinstance(value, str):
            return value
        try:
            return decode_value(value, self.annotation, self.tag, registry=self.registry, config=self.config)
        except MarshalError as exc:
            self.fail(exc.message, param, ctx)


def _default_text(option: Option) -> str | bool:
    try:
        return option.text() or False
    except MarshalError as exc:
        # the same error resurfaces when an argument for this option is decoded
        logger.warning("no default text for --%s: %s", option.long_name, exc.message)
        return False


def click_option(option: Option) -> click.Option:
    """Build a ``click.Option`` whose default is the option's current value."""
    decls = [f"--{option.long_name}"]
    if option.short_name:
        decls.append(f"-{option.short_name}")
    decls.append(option.name)

    if classify(option.annotation, option.registry, Direction.UNMARSHAL).kind is Kind.BOOL:
        return click.Option(decls, is_flag=True, default=bool(option.value.get()), help=option.description or None)

    return click.Option(
        decls,
        type=FlagParamType(option.annotation, option.tag, registry=option.registry, config=option.config),
        default=option.value.get(),
        show_default=_default_text(option),
        help=option.description or None,
    )


def click_options(obj: Any, **kwargs: Any) -> list[click.Option]:
    """Click options for every field of the dataclass instance ``obj``."""
    return [click_option(option) for option in options_from(obj, **kwargs)]
