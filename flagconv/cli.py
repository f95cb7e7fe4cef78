"""Command-line launcher: inspect and exercise options declared on dataclasses."""

from __future__ import annotations

import dataclasses
import importlib
import importlib.util
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from flagconv.config import FlagconvConfig
from flagconv.errors import ConversionError, LoadError, MarshalError
from flagconv.exit_codes import ExitCode
from flagconv.options import Option, lookup_option, options_from

logger = logging.getLogger(__name__)

cli = typer.Typer(no_args_is_help=True, help="flagconv launcher")


@cli.callback()
def _launcher_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug records to stderr."),
) -> None:
    """Inspect options declared on a dataclass."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)


def _normalize_target(raw: str) -> tuple[str, str | None]:
    """Split `<source>[:Class]` into source path/module and optional class name."""
    if ":" in raw:
        source, class_name = raw.rsplit(":", 1)
        return source.strip(), class_name.strip() or None
    return raw.strip(), None


def _load_module_from_path(path: Path) -> Any:
    module_name = f"flagconv_loader_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise LoadError(f"Failed to create import spec for {path}.", code="E3001")

    module = importlib.util.module_from_spec(spec)
    # dataclasses resolve string annotations through sys.modules
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def _load_module(source: str) -> Any:
    """Load a module from a file path or import path."""
    source_path = Path(source)
    if source_path.exists():
        if not source_path.is_file():
            raise LoadError(f"Not a file: {source_path}", code="E3002")
        return _load_module_from_path(source_path)

    try:
        return importlib.import_module(source)
    except ModuleNotFoundError as exc:
        raise LoadError(f"Could not import module '{source}'.", code="E3003") from exc


def _resolve_options_class(module: Any, class_name: str | None) -> type:
    if class_name is not None:
        target = getattr(module, class_name, None)
        if target is None:
            raise LoadError(f"Module '{module.__name__}' has no '{class_name}' attribute.", code="E3004")
        if not (isinstance(target, type) and dataclasses.is_dataclass(target)):
            raise LoadError(f"'{class_name}' is not a dataclass.", code="E3005")
        return target

    candidates = [
        value
        for value in vars(module).values()
        if isinstance(value, type) and dataclasses.is_dataclass(value) and value.__module__ == module.__name__
    ]
    if len(candidates) == 1:
        return candidates[0]

    if len(candidates) > 1:
        raise LoadError(
            "Module defines multiple dataclasses. Pass an explicit class name via <module>:<Class>.",
            code="E3006",
        )

    raise LoadError("Module does not define an options dataclass.", code="E3007")


def _bind(target: str) -> tuple[Any, list[Option]]:
    source, class_name = _normalize_target(target)
    options_class = _resolve_options_class(_load_module(source), class_name)
    try:
        instance = options_class()
    except TypeError as exc:
        raise LoadError(f"Cannot instantiate {options_class.__name__} with defaults: {exc}", code="E3008") from exc
    return instance, options_from(instance, config=FlagconvConfig())


def _render(options: list[Option], as_json: bool) -> None:
    rendered = {f"--{option.long_name}": option.text() for option in options}
    if as_json:
        typer.echo(json.dumps(rendered, ensure_ascii=False))
        return
    width = max((len(name) for name in rendered), default=0)
    for name, text in rendered.items():
        typer.echo(f"{name.ljust(width)}  {text}")


def _fail(exc: ConversionError, prefix: str) -> NoReturn:
    typer.echo(f"{prefix}: {exc.message}", err=True)
    raise typer.Exit(code=exc.exit_code)


@cli.command()
def show(
    target: str = typer.Argument(..., help="<module or .py file>[:<Class>] declaring the options."),
    as_json: bool = typer.Option(False, "--json", help="Emit a JSON object."),
) -> None:
    """Print every option with the text of its default value."""
    try:
        _, options = _bind(target)
        _render(options, as_json)
    except LoadError as exc:
        _fail(exc, "Failed to load options")
    except MarshalError as exc:
        _fail(exc, "Cannot encode default")


@cli.command()
def parse(
    target: str = typer.Argument(..., help="<module or .py file>[:<Class>] declaring the options."),
    assignments: Optional[list[str]] = typer.Option(
        None,
        "--set",
        "-s",
        help="NAME=TEXT; decode TEXT into option NAME. Repeatable.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit a JSON object."),
) -> None:
    """Decode assignments into a fresh instance and print the canonical values."""
    try:
        _, options = _bind(target)
    except LoadError as exc:
        _fail(exc, "Failed to load options")

    for assignment in assignments or []:
        name, sep, text = assignment.partition("=")
        if not sep:
            typer.echo(f"Invalid assignment {assignment!r}: expected NAME=TEXT", err=True)
            raise typer.Exit(code=int(ExitCode.INVALID_INPUT))
        try:
            option = lookup_option(options, name)
        except KeyError:
            typer.echo(f"Unknown option {name!r}", err=True)
            raise typer.Exit(code=int(ExitCode.INVALID_INPUT)) from None
        try:
            option.set(text)
        except MarshalError as exc:
            _fail(exc, f"invalid value for --{option.long_name}")
        logger.debug("applied --%s=%r", option.long_name, text)

    try:
        _render(options, as_json)
    except MarshalError as exc:
        _fail(exc, "Cannot encode value")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
