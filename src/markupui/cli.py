"""markupui CLI Main Entry Point

Usage:
    markupui build page.html                 # print the compiled document
    markupui build page.html -o page.ui      # write it to a file
    markupui build page.html --var Title=Hi  # override a script variable
    markupui inspect page.html               # dump variables/aliases as JSON
    markupui watch page.html -o page.ui      # recompile on every save
    markupui --version
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import List, NoReturn, Optional

import msgspec
import typer
import yaml

from ._version import __version__
from .builder import InterfaceBuilder
from .cache import FileWatcher, TemplateCache
from .config import BuilderSettings, load_settings
from .errors import MarkupUIError, NotFoundError
from .log import setup_logging

typer_app = typer.Typer(
    help="Compile HTML-like markup into UI runtime command documents.",
    no_args_is_help=True,
    add_completion=False,
)


class TemplateReport(msgspec.Struct):
    """JSON shape printed by ``markupui inspect``."""

    source: str
    variables: dict[str, str]
    aliases: dict[str, str]
    roots: list[str]


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Print a red error line to stderr and exit."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=exit_code)


def parse_vars(values: Optional[List[str]]) -> dict[str, str]:
    """Parse repeated ``--var NAME=VALUE`` options into an override map."""
    overrides: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--var")
        overrides[name.strip()] = value
    return overrides


def make_settings(config: Optional[Path], minimal: bool = False) -> BuilderSettings:
    try:
        settings = load_settings(config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        exit_with_error(f"Invalid settings: {exc}")
    if minimal:
        settings = settings.model_copy(update={"minimal": True})
    return settings


def write_output(text: str, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")


def wait_for_file(path: Path, timeout: float = 2.0, interval: float = 0.1) -> bool:
    """Wait for ``path`` to exist; replace-on-save editors delete it first."""
    deadline = time.monotonic() + timeout
    while not path.exists():
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)
    return True


VarOption = typer.Option(None, "--var", help="Override a variable, NAME=VALUE. Repeatable.")
ConfigOption = typer.Option(None, "-c", "--config", help="Path to markupui.yaml.")
VerboseOption = typer.Option(False, "-v", "--verbose", help="Show info-level logs.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"markupui {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compile HTML-like markup into UI runtime command documents."""


@typer_app.command()
def build(
    source: Path = typer.Argument(..., help="Markup file to compile."),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the document to a file instead of stdout."
    ),
    var: Optional[List[str]] = VarOption,
    minimal: bool = typer.Option(False, "--minimal", help="Emit single-line blocks."),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Compile a markup file to a command document."""
    setup_logging(verbose)
    overrides = parse_vars(var)
    settings = make_settings(config, minimal)

    try:
        with InterfaceBuilder(settings) as builder:
            document = builder.parse_file(source, overrides).build()
    except MarkupUIError as exc:
        exit_with_error(str(exc))

    if output is None:
        typer.echo(document)
    else:
        write_output(document, output)
        typer.echo(f"Wrote {output}")


@typer_app.command()
def inspect(
    source: Path = typer.Argument(..., help="Markup file to inspect."),
    var: Optional[List[str]] = VarOption,
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Print the variables, aliases and root components of a markup file as JSON."""
    setup_logging(verbose)
    overrides = parse_vars(var)
    settings = make_settings(config)

    try:
        with InterfaceBuilder(settings) as builder:
            template = builder.parse_file(source, overrides)
    except MarkupUIError as exc:
        exit_with_error(str(exc))

    report = TemplateReport(
        source=str(template.source_path or source),
        variables=template.get_variables(),
        aliases=template.aliases,
        roots=[root.header() for root in template.roots],
    )
    typer.echo(msgspec.json.format(msgspec.json.encode(report), indent=2).decode())


@typer_app.command()
def watch(
    source: Path = typer.Argument(..., help="Markup file to watch."),
    output: Path = typer.Option(..., "-o", "--output", help="File to keep up to date."),
    var: Optional[List[str]] = VarOption,
    minimal: bool = typer.Option(False, "--minimal", help="Emit single-line blocks."),
    config: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Compile a markup file, then recompile it every time it changes."""
    setup_logging(verbose)
    overrides = parse_vars(var)
    settings = make_settings(config, minimal)

    changed = threading.Event()
    cache = TemplateCache()
    watcher = FileWatcher(
        cache,
        shutdown_timeout=settings.shutdown_timeout,
        on_invalidate=lambda _path: changed.set(),
    )
    builder = InterfaceBuilder(settings, cache=cache, watcher=watcher)

    try:
        write_output(builder.parse_file(source, overrides).build(), output)
        builder.watch_file_changes(source)
        typer.echo(f"Watching {source}, writing {output} (Ctrl+C to stop)")

        while True:
            changed.wait()
            changed.clear()
            if not wait_for_file(source):
                raise NotFoundError(source)
            builder.watch_file_changes(source)
            try:
                write_output(builder.parse_file(source, overrides).build(), output)
            except NotFoundError:
                raise
            except MarkupUIError as exc:
                typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
                continue
            typer.echo(f"Rebuilt {output}")
    except KeyboardInterrupt:
        typer.echo("Stopped watching")
    except MarkupUIError as exc:
        exit_with_error(str(exc))
    finally:
        builder.close()


def app() -> None:
    """Entry point for the installed ``markupui`` script."""
    typer_app()


if __name__ == "__main__":
    app()
