"""Helpers shared by the CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import typer

from cdrrate.core.config import ConfigManager, RatingConfig

from .constants import VALIDATION_EXIT_CODE
from .formatters import create_formatter


@dataclass(slots=True)
class CLIOptions:
    """Global options collected by the root callback."""

    format: str = "table"
    output_path: Path | None = None
    no_color: bool = False
    config_path: Path | None = None
    config: RatingConfig | None = None

    @classmethod
    def from_context(cls, ctx: typer.Context) -> "CLIOptions":
        ctx.ensure_object(dict)
        data = ctx.obj
        return cls(
            format=str(data.get("format", "table")),
            output_path=data.get("output_path"),
            no_color=bool(data.get("no_color", False)),
            config_path=data.get("config_path"),
            config=data.get("config"),
        )


def get_cli_options(ctx: typer.Context) -> CLIOptions:
    return CLIOptions.from_context(ctx)


def load_cli_config(ctx: typer.Context) -> RatingConfig:
    """Return the configuration loaded by the root callback, loading it if absent."""

    options = get_cli_options(ctx)
    if options.config is not None:
        return options.config
    return ConfigManager(options.config_path).get_config()


@contextmanager
def open_output(options: CLIOptions) -> Iterator[TextIO]:
    """Yield stdout or the ``--output`` file; an unwritable path exits with code 2."""

    if options.output_path is None:
        yield sys.stdout
        return
    try:
        handle = open(options.output_path, "w", encoding="utf-8", newline="")
    except OSError as exc:
        emit_error(f"Unable to open '{options.output_path}': {exc}", "OUTPUT_WRITE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    with handle:
        yield handle


def render_rows(ctx: typer.Context, rows: Sequence[Mapping[str, object]], columns: Sequence[str]) -> None:
    """Render ``rows`` with the formatter and destination chosen on the command line."""

    options = get_cli_options(ctx)
    formatter = create_formatter(options.format, no_color=options.no_color)
    with open_output(options) as stream:
        formatter.render(rows, stream=stream, columns=columns)


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Write a ``{"code", "message", "details"}`` JSON line to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = {key: _plain(value) for key, value in details.items()}
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def _plain(value: object) -> object:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [_plain(item) for item in value]
    return str(value)


__all__ = ["CLIOptions", "emit_error", "get_cli_options", "load_cli_config", "open_output", "render_rows"]
