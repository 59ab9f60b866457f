"""Main entry point for the cdrrate command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from cdrrate.core.config import ConfigManager, RatingConfig
from cdrrate.core.exceptions.base import CdrRateError
from cdrrate.core.logging import configure_logging

from .constants import VALIDATION_EXIT_CODE
from .formatters import FORMATS, create_formatter
from .lookup import register as register_lookup_commands
from .rate import register as register_rate_commands
from .utils import emit_error


def _root(
    ctx: typer.Context,
    format: str = typer.Option("table", "--format", "-f", help=f"Output format: {', '.join(FORMATS)}."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write results to this file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Level of the JSON log stream on stderr."),
    no_color: bool = typer.Option(False, "--no-color", help="Plain table output."),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="TOML settings file."),
) -> None:
    ctx.ensure_object(dict)
    chosen_format = format.strip().lower()
    try:
        create_formatter(chosen_format)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--format") from exc

    config = _load_config(config_path)
    level = (log_level or config.logging.level).upper()
    if config.logging.file:
        configure_logging(level, file_output=True, file_path=config.logging.file)
    else:
        configure_logging(level)

    ctx.obj.update(
        format=chosen_format,
        output_path=output,
        no_color=no_color,
        config_path=config_path,
        config=config,
    )


def _load_config(config_path: Path | None) -> RatingConfig:
    try:
        return ConfigManager(config_path).get_config()
    except CdrRateError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error


def create_app() -> typer.Typer:
    """Create a Typer application instance for cdrrate."""

    app = typer.Typer(add_completion=False, help="Rate call detail records against a rate table.")
    app.callback()(_root)
    register_rate_commands(app)
    register_lookup_commands(app)
    return app


app = create_app()
