"""Lookup commands: destination resolution and the record schema."""

from __future__ import annotations

from pathlib import Path

import typer

from cdrrate.core.exceptions.base import CdrRateError
from cdrrate.core.models.call import CallClass
from cdrrate.core.services.decoder import FIELD_DEFINITIONS
from cdrrate.core.services.pipeline import RatingPipeline
from cdrrate.core.services.rate_loader import load_rate_table
from cdrrate.core.services.resolver import Resolution

from .constants import VALIDATION_EXIT_CODE
from .rate import build_pipeline
from .utils import emit_error, load_cli_config, render_rows

RESOLVE_COLUMNS = ["destination", "country_code", "method", "outbound_prefix", "dial_plan", "economic", "rate_id"]
FIELD_COLUMNS = ["position", "name", "size"]


def register(app: typer.Typer) -> None:
    """Register lookup commands on the root CLI application."""

    app.command("resolve", help="Resolve a dialed number against a rate table.")(resolve_command)
    app.command("fields", help="List the CDR record schema.")(fields_command)


def resolve_command(
    ctx: typer.Context,
    number: str = typer.Argument(..., help="Dialed destination number."),
    rates: Path = typer.Option(..., "--rates", "-r", help="Rate table (.json or .csv)."),
) -> None:
    """Show how a destination number resolves and which rate entry prices it."""

    try:
        config = load_cli_config(ctx)
        table = load_rate_table(rates)
    except CdrRateError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    pipeline = build_pipeline(table, config)
    resolution = pipeline.resolver.resolve_detailed(number)
    render_rows(ctx, [_resolution_to_row(pipeline, resolution)], RESOLVE_COLUMNS)


def fields_command(ctx: typer.Context) -> None:
    """Print the pipe-delimited field schema in record order."""

    rows = [
        {"position": index, "name": definition.name, "size": definition.size}
        for index, definition in enumerate(FIELD_DEFINITIONS)
    ]
    render_rows(ctx, rows, FIELD_COLUMNS)


def _resolution_to_row(pipeline: RatingPipeline, resolution: Resolution) -> dict[str, object]:
    economic = pipeline.resolver.is_economic(resolution.destination)
    rate = pipeline.selector.select_rate(resolution.country_code, CallClass.INTERNATIONAL, economic)
    return {
        "destination": resolution.destination,
        "country_code": resolution.country_code,
        "method": resolution.method,
        "outbound_prefix": resolution.outbound_prefix,
        "dial_plan": resolution.dial_plan,
        "economic": economic,
        "rate_id": rate.rate_id,
    }


__all__ = ["FIELD_COLUMNS", "RESOLVE_COLUMNS", "fields_command", "register", "resolve_command"]
