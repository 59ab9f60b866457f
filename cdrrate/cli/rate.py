"""``rate`` command: price a DLV file against a rate table."""

from __future__ import annotations

from pathlib import Path

import typer

from cdrrate.core.config import PERIOD_POLICIES, RatingConfig
from cdrrate.core.exceptions.base import CdrRateError
from cdrrate.core.models.rates import RateTable
from cdrrate.core.services.pipeline import RatingPipeline, RatingSummary
from cdrrate.core.services.rate_loader import load_rate_table

from .constants import SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, load_cli_config, render_rows

RATED_COLUMNS = [
    "NETTYPE",
    "BILLTYPE",
    "SUBSCRIBER",
    "DESTINATION",
    "CTYPE",
    "ECONOMICAL",
    "COUNTRYCODE",
    "ANSDATE",
    "ANSTIME",
    "ENDDATE",
    "ENDTIME",
    "CONVERSATIONTIME",
    "CALCULATEDCONVERSATIONTIME",
    "STANDARDSECONDS",
    "REDUCEDSECONDS",
    "TOTALCHARGES",
]


def register(app: typer.Typer) -> None:
    """Register the rate command on the root CLI application."""

    app.command("rate", help="Rate every call in a DLV file.")(rate_command)


def build_pipeline(rate_table: RateTable, config: RatingConfig) -> RatingPipeline:
    """Factory hook for obtaining a :class:`RatingPipeline`."""

    return RatingPipeline(rate_table, config=config)


def rate_command(
    ctx: typer.Context,
    dlv_file: Path = typer.Argument(..., help="Pipe-delimited CDR file."),
    rates: Path = typer.Option(..., "--rates", "-r", help="Rate table (.json or .csv)."),
    block_seconds: int | None = typer.Option(None, "--block-seconds", help="Billing block size in seconds."),
    policy: str | None = typer.Option(
        None, "--policy", help=f"Rate period policy ({', '.join(PERIOD_POLICIES)})."
    ),
    workers: int = typer.Option(1, "--workers", min=1, help="Rate records on a thread pool."),
    summary: bool = typer.Option(False, "--summary", help="Print a batch summary to stderr."),
) -> None:
    """Rate every non-blank line of DLV_FILE and render the results."""

    try:
        config = load_cli_config(ctx)
        overrides: dict[str, dict[str, object]] = {}
        if block_seconds is not None:
            overrides["billing"] = {"block_seconds": block_seconds}
        if policy is not None:
            overrides["periods"] = {"policy": policy.strip().lower()}
        if overrides:
            config = _apply_overrides(config, overrides)
        table = load_rate_table(rates)
        # undecodable bytes become U+FFFD and the record is still rated
        lines = dlv_file.read_text(encoding="utf-8", errors="replace").splitlines()
    except CdrRateError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error
    except OSError as error:
        emit_error(f"Unable to read '{dlv_file}': {error}", "INPUT_READ_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    pipeline = build_pipeline(table, config)
    try:
        batch = pipeline.rate_batch(lines, workers=workers)
    except CdrRateError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error

    render_rows(ctx, [item.to_output() for item in batch.results], RATED_COLUMNS)

    if summary:
        typer.echo(_format_summary(batch.summary), err=True)


def _apply_overrides(config: RatingConfig, overrides: dict[str, dict[str, object]]) -> RatingConfig:
    merged = config.to_dict()
    for section, values in overrides.items():
        merged.setdefault(section, {}).update(values)
    return RatingConfig.from_dict(merged)


def _format_summary(summary: RatingSummary) -> str:
    return (
        f"records={summary.records} blank={summary.blank_lines} "
        f"defaulted={summary.defaulted_destinations} classifier={summary.classifier_resolutions} "
        f"ambiguous={summary.ambiguous_matches} timestamp_fallbacks={summary.timestamp_fallbacks} "
        f"total_charges={summary.total_charges}"
    )


__all__ = ["RATED_COLUMNS", "build_pipeline", "rate_command", "register"]
