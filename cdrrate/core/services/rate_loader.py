"""Load rate tables from JSON or CSV files."""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cdrrate.core.exceptions.base import RateTableError
from cdrrate.core.logging import logger
from cdrrate.core.models.rates import RateEntry, RateTable

_ALLOWED_FILE_SUFFIXES = {".json", ".csv"}

# CSV exports use snake_case headers and a few abbreviated names.
_CSV_COLUMN_MAP: Mapping[str, str] = {
    "rate_id": "rateId",
    "country_code": "countryCode",
    "std_rate": "standardRate",
    "standard_rate": "standardRate",
    "reduced_rate": "reducedRate",
    "description": "description",
    "dial_plan": "dialPlan",
    "charging_block_id": "chargingBlockId",
    "access_code": "accessCode",
}


def load_rate_table(path: str | Path) -> RateTable:
    """Load a rate table from a ``.json`` or ``.csv`` file."""

    file_path = Path(path)
    if not file_path.exists():
        raise RateTableError("Rate table file does not exist.", path=str(file_path))

    suffix = file_path.suffix.lower()
    if suffix not in _ALLOWED_FILE_SUFFIXES:
        raise RateTableError(
            "Unsupported rate table file type.",
            path=str(file_path),
            details={"suffix": suffix},
        )

    if suffix == ".json":
        try:
            config = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise RateTableError(f"Rate table is not valid JSON: {exc}", path=str(file_path)) from exc
        if isinstance(config, Mapping):
            config = config.get("rates")
        if not isinstance(config, list):
            raise RateTableError(
                "Rate table JSON must be a list of rates or an object with a 'rates' list.",
                path=str(file_path),
            )
        rows: Iterable[Mapping[str, Any]] = config
    else:
        with file_path.open(newline="", encoding="utf-8") as handle:
            rows = [_normalize_csv_row(row) for row in csv.DictReader(handle)]

    table = load_rate_table_from_rows(rows, source=str(file_path))
    logger.bind(stage="load").info("Loaded rate table", path=str(file_path), entries=len(table))
    return table


def load_rate_table_from_rows(rows: Iterable[Mapping[str, Any]], source: str | None = None) -> RateTable:
    """Validate raw mappings into a :class:`RateTable`."""

    entries: list[RateEntry] = []
    for index, raw in enumerate(rows):
        if not isinstance(raw, Mapping):
            raise RateTableError("Each rate entry must be a mapping.", path=source, details={"index": index})
        try:
            entries.append(RateEntry.model_validate(dict(raw)))
        except ValidationError as exc:
            errors = {".".join(str(part) for part in err["loc"]): err["msg"] for err in exc.errors()}
            raise RateTableError(
                "Invalid rate entry.",
                path=source,
                validation_errors=errors,
                details={"index": index},
            ) from exc
    return RateTable(entries)


def _normalize_csv_row(row: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in row.items():
        if key is None:
            continue
        column = key.strip()
        normalized[_CSV_COLUMN_MAP.get(column.lower(), column)] = value
    return normalized


__all__ = ["load_rate_table", "load_rate_table_from_rows"]
