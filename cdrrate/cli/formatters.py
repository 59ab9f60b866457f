"""Renderers for rated records and lookup results."""

from __future__ import annotations

import csv
import json
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table

Row = Mapping[str, object]


class OutputFormatter:
    """Base class for CLI renderers.

    ``columns`` fixes the field order; without it the keys of the first row
    are used.
    """

    name: str

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        raise NotImplementedError

    @staticmethod
    def field_names(rows: Sequence[Row], columns: Sequence[str] | None) -> list[str]:
        if columns:
            return list(columns)
        return list(rows[0]) if rows else []

    @classmethod
    def project(cls, rows: Sequence[Row], columns: Sequence[str] | None) -> Iterator[dict[str, object]]:
        names = cls.field_names(rows, columns)
        for row in rows:
            yield {name: row.get(name) for name in names}


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Rich table; numbers are right-aligned and ``None`` shows as ``-``."""

    name: str = "table"
    no_color: bool = False

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        names = self.field_names(rows, columns)
        projected = list(self.project(rows, names))
        # wide enough that a rated call never wraps
        console = Console(
            file=stream,
            width=max(200, 18 * len(names)),
            color_system=None if self.no_color else "auto",
            no_color=self.no_color,
        )

        table = Table(box=SIMPLE)
        for name in names:
            numeric = bool(projected) and all(_is_number(row[name]) for row in projected)
            table.add_column(name, justify="right" if numeric else "left", header_style="" if self.no_color else "bold")
        for row in projected:
            table.add_row(*("-" if row[name] is None else str(row[name]) for name in names))

        if names:
            console.print(table)
        if not projected:
            console.print("No records.")


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """One JSON object per line; Decimals are written as strings."""

    name: str = "jsonl"

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        for row in self.project(rows, columns):
            stream.write(json.dumps(row, ensure_ascii=False, default=str))
            stream.write("\n")
        stream.flush()


@dataclass(slots=True)
class CSVFormatter(OutputFormatter):
    """CSV with a header row; ``None`` becomes an empty cell."""

    name: str = "csv"

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        writer = csv.writer(stream, lineterminator="\n")
        names = self.field_names(rows, columns)
        writer.writerow(names)
        for row in self.project(rows, names):
            writer.writerow(["" if row[name] is None else row[name] for name in names])
        stream.flush()


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


_FACTORIES: dict[str, Callable[[bool], OutputFormatter]] = {
    "table": lambda no_color: TableFormatter(no_color=no_color),
    "jsonl": lambda no_color: JSONLFormatter(),
    "csv": lambda no_color: CSVFormatter(),
}

FORMATS = tuple(_FACTORIES)


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Instantiate a formatter by name."""

    factory = _FACTORIES.get(name.strip().lower())
    if factory is None:
        raise ValueError(f"Unsupported format '{name}'. Available formats: {', '.join(FORMATS)}.")
    return factory(no_color)


__all__ = ["CSVFormatter", "FORMATS", "JSONLFormatter", "OutputFormatter", "TableFormatter", "create_formatter"]
