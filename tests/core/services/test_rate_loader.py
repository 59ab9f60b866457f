"""Tests for loading rate tables from files."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from cdrrate.core.exceptions import RateTableError
from cdrrate.core.services.rate_loader import load_rate_table, load_rate_table_from_rows


def test_load_json_list(rates_json: Path) -> None:
    table = load_rate_table(rates_json)

    assert len(table) == 4
    sabah = table.by_dial_plan("6088")
    assert [entry.rate_id for entry in sabah] == ["MY-SABAH", "MY-SABAH-ECO"]
    assert sabah[0].standard_rate == Decimal("0.06")
    assert sabah[1].is_economic


def test_load_json_object_with_rates_key(tmp_path: Path, rate_rows: list[dict[str, object]]) -> None:
    path = tmp_path / "rates.json"
    path.write_text(json.dumps({"rates": rate_rows}), encoding="utf-8")

    assert len(load_rate_table(path)) == len(rate_rows)


def test_json_float_rates_keep_their_decimal_value(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    path.write_text(
        json.dumps([{"rateId": 1, "countryCode": 6088, "standardRate": 0.06, "reducedRate": 0.05, "dialPlan": 6088}]),
        encoding="utf-8",
    )

    entry = load_rate_table(path).entries[0]

    assert entry.rate_id == "1"
    assert entry.dial_plan == "6088"
    assert entry.standard_rate == Decimal("0.06")
    assert entry.access_code == "0"


def test_whole_number_float_codes_keep_their_digits(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    path.write_text(
        json.dumps(
            [
                {"rateId": 1, "countryCode": 6088, "standardRate": 0.06, "reducedRate": 0.05, "dialPlan": 6088.0},
                {
                    "rateId": 2,
                    "countryCode": 6088,
                    "standardRate": 0.04,
                    "reducedRate": 0.03,
                    "dialPlan": 6088.0,
                    "accessCode": 95.0,
                },
            ]
        ),
        encoding="utf-8",
    )

    table = load_rate_table(path)

    economic = table.by_dial_plan("6088")[1]
    assert economic.access_code == "95"
    assert economic.is_economic


def test_fractional_code_is_rejected() -> None:
    rows = [{"rateId": "x", "countryCode": 60, "standardRate": "0.1", "reducedRate": "0.1", "accessCode": 9.5}]

    with pytest.raises(RateTableError) as exc_info:
        load_rate_table_from_rows(rows, source="inline")

    assert "accessCode" in exc_info.value.validation_errors


def test_load_csv_export(tmp_path: Path) -> None:
    path = tmp_path / "rates.csv"
    path.write_text(
        "rate_id,country_code,std_rate,reduced_rate,description,dial_plan,charging_block_id,access_code\n"
        "1,6088,0.06,0.05,Malaysia Sabah,6088,1,0\n"
        "2,6088,0.04,0.03,Malaysia Sabah economic,6088,1,95\n",
        encoding="utf-8",
    )

    table = load_rate_table(path)

    assert len(table) == 2
    assert [entry.access_code for entry in table.by_country(6088)] == ["0", "95"]
    assert table.entries[1].reduced_rate == Decimal("0.03")


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(RateTableError) as exc_info:
        load_rate_table(tmp_path / "absent.json")

    assert exc_info.value.error_code == "RATE_TABLE_ERROR"
    assert exc_info.value.details["path"].endswith("absent.json")


def test_unsupported_suffix_raises(tmp_path: Path) -> None:
    path = tmp_path / "rates.xml"
    path.write_text("<rates/>", encoding="utf-8")

    with pytest.raises(RateTableError) as exc_info:
        load_rate_table(path)

    assert exc_info.value.details["suffix"] == ".xml"


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RateTableError, match="not valid JSON"):
        load_rate_table(path)


def test_json_without_rate_list_raises(tmp_path: Path) -> None:
    path = tmp_path / "rates.json"
    path.write_text(json.dumps({"entries": []}), encoding="utf-8")

    with pytest.raises(RateTableError):
        load_rate_table(path)


def test_invalid_row_reports_validation_errors() -> None:
    rows = [
        {"rateId": "ok", "countryCode": 1, "standardRate": "0.1", "reducedRate": "0.1"},
        {"rateId": "bad", "countryCode": "not-a-number", "standardRate": "-1", "reducedRate": "0.1"},
    ]

    with pytest.raises(RateTableError) as exc_info:
        load_rate_table_from_rows(rows, source="inline")

    error = exc_info.value
    assert error.details["index"] == 1
    assert error.details["path"] == "inline"
    assert "countryCode" in error.validation_errors
    assert "standardRate" in error.validation_errors


def test_non_mapping_row_raises() -> None:
    with pytest.raises(RateTableError):
        load_rate_table_from_rows([["not", "a", "mapping"]])  # type: ignore[list-item]


def test_empty_table_is_allowed() -> None:
    assert len(load_rate_table_from_rows([])) == 0
