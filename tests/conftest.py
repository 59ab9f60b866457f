"""Shared fixtures for the cdrrate test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from cdrrate.core.models.rates import RateTable
from cdrrate.core.services.decoder import FIELD_DEFINITIONS, FIELD_DELIMITER
from cdrrate.core.services.rate_loader import load_rate_table_from_rows

RATE_ROWS: list[dict[str, object]] = [
    {
        "rateId": "MY-SABAH",
        "countryCode": 6088,
        "standardRate": "0.06",
        "reducedRate": "0.05",
        "description": "Malaysia Sabah",
        "dialPlan": "6088",
        "chargingBlockId": "1",
        "accessCode": "0",
    },
    {
        "rateId": "MY-SABAH-ECO",
        "countryCode": 6088,
        "standardRate": "0.04",
        "reducedRate": "0.03",
        "description": "Malaysia Sabah economic",
        "dialPlan": "6088",
        "chargingBlockId": "1",
        "accessCode": "95",
    },
    {
        "rateId": "MY",
        "countryCode": 60,
        "standardRate": "0.08",
        "reducedRate": "0.07",
        "description": "Malaysia",
        "dialPlan": "60",
        "chargingBlockId": "1",
        "accessCode": "0",
    },
    {
        "rateId": "UK",
        "countryCode": 44,
        "standardRate": "0.12",
        "reducedRate": "0.10",
        "description": "United Kingdom",
        "dialPlan": "44",
        "chargingBlockId": "2",
        "accessCode": "0",
    },
]

SAMPLE_FIELDS: dict[str, str] = {
    "NETTYPE": "11",
    "BILLTYPE": "01",
    "PARTIALRECORDINDICATOR": "0",
    "CHARGEPARTYINDICATOR": "9",
    "ANSDATE": "13082024",
    "ANSTIME": "092305",
    "ENDDATE": "13082024",
    "ENDTIME": "092330",
    "CONVERSATIONTIME": "25",
    "CALLERDNSET": "0",
    "CALLERADDRESSNATURE": "0",
    "CALLERNUMBER": "2330142",
    "CALLEDDNSET": "0",
    "CALLEDADDRESSNATURE": "3",
    "CALLEDNUMBER": "006088265386",
}

LineBuilder = Callable[..., str]


def build_line(**overrides: str) -> str:
    """Render a full 66-field DLV line from the sample call plus overrides."""

    values = {**SAMPLE_FIELDS, **overrides}
    tokens = []
    for definition in FIELD_DEFINITIONS:
        value = values.get(definition.name, "")
        tokens.append(value.rjust(min(definition.size, 12)))
    return FIELD_DELIMITER.join(tokens)


class StubClassifier:
    """Calling-code classifier returning canned answers."""

    def __init__(self, codes: dict[str, int] | None = None) -> None:
        self.codes = codes or {}
        self.calls: list[str] = []

    def classify(self, number: str) -> int | None:
        self.calls.append(number)
        for prefix, code in self.codes.items():
            if number.startswith(prefix):
                return code
        return None


@pytest.fixture
def rate_rows() -> list[dict[str, object]]:
    return [dict(row) for row in RATE_ROWS]


@pytest.fixture
def rate_table(rate_rows: list[dict[str, object]]) -> RateTable:
    return load_rate_table_from_rows(rate_rows, source="fixture")


@pytest.fixture
def line_builder() -> LineBuilder:
    return build_line


@pytest.fixture
def no_classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture
def rates_json(tmp_path: Path, rate_rows: list[dict[str, object]]) -> Path:
    path = tmp_path / "cdr.json"
    path.write_text(json.dumps(rate_rows), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user config files and CDRRATE_* variables out of the tests."""

    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in (
        "CDRRATE_BLOCK_SECONDS",
        "CDRRATE_ROUNDING",
        "CDRRATE_PERIOD_POLICY",
        "CDRRATE_INTERNATIONAL_PREFIX",
        "CDRRATE_LOGGING_LEVEL",
        "CDRRATE_LOGGING_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
