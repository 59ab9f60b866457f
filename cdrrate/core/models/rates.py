"""Rate table models."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from decimal import Decimal
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

STANDARD_ACCESS_CODE = "0"
ECONOMIC_ACCESS_CODE = "95"


class RateEntry(BaseModel):
    """One row of the rate table.

    Keys follow the camelCase names of the rate table files; the snake_case
    attribute names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rate_id: str = Field(alias="rateId")
    country_code: int = Field(alias="countryCode")
    standard_rate: Decimal = Field(alias="standardRate", ge=0)
    reduced_rate: Decimal = Field(alias="reducedRate", ge=0)
    description: str = ""
    dial_plan: str = Field(default="", alias="dialPlan")
    charging_block_id: str = Field(default="", alias="chargingBlockId")
    access_code: str = Field(default=STANDARD_ACCESS_CODE, alias="accessCode")

    @field_validator("rate_id", "dial_plan", "charging_block_id", "access_code", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, float):
            # codes are digit strings, so 95.0 means "95"
            if not value.is_integer():
                raise ValueError(f"expected a whole number, got {value!r}")
            return str(int(value))
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("standard_rate", "reduced_rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: object) -> object:
        # floats go through str() so 0.06 stays 0.06
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @property
    def is_economic(self) -> bool:
        return self.access_code == ECONOMIC_ACCESS_CODE

    @field_serializer("standard_rate", "reduced_rate", when_used="json")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)


class RateTable:
    """Immutable, indexed collection of :class:`RateEntry` rows.

    Built once per run and passed explicitly to the resolver and selector.
    """

    __slots__ = ("_entries", "_by_dial_plan", "_by_country")

    def __init__(self, entries: Iterable[RateEntry]) -> None:
        self._entries: tuple[RateEntry, ...] = tuple(entries)

        by_dial_plan: dict[str, list[RateEntry]] = {}
        by_country: dict[int, list[RateEntry]] = {}
        for entry in self._entries:
            if entry.dial_plan:
                by_dial_plan.setdefault(entry.dial_plan, []).append(entry)
            by_country.setdefault(entry.country_code, []).append(entry)

        self._by_dial_plan: Mapping[str, tuple[RateEntry, ...]] = MappingProxyType(
            {key: tuple(rows) for key, rows in by_dial_plan.items()}
        )
        self._by_country: Mapping[int, tuple[RateEntry, ...]] = MappingProxyType(
            {key: tuple(rows) for key, rows in by_country.items()}
        )

    @property
    def entries(self) -> tuple[RateEntry, ...]:
        return self._entries

    def by_dial_plan(self, dial_plan: str) -> tuple[RateEntry, ...]:
        """Return all rows whose dial plan equals ``dial_plan`` (in table order)."""

        return self._by_dial_plan.get(dial_plan, ())

    def by_country(self, country_code: int) -> tuple[RateEntry, ...]:
        """Return all rows for ``country_code`` (in table order)."""

        return self._by_country.get(country_code, ())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RateEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"RateTable(entries={len(self._entries)})"


__all__ = ["ECONOMIC_ACCESS_CODE", "STANDARD_ACCESS_CODE", "RateEntry", "RateTable"]
