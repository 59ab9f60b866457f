"""Call record and rating result models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CallClass(str, Enum):
    """Call class derived from the called-address-nature code."""

    LANDLINE = "landline"
    MOBILE = "mobile"
    INTERNATIONAL = "international"
    UNKNOWN = "unknown"


class RatePeriod(str, Enum):
    """The two pricing tiers a call duration is split across."""

    STANDARD = "standard"
    REDUCED = "reduced"


@dataclass(frozen=True)
class CallRecord:
    """Decoded view of one CDR line used by the rating pipeline."""

    answer_time: datetime
    end_time: datetime
    subscriber: str
    destination: str
    call_class: CallClass
    fields: Mapping[str, str] = field(default_factory=dict)
    timestamp_fallback: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def duration_seconds(self) -> int:
        return max(0, int((self.end_time - self.answer_time).total_seconds()))


@dataclass(frozen=True)
class Segment:
    """A contiguous slice of a call inside a single rate period."""

    start: datetime
    end: datetime
    period: RatePeriod

    @property
    def seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


@dataclass(frozen=True)
class Segmentation:
    """Tier-split durations of one call."""

    standard_seconds: int = 0
    reduced_seconds: int = 0

    @property
    def total_seconds(self) -> int:
        return self.standard_seconds + self.reduced_seconds


@dataclass(frozen=True)
class ChargeResult:
    """Priced outcome of one call."""

    standard_seconds: int
    reduced_seconds: int
    billed_seconds: int
    amount: Decimal


class RatedCall(BaseModel):
    """Output record emitted by the pipeline for one input line."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    net_type: str = Field(alias="NETTYPE")
    bill_type: str = Field(alias="BILLTYPE")
    subscriber: str = Field(alias="SUBSCRIBER")
    destination: str = Field(alias="DESTINATION")
    call_class: CallClass = Field(alias="CTYPE")
    economical: bool = Field(default=False, alias="ECONOMICAL")
    country_code: int | None = Field(default=None, alias="COUNTRYCODE")
    ans_date: str = Field(alias="ANSDATE")
    ans_time: str = Field(alias="ANSTIME")
    end_date: str = Field(alias="ENDDATE")
    end_time: str = Field(alias="ENDTIME")
    conversation_time: str = Field(alias="CONVERSATIONTIME")
    calculated_conversation_time: int = Field(alias="CALCULATEDCONVERSATIONTIME")
    standard_seconds: int = Field(alias="STANDARDSECONDS")
    reduced_seconds: int = Field(alias="REDUCEDSECONDS")
    total_charges: Decimal = Field(alias="TOTALCHARGES")

    # diagnostics, never serialized
    resolution_method: str = Field(default="default", exclude=True)
    ambiguous_match: bool = Field(default=False, exclude=True)
    timestamp_fallback: bool = Field(default=False, exclude=True)
    rate_id: str = Field(default="default", exclude=True)

    @field_serializer("total_charges", when_used="json")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal to string."""
        return str(value)

    @field_serializer("call_class")
    def serialize_call_class(self, value: CallClass) -> str:
        return value.value

    def to_output(self, mode: str = "python") -> dict[str, Any]:
        """Return the record keyed by its upper-case output names."""

        return self.model_dump(by_alias=True, mode=mode)


__all__ = [
    "CallClass",
    "CallRecord",
    "ChargeResult",
    "RatePeriod",
    "RatedCall",
    "Segment",
    "Segmentation",
]
