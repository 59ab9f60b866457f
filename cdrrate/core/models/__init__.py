"""Data models module."""

from cdrrate.core.models.call import (
    CallClass,
    CallRecord,
    ChargeResult,
    RatedCall,
    RatePeriod,
    Segment,
    Segmentation,
)
from cdrrate.core.models.rates import (
    ECONOMIC_ACCESS_CODE,
    STANDARD_ACCESS_CODE,
    RateEntry,
    RateTable,
)

__all__ = [
    "CallClass",
    "CallRecord",
    "ChargeResult",
    "ECONOMIC_ACCESS_CODE",
    "RateEntry",
    "RateTable",
    "RatePeriod",
    "RatedCall",
    "STANDARD_ACCESS_CODE",
    "Segment",
    "Segmentation",
]
