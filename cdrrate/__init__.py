"""cdrrate - call detail record rating.

Decodes pipe-delimited CDR lines, resolves destinations against a rate table
and prices each call across standard and reduced rate periods.

Examples:
    >>> import cdrrate
    >>> table = cdrrate.load_rate_table("cdr.json")
    >>> pipeline = cdrrate.RatingPipeline(table)
    >>> rated = pipeline.rate_lines(open("calls.DLV", encoding="utf-8"))
"""

from cdrrate.core.config import RatingConfig
from cdrrate.core.exceptions import CdrRateError, RateTableError
from cdrrate.core.models import CallClass, RatedCall, RateEntry, RatePeriod, RateTable
from cdrrate.core.services import (
    DEFAULT_COUNTRY,
    ChargeCalculator,
    DestinationResolver,
    RatePeriodPolicy,
    RateSelector,
    RatingPipeline,
    decode_line,
    load_rate_table,
    split,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_COUNTRY",
    "CallClass",
    "CdrRateError",
    "ChargeCalculator",
    "DestinationResolver",
    "RateEntry",
    "RatePeriod",
    "RatePeriodPolicy",
    "RateSelector",
    "RateTable",
    "RateTableError",
    "RatedCall",
    "RatingConfig",
    "RatingPipeline",
    "decode_line",
    "load_rate_table",
    "split",
]
