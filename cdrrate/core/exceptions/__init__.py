"""Exception handling module."""

from cdrrate.core.exceptions.base import (
    CdrRateError,
    ConfigurationError,
    DataValidationError,
    RateTableError,
    TimestampParseError,
)
from cdrrate.core.exceptions.codes import ErrorCode

__all__ = [
    "CdrRateError",
    "ConfigurationError",
    "DataValidationError",
    "ErrorCode",
    "RateTableError",
    "TimestampParseError",
]
