"""Standardized error codes for cdrrate exceptions."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes carried by :class:`CdrRateError` instances."""

    GENERAL = "GENERAL_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    RATE_TABLE = "RATE_TABLE_ERROR"
    CONFIGURATION = "CONFIGURATION_ERROR"
    TIMESTAMP = "TIMESTAMP_PARSE_ERROR"


__all__ = ["ErrorCode"]
