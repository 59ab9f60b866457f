"""cdrrate core exception classes."""

from typing import Any

from cdrrate.core.exceptions.codes import ErrorCode


class CdrRateError(Exception):
    """Base exception for cdrrate."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: human readable message
            error_code: stable error code
            details: extra structured details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {"code": self.error_code, "message": self.message, "details": dict(self.details)}


class DataValidationError(CdrRateError):
    """Input data failed validation."""

    def __init__(
        self,
        message: str,
        validation_errors: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
        error_code: str = ErrorCode.VALIDATION.value,
    ):
        super_details = details or {}
        if validation_errors:
            super_details["validation_errors"] = validation_errors
        super().__init__(message, error_code, super_details)
        self.validation_errors = validation_errors or {}


class RateTableError(DataValidationError):
    """The rate table could not be read or contains invalid rows."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        validation_errors: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if path is not None:
            super_details["path"] = path
        super().__init__(message, validation_errors, super_details, ErrorCode.RATE_TABLE.value)
        self.path = path


class ConfigurationError(CdrRateError):
    """Configuration values are missing or invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION.value, super_details)
        self.setting = setting


class TimestampParseError(CdrRateError):
    """Date/time sub-fields do not form a valid calendar timestamp."""

    def __init__(
        self,
        message: str,
        date_text: str,
        time_text: str,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details.update({"date": date_text, "time": time_text})
        super().__init__(message, ErrorCode.TIMESTAMP.value, super_details)
        self.date_text = date_text
        self.time_text = time_text
