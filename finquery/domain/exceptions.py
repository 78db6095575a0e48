"""Domain-specific exceptions and the error codes reported to callers"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FETCH_ERROR = "FETCH_ERROR"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"


class DomainException(Exception):
    """Base exception for domain layer"""

    code: ErrorCode = ErrorCode.FETCH_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_error_payload(self) -> Dict[str, Any]:
        return {"code": self.code.value, "details": self.message}


class ValidationError(DomainException):
    """A query parameter is malformed or out of range"""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.value = value
        self.reason = reason

    def to_error_payload(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "field": self.field,
            "value": self.value,
            "details": self.reason,
        }


class DataSourceError(DomainException):
    """The external record collection could not be obtained"""

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        # Transient failures are worth retrying; the rest fail fast
        self.transient = transient


class FetchError(DataSourceError):
    """Data source answered, but the payload or response was unusable"""

    code = ErrorCode.FETCH_ERROR


class SourceUnavailableError(DataSourceError):
    """Data source could not be reached or located"""

    code = ErrorCode.SOURCE_UNAVAILABLE


class FetchTimeoutError(DomainException):
    """Overall fetch deadline elapsed before any attempt succeeded"""

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str, last_error: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.last_error = last_error
