"""Typed failures raised by the parsing pipeline and the offer providers.

Every failure carries a ``kind`` tag. Callers branch on the tag value rather
than on the exception class, and the API layer maps the same attributes
straight onto the error body.
"""
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    AI_VALIDATION = "ai_validation"
    INVALID_SEARCH = "invalid_search"
    EXTERNAL_API = "external_api"


class FlightSearchError(Exception):
    """Base for every classified failure surfaced to the HTTP boundary."""

    kind: ErrorKind
    status_code: int = 500
    error: str = "InternalServerError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_details(self) -> dict:
        return {"kind": self.kind.value}


class AiValidationError(FlightSearchError):
    """The model call failed, returned nothing, or returned unusable output."""

    kind = ErrorKind.AI_VALIDATION
    status_code = 422
    error = "AiValidationError"

    def __init__(self, message: str, raw_output: Optional[Any] = None):
        self.raw_output = raw_output
        super().__init__(message)


class InvalidFlightSearchError(FlightSearchError):
    """The extracted query is well-formed but rejected, or parsing failed unclassified."""

    kind = ErrorKind.INVALID_SEARCH
    status_code = 400
    error = "InvalidFlightSearch"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_details(self) -> dict:
        details = super().to_details()
        details["field"] = self.field
        return details


class ExternalApiError(FlightSearchError):
    """A downstream provider (flight offers) failed."""

    kind = ErrorKind.EXTERNAL_API
    status_code = 502
    error = "ExternalApiError"

    def __init__(self, provider: str, message: Optional[str] = None):
        self.provider = provider
        super().__init__(message or f"External API error: {provider}")

    def to_details(self) -> dict:
        details = super().to_details()
        details["provider"] = self.provider
        return details
