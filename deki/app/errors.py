"""Error hierarchy raised by the client.

Construction and validation failures are raised synchronously, before any
request is issued. Exchange failures split into ``HttpError`` (a response with
an unacceptable status arrived) and ``TransportError`` (no response at all).
"""
from __future__ import annotations

from typing import Any


class DekiError(Exception):
    """Base for every error raised by this package."""


class ConstructionError(DekiError, ValueError):
    """Raised when a URL or resource identifier cannot be built."""


class ValidationError(DekiError, ValueError):
    """Raised when caller-supplied arguments have the wrong type or shape."""


class SchemaError(DekiError):
    """Raised for malformed schemas and for values a primitive cannot convert."""


class HttpClientError(DekiError):
    """Base for HTTP exchange failures."""

    status: int | None = None


class HttpError(HttpClientError):
    """A response arrived with a status outside 2xx (and other than 304)."""

    def __init__(self, message: str, status: int, response_text: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.response_text = response_text

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "responseText": self.response_text,
        }

    def __str__(self) -> str:
        return f"{self.status} {self.message}".strip()


class ApiRequestError(HttpError):
    """HttpError whose body was run through the API error schema."""

    def __init__(self, error: HttpError, info: dict[str, Any]) -> None:
        super().__init__(error.message, error.status, error.response_text)
        self.info = info


class TransportError(HttpClientError):
    """No HTTP response could be obtained (network, DNS, timeout, abort)."""

    status = None


class UploadInitiationError(TransportError):
    """The upload could not be initiated."""


class TooManyRedirectsError(TransportError):
    """The redirect hop bound was exceeded."""
