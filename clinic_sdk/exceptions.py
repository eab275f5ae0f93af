"""SDK exception hierarchy."""

from __future__ import annotations

from enum import Enum
from typing import Any


class SDKError(Exception):
    """Base class for all SDK-specific exceptions."""


class ErrorKind(str, Enum):
    """Failure taxonomy attached to every normalized API error."""

    NO_CREDENTIAL = "no_credential"
    AUTHENTICATION_EXPIRED = "authentication_expired"
    PERMISSION_DENIED = "permission_denied"
    VALIDATION_FAILURE = "validation_failure"
    SERVER_FAILURE = "server_failure"
    TRANSPORT_FAILURE = "transport_failure"
    UNCLASSIFIED = "unclassified"


def kind_for_status(status_code: int, body: Any = None) -> ErrorKind:
    """Derive the failure kind from an HTTP status code and parsed body."""
    if status_code == 0:
        return ErrorKind.TRANSPORT_FAILURE
    if status_code == 401:
        return ErrorKind.AUTHENTICATION_EXPIRED
    if status_code == 403:
        return ErrorKind.PERMISSION_DENIED
    if status_code == 400 and isinstance(body, dict):
        return ErrorKind.VALIDATION_FAILURE
    if status_code >= 500:
        return ErrorKind.SERVER_FAILURE
    return ErrorKind.UNCLASSIFIED


class ApiError(SDKError):
    """Raised for every failed dispatch: non-2xx, refresh failure or transport failure.

    ``status_code`` is ``0`` when no response was received at all. ``body`` holds the
    parsed JSON payload, the raw response text, or ``None``.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
        kind: ErrorKind | None = None,
    ) -> None:
        """Initialize with HTTP status context and an optional explicit kind."""
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.kind = kind or kind_for_status(status_code, body)

    def __repr__(self) -> str:
        return (
            f"ApiError(message={self.message!r}, status_code={self.status_code}, "
            f"kind={self.kind.value!r})"
        )
