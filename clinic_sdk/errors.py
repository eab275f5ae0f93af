"""Map normalized API failures to stable, user-presentable messages."""

from __future__ import annotations

from enum import Enum
from typing import Any

from clinic_sdk.exceptions import ApiError
from clinic_sdk.types import ErrorOverrides

DEFAULT_UNAUTHORIZED_MESSAGE = "session expired, please sign in again"
DEFAULT_FORBIDDEN_MESSAGE = "not permitted for this resource"
DEFAULT_SERVER_MESSAGE = "unexpected error, please retry"
DEFAULT_VALIDATION_MESSAGE = "invalid data, please check and retry"
LAST_RESORT_MESSAGE = "request failed"


class ErrorCategory(str, Enum):
    """Presentation category of a failed request."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION_FAILURE = "validation_failure"
    SERVER_FAILURE = "server_failure"
    UNCLASSIFIED = "unclassified"


def categorize(failure: ApiError) -> ErrorCategory:
    """Return the presentation category for a failure's status code."""
    status_code = failure.status_code
    if status_code == 401:
        return ErrorCategory.UNAUTHORIZED
    if status_code == 403:
        return ErrorCategory.FORBIDDEN
    if status_code >= 500:
        return ErrorCategory.SERVER_FAILURE
    if status_code == 400:
        return ErrorCategory.VALIDATION_FAILURE
    return ErrorCategory.UNCLASSIFIED


def _join(items: list[Any]) -> str:
    """Join list items as strings with a comma separator."""
    return ", ".join(str(item) for item in items)


def _validation_message(body: Any, overrides: ErrorOverrides) -> str:
    """Extract the most specific validation message from a 400 response body."""
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, list) and _join(message):
            return _join(message)
        if isinstance(message, str) and message:
            return message
        errors = body.get("errors")
        if isinstance(errors, list) and _join(errors):
            return _join(errors)
    return overrides.get("validation") or DEFAULT_VALIDATION_MESSAGE


def classify(
    failure: BaseException,
    fallback_message: str,
    overrides: ErrorOverrides | None = None,
) -> str:
    """Return a human-facing message for a failure.

    Anything that is not an :class:`ApiError` maps to ``fallback_message``. The
    result is never empty.
    """
    overrides = overrides or {}
    if not isinstance(failure, ApiError):
        return fallback_message or LAST_RESORT_MESSAGE

    category = categorize(failure)
    if category is ErrorCategory.UNAUTHORIZED:
        message = overrides.get("unauthorized") or DEFAULT_UNAUTHORIZED_MESSAGE
    elif category is ErrorCategory.FORBIDDEN:
        message = overrides.get("forbidden") or DEFAULT_FORBIDDEN_MESSAGE
    elif category is ErrorCategory.SERVER_FAILURE:
        message = overrides.get("server") or DEFAULT_SERVER_MESSAGE
    elif category is ErrorCategory.VALIDATION_FAILURE:
        message = _validation_message(failure.body, overrides)
    else:
        message = failure.message or fallback_message
    return message or fallback_message or LAST_RESORT_MESSAGE
