"""Unit tests for failure classification and messages."""

from __future__ import annotations

import pytest

from clinic_sdk.errors import (
    DEFAULT_FORBIDDEN_MESSAGE,
    DEFAULT_SERVER_MESSAGE,
    DEFAULT_UNAUTHORIZED_MESSAGE,
    DEFAULT_VALIDATION_MESSAGE,
    ErrorCategory,
    categorize,
    classify,
)
from clinic_sdk.exceptions import ApiError, ErrorKind, kind_for_status

FALLBACK = "could not load appointments"


def test_classify_joins_list_message_for_400() -> None:
    """A list ``message`` field is joined with commas."""
    failure = ApiError("Bad Request", 400, body={"message": ["A", "B"]})
    assert classify(failure, FALLBACK) == "A, B"


def test_classify_uses_string_message_and_errors_list_for_400() -> None:
    """String messages are used verbatim; ``errors`` lists are joined."""
    assert classify(ApiError("Bad Request", 400, body={"message": "date required"}), FALLBACK) == (
        "date required"
    )
    assert classify(ApiError("Bad Request", 400, body={"errors": [1, "two"]}), FALLBACK) == (
        "1, two"
    )


def test_classify_empty_400_body_uses_validation_override_or_default() -> None:
    """A 400 without usable details falls back to the validation message."""
    failure = ApiError("Bad Request", 400, body={})
    assert classify(failure, FALLBACK) == DEFAULT_VALIDATION_MESSAGE
    assert classify(failure, FALLBACK, {"validation": "check the form"}) == "check the form"
    assert classify(ApiError("Bad Request", 400, body="plain text"), FALLBACK) == (
        DEFAULT_VALIDATION_MESSAGE
    )


def test_classify_empty_list_message_falls_through_to_errors_and_override() -> None:
    """An empty ``message`` list never hides later details or the validation override."""
    empty_message = ApiError("Bad Request", 400, body={"message": []})
    assert classify(empty_message, "could not load", {"validation": "check filters"}) == (
        "check filters"
    )
    assert classify(empty_message, FALLBACK) == DEFAULT_VALIDATION_MESSAGE
    assert classify(
        ApiError("Bad Request", 400, body={"message": [], "errors": ["date required"]}), FALLBACK
    ) == "date required"
    assert classify(
        ApiError("Bad Request", 400, body={"message": [], "errors": []}), FALLBACK
    ) == DEFAULT_VALIDATION_MESSAGE


def test_classify_forbidden_ignores_body() -> None:
    """403 always yields the forbidden message."""
    failure = ApiError("Forbidden", 403, body={"message": "custom"})
    assert classify(failure, FALLBACK) == DEFAULT_FORBIDDEN_MESSAGE
    assert classify(failure, FALLBACK, {"forbidden": "admins only"}) == "admins only"


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [
        (401, DEFAULT_UNAUTHORIZED_MESSAGE),
        (500, DEFAULT_SERVER_MESSAGE),
        (503, DEFAULT_SERVER_MESSAGE),
    ],
)
def test_classify_status_defaults(status_code: int, expected: str) -> None:
    """401 and 5xx map to their default messages."""
    assert classify(ApiError("x", status_code), FALLBACK) == expected


def test_classify_overrides_unauthorized_and_server() -> None:
    """Overrides replace the default 401 and 5xx messages."""
    overrides = {"unauthorized": "bad login", "server": "try later"}
    assert classify(ApiError("x", 401), FALLBACK, overrides) == "bad login"
    assert classify(ApiError("x", 504), FALLBACK, overrides) == "try later"


def test_classify_other_status_uses_own_message_or_fallback() -> None:
    """Unclassified failures use their message, then the fallback."""
    assert classify(ApiError("Not Found", 404), FALLBACK) == "Not Found"
    assert classify(ApiError("", 409), FALLBACK) == FALLBACK
    assert classify(ApiError("network error", 0), FALLBACK) == "network error"


def test_classify_is_total_for_non_api_errors_and_empty_inputs() -> None:
    """Every input maps to a non-empty string."""
    assert classify(RuntimeError("boom"), FALLBACK) == FALLBACK
    assert classify(ApiError("", 418), "") != ""
    assert classify(ApiError("Bad Request", 400, body={"message": []}), "") != ""


def test_classify_is_deterministic() -> None:
    """Identical inputs produce identical messages."""
    failure = ApiError("Bad Request", 400, body={"errors": ["x"]})
    assert classify(failure, FALLBACK) == classify(failure, FALLBACK)


def test_categorize_maps_status_codes() -> None:
    """Status codes map to presentation categories."""
    assert categorize(ApiError("x", 401)) is ErrorCategory.UNAUTHORIZED
    assert categorize(ApiError("x", 403)) is ErrorCategory.FORBIDDEN
    assert categorize(ApiError("x", 400)) is ErrorCategory.VALIDATION_FAILURE
    assert categorize(ApiError("x", 502)) is ErrorCategory.SERVER_FAILURE
    assert categorize(ApiError("x", 404)) is ErrorCategory.UNCLASSIFIED


def test_error_kind_derivation_and_explicit_override() -> None:
    """Kinds derive from status and body unless set explicitly."""
    assert kind_for_status(0) is ErrorKind.TRANSPORT_FAILURE
    assert kind_for_status(400, {"message": "x"}) is ErrorKind.VALIDATION_FAILURE
    assert kind_for_status(400, "text") is ErrorKind.UNCLASSIFIED
    assert kind_for_status(404) is ErrorKind.UNCLASSIFIED
    explicit = ApiError("invalid credentials", 401, kind=ErrorKind.NO_CREDENTIAL)
    assert explicit.kind is ErrorKind.NO_CREDENTIAL
    assert "no_credential" in repr(explicit)
