"""Raw HTTP send helpers shared by the dispatcher, refresher and auth service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from clinic_sdk.exceptions import ApiError, ErrorKind

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one outbound request, replayable after refresh."""

    path: str
    method: str = "GET"
    content: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    cache: str | None = None


def build_headers(
    token: str | None,
    overrides: Mapping[str, str] | None = None,
    cache: str | None = None,
) -> dict[str, str]:
    """Build request headers with a JSON default, caller overrides and bearer token."""
    headers: dict[str, str] = {"Content-Type": JSON_CONTENT_TYPE}
    if overrides:
        for key, value in overrides.items():
            # Header names are case-insensitive; an override replaces the default key.
            for existing in [name for name in headers if name.lower() == key.lower()]:
                del headers[existing]
            headers[key] = value
    if cache is not None:
        headers["Cache-Control"] = cache
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def send(
    client: httpx.AsyncClient,
    descriptor: RequestDescriptor,
    token: str | None,
) -> httpx.Response:
    """Send a descriptor with the given bearer token and normalize transport failures."""
    headers = build_headers(token, descriptor.headers, descriptor.cache)
    try:
        return await client.request(
            descriptor.method,
            descriptor.path,
            content=descriptor.content,
            headers=headers,
        )
    except httpx.RequestError as exc:
        raise ApiError(
            "network error", 0, body=str(exc), kind=ErrorKind.TRANSPORT_FAILURE
        ) from exc


def is_json_response(response: httpx.Response) -> bool:
    """Return True when the response declares a JSON content type."""
    return JSON_CONTENT_TYPE in response.headers.get("content-type", "")


def error_body(response: httpx.Response) -> Any:
    """Parse a failed response body as JSON, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


def failure_from_response(response: httpx.Response) -> ApiError:
    """Build the normalized failure for a non-2xx response."""
    return ApiError(response.reason_phrase, response.status_code, body=error_body(response))


def success_payload(response: httpx.Response) -> Any:
    """Return the parsed JSON payload of a 2xx response, or None for non-JSON bodies."""
    if not is_json_response(response) or not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            "invalid JSON response",
            0,
            body=response.text,
            kind=ErrorKind.TRANSPORT_FAILURE,
        ) from exc
