"""Async HTTP client facade for the clinic admin API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from clinic_sdk.config import Settings, get_settings
from clinic_sdk.dispatcher import RequestDispatcher
from clinic_sdk.signals import SessionSignal
from clinic_sdk.store import CredentialStore
from clinic_sdk.transport import RequestDescriptor


def _serialize(body: Any) -> str | None:
    """Serialize a request body to JSON text when one is given."""
    if body is None:
        return None
    return json.dumps(body)


class ApiClient:
    """Verb-shaped entry points that all route through the request dispatcher."""

    def __init__(
        self,
        base_url: str,
        store: CredentialStore,
        signal: SessionSignal | None = None,
        timeout: httpx.Timeout | float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create client with transport defaults and optional injected transport."""
        self._owns_client = http_client is None
        if http_client is None:
            kwargs: dict[str, Any] = {"base_url": base_url.rstrip("/")}
            if timeout is not None:
                kwargs["timeout"] = timeout
            http_client = httpx.AsyncClient(**kwargs)
        self._client = http_client
        self.store = store
        self.dispatcher = RequestDispatcher(http_client, store, signal=signal)

    @classmethod
    def from_settings(
        cls,
        store: CredentialStore,
        signal: SessionSignal | None = None,
        settings: Settings | None = None,
    ) -> ApiClient:
        """Build a client for the configured base URL."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.api.base_url_str,
            store=store,
            signal=signal,
            timeout=settings.api.timeout_seconds,
        )

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def signal(self) -> SessionSignal:
        return self.dispatcher.signal

    async def fetch(self, path: str, headers: Mapping[str, str] | None = None) -> Any:
        """GET a resource."""
        return await self._dispatch("GET", path, headers=headers)

    async def create(
        self, path: str, body: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        """POST a new resource."""
        return await self._dispatch("POST", path, body=body, headers=headers)

    async def update(
        self, path: str, body: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        """PATCH an existing resource."""
        return await self._dispatch("PATCH", path, body=body, headers=headers)

    async def remove(self, path: str, headers: Mapping[str, str] | None = None) -> Any:
        """DELETE a resource."""
        return await self._dispatch("DELETE", path, headers=headers)

    async def aclose(self) -> None:
        """Close underlying HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Exit async context manager and close managed resources."""
        del exc_type, exc, tb
        await self.aclose()

    async def _dispatch(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        descriptor = RequestDescriptor(
            path=path,
            method=method,
            content=_serialize(body),
            headers=dict(headers or {}),
        )
        return await self.dispatcher.dispatch(descriptor)
