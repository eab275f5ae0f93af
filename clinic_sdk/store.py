"""Credential storage backends shared by the dispatcher and auth services."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import structlog
from redis.asyncio.client import Redis
from redis.exceptions import RedisError

from clinic_sdk.exceptions import SDKError

logger = structlog.get_logger(__name__)

Listener = Callable[[], None]


class CredentialStoreError(SDKError):
    """Raised when the credential backend cannot be read or written."""


class CredentialStore(Protocol):
    """Key/value persistence for the access and refresh credentials."""

    async def get_access(self) -> str | None: ...

    async def get_refresh(self) -> str | None: ...

    async def set_tokens(self, access_token: str, refresh_token: str | None = None) -> None: ...

    async def clear(self) -> None: ...

    def subscribe(self, listener: Listener) -> Callable[[], None]: ...


class _ListenerRegistry:
    """Change-notification fan-out shared by store implementations."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        """Invoke every listener; a failing listener does not block the others."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("credential_listener_failed")


class InMemoryCredentialStore(_ListenerRegistry):
    """Process-local credential store."""

    def __init__(self, access_token: str | None = None, refresh_token: str | None = None) -> None:
        super().__init__()
        self._access_token = access_token
        self._refresh_token = refresh_token

    async def get_access(self) -> str | None:
        return self._access_token

    async def get_refresh(self) -> str | None:
        return self._refresh_token

    async def set_tokens(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store a new access token and, when supplied, a new refresh token."""
        self._access_token = access_token
        if refresh_token is not None:
            self._refresh_token = refresh_token
        self._notify()

    async def clear(self) -> None:
        """Forget both credentials."""
        self._access_token = None
        self._refresh_token = None
        self._notify()


class RedisCredentialStore(_ListenerRegistry):
    """Redis-backed credential store for sessions shared across processes."""

    def __init__(self, redis_client: Redis, key_prefix: str = "clinic_admin") -> None:
        super().__init__()
        self._redis = redis_client
        self._access_key = f"{key_prefix}:access_token"
        self._refresh_key = f"{key_prefix}:refresh_token"

    async def get_access(self) -> str | None:
        return await self._get(self._access_key)

    async def get_refresh(self) -> str | None:
        return await self._get(self._refresh_key)

    async def set_tokens(self, access_token: str, refresh_token: str | None = None) -> None:
        """Store a new access token and, when supplied, a new refresh token."""
        try:
            await self._redis.set(self._access_key, access_token)
            if refresh_token is not None:
                await self._redis.set(self._refresh_key, refresh_token)
        except RedisError as exc:
            raise CredentialStoreError("Credential store unavailable.") from exc
        self._notify()

    async def clear(self) -> None:
        """Delete both credential keys."""
        try:
            await self._redis.delete(self._access_key, self._refresh_key)
        except RedisError as exc:
            raise CredentialStoreError("Credential store unavailable.") from exc
        self._notify()

    async def _get(self, key: str) -> str | None:
        """Read a key and decode it to text."""
        try:
            value = await self._redis.get(key)
        except RedisError as exc:
            raise CredentialStoreError("Credential store unavailable.") from exc
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)
