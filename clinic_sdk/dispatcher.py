"""Authenticated request dispatch with a single refresh-and-retry on 401."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import httpx
import structlog

from clinic_sdk.exceptions import ApiError, ErrorKind
from clinic_sdk.refresh import TokenRefresher
from clinic_sdk.signals import SessionSignal
from clinic_sdk.store import CredentialStore
from clinic_sdk.transport import RequestDescriptor, failure_from_response, send, success_payload

INVALID_CREDENTIALS_MESSAGE = "invalid credentials"
NOT_AUTHORIZED_MESSAGE = "not authorized"

logger = structlog.get_logger(__name__)


class DispatchState(str, Enum):
    """Lifecycle of a single dispatch."""

    INITIAL = "initial"
    SENT = "sent"
    REFRESHING = "refreshing"
    RETRIED = "retried"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[DispatchState, frozenset[DispatchState]] = {
    DispatchState.INITIAL: frozenset({DispatchState.SENT, DispatchState.FAILED}),
    DispatchState.SENT: frozenset(
        {DispatchState.REFRESHING, DispatchState.SUCCEEDED, DispatchState.FAILED}
    ),
    DispatchState.REFRESHING: frozenset({DispatchState.RETRIED, DispatchState.FAILED}),
    DispatchState.RETRIED: frozenset({DispatchState.SUCCEEDED, DispatchState.FAILED}),
    DispatchState.SUCCEEDED: frozenset(),
    DispatchState.FAILED: frozenset(),
}


class _DispatchRun:
    """State tracker for one dispatch; rejects any transition outside the table."""

    def __init__(self, descriptor: RequestDescriptor) -> None:
        self.descriptor = descriptor
        self.state = DispatchState.INITIAL
        self.history: list[DispatchState] = [DispatchState.INITIAL]

    def advance(self, target: DispatchState) -> None:
        """Move to ``target`` or raise when the transition is not allowed."""
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal dispatch transition {self.state.value} -> {target.value}.")
        self.state = target
        self.history.append(target)


class RequestDispatcher:
    """Attach the access credential, renew it once on 401, and normalize the outcome."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: CredentialStore,
        signal: SessionSignal | None = None,
        refresher: TokenRefresher | None = None,
    ) -> None:
        self._client = http_client
        self._store = store
        self._signal = signal or SessionSignal()
        self._refresher = refresher or TokenRefresher(http_client, store)
        self._expiry_lock = asyncio.Lock()
        self.last_history: list[DispatchState] = []

    @property
    def signal(self) -> SessionSignal:
        return self._signal

    async def dispatch(self, descriptor: RequestDescriptor) -> Any:
        """Send ``descriptor`` and return its parsed payload, raising ApiError on failure."""
        run = _DispatchRun(descriptor)
        try:
            payload = await self._run(run)
        except ApiError as exc:
            if run.state is not DispatchState.FAILED:
                run.advance(DispatchState.FAILED)
            logger.info(
                "dispatch_failed",
                method=descriptor.method,
                path=descriptor.path,
                status_code=exc.status_code,
                kind=exc.kind.value,
            )
            raise
        finally:
            self.last_history = run.history
        return payload

    async def _run(self, run: _DispatchRun) -> Any:
        """Drive one dispatch through its states to a terminal outcome."""
        descriptor = run.descriptor
        token = await self._store.get_access()
        response = await send(self._client, descriptor, token)
        run.advance(DispatchState.SENT)

        if response.status_code == 401:
            if not token:
                raise ApiError(INVALID_CREDENTIALS_MESSAGE, 401, kind=ErrorKind.NO_CREDENTIAL)

            run.advance(DispatchState.REFRESHING)
            logger.info("dispatch_refresh_started", method=descriptor.method, path=descriptor.path)
            refreshed = await self._refresher.refresh()
            token = await self._store.get_access() if refreshed else None
            if not token:
                await self._expire_session(run)

            response = await send(self._client, descriptor, token)
            run.advance(DispatchState.RETRIED)
            if response.status_code == 401:
                await self._expire_session(run)

        if not response.is_success:
            raise failure_from_response(response)

        payload = success_payload(response)
        run.advance(DispatchState.SUCCEEDED)
        return payload

    async def _expire_session(self, run: _DispatchRun) -> None:
        """Clear credentials, signal expiry once per live session, and fail the dispatch."""
        run.advance(DispatchState.FAILED)
        # Check and clear under one lock so overlapping failures signal only once.
        async with self._expiry_lock:
            had_session = (
                await self._store.get_access() is not None
                or await self._store.get_refresh() is not None
            )
            await self._store.clear()
            if had_session:
                logger.warning("session_expired", path=run.descriptor.path)
                await self._signal.session_expired()
        raise ApiError(NOT_AUTHORIZED_MESSAGE, 401, kind=ErrorKind.AUTHENTICATION_EXPIRED)
