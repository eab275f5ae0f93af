"""Session-expired signal consumed by the sign-in entry point."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_EXPIRED_NOTICE = "Your session has expired. Please sign in again."

NavigateCallback = Callable[[], Awaitable[None] | None]


class SessionSignal:
    """One-shot notice plus a navigation hook fired when a session expires.

    Publishing twice only overwrites the pending notice with the same text, so a
    duplicate expiry caused by overlapping requests leaves the state consistent.
    """

    def __init__(
        self,
        navigate_to_sign_in: NavigateCallback | None = None,
        notice: str = DEFAULT_EXPIRED_NOTICE,
    ) -> None:
        self._navigate_to_sign_in = navigate_to_sign_in
        self._notice_text = notice
        self._pending: str | None = None
        self.expired_count = 0

    async def session_expired(self) -> None:
        """Publish the expiry notice and trigger navigation to sign-in."""
        self.expired_count += 1
        self.publish(self._notice_text)
        if self._navigate_to_sign_in is None:
            return
        try:
            result = self._navigate_to_sign_in()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("session_navigation_failed")

    def publish(self, message: str) -> None:
        """Leave a notice for the next reader."""
        self._pending = message
        logger.info("session_notice_published")

    def peek(self) -> str | None:
        return self._pending

    def consume(self) -> str | None:
        """Return the pending notice and clear it."""
        message, self._pending = self._pending, None
        return message
