"""Exchange the refresh credential for a new access/refresh pair."""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from clinic_sdk.exceptions import ApiError
from clinic_sdk.schemas import TokenPairResponse
from clinic_sdk.store import CredentialStore
from clinic_sdk.transport import RequestDescriptor, send

REFRESH_PATH = "/auth/refresh"

logger = structlog.get_logger(__name__)


class TokenRefresher:
    """Run the single refresh exchange used by the dispatcher.

    Concurrent callers are not de-duplicated: every dispatch that observes a 401
    performs its own exchange and the last store write wins.
    """

    def __init__(self, http_client: httpx.AsyncClient, store: CredentialStore) -> None:
        self._client = http_client
        self._store = store
        self.attempts = 0

    async def refresh(self) -> bool:
        """Return True when a new access credential has been installed in the store."""
        refresh_token = await self._store.get_refresh()
        if not refresh_token:
            logger.info("token_refresh_skipped", reason="no_refresh_token")
            return False

        self.attempts += 1
        try:
            response = await send(
                self._client,
                RequestDescriptor(path=REFRESH_PATH, method="POST"),
                refresh_token,
            )
        except ApiError as exc:
            logger.warning("token_refresh_failed", reason=exc.kind.value)
            return False

        if not response.is_success:
            logger.warning("token_refresh_rejected", status_code=response.status_code)
            return False

        try:
            tokens = TokenPairResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("token_refresh_failed", reason="invalid_payload")
            return False

        await self._store.set_tokens(tokens.access_token, tokens.refresh_token)
        logger.info("token_refresh_succeeded", rotated_refresh=tokens.refresh_token is not None)
        return True
