"""Sign-in, sign-out and session helpers."""

from __future__ import annotations

import json

import structlog
from pydantic import ValidationError

from clinic_sdk.client import ApiClient
from clinic_sdk.dispatcher import INVALID_CREDENTIALS_MESSAGE
from clinic_sdk.exceptions import ApiError, ErrorKind
from clinic_sdk.schemas import SignInRequest, TokenPairResponse
from clinic_sdk.transport import RequestDescriptor, failure_from_response, send
from clinic_sdk.types import TokenPayload

SIGNIN_PATH = "/auth/signin"
LOGOUT_PATH = "/auth/logout"

logger = structlog.get_logger(__name__)


class AuthService:
    """Credential lifecycle operations against the auth endpoints."""

    def __init__(self, api_client: ApiClient) -> None:
        self._client = api_client.http_client
        self._store = api_client.store

    async def sign_in(self, email: str, password: str) -> TokenPayload:
        """Exchange email and password for a credential pair and store it."""
        try:
            request = SignInRequest(email=email, password=password)
        except ValidationError as exc:
            raise ApiError(
                "invalid sign-in payload",
                400,
                body={"errors": [error["msg"] for error in exc.errors()]},
            ) from exc

        response = await send(
            self._client,
            RequestDescriptor(
                path=SIGNIN_PATH,
                method="POST",
                content=json.dumps(request.model_dump()),
            ),
            None,
        )
        if response.status_code == 401:
            logger.info("sign_in_rejected")
            raise ApiError(
                INVALID_CREDENTIALS_MESSAGE, 401, kind=ErrorKind.AUTHENTICATION_EXPIRED
            )
        if not response.is_success:
            raise failure_from_response(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(
                "invalid JSON response", 0, body=response.text, kind=ErrorKind.TRANSPORT_FAILURE
            ) from exc

        result: TokenPayload = {}
        try:
            tokens = TokenPairResponse.model_validate(payload)
        except ValidationError:
            logger.warning("sign_in_missing_access_token")
            return result

        await self._store.set_tokens(tokens.access_token, tokens.refresh_token)
        logger.info("sign_in_succeeded")
        result["access_token"] = tokens.access_token
        if tokens.refresh_token is not None:
            result["refresh_token"] = tokens.refresh_token
        return result

    async def logout(self) -> None:
        """Revoke the session server-side when possible; always clear local credentials."""
        token = await self._store.get_access()
        if not token:
            await self._store.clear()
            return
        try:
            response = await send(
                self._client, RequestDescriptor(path=LOGOUT_PATH, method="POST"), token
            )
            if not response.is_success:
                logger.info("logout_rejected", status_code=response.status_code)
        except ApiError as exc:
            logger.warning("logout_request_failed", reason=exc.kind.value)
        finally:
            await self._store.clear()

    async def clear_session(self) -> None:
        """Drop local credentials without contacting the server."""
        await self._store.clear()

    async def is_authenticated(self) -> bool:
        """Return True when an access credential is stored."""
        return bool(await self._store.get_access())
