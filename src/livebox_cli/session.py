"""Authentication state for one Livebox and credential pair."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from types import TracebackType
from typing import Any, cast

import httpx

from livebox_cli.connection import Credentials
from livebox_cli.errors import (
    AuthMalformedResponseError,
    InvalidCredentialsError,
    UnreachableError,
)
from livebox_cli.logs import log_request, log_response
from livebox_cli.models.sysbus import RequestEnvelope, Session
from livebox_cli.sdk import SAH_CONTENT_TYPE, create_http_client

APPLICATION_NAME = "livebox-cli"
LOGIN_SERVICE = "sah.Device.Information"
X_SAH_LOGIN = "X-Sah-Login"
X_SAH_LOGOUT = "X-Sah-Logout"

LOGGER = logging.getLogger(__name__)


class SysbusSession:
    """Performs the login handshake and repairs expired sessions on request.

    One instance owns the HTTP client (and therefore the device cookie jar)
    for the whole run. Callers hold the ``Session`` values it hands out and
    pass them back into the invoker.
    """

    def __init__(self, credentials: Credentials, http_client: httpx.Client | None = None):
        self.credentials = credentials
        self.http = http_client if http_client is not None else create_http_client(credentials)

    def __enter__(self) -> SysbusSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def authenticate(self) -> Session:
        context_id = self._login()
        LOGGER.info(
            "Authenticated against %s as %s",
            self.credentials.base_url,
            self.credentials.username,
        )
        return Session(context_id=context_id)

    def reauthenticate(self, session: Session) -> Session:
        """Repeat the handshake and refresh ``session`` in place."""

        LOGGER.info("Session expired, logging in again")
        session.context_id = self._login()
        session.established_at = datetime.now(UTC)
        session.invalidated = False
        return session

    def is_expired(self, session: Session) -> bool:
        return session.invalidated

    def invalidate(self, session: Session) -> None:
        session.invalidated = True

    def headers_for(self, session: Session) -> dict[str, str]:
        return {
            "Content-Type": SAH_CONTENT_TYPE,
            "Accept": SAH_CONTENT_TYPE,
            "X-Context": session.context_id,
        }

    def logout(self, session: Session) -> None:
        """Release the device context; failures are logged, never raised."""

        if session.invalidated:
            return

        request = RequestEnvelope(
            service=LOGIN_SERVICE,
            method="releaseContext",
            parameters={"applicationName": APPLICATION_NAME},
        )
        body = request.model_dump()
        headers = self.headers_for(session)
        headers["Authorization"] = f"{X_SAH_LOGOUT} {session.context_id}"

        log_request(self.credentials.ws_url, body)
        try:
            response = self.http.post(self.credentials.ws_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            LOGGER.warning("Logout failed: %s", exc)
            return
        finally:
            self.invalidate(session)

        log_response(response)
        # the device answers a successful releaseContext with 401
        if not (response.is_success or response.status_code == httpx.codes.UNAUTHORIZED):
            LOGGER.warning("Logout error: %s %s", response.status_code, response.text)
            return
        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("Logout error: %s", response.text)
            return
        if not isinstance(payload, dict) or payload.get("status") not in (1, True):
            LOGGER.warning("Logout error: %s", response.text)
            return
        LOGGER.info("Logged out from %s", self.credentials.base_url)

    def _login(self) -> str:
        url = self.credentials.ws_url
        request = RequestEnvelope(
            service=LOGIN_SERVICE,
            method="createContext",
            parameters={
                "applicationName": APPLICATION_NAME,
                "username": self.credentials.username,
                "password": self.credentials.password,
            },
        )
        body = request.model_dump()

        log_request(url, body)
        try:
            response = self.http.post(
                url,
                json=body,
                headers={"Content-Type": SAH_CONTENT_TYPE, "Authorization": X_SAH_LOGIN},
            )
        except httpx.HTTPError as exc:
            raise UnreachableError(f"Cannot reach {url}: {exc}") from exc
        log_response(response)

        if response.status_code in (401, 403):
            raise InvalidCredentialsError(
                f"Authentication failed for user {self.credentials.username!r}"
            )
        if not response.is_success:
            raise AuthMalformedResponseError(
                f"Unexpected login response: HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthMalformedResponseError("Login response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise AuthMalformedResponseError("Login response is not a JSON object")

        payload = cast(dict[str, Any], payload)
        if payload.get("errors"):
            raise InvalidCredentialsError(
                f"Authentication failed for user {self.credentials.username!r}"
            )

        data = payload.get("data")
        context_id = data.get("contextID") if isinstance(data, dict) else None
        if not isinstance(context_id, str) or not context_id:
            raise AuthMalformedResponseError("Login response does not carry a contextID")
        return context_id
