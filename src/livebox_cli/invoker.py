"""Generic sysbus method invocation."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from livebox_cli.errors import (
    AuthError,
    AuthExpiredError,
    MalformedResponseError,
    NetworkError,
    ServiceError,
)
from livebox_cli.logs import log_request, log_response
from livebox_cli.models.sysbus import ErrorDescriptor, RequestEnvelope, ResponseEnvelope, Session
from livebox_cli.session import SysbusSession

# sysbus reports an unknown or expired context as error 13 "Permission denied"
SESSION_ERROR_CODE = 13
SESSION_ERROR_DESCRIPTION = "permission denied"

LOGGER = logging.getLogger(__name__)


def _is_session_rejected(errors: list[ErrorDescriptor]) -> bool:
    for descriptor in errors:
        if descriptor.get("error") == SESSION_ERROR_CODE:
            return True
        if str(descriptor.get("description", "")).strip().lower() == SESSION_ERROR_DESCRIPTION:
            return True
    return False


class Invoker:
    """Performs one sysbus call, reauthenticating at most once on expiry."""

    def __init__(self, sysbus: SysbusSession):
        self._sysbus = sysbus

    def call(
        self,
        session: Session,
        service: str,
        method: str,
        parameters: dict[str, Any] | None = None,
    ) -> ResponseEnvelope:
        request = RequestEnvelope(service=service, method=method, parameters=parameters or {})

        envelope = self._send(session, request)
        if envelope.status or not _is_session_rejected(envelope.errors or []):
            return self._unwrap(envelope)

        self._sysbus.invalidate(session)
        try:
            self._sysbus.reauthenticate(session)
        except AuthError as exc:
            raise AuthExpiredError(f"Session expired and login failed: {exc}") from exc

        envelope = self._send(session, request)
        if not envelope.status and _is_session_rejected(envelope.errors or []):
            self._sysbus.invalidate(session)
            raise AuthExpiredError(
                f"Session rejected after reauthentication calling {service}.{method}",
                list(envelope.errors or []),
            )
        return self._unwrap(envelope)

    @staticmethod
    def _unwrap(envelope: ResponseEnvelope) -> ResponseEnvelope:
        if not envelope.status:
            raise ServiceError(list(envelope.errors or []))
        return envelope

    def _send(self, session: Session, request: RequestEnvelope) -> ResponseEnvelope:
        url = self._sysbus.credentials.ws_url
        body = request.model_dump()

        log_request(url, body)
        try:
            response = self._sysbus.http.post(
                url,
                json=body,
                headers=self._sysbus.headers_for(session),
            )
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        log_response(response)

        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> ResponseEnvelope:
        if response.status_code == 401:
            return ResponseEnvelope(
                status=False,
                errors=[
                    {
                        "error": SESSION_ERROR_CODE,
                        "description": "Permission denied",
                        "info": "HTTP 401",
                    }
                ],
            )
        if not response.is_success:
            raise MalformedResponseError(f"Unexpected response: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Response body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("Response body is not a JSON object")

        payload = cast(dict[str, Any], payload)
        if "status" not in payload:
            raise MalformedResponseError("Response body has no 'status' field")

        status = payload["status"]
        raw_errors = payload.get("errors")
        if raw_errors is not None and not isinstance(raw_errors, list):
            raise MalformedResponseError("Response 'errors' field is not a list")

        errors = [
            cast(ErrorDescriptor, item) if isinstance(item, dict) else {"description": str(item)}
            for item in cast(list[object], raw_errors or [])
        ]
        if errors or status is False or status is None:
            return ResponseEnvelope(status=False, errors=errors)

        # some methods (getPortForwarding) return their result in 'status'
        data = payload["data"] if "data" in payload else status
        return ResponseEnvelope(status=True, data=data)
