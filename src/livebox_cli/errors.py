"""Domain-specific errors for livebox-cli."""

from __future__ import annotations

from typing import Any


class LiveboxError(Exception):
    """Base error for livebox-cli."""


class AuthError(LiveboxError):
    """Base error for the login handshake."""


class InvalidCredentialsError(AuthError):
    """Raised when the device rejects the username/password pair."""


class UnreachableError(AuthError):
    """Raised when the device cannot be reached during login."""


class AuthMalformedResponseError(AuthError):
    """Raised when the login response cannot be decoded."""


class InvokeError(LiveboxError):
    """Base error for sysbus method invocations."""


class NetworkError(InvokeError):
    """Raised on connection, TLS or timeout failures."""


class MalformedResponseError(InvokeError):
    """Raised when a response is not a decodable sysbus envelope."""


def describe_errors(descriptors: list[dict[str, Any]]) -> str:
    """Render sysbus error descriptors as ``[code] description (info)``."""

    parts = []
    for descriptor in descriptors:
        text = str(descriptor.get("description") or "unknown error")
        code = descriptor.get("error")
        info = descriptor.get("info")
        if code is not None:
            text = f"[{code}] {text}"
        if info:
            text = f"{text} ({info})"
        parts.append(text)
    return "; ".join(parts)


class AuthExpiredError(InvokeError):
    """Raised when the session is still rejected after one reauthentication.

    ``descriptors`` holds the device's last error payload, empty when the
    reauthentication itself failed.
    """

    def __init__(self, message: str, descriptors: list[dict[str, Any]] | None = None):
        self.descriptors = list(descriptors or [])
        if self.descriptors:
            message = f"{message}: {describe_errors(self.descriptors)}"
        super().__init__(message)


class ServiceError(InvokeError):
    """Raised when the device reports a failure for the invoked method."""

    def __init__(self, descriptors: list[dict[str, Any]]):
        self.descriptors = descriptors
        super().__init__(
            describe_errors(descriptors)
            if descriptors
            else "Service call failed without error details"
        )


class RuleValidationError(LiveboxError, ValueError):
    """Base error for local NAT rule validation."""


class InvalidIdError(RuleValidationError):
    """Raised when a rule id is empty."""


class InvalidProtocolError(RuleValidationError):
    """Raised when a rule protocol is not tcp, udp or all."""


class InvalidPortError(RuleValidationError):
    """Raised when a port field is not a port or port range."""


class QueryError(LiveboxError):
    """Base error for response filtering."""


class InvalidExpressionError(QueryError):
    """Raised when a JSONPath expression cannot be parsed."""


class NoMatchError(QueryError):
    """Raised when a JSONPath expression selects nothing."""
