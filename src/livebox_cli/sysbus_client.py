"""Typed protocol for sysbus invocations used by services/commands."""

from __future__ import annotations

from typing import Any, Protocol

from livebox_cli.models.sysbus import ResponseEnvelope, Session


class SysbusInvokerProtocol(Protocol):
    """The single capability services need from the invoker."""

    def call(
        self,
        session: Session,
        service: str,
        method: str,
        parameters: dict[str, Any] | None = None,
    ) -> ResponseEnvelope: ...
