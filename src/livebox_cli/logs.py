"""Logging setup and wire tracing helpers."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from rich.console import Console
from rich.logging import RichHandler

REDACTED = "********"
_SECRET_KEYS = frozenset({"password"})

LOGGER = logging.getLogger("livebox_cli.wire")


def configure_logging(verbosity: int = 0) -> None:
    """Route log records to stderr; ``-v`` enables INFO, ``-vv`` DEBUG."""

    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if key in _SECRET_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def log_request(url: str, body: dict[str, Any]) -> None:
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(">>> POST %s\n%s", url, json.dumps(redact(body), indent=2))


def log_response(response: httpx.Response) -> None:
    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug("<<< %s\n%s", response.status_code, response.text)
