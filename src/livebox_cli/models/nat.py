"""Models for firewall NAT (port forwarding) rules."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel

from livebox_cli.errors import InvalidIdError, InvalidPortError, InvalidProtocolError

NatProtocol = Literal["tcp", "udp", "all"]

PROTOCOL_CODES: dict[str, str] = {"tcp": "6", "udp": "17", "all": "6,17"}
PROTOCOLS_BY_CODE: dict[str, str] = {code: name for name, code in PROTOCOL_CODES.items()}

_PORT_RE = re.compile(r"^(\d{1,5})(?:-(\d{1,5}))?$")


class NatRule(BaseModel):
    """A port forwarding rule as exposed by the Firewall service."""

    id: str
    description: str = ""
    protocol: str = "tcp"
    source_host: str = ""
    source_port: str = ""
    destination_host: str = ""
    destination_port: str = ""
    enabled: bool = True


def validate_rule_id(rule_id: str) -> str:
    normalized = rule_id.strip()
    if not normalized:
        raise InvalidIdError("Rule id must not be empty")
    return normalized


def validate_port(value: str, field_name: str) -> str:
    """Accept ``N`` or ``N-M`` with 1 <= N <= M <= 65535."""

    match = _PORT_RE.match(value.strip())
    if match is None:
        raise InvalidPortError(f"Invalid {field_name}: {value!r}")

    first = int(match.group(1))
    last = int(match.group(2)) if match.group(2) else first
    if not 1 <= first <= last <= 65535:
        raise InvalidPortError(f"Invalid {field_name}: {value!r}")
    return value.strip()


def validate_rule(rule: NatRule) -> NatRule:
    """Check a rule before it is sent to the device.

    Returns a copy with the id and ports stripped of surrounding whitespace.
    """

    rule_id = validate_rule_id(rule.id)
    if rule.protocol not in PROTOCOL_CODES:
        raise InvalidProtocolError(
            f"Invalid protocol: {rule.protocol!r} (expected one of tcp, udp, all)"
        )
    source_port = rule.source_port.strip()
    destination_port = rule.destination_port.strip()
    if rule.protocol != "all":
        source_port = validate_port(rule.source_port, "source port")
        destination_port = validate_port(rule.destination_port, "destination port")
    return rule.model_copy(
        update={"id": rule_id, "source_port": source_port, "destination_port": destination_port}
    )
