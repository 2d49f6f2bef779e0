"""NAT (port forwarding) rules on top of the Firewall sysbus service."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, cast

from livebox_cli.errors import MalformedResponseError
from livebox_cli.models.nat import (
    PROTOCOL_CODES,
    PROTOCOLS_BY_CODE,
    NatRule,
    validate_rule,
    validate_rule_id,
)
from livebox_cli.models.sysbus import ResponseEnvelope, Session
from livebox_cli.sysbus_client import SysbusInvokerProtocol

FIREWALL_SERVICE = "Firewall"
RULE_ORIGIN = "webui"
SOURCE_INTERFACE = "data"

# device record key -> NatRule field
_RECORD_FIELDS: dict[str, str] = {
    "Id": "id",
    "Description": "description",
    "Protocol": "protocol",
    "SourcePrefix": "source_host",
    "ExternalPort": "source_port",
    "DestinationIPAddress": "destination_host",
    "InternalPort": "destination_port",
    "Enable": "enabled",
}


class NatAction(StrEnum):
    LIST = "list"
    ADD = "add"
    ENABLE = "enable"
    DISABLE = "disable"
    REMOVE = "remove"
    COMMIT = "commit"


NAT_METHODS: dict[NatAction, str] = {
    NatAction.LIST: "getPortForwarding",
    NatAction.ADD: "setPortForwarding",
    NatAction.ENABLE: "enablePortForwarding",
    NatAction.DISABLE: "disablePortForwarding",
    NatAction.REMOVE: "deletePortForwarding",
    NatAction.COMMIT: "commit",
}


class NatRuleCodec:
    """Present firewall NAT rules as id-keyed resources.

    Every operation is exactly one invoker call against the Firewall
    service. The device is authoritative: nothing is cached and existence is
    never checked locally.
    """

    def __init__(self, invoker: SysbusInvokerProtocol):
        self._invoker = invoker

    def run(
        self,
        session: Session,
        action: NatAction,
        *,
        rule: NatRule | None = None,
        rule_id: str | None = None,
    ) -> list[NatRule] | ResponseEnvelope:
        """Dispatch one of the NAT actions."""

        match action:
            case NatAction.LIST:
                return self.list_rules(session)
            case NatAction.ADD:
                if rule is None:
                    raise ValueError("add requires a rule")
                return self.add(session, rule)
            case NatAction.ENABLE:
                return self.enable(session, rule_id or "")
            case NatAction.DISABLE:
                return self.disable(session, rule_id or "")
            case NatAction.REMOVE:
                return self.remove(session, rule_id or "")
            case NatAction.COMMIT:
                return self.commit(session)

    def list_rules(self, session: Session) -> list[NatRule]:
        envelope = self._invoke(session, NatAction.LIST, {})
        return self._parse_rules(envelope.data)

    def add(self, session: Session, rule: NatRule) -> ResponseEnvelope:
        rule = validate_rule(rule)
        return self._invoke(session, NatAction.ADD, self._rule_to_parameters(rule))

    def enable(self, session: Session, rule_id: str) -> ResponseEnvelope:
        return self._invoke(session, NatAction.ENABLE, {"id": validate_rule_id(rule_id)})

    def disable(self, session: Session, rule_id: str) -> ResponseEnvelope:
        return self._invoke(session, NatAction.DISABLE, {"id": validate_rule_id(rule_id)})

    def remove(self, session: Session, rule_id: str) -> ResponseEnvelope:
        return self._invoke(session, NatAction.REMOVE, {"id": validate_rule_id(rule_id)})

    def commit(self, session: Session) -> ResponseEnvelope:
        """Ask the device to persist its current firewall configuration."""

        return self._invoke(session, NatAction.COMMIT, {})

    def _invoke(
        self, session: Session, action: NatAction, parameters: dict[str, Any]
    ) -> ResponseEnvelope:
        return self._invoker.call(session, FIREWALL_SERVICE, NAT_METHODS[action], parameters)

    @staticmethod
    def _rule_to_parameters(rule: NatRule) -> dict[str, Any]:
        return {
            "id": rule.id,
            "origin": RULE_ORIGIN,
            "description": rule.description,
            "sourceInterface": SOURCE_INTERFACE,
            "protocol": PROTOCOL_CODES[rule.protocol],
            "externalPort": rule.source_port,
            "internalPort": rule.destination_port,
            "destinationIPAddress": rule.destination_host,
            "sourcePrefix": rule.source_host,
            "destinationMACAddress": "",
            "enable": rule.enabled,
            "persistent": True,
        }

    @staticmethod
    def _parse_rules(data: object) -> list[NatRule]:
        if isinstance(data, dict):
            raw_records = list(cast(dict[str, object], data).values())
        elif isinstance(data, list):
            raw_records = cast(list[object], data)
        else:
            raise MalformedResponseError("Port forwarding list is neither an object nor a list")

        return [NatRuleCodec._parse_rule(record) for record in raw_records]

    @staticmethod
    def _parse_rule(raw_record: object) -> NatRule:
        if not isinstance(raw_record, dict):
            raise MalformedResponseError("Port forwarding record is not an object")
        record = cast(dict[str, object], raw_record)

        missing = [key for key in _RECORD_FIELDS if key not in record]
        if missing:
            raise MalformedResponseError(
                f"Port forwarding record lacks field(s): {', '.join(missing)}"
            )

        values: dict[str, object] = {}
        for key, field_name in _RECORD_FIELDS.items():
            value = record[key]
            if field_name == "enabled":
                if not isinstance(value, bool):
                    raise MalformedResponseError(f"Field {key} is not a boolean")
            elif isinstance(value, bool) or not isinstance(value, (str, int)):
                raise MalformedResponseError(f"Field {key} is not a string")
            else:
                value = str(value)
            values[field_name] = value

        protocol = PROTOCOLS_BY_CODE.get(cast(str, values["protocol"]))
        if protocol is None:
            raise MalformedResponseError(f"Unknown protocol code: {values['protocol']!r}")
        values["protocol"] = protocol

        return NatRule.model_validate(values)
