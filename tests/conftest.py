from __future__ import annotations

import json
from typing import Any, cast

import httpx
import pytest
from typer.testing import CliRunner

from livebox_cli.connection import Credentials
from livebox_cli.session import SysbusSession

BASE_URL = "http://livebox.test"
WAN_STATUS = {
    "LinkType": "dsl",
    "LinkState": "up",
    "MACAddress": "3C:81:D8:00:00:01",
    "Protocol": "ppp",
    "ConnectionState": "Bound",
    "LastConnectionError": "None",
    "IPAddress": "55.27.2.115",
    "RemoteGateway": "55.27.2.1",
    "DNSServers": "80.10.246.2,81.253.149.1",
    "IPv6Address": "2a01:cb00:0:0:0:0:0:1",
}
PERMISSION_DENIED = {"error": 13, "description": "Permission denied", "info": "Invalid context"}


class FakeLivebox:
    """In-memory sysbus endpoint served through ``httpx.MockTransport``."""

    def __init__(self, username: str = "admin", password: str = "super-secret") -> None:
        self.username = username
        self.password = password
        self.rules: dict[str, dict[str, object]] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.valid_contexts: set[str] = set()
        self.logins = 0
        self.expire_next = 0
        self.reject_logins_after: int | None = None
        self.responses: dict[tuple[str, str], httpx.Response] = {}

    def seed_rule(
        self,
        rule_id: str,
        external_port: str = "8080",
        internal_port: str = "80",
        destination: str = "192.168.1.10",
        protocol: str = "6",
        enable: bool = True,
    ) -> None:
        self.rules[rule_id] = {
            "Id": rule_id,
            "Origin": "webui",
            "Description": f"{rule_id} rule",
            "Status": "Enabled" if enable else "Disabled",
            "SourceInterface": "data",
            "Protocol": protocol,
            "ExternalPort": external_port,
            "InternalPort": internal_port,
            "SourcePrefix": "",
            "DestinationIPAddress": destination,
            "DestinationMACAddress": "",
            "LeaseDuration": 0,
            "HairpinNAT": True,
            "SymmetricSNAT": False,
            "UPnPV1Compat": False,
            "Enable": enable,
        }

    def expire_sessions(self, count: int = 1) -> None:
        """Reject the next ``count`` calls as if the context had expired."""

        self.expire_next = count

    def method_calls(self) -> list[tuple[str, str]]:
        return [(service, method) for service, method, _ in self.calls]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport())

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = cast(dict[str, Any], json.loads(request.content))
        service = str(body["service"])
        method = str(body["method"])
        parameters = cast(dict[str, Any], body.get("parameters", {}))
        self.calls.append((service, method, parameters))

        if method == "createContext":
            return self._login(request, parameters)
        if method == "releaseContext":
            self.valid_contexts.discard(request.headers.get("X-Context", ""))
            return httpx.Response(401, json={"status": 1})

        if self.expire_next > 0 or request.headers.get("X-Context") not in self.valid_contexts:
            self.expire_next = max(self.expire_next - 1, 0)
            return httpx.Response(200, json={"status": None, "errors": [PERMISSION_DENIED]})

        canned = self.responses.get((service, method))
        if canned is not None:
            return httpx.Response(
                canned.status_code, content=canned.content, headers=canned.headers
            )
        if service == "NMC" and method == "getWANStatus":
            return httpx.Response(200, json={"status": True, "data": WAN_STATUS})
        if service == "Firewall":
            return self._firewall(method, parameters)
        return httpx.Response(
            200,
            json={
                "status": None,
                "errors": [
                    {"error": 196618, "description": "Object or parameter not found", "info": service}
                ],
            },
        )

    def _login(self, request: httpx.Request, parameters: dict[str, Any]) -> httpx.Response:
        assert request.headers["Authorization"] == "X-Sah-Login"
        rejected = self.reject_logins_after is not None and self.logins >= self.reject_logins_after
        if rejected or (
            parameters.get("username") != self.username
            or parameters.get("password") != self.password
        ):
            return httpx.Response(
                401, json={"status": None, "errors": [PERMISSION_DENIED]}
            )

        self.logins += 1
        context_id = f"ctx-{self.logins}"
        self.valid_contexts.add(context_id)
        return httpx.Response(
            200,
            json={
                "status": 0,
                "data": {"contextID": context_id, "username": self.username, "groups": "admin"},
            },
            headers={"Set-Cookie": f"sessid={context_id}; path=/"},
        )

    def _firewall(self, method: str, parameters: dict[str, Any]) -> httpx.Response:
        if method == "getPortForwarding":
            return httpx.Response(200, json={"status": self.rules})
        if method == "setPortForwarding":
            rule_id = str(parameters["id"])
            self.rules[rule_id] = {
                "Id": rule_id,
                "Origin": parameters["origin"],
                "Description": parameters["description"],
                "Status": "Enabled" if parameters["enable"] else "Disabled",
                "SourceInterface": parameters["sourceInterface"],
                "Protocol": parameters["protocol"],
                "ExternalPort": parameters["externalPort"],
                "InternalPort": parameters["internalPort"],
                "SourcePrefix": parameters["sourcePrefix"],
                "DestinationIPAddress": parameters["destinationIPAddress"],
                "DestinationMACAddress": parameters["destinationMACAddress"],
                "LeaseDuration": 0,
                "HairpinNAT": True,
                "SymmetricSNAT": False,
                "UPnPV1Compat": False,
                "Enable": parameters["enable"],
            }
            return httpx.Response(200, json={"status": rule_id})
        if method == "commit":
            return httpx.Response(200, json={"status": True})

        rule = self.rules.get(str(parameters.get("id")))
        if rule is None:
            return httpx.Response(
                200,
                json={
                    "status": None,
                    "errors": [
                        {
                            "error": 196639,
                            "description": "Function execution failed",
                            "info": "rule not found",
                        }
                    ],
                },
            )
        if method == "deletePortForwarding":
            del self.rules[str(parameters["id"])]
        else:
            rule["Enable"] = method == "enablePortForwarding"
        return httpx.Response(200, json={"status": True})


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def device() -> FakeLivebox:
    return FakeLivebox()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(base_url=BASE_URL, username="admin", password="super-secret")


@pytest.fixture
def sysbus(device: FakeLivebox, credentials: Credentials) -> SysbusSession:
    return SysbusSession(credentials, device.client())


@pytest.fixture
def connection_args() -> list[str]:
    return [
        "--base-url",
        BASE_URL,
        "--username",
        "admin",
        "--password",
        "super-secret",
    ]


@pytest.fixture
def livebox(monkeypatch: pytest.MonkeyPatch, device: FakeLivebox) -> FakeLivebox:
    def _create_http_client(_credentials: Credentials) -> httpx.Client:
        return device.client()

    monkeypatch.setattr("livebox_cli.runtime.create_http_client", _create_http_client)
    return device
