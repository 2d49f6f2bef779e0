import json

import pytest

from livebox_cli.errors import InvalidExpressionError, NoMatchError
from livebox_cli.query import QueryFilter, apply

DOCUMENT = {
    "status": True,
    "data": {
        "LinkType": "dsl",
        "LinkState": "up",
        "IPAddress": "55.27.2.115",
        "LastConnectionError": "None",
        "MTU": 1492,
        "IPv6Enabled": True,
        "DNSServers": ["80.10.246.2", "81.253.149.1"],
    },
}


def test_raw_scalar_is_bare_text() -> None:
    assert apply(DOCUMENT, "$.data.IPAddress", raw=True) == "55.27.2.115"


def test_scalar_without_raw_is_json_text() -> None:
    assert apply(DOCUMENT, "$.data.IPAddress") == '"55.27.2.115"'


def test_no_path_prints_data_member() -> None:
    output = apply(DOCUMENT)

    assert json.loads(output) == DOCUMENT["data"]
    assert output == json.dumps(DOCUMENT["data"], indent=2)


def test_no_path_on_document_without_data_prints_everything() -> None:
    document = [{"id": "web"}]

    assert json.loads(apply(document)) == document


def test_raw_numbers_and_booleans() -> None:
    assert apply(DOCUMENT, "$.data.MTU", raw=True) == "1492"
    assert apply(DOCUMENT, "$.data.IPv6Enabled", raw=True) == "true"


def test_raw_does_not_apply_to_containers() -> None:
    output = apply(DOCUMENT, "$.data.DNSServers", raw=True)

    assert json.loads(output) == ["80.10.246.2", "81.253.149.1"]


def test_first_match_is_returned() -> None:
    assert apply(DOCUMENT, "$.data.DNSServers[*]", raw=True) == "80.10.246.2"


def test_unknown_path_is_no_match() -> None:
    with pytest.raises(NoMatchError):
        apply(DOCUMENT, "$.data.DoesNotExist")


def test_invalid_expression_is_rejected_on_construction() -> None:
    with pytest.raises(InvalidExpressionError):
        QueryFilter("$.data.[", raw=True)
