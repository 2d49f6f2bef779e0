"""JSONPath filtering of sysbus response documents."""

from __future__ import annotations

import json
from typing import Any

from jsonpath_ng import parse
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.jsonpath import JSONPath

from livebox_cli.errors import InvalidExpressionError, NoMatchError


def render_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


class QueryFilter:
    """Select a node of a response document and format it for output.

    The expression is compiled on construction so that an invalid query is
    reported before any request is sent.
    """

    def __init__(self, path: str | None = None, raw: bool = False):
        self.path = path
        self.raw = raw
        self._expression: JSONPath | None = None
        if path is not None:
            try:
                self._expression = parse(path)
            except JSONPathError as exc:
                raise InvalidExpressionError(f"Invalid query {path!r}: {exc}") from exc

    def select(self, document: Any) -> Any:
        """Return the first node matched by the expression.

        Without an expression this is the document's ``data`` member, or the
        whole document when it has none.
        """

        if self._expression is None:
            if isinstance(document, dict) and "data" in document:
                return document["data"]
            return document

        matches = self._expression.find(document)
        if not matches:
            raise NoMatchError(f"Query {self.path!r} matched nothing")
        return matches[0].value

    def apply(self, document: Any) -> str:
        return self.format(self.select(document))

    def format(self, node: Any) -> str:
        if self.raw and isinstance(node, str):
            return node
        if self.raw and isinstance(node, (bool, int, float)):
            return json.dumps(node)
        return render_json(node)


def apply(document: Any, path: str | None = None, raw: bool = False) -> str:
    """Filter ``document`` with ``path`` and format the selected node."""

    return QueryFilter(path, raw).apply(document)
