"""
JSONPath filters.

The expression is evaluated against a one-element array holding the event, so
filter expressions address the event as `@`:

    $[?(@.level == 'ERROR')]
    $[?(@.latency_ms > 500)]
    $..user

An event matches when the expression selects anything.
"""

from __future__ import annotations

from typing import Any, Mapping

from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.ext import parse as parse_jsonpath

from rtquery.errors import QuerySyntaxError
from rtquery.filters.abstract import AbstractRTFilter

JSONPATH_PREFIX = "$"


def is_jsonpath(text: str) -> bool:
    """Queries starting with `$` are JSONPath expressions."""
    return text.strip().startswith(JSONPATH_PREFIX)


class JsonPathFilter(AbstractRTFilter):
    """
    Match events selected by a JSONPath expression (jsonpath-ng extended syntax).

    The expression is compiled once; a malformed one raises QuerySyntaxError.
    Comparisons between incompatible types (e.g. a string field against a
    number) count as no match.
    """

    def __init__(self, expression: str) -> None:
        self.expression = expression.strip()
        self.name = f"jsonpath:{self.expression}"
        try:
            self._path = parse_jsonpath(self.expression)
        except (JsonPathLexerError, JsonPathParserError) as exc:
            raise QuerySyntaxError(expression, str(exc)) from exc

    @classmethod
    def from_string(cls, text: str) -> JsonPathFilter:
        return cls(text)

    def matches(self, log: Mapping[str, Any]) -> bool:
        try:
            return bool(self._path.find([log]))
        except TypeError:
            return False


__all__ = ["JsonPathFilter", "is_jsonpath", "JSONPATH_PREFIX"]
