"""
Parsing and evaluation of saved query strings.

The query language is deliberately small:

    level:ERROR                 field equals value (case-insensitive)
    kubernetes.pod:api-*        dotted path into nested objects, prefix match
    user:*                      field is present
    timeout                     free text, substring of the message field
    "connection reset"          quoted phrase
    message:"disk full"         field compared with a quoted value
    -level:DEBUG                negation

All terms must hold. An empty query matches every event.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Tuple

from rtquery.errors import QuerySyntaxError

_MISSING = object()


@dataclass(frozen=True)
class QueryTerm:
    """One parsed term of a query string."""

    value: str
    field: Optional[str] = None
    prefix: bool = False
    negated: bool = False

    def matches(self, log: Mapping[str, Any], message_field: str = "message") -> bool:
        if self.field is None:
            matched = self._matches_text(resolve_field(log, message_field))
        else:
            matched = self._matches_field(resolve_field(log, self.field))
        return matched != self.negated

    def _matches_text(self, message: Any) -> bool:
        if message is _MISSING or message is None:
            return False
        return self.value in _normalize(message)

    def _matches_field(self, found: Any) -> bool:
        if found is _MISSING or found is None:
            return False
        for candidate in _iter_values(found):
            normalized = _normalize(candidate)
            if self.prefix and normalized.startswith(self.value):
                return True
            if not self.prefix and normalized == self.value:
                return True
        return False


def parse_query(text: str) -> Tuple[QueryTerm, ...]:
    """Split a query string into terms."""
    if not text or not text.strip():
        return ()
    try:
        tokens = list(_tokenize(text))
    except ValueError as exc:
        raise QuerySyntaxError(text, str(exc)) from exc
    return tuple(_parse_term(text, raw, token) for raw, token in tokens)


def _tokenize(text: str) -> Iterator[Tuple[str, str]]:
    """Yield (raw, token) pairs: the text as typed and its unquoted form."""
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    start = 0
    while True:
        token = lexer.get_token()
        if token is None:
            return
        end = lexer.instream.tell()
        yield text[start:end].strip(), token
        start = end


def _parse_term(query: str, raw: str, token: str) -> QueryTerm:
    negated = raw.startswith("-") and len(raw) > 1
    if negated:
        raw, token = raw[1:], token[1:]

    # Only a colon typed before any quote or escape separates field and value.
    colon = raw.find(":")
    special = [i for i in (raw.find('"'), raw.find("'"), raw.find("\\")) if i >= 0]
    field: Optional[str] = None
    value = token
    if 0 < colon < min(special, default=len(raw)):
        field = raw[:colon]
        value = token[colon + 1 :]
        if not raw[colon + 1 :]:
            raise QuerySyntaxError(query, f"missing value for field '{field}'")

    prefix = raw.endswith("*")
    if prefix:
        value = value[:-1]
    return QueryTerm(value=value.lower(), field=field, prefix=prefix, negated=negated)


def resolve_field(log: Mapping[str, Any], path: str) -> Any:
    """
    Look up `path` in a log event.

    A literal key wins over a dotted path, so flat keys such as "@timestamp"
    or "kubernetes.pod" written verbatim still resolve.
    """
    if path in log:
        return log[path]
    current: Any = log
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def is_missing(value: Any) -> bool:
    return value is _MISSING


def _iter_values(found: Any) -> Iterator[Any]:
    if isinstance(found, (list, tuple)):
        yield from found
    else:
        yield found


def _normalize(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).lower()


__all__ = ["QueryTerm", "parse_query", "resolve_field", "is_missing"]
