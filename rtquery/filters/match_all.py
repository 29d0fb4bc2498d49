"""
Match-everything filter, used as the permissive default.
"""

from __future__ import annotations

from typing import Any, Mapping

from rtquery.filters.abstract import AbstractRTFilter


class MatchAllFilter(AbstractRTFilter):
    """Matches every log event."""

    name: str = "match_all"

    @classmethod
    def from_string(cls, text: str) -> MatchAllFilter:
        """Build from a filter expression; the expression is not interpreted."""
        del text
        return cls()

    def matches(self, log: Mapping[str, Any]) -> bool:
        return True


__all__ = ["MatchAllFilter"]
