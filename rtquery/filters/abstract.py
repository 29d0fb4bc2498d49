"""
Filter interfaces for real-time log routing.

A filter is a predicate over one decoded JSON log event. Queues hold several
filters and only care whether any of them matches.
"""

from __future__ import annotations

import abc
from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class RTFilter(Protocol):
    """
    Common interface all real-time filters implement.

    Attributes
    ----------
    name : str
        A short identifier used in logs and reports.
    """

    name: str

    def matches(self, log: Mapping[str, Any]) -> bool:
        """Return True when the decoded log event satisfies the filter."""
        ...


class AbstractRTFilter(abc.ABC):
    """
    Optional ABC helper for class-based filters.

    Subclasses set `name` and implement `matches`.
    """

    name: str

    @abc.abstractmethod
    def matches(self, log: Mapping[str, Any]) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["RTFilter", "AbstractRTFilter"]
