"""
Queue interfaces for buffering raw log payloads.

Payloads are the UTF-8 bytes of one JSON log event. Implementations decide
whether to accept a payload; `enqueue` reports that decision.
"""

from __future__ import annotations

import abc
from types import TracebackType
from typing import Optional, Protocol, Type, runtime_checkable


@runtime_checkable
class LogsQueue(Protocol):
    def enqueue(self, payload: bytes) -> bool:
        """Offer a payload; return True when it was buffered."""
        ...

    def dequeue(self) -> bytes:
        """Remove and return the oldest payload. Raises QueueEmptyError when empty."""
        ...

    def is_empty(self) -> bool: ...

    def close(self) -> None: ...


class AbstractLogsQueue(abc.ABC):
    """
    ABC helper adding context-manager support on top of `close`.
    """

    @abc.abstractmethod
    def enqueue(self, payload: bytes) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def dequeue(self) -> bytes:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def is_empty(self) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    def close(self) -> None:
        return None

    def __enter__(self) -> AbstractLogsQueue:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


__all__ = ["LogsQueue", "AbstractLogsQueue"]
