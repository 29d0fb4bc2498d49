"""
Queue that routes log payloads through real-time and default filters.

Routing for each payload:
1. any real-time filter matches  -> buffered
2. any default filter matches    -> dropped
3. otherwise                     -> buffered

Payloads that are not a UTF-8 JSON object are rejected and never buffered.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from rtquery.filters.abstract import RTFilter
from rtquery.queues.abstract import AbstractLogsQueue, LogsQueue
from rtquery.utils.logging import get_logger

log = get_logger(__name__)


class FilteredQueue(AbstractLogsQueue):
    def __init__(
        self,
        target: LogsQueue,
        realtime_filters: Iterable[RTFilter] = (),
        default_filters: Iterable[RTFilter] = (),
    ) -> None:
        self.target = target
        self.realtime_filters: Tuple[RTFilter, ...] = tuple(realtime_filters)
        self.default_filters: Tuple[RTFilter, ...] = tuple(default_filters)
        self.filtered_out = 0
        self.rejected = 0

    def should_enqueue(self, event: Dict[str, Any]) -> bool:
        if _first_match(self.realtime_filters, event) is not None:
            return True
        blocking = _first_match(self.default_filters, event)
        if blocking is not None:
            log.debug("Log filtered out", extra={"filter": blocking.name})
            return False
        return True

    def enqueue(self, payload: bytes) -> bool:
        event = _decode_event(payload)
        if event is None:
            self.rejected += 1
            log.warning("Rejecting payload that is not a JSON object", extra={"size": len(payload)})
            return False
        if not self.should_enqueue(event):
            self.filtered_out += 1
            return False
        return self.target.enqueue(payload)

    def dequeue(self) -> bytes:
        return self.target.dequeue()

    def is_empty(self) -> bool:
        return self.target.is_empty()

    def close(self) -> None:
        self.target.close()


def _first_match(filters: Sequence[RTFilter], event: Dict[str, Any]) -> Optional[RTFilter]:
    for candidate in filters:
        if candidate.matches(event):
            return candidate
    return None


def _decode_event(payload: bytes) -> Optional[Dict[str, Any]]:
    try:
        decoded = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return decoded if isinstance(decoded, dict) else None


__all__ = ["FilteredQueue"]
