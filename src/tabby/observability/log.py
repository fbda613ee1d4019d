"""In-memory store for build and live-reload events.

A bounded, lock-protected ring buffer: the watcher thread and the event
loop both append to it, and tests or callers read it back with
:meth:`EventLog.query`.
"""

from __future__ import annotations

import threading
from collections import Counter, deque
from collections.abc import Iterator
from itertools import islice
from typing import Any

from tabby.observability.events import TabbyEvent


class EventLog:
    """Ring buffer of the most recent ``max_events`` events.

    Args:
        max_events: Capacity; the oldest events fall off once it is reached.

    """

    __slots__ = ("_buffer", "_capacity", "_mutex")

    def __init__(self, max_events: int = 10_000) -> None:
        self._capacity = max_events
        self._buffer: deque[TabbyEvent] = deque(maxlen=max_events)
        self._mutex = threading.Lock()

    def append(self, event: TabbyEvent) -> None:
        with self._mutex:
            self._buffer.append(event)

    def _snapshot(self) -> list[TabbyEvent]:
        with self._mutex:
            return list(self._buffer)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[TabbyEvent]:
        """Return matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Drop events stamped before this monotonic time.
            path: Keep only events with a ``path`` containing this substring.
            limit: Upper bound on the number of events returned.

        """

        def matches(event: TabbyEvent) -> bool:
            if event_type is not None and not isinstance(event, event_type):
                return False
            if event.timestamp_ns < since_ns:
                return False
            return path is None or path in getattr(event, "path", "")

        newest_first: Iterator[TabbyEvent] = reversed(self._snapshot())
        return list(islice(filter(matches, newest_first), limit))

    def recent(self, n: int = 20) -> list[TabbyEvent]:
        """The last *n* events in the order they were recorded."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every stored event; returns how many there were."""
        with self._mutex:
            dropped = len(self._buffer)
            self._buffer.clear()
        return dropped

    def __len__(self) -> int:
        with self._mutex:
            return len(self._buffer)

    def stats(self) -> dict[str, Any]:
        counts = Counter(type(e).__name__ for e in self._snapshot())
        return {
            "total": counts.total(),
            "max_events": self._capacity,
            "by_type": dict(counts),
        }
