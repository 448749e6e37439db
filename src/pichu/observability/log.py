"""Event log for build runs.

Keeps the most recent build events in a bounded buffer so a build script
(or a test) can ask what was written, which stages ran and how long
they took.  Pipeline workers append from several threads at once, so
every access goes through one lock.

"""

import threading
from collections import Counter, deque
from itertools import islice
from typing import Any

from pichu.observability.events import BuildEventType


def _matches(
    event: BuildEventType,
    event_type: type | None,
    since_ns: int,
    path: str | None,
) -> bool:
    if event_type is not None and not isinstance(event, event_type):
        return False
    if event.timestamp_ns < since_ns:
        return False
    if path is None:
        return True
    # Only FileWritten carries a single path.
    written = getattr(event, "path", None)
    return isinstance(written, str) and path in written


class EventLog:
    """Bounded, thread-safe store of build events.

    Once ``max_events`` is reached the oldest event is dropped for each new
    one; :meth:`stats` reports how many were lost that way.

    Args:
        max_events: Number of events kept.

    """

    __slots__ = ("_dropped", "_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[BuildEventType] = deque(maxlen=max_events)
        self._dropped = 0
        self._lock = threading.Lock()

    def append(self, event: BuildEventType) -> None:
        with self._lock:
            if len(self._events) == self._max_events:
                self._dropped += 1
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        path: str | None = None,
        limit: int = 100,
    ) -> list[BuildEventType]:
        """Return matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            since_ns: Keep only events stamped at or after this time.
            path: Keep only written files whose path contains this text.
            limit: Return at most this many events.

        """
        with self._lock:
            newest_first = reversed(self._events)
            hits = (e for e in newest_first if _matches(e, event_type, since_ns, path))
            return list(islice(hits, limit))

    def recent(self, n: int = 20) -> list[BuildEventType]:
        """Return the last ``n`` events, oldest first."""
        with self._lock:
            start = max(len(self._events) - n, 0)
            return list(islice(self._events, start, None))

    def clear(self) -> int:
        """Drop every stored event; return how many there were."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
            self._dropped = 0
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summarize the buffer: size, capacity, evictions and per-type counts."""
        with self._lock:
            by_type = Counter(type(event).__name__ for event in self._events)
            return {
                "total": len(self._events),
                "max_events": self._max_events,
                "dropped": self._dropped,
                "by_type": dict(by_type),
            }
