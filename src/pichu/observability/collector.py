"""Build collector — records pipeline, writer and watcher events.

Pipeline stages, ``write``, and ``watch`` accept an optional collector.
When none is given, nothing is recorded.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from pool worker threads.

"""

from __future__ import annotations

from pichu.observability.events import (
    BatchDelivered,
    FileWritten,
    StageCompleted,
    StageName,
    now_ns,
)
from pichu.observability.log import EventLog


class BuildCollector:
    """Records build events into an EventLog.

    Args:
        log: The EventLog to store events in (a fresh one if omitted).

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_stage(
        self,
        stage: StageName,
        *,
        items: int,
        ok: bool = True,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a completed (or failed) pipeline stage."""
        self._log.append(
            StageCompleted(
                stage=stage,
                items=items,
                ok=ok,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_write(self, path: str, size_bytes: int) -> None:
        """Record a file written to disk."""
        self._log.append(
            FileWritten(path=path, size_bytes=size_bytes, timestamp_ns=now_ns())
        )

    def record_batch(self, paths: int, callback_ms: float) -> None:
        """Record a watcher batch delivered to its callback."""
        self._log.append(
            BatchDelivered(paths=paths, callback_ms=callback_ms, timestamp_ns=now_ns())
        )

    def stage_stats(self) -> dict[str, dict[str, float]]:
        """Aggregate stage timings by stage name.

        Returns:
            Mapping of stage name to ``{"count", "failures", "total_ms", "max_ms"}``.

        """
        stats: dict[str, dict[str, float]] = {}
        for event in self._log.query(event_type=StageCompleted, limit=len(self._log)):
            if not isinstance(event, StageCompleted):
                continue
            entry = stats.setdefault(
                event.stage, {"count": 0, "failures": 0, "total_ms": 0.0, "max_ms": 0.0},
            )
            entry["count"] += 1
            if not event.ok:
                entry["failures"] += 1
            entry["total_ms"] += event.duration_ms
            entry["max_ms"] = max(entry["max_ms"], event.duration_ms)
        return stats
