"""Build observability — structured events for pipeline runs.

Records events from:
- **Pipeline**: stage completion (parse, sort, render_each, render_all)
- **Writer**: every output file written
- **Watcher**: every batch delivered to the rebuild callback

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from multiple worker threads.

Quick Start:
    >>> from pichu.observability import BuildCollector
    >>> collector = BuildCollector()
    >>> # pichu.glob("content/*.md").parse(fn, collector=collector)
    >>> collector.stage_stats()
    {}

"""

from pichu.observability.collector import BuildCollector
from pichu.observability.events import (
    BatchDelivered,
    BuildEventType,
    FileWritten,
    StageCompleted,
    now_ns,
)
from pichu.observability.log import EventLog

__all__ = [
    "BatchDelivered",
    "BuildCollector",
    "BuildEventType",
    "EventLog",
    "FileWritten",
    "StageCompleted",
    "now_ns",
]
