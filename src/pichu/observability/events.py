"""Build event model.

One small frozen record per reportable moment of a build, such as a
stage finishing or a file landing on disk.
Each carries a ``time.monotonic_ns()`` stamp, which orders events within
one process and nothing more.  Records are immutable, so worker threads
hand them to the log without copying.

"""

import time
from dataclasses import dataclass
from typing import Literal

type StageName = Literal["parse", "sort", "render_each", "render_all", "sass", "mirror"]


@dataclass(frozen=True, slots=True)
class StageCompleted:
    """A pipeline stage finished (successfully or not).

    Attributes:
        stage: Which stage ran.
        items: Number of items the stage processed.
        ok: False if the stage raised.
        duration_ms: Wall-clock time of the stage in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: StageName
    items: int
    ok: bool
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class FileWritten:
    """An output file was written.

    Attributes:
        path: Destination path.
        size_bytes: Number of bytes written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    size_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BatchDelivered:
    """The watcher handed a debounced batch to its callback.

    Attributes:
        paths: Number of distinct paths in the batch.
        callback_ms: Time the callback took in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    paths: int
    callback_ms: float
    timestamp_ns: int


type BuildEventType = StageCompleted | FileWritten | BatchDelivered


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
