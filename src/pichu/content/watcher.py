"""File watcher — debounced change batches driving rebuilds.

Subscribes to recursive create/modify/delete notifications for one or more
roots via watchfiles.  Bursts of raw notifications are coalesced: a batch is
flushed once ``debounce_ms`` passes without a new event, deduplicated by
path, and handed to the caller's callback.

Callbacks run on the watching thread, one at a time.  Notifications that
arrive while a callback runs keep accumulating in the backend and flush as
the next batch after it returns.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change, DefaultFilter

from pichu._errors import NotifyError

if TYPE_CHECKING:
    from watchfiles import BaseFilter

    from pichu._types import ChangeCallback, PathLike
    from pichu.observability.collector import BuildCollector

type ChangeKind = Literal["created", "modified", "deleted"]

# Quiet period that ends a burst
DEBOUNCE_MS = 200

# Upper bound on how long one continuous burst is held back
MAX_BATCH_MS = 1600

_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


@dataclass(frozen=True, slots=True)
class ChangeBatch:
    """Distinct paths that changed within one debounce window.

    Attributes:
        paths: Each changed path once.
        changes: Raw ``(kind, path)`` pairs; a path can appear with more
            than one kind (e.g. created then modified).

    """

    paths: frozenset[Path]
    changes: frozenset[tuple[ChangeKind, Path]]

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[Change, str]]) -> ChangeBatch:
        """Build a batch from watchfiles' ``(Change, path)`` pairs."""
        changes = frozenset(
            (_CHANGE_KIND_MAP.get(change, "modified"), Path(path)) for change, path in raw
        )
        return cls(paths=frozenset(path for _, path in changes), changes=changes)

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(sorted(self.paths))

    def kinds(self, path: Path) -> frozenset[ChangeKind]:
        """Kinds of change seen for ``path`` in this batch."""
        return frozenset(kind for kind, p in self.changes if p == path)


def _roots(paths: PathLike | Iterable[PathLike]) -> list[Path]:
    if isinstance(paths, (str, Path)):
        return [Path(paths)]
    return [Path(p) for p in paths]


def watch(
    paths: PathLike | Iterable[PathLike],
    on_change: ChangeCallback,
    *,
    debounce_ms: int = DEBOUNCE_MS,
    max_batch_ms: int = MAX_BATCH_MS,
    stop_event: threading.Event | None = None,
    watch_filter: BaseFilter | None = None,
    collector: BuildCollector | None = None,
) -> None:
    """Watch ``paths`` recursively and call ``on_change`` once per batch.

    Blocks until the subscription ends.  Setting ``stop_event`` closes the
    subscription and makes ``watch`` return normally.

    Args:
        paths: One root or several roots to watch.
        on_change: Called with each non-empty :class:`ChangeBatch`.
        debounce_ms: Quiet period that ends a burst.
        max_batch_ms: Longest a continuous burst is held before flushing.
        stop_event: Event that stops the loop when set.
        watch_filter: watchfiles filter (defaults to ``DefaultFilter``, which
            ignores VCS and cache directories).
        collector: Optional event collector.

    Raises:
        NotifyError: The subscription could not be created (e.g. a root does
            not exist) or the backend failed while watching.

    Exceptions raised by ``on_change`` propagate unchanged and end the loop.

    """
    from watchfiles import watch as watch_changes

    roots = _roots(paths)
    if not roots:
        raise NotifyError(ValueError("no paths to watch"))

    changes = watch_changes(
        *roots,
        watch_filter=watch_filter if watch_filter is not None else DefaultFilter(),
        debounce=max(max_batch_ms, debounce_ms),
        step=debounce_ms,
        stop_event=stop_event,
    )
    try:
        while True:
            try:
                raw = next(changes)
            except StopIteration:
                return
            except (OSError, RuntimeError) as exc:
                raise NotifyError(exc) from exc

            batch = ChangeBatch.from_raw(raw)
            if not batch:
                continue

            t0 = time.perf_counter()
            on_change(batch)
            if collector is not None:
                collector.record_batch(len(batch), (time.perf_counter() - t0) * 1000)
    finally:
        changes.close()


class Watcher:
    """Runs :func:`watch` on a background thread.

    The loop owns its own stop event; :meth:`stop` sets it and joins the
    thread.  An exception that ended the loop (``NotifyError`` or one raised
    by the callback) is re-raised from :meth:`stop` / :meth:`join`.

    Args:
        paths: One root or several roots to watch.
        on_change: Called with each non-empty :class:`ChangeBatch`.
        debounce_ms: Quiet period that ends a burst.
        collector: Optional event collector.

    """

    def __init__(
        self,
        paths: PathLike | Iterable[PathLike],
        on_change: ChangeCallback,
        *,
        debounce_ms: int = DEBOUNCE_MS,
        collector: BuildCollector | None = None,
    ) -> None:
        self._roots = _roots(paths)
        self._on_change = on_change
        self._debounce_ms = debounce_ms
        self._collector = collector
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching for file changes in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._error = None
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="pichu-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        self.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the loop to end; re-raise whatever ended it."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if not self._thread.is_alive():
                self._thread = None
        if self._error is not None:
            error, self._error = self._error, None
            raise error

    def _watch_loop(self) -> None:
        try:
            watch(
                self._roots,
                self._on_change,
                debounce_ms=self._debounce_ms,
                stop_event=self._stop_event,
                collector=self._collector,
            )
        except Exception as exc:  # noqa: BLE001 - handed to join()
            self._error = exc
