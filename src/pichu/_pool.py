"""Shared worker pool for the bulk-parallel pipeline stages.

One ``ThreadPoolExecutor`` per process, created lazily on first use.
Parse, sort-key and render work from every pipeline runs on it.

A pipeline started from inside a worker (a render function that parses
its own includes, say) gets an inline executor instead.  Submitting to the
bounded pool from one of its own threads and then waiting would leave every
worker blocked on tasks none of them is free to run.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

_lock = threading.Lock()
_executor: ThreadPoolExecutor | None = None
_max_workers: int | None = None
_worker = threading.local()


class InlineExecutor(Executor):
    """Executor that runs each call on the submitting thread.

    The returned future is already finished, so callers written against the
    pool (``wait``, ``map``, ``result``) work unchanged.
    """

    def submit(self, fn: Any, /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


_inline = InlineExecutor()


def _enter_worker() -> None:
    _worker.active = True


def in_worker() -> bool:
    """True on a thread owned by the shared pool."""
    return getattr(_worker, "active", False)


def get_executor() -> Executor:
    """Return the process-wide executor, creating it on first call.

    Called from one of the pool's own threads, returns an
    :class:`InlineExecutor` so nested stages run serially.
    """
    global _executor  # noqa: PLW0603
    if in_worker():
        return _inline
    with _lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=_max_workers,
                thread_name_prefix="pichu-worker",
                initializer=_enter_worker,
            )
        return _executor


def set_max_workers(max_workers: int | None) -> None:
    """Resize the pool.

    An existing executor is shut down (after its queued work finishes) and
    the next ``get_executor()`` call creates one with the new size.

    """
    global _executor, _max_workers  # noqa: PLW0603
    with _lock:
        _max_workers = max_workers
        old, _executor = _executor, None
    if old is not None:
        old.shutdown(wait=True)


def shutdown() -> None:
    """Shut down the pool; it is recreated on next use."""
    global _executor  # noqa: PLW0603
    with _lock:
        old, _executor = _executor, None
    if old is not None:
        old.shutdown(wait=True)
