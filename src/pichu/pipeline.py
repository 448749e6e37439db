"""Pipeline — parsed items flowing through sort and render stages.

A pipeline owns an ordered list of caller-defined items.  Each stage
consumes the handle it is called on and returns a fresh one, so a build
reads as a single chain::

    (
        pichu.glob("content/blog/*.md")
        .parse_markdown(Post)
        .sort_by_key_reverse(lambda post: post.frontmatter.date)
        .render_each(render_post, lambda post: f"dist/blog/{post.basename}/index.html")
        .render_all(render_index, "dist/blog/index.html")
    )

Parse, sort-key and render work runs on the shared worker pool.  Failure
policy:

- parse: one failure discards every parsed item and raises ``ParseError``.
- render_each: a render failure raises ``RenderError`` before anything is
  written; a write failure raises ``OSError`` but writes that already
  finished stay on disk.
- No stage is retried and nothing is rolled back.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, wait
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pichu._errors import ParseError, PipelineConsumedError, RenderError
from pichu._pool import get_executor
from pichu.config import default_encoding
from pichu.export.writer import write

if TYPE_CHECKING:
    from pichu._types import (
        ParseFn,
        PathFn,
        RenderAllFn,
        Rendered,
        RenderFn,
        SortDirection,
    )
    from pichu.observability.collector import BuildCollector
    from pichu.observability.events import StageName


def _cancel(futures: Iterable[Future[Any]]) -> None:
    for future in futures:
        future.cancel()


def _first_failure(futures: Sequence[Future[Any]]) -> Future[Any] | None:
    """Wait until all futures finish or one fails; return the failed one."""
    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    for future in done:
        if not future.cancelled() and future.exception() is not None:
            _cancel(pending)
            return future
    return None


class Pipeline[T]:
    """An ordered collection of parsed items, ready to be sorted and rendered.

    Pipelines are move-only: every stage except :meth:`first` and ``len()``
    consumes the handle and returns a new one.  Reusing a consumed handle
    raises :class:`PipelineConsumedError`.  A stage that raises also
    consumes its handle.

    Args:
        items: Items in pipeline order.
        encoding: Encoding for ``str`` render output (the configured
            default if omitted).
        collector: Optional event collector passed down the chain.

    """

    __slots__ = ("_collector", "_consumed", "_encoding", "_items")

    def __init__(
        self,
        items: Iterable[T],
        *,
        encoding: str | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self._items: list[T] = list(items)
        self._encoding = encoding or default_encoding()
        self._collector = collector
        self._consumed = False

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[Path],
        parse_fn: ParseFn[T],
        *,
        encoding: str | None = None,
        collector: BuildCollector | None = None,
    ) -> Pipeline[T]:
        """Parse every path concurrently, keeping the original path order.

        ``parse_fn`` is called from several worker threads at once and must
        not mutate shared state without its own synchronization.

        Raises:
            ParseError: ``parse_fn`` raised for some path.  The first failure
                found while collecting results in path order is reported;
                outstanding work is cancelled and no pipeline is produced.

        """
        ordered = list(paths)
        start = time.perf_counter()
        executor = get_executor()
        futures = [executor.submit(parse_fn, path) for path in ordered]

        items: list[T] = []
        for index, (path, future) in enumerate(zip(ordered, futures, strict=True)):
            try:
                items.append(future.result())
            except Exception as exc:
                _cancel(futures[index + 1:])
                _record(collector, "parse", len(ordered), start, ok=False)
                raise ParseError(path, exc) from exc

        _record(collector, "parse", len(ordered), start)
        return cls(items, encoding=encoding, collector=collector)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def _take(self) -> list[T]:
        """Mark this handle consumed and hand over its items."""
        if self._consumed:
            msg = "pipeline was already consumed by a previous stage"
            raise PipelineConsumedError(msg)
        self._consumed = True
        return self._items

    def _derive(self, items: list[T]) -> Pipeline[T]:
        return Pipeline(items, encoding=self._encoding, collector=self._collector)

    @property
    def consumed(self) -> bool:
        """True once a stage has taken ownership of this handle."""
        return self._consumed

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def sort_by_key(
        self,
        key: Callable[[T], Any],
        direction: SortDirection = "ascending",
    ) -> Pipeline[T]:
        """Sort the items by a derived key.

        Keys are computed concurrently on the worker pool.  The sort itself
        is stable, but callers that need a deterministic order among equal
        keys should still put a tiebreaker in the key.

        Args:
            key: Maps an item to a totally ordered key.
            direction: ``"ascending"`` or ``"descending"``.

        """
        if direction not in ("ascending", "descending"):
            msg = f"direction must be 'ascending' or 'descending', got {direction!r}"
            raise ValueError(msg)

        items = self._take()
        start = time.perf_counter()
        keys = list(get_executor().map(key, items))
        order = sorted(
            range(len(items)),
            key=keys.__getitem__,
            reverse=direction == "descending",
        )
        _record(self._collector, "sort", len(items), start)
        return self._derive([items[i] for i in order])

    def sort_by_key_reverse(self, key: Callable[[T], Any]) -> Pipeline[T]:
        """Sort the items by a derived key, descending."""
        return self.sort_by_key(key, "descending")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_each(
        self,
        render_fn: RenderFn[T],
        path_fn: PathFn[T],
    ) -> Pipeline[T]:
        """Render every item to its own file, in parallel.

        Two phases: first every item is rendered; only if all renders
        succeed are the files written.

        Args:
            render_fn: Produces the file content (``str`` or ``bytes``).
            path_fn: Produces the destination path for an item.

        Returns:
            A pipeline with the same items in the same order.

        Raises:
            RenderError: ``render_fn`` or ``path_fn`` raised.  No file is
                written for this call.
            OSError: A write failed.  Other writes may already be on disk.

        """
        items = self._take()
        start = time.perf_counter()
        executor = get_executor()

        def render_one(item: T) -> tuple[Path, Rendered]:
            try:
                dest = Path(path_fn(item))
            except Exception as exc:
                raise RenderError(None, exc) from exc
            try:
                return dest, render_fn(item)
            except Exception as exc:
                raise RenderError(dest, exc) from exc

        renders = [executor.submit(render_one, item) for item in items]
        failed = _first_failure(renders)
        if failed is not None:
            _record(self._collector, "render_each", len(items), start, ok=False)
            raise failed.exception()  # type: ignore[misc]

        encoding = self._encoding
        collector = self._collector
        writes = [
            executor.submit(write, dest, content, encoding=encoding, collector=collector)
            for dest, content in (future.result() for future in renders)
        ]
        # Every write runs to completion; the first failure is reported after.
        wait(writes)
        for future in writes:
            error = future.exception()
            if error is not None:
                _record(self._collector, "render_each", len(items), start, ok=False)
                raise error

        _record(self._collector, "render_each", len(items), start)
        return self._derive(items)

    def render_all(
        self,
        render_fn: RenderAllFn[T],
        dest: str | Path,
    ) -> Pipeline[T]:
        """Render all items, in order, into one destination file.

        ``render_fn`` is called exactly once, on the calling thread, with the
        full ordered list.

        Raises:
            RenderError: ``render_fn`` raised.
            OSError: The write failed.

        """
        items = self._take()
        start = time.perf_counter()
        dest_path = Path(dest)
        try:
            content = render_fn(items)
        except Exception as exc:
            _record(self._collector, "render_all", len(items), start, ok=False)
            raise RenderError(dest_path, exc) from exc
        write(dest_path, content, encoding=self._encoding, collector=self._collector)
        _record(self._collector, "render_all", len(items), start)
        return self._derive(items)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def into_list(self) -> list[T]:
        """Consume the pipeline and return its items for further processing."""
        return self._take()

    def first(self) -> T | None:
        """Return the first item without consuming, or None if empty."""
        if self._consumed:
            msg = "pipeline was already consumed by a previous stage"
            raise PipelineConsumedError(msg)
        return self._items[0] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else f"{len(self._items)} items"
        return f"<Pipeline {state}>"


def _record(
    collector: BuildCollector | None,
    stage: StageName,
    items: int,
    start: float,
    *,
    ok: bool = True,
) -> None:
    if collector is None:
        return
    collector.record_stage(
        stage,
        items=items,
        ok=ok,
        duration_ms=(time.perf_counter() - start) * 1000,
    )
