"""Pattern resolution — glob patterns to ordered path sets.

Patterns use shell-style wildcards (``*``, ``**``, ``?``, ``[...]``) and are
resolved against the working directory unless absolute.  Results keep the
order of the filesystem traversal; they are not sorted.  Directories are
listed with ``os.scandir`` so a read failure anywhere in the walk raises
instead of silently shrinking the result.
"""

from __future__ import annotations

import glob as _glob
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, Any, overload

from pichu._errors import PatternError

if TYPE_CHECKING:
    from pichu._types import ParseFn
    from pichu.content.markdown import Markdown
    from pichu.observability.collector import BuildCollector
    from pichu.pipeline import Pipeline


def _check_brackets(pattern: str, component: str) -> None:
    i = 0
    while i < len(component):
        if component[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < len(component) and component[j] in "!^":
            j += 1
        # A leading ']' is a literal member of the class
        if j < len(component) and component[j] == "]":
            j += 1
        close = component.find("]", j)
        if close == -1:
            raise PatternError(pattern, f"unterminated character class at {component!r}")
        i = close + 1


def validate_pattern(pattern: str) -> None:
    """Reject patterns the matcher would silently misread.

    Raises:
        PatternError: Empty pattern, ``**`` mixed with other characters in one
            path component, or an unterminated ``[`` class.

    """
    if not pattern:
        raise PatternError(pattern, "empty pattern")
    separators = "/" + (os.sep if os.sep != "/" else "")
    components = [pattern]
    for sep in separators:
        components = [part for c in components for part in c.split(sep)]
    for component in components:
        if "**" in component and component != "**":
            raise PatternError(
                pattern, "recursive wildcards must form a single path component",
            )
        _check_brackets(pattern, component)


def _anchor(pattern: str) -> tuple[str, list[str]]:
    """Split a pattern into its literal leading directory and the rest."""
    parts = list(Path(pattern).parts)
    split = 0
    while split < len(parts) - 1 and not _glob.has_magic(parts[split]):
        split += 1
    base = os.path.join(*parts[:split]) if split else ""
    return base, parts[split:]


def _scan(directory: str) -> list[os.DirEntry[str]]:
    # OSError propagates: an unreadable directory fails the whole resolve.
    with os.scandir(directory or os.curdir) as entries:
        return list(entries)


def _join(base: str, name: str) -> str:
    return os.path.join(base, name) if base else name


def _descendants(base: str) -> Iterator[str]:
    for entry in _scan(base):
        path = _join(base, entry.name)
        yield path
        if entry.is_dir(follow_symlinks=False):
            yield from _descendants(path)


def _matches(base: str, parts: Sequence[str]) -> Iterator[str]:
    head, rest = parts[0], parts[1:]

    if head == "**":
        if not rest:
            yield from _descendants(base)
            return
        yield from _matches(base, rest)
        for entry in _scan(base):
            if entry.is_dir(follow_symlinks=False):
                yield from _matches(_join(base, entry.name), parts)
        return

    if not _glob.has_magic(head):
        path = _join(base, head)
        if rest:
            if os.path.isdir(path):
                yield from _matches(path, rest)
        elif os.path.lexists(path):
            yield path
        return

    for entry in _scan(base):
        if not fnmatch(entry.name, head):
            continue
        path = _join(base, entry.name)
        if not rest:
            yield path
        elif entry.is_dir():
            yield from _matches(path, rest)


def resolve(pattern: str | os.PathLike[str]) -> PathSet:
    """Get the paths that match a glob pattern.

    ``*``, ``?`` and ``[...]`` match names starting with ``.`` like any
    other name, and ``**`` descends into hidden directories.  Symlinked
    directories are followed by ordinary components but not by ``**``.

    Examples:
        >>> paths = resolve("content/blog/*.md")  # doctest: +SKIP

    Raises:
        PatternError: If the pattern is malformed.
        OSError: If a directory the pattern has to list cannot be read.

    """
    text = os.fspath(pattern)
    validate_pattern(text)

    base, parts = _anchor(text)
    if base and not os.path.isdir(base):
        return PathSet(())
    return PathSet(tuple(Path(match) for match in _matches(base, parts)))


glob = resolve


@dataclass(frozen=True, slots=True)
class PathSet(Sequence[Path]):
    """An ordered list of paths, usually created by :func:`resolve`.

    Attributes:
        paths: Matched paths in traversal order.

    """

    paths: tuple[Path, ...]

    @overload
    def __getitem__(self, index: int) -> Path: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Path, ...]: ...

    def __getitem__(self, index: int | slice) -> Path | tuple[Path, ...]:
        return self.paths[index]

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def parse[T](
        self,
        parse_fn: ParseFn[T],
        *,
        collector: BuildCollector | None = None,
    ) -> Pipeline[T]:
        """Parse every path concurrently with ``parse_fn``.

        See :meth:`Pipeline.from_paths`.

        """
        from pichu.pipeline import Pipeline

        return Pipeline.from_paths(self.paths, parse_fn, collector=collector)

    def parse_markdown(
        self,
        schema: Any = dict,
        *,
        collector: BuildCollector | None = None,
    ) -> Pipeline[Markdown[Any]]:
        """Parse the paths as Markdown files with YAML frontmatter.

        Args:
            schema: Type the frontmatter is validated into (a pydantic
                model, dataclass, TypedDict, or ``dict``).
            collector: Optional event collector.

        """
        from pichu.content.markdown import MarkdownParser

        return self.parse(MarkdownParser(schema), collector=collector)
