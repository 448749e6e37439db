"""Shared type definitions for pichu."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from pichu.content.watcher import ChangeBatch

# Anything accepted where a filesystem path is expected
type PathLike = str | Path

# Direction for Pipeline.sort_by_key
type SortDirection = Literal["ascending", "descending"]

# Rendered output of a render function
type Rendered = str | bytes

# Caller hooks
type ParseFn[T] = Callable[[Path], T]
type RenderFn[T] = Callable[[T], Rendered]
type RenderAllFn[T] = Callable[[Sequence[T]], Rendered]
type PathFn[T] = Callable[[T], PathLike]

# Watcher callback, invoked once per debounced batch
type ChangeCallback = Callable[[ChangeBatch], object]
