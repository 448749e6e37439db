"""Output writing — single files and whole directory trees.

``write`` creates any missing ancestor directories before writing.  Nothing
here is atomic: a crash mid-write can leave a truncated file, and a failed
``mirror_directory`` leaves whatever it already copied in place.
"""

from __future__ import annotations

import errno
import shutil
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pichu.config import default_encoding

if TYPE_CHECKING:
    from pichu._types import PathLike, Rendered
    from pichu.observability.collector import BuildCollector

# Dot-entries that are still copied by mirror_directory
_KEEP_DOTTED = frozenset({".well-known"})


def write(
    path: PathLike,
    data: Rendered,
    *,
    encoding: str | None = None,
    collector: BuildCollector | None = None,
) -> int:
    """Write ``data`` to ``path``, creating parent dirs as needed.

    Existing files are overwritten.  ``str`` data is encoded with
    ``encoding``, or the configured default encoding.

    Returns the size in bytes of the written file.

    Raises:
        OSError: If a directory cannot be created or the file written.

    """
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        payload = data.encode(encoding or default_encoding())
    else:
        payload = bytes(data)
    filepath.write_bytes(payload)
    if collector is not None:
        collector.record_write(str(filepath), len(payload))
    return len(payload)


def _should_skip(name: str) -> bool:
    return name.startswith(".") and name not in _KEEP_DOTTED


def mirror_directory(
    src: PathLike,
    dest: PathLike,
    *,
    collector: BuildCollector | None = None,
) -> tuple[Path, ...]:
    """Recursively copy the entries of ``src`` into ``dest``.

    ``dest`` is created if absent.  Entries whose name starts with ``.`` are
    skipped, except ``.well-known``.  Directories are merged into existing
    ones; a file that already exists at a destination leaf is an error.

    Args:
        src: Directory to copy from.
        dest: Directory to copy into.
        collector: Receives one write event per copied file and a
            ``mirror`` stage event.

    Returns:
        Destination paths of every copied file, in traversal order.

    Raises:
        FileExistsError: A destination file already exists.  Files copied
            before the collision remain on disk.
        OSError: Any other filesystem failure.

    """
    start = time.perf_counter()
    copied: list[Path] = []
    try:
        _mirror(Path(src), Path(dest), copied, collector)
    except OSError:
        _record_mirror(collector, len(copied), start, ok=False)
        raise
    _record_mirror(collector, len(copied), start, ok=True)
    return tuple(copied)


def _record_mirror(
    collector: BuildCollector | None, copied: int, start: float, *, ok: bool,
) -> None:
    if collector is not None:
        collector.record_stage(
            "mirror",
            items=copied,
            ok=ok,
            duration_ms=(time.perf_counter() - start) * 1000,
        )


def _mirror(
    src: Path,
    dest: Path,
    copied: list[Path],
    collector: BuildCollector | None,
) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        if _should_skip(entry.name):
            continue
        target = dest / entry.name
        if entry.is_dir():
            if target.exists() and not target.is_dir():
                raise FileExistsError(errno.EEXIST, "destination already exists", str(target))
            _mirror(entry, target, copied, collector)
            continue
        if target.exists():
            raise FileExistsError(errno.EEXIST, "destination already exists", str(target))
        shutil.copy2(entry, target)
        copied.append(target)
        if collector is not None:
            collector.record_write(str(target), target.stat().st_size)
