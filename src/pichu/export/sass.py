"""SASS/SCSS stage — compile one entry stylesheet and fingerprint it.

Sibling partials of the entry file are importable: its parent directory is
added to the compiler's include paths.
"""

from __future__ import annotations

import hashlib
import time
from pathlib import Path
from typing import TYPE_CHECKING

import sass

from pichu._errors import SassCompileError
from pichu.export.writer import write

if TYPE_CHECKING:
    from pichu._types import PathLike
    from pichu.observability.collector import BuildCollector

# Length of the hex fingerprint returned by render_sass
FINGERPRINT_LENGTH = 16


def fingerprint(data: bytes) -> str:
    """Short content hash for cache-busting URLs.

    The first 16 lowercase hex characters of the SHA-256 digest.

    """
    return hashlib.sha256(data).hexdigest()[:FINGERPRINT_LENGTH]


def compile_sass(source: PathLike, *, output_style: str = "nested") -> str:
    """Compile ``source`` to CSS without writing it.

    Raises:
        SassCompileError: The compiler reported a diagnostic (including a
            missing source file).

    """
    entry = Path(source)
    try:
        return sass.compile(
            filename=str(entry),
            include_paths=[str(entry.parent)],
            output_style=output_style,
        )
    except (sass.CompileError, OSError) as exc:
        raise SassCompileError(entry, exc) from exc


def render_sass(
    source: PathLike,
    dest: PathLike,
    *,
    output_style: str = "nested",
    collector: BuildCollector | None = None,
) -> str:
    """Render a SASS/SCSS file to ``dest``.

    Returns:
        The content fingerprint of the written CSS (see :func:`fingerprint`).

    Raises:
        SassCompileError: The compiler reported a diagnostic.
        OSError: The CSS could not be written.

    """
    start = time.perf_counter()
    try:
        css = compile_sass(source, output_style=output_style).encode("utf-8")
        write(dest, css, collector=collector)
    except Exception:
        if collector is not None:
            collector.record_stage("sass", items=1, ok=False, duration_ms=_elapsed_ms(start))
        raise
    if collector is not None:
        collector.record_stage("sass", items=1, duration_ms=_elapsed_ms(start))
    return fingerprint(css)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
