"""Pichu configuration.

PichuConfig is the central configuration object, frozen after creation.
The text encoding it names becomes the process default once passed to
``pichu.configure``; pipelines, Markdown parsing and ``write`` read it
when no encoding is given.
"""

import codecs
from dataclasses import dataclass, field
from pathlib import Path

from pichu._errors import ConfigError


@dataclass(frozen=True, slots=True)
class PichuConfig:
    """Configuration for a pichu build.

    Attributes:
        root: Path to the project root. Always resolved to an absolute path
              on construction.
        output: Output directory for generated files.
        workers: Size of the shared worker pool (0 = executor default).
        debounce_ms: Quiet period that ends a burst of file changes.
        encoding: Encoding used for text read from sources and written out.
        highlight_style: Pygments style used for fenced code blocks.

    """

    root: Path = field(default_factory=Path.cwd)
    output: Path = field(default_factory=lambda: Path("dist"))
    workers: int = 0
    debounce_ms: int = 200
    encoding: str = "utf-8"
    highlight_style: str = "default"

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep root comparable with them.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if self.workers < 0:
            msg = f"workers must be >= 0, got {self.workers}"
            raise ConfigError(msg)
        if self.debounce_ms <= 0:
            msg = f"debounce_ms must be > 0, got {self.debounce_ms}"
            raise ConfigError(msg)
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            msg = f"unknown encoding: {self.encoding!r}"
            raise ConfigError(msg) from exc

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def max_workers(self) -> int | None:
        """Worker count for ThreadPoolExecutor (None lets it decide)."""
        return self.workers or None


_default_encoding = "utf-8"


def default_encoding() -> str:
    """Encoding used for source text and ``str`` output when none is given."""
    return _default_encoding


def set_default_encoding(encoding: str) -> None:
    """Change the process default encoding.

    Raises:
        ConfigError: ``encoding`` is not a known codec.

    """
    global _default_encoding  # noqa: PLW0603
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        msg = f"unknown encoding: {encoding!r}"
        raise ConfigError(msg) from exc
    _default_encoding = encoding
