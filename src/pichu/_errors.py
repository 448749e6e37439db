"""Pichu error hierarchy.

All pichu-specific errors inherit from PichuError for easy catching.
Filesystem failures are not wrapped: they surface as the builtin
``OSError`` (and ``FileExistsError`` for mirror collisions).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class PichuError(Exception):
    """Base error for all pichu operations."""


class ConfigError(PichuError):
    """Invalid configuration file or value."""


class PatternError(PichuError):
    """A glob pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid pattern {pattern!r}: {reason}")


class PipelineConsumedError(PichuError):
    """A pipeline handle was used after a stage consumed it."""


class ParseError(PichuError):
    """A caller-supplied parse function failed.

    Attributes:
        path: Source path whose parse failed.
        cause: The original exception, untouched.

    """

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to parse {path}: {cause}")


class RenderError(PichuError):
    """A caller-supplied render (or output-path) function failed.

    ``path`` is the destination the item would have been written to, or
    None when the destination itself could not be computed.

    """

    def __init__(self, path: Path | None, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        target = f" for {path}" if path is not None else ""
        super().__init__(f"render fn error{target}: {cause}")


class ContentError(PichuError):
    """Error while turning a content file into a Markdown item."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class MissingFrontmatterError(ContentError):
    """The content file has no leading frontmatter block."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"missing frontmatter in {path}")


class FrontmatterDeserializeError(ContentError):
    """Frontmatter did not match the declared schema."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(path, f"failed to deserialize frontmatter for {path}: {cause}")


class NoFileStemError(ContentError):
    """The content path has no file stem to derive a basename from."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"no file stem for: {path}")


class SassCompileError(PichuError):
    """The SASS/SCSS compiler reported a diagnostic."""

    def __init__(self, source: Path, cause: BaseException) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f"failed to compile sass {source}: {cause}")


class NotifyError(PichuError):
    """The filesystem watcher subscription failed or broke."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"notify error: {cause}")
