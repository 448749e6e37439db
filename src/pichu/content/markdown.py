"""Markdown content stage — frontmatter + CommonMark body to HTML.

Each content file starts with a YAML frontmatter block delimited by ``---``
lines.  The block is validated into a caller-declared schema with pydantic;
the body is rendered by Python-Markdown with:

- raw HTML passthrough
- tables, fenced code, footnotes, definition lists
- strikethrough (``~~text~~``) and superscript (``^text^``) via pymdown-extensions
- smart typography and generated heading ids
- Pygments highlighting of code blocks (``codehilite``) through the shared
  highlighter
- the GFM tag filter: raw ``<script>``, ``<iframe>``, ``<style>`` and the
  other tags GFM disallows are escaped, while all other raw HTML passes

Python-Markdown converters carry per-document state, so each worker thread
keeps its own.  The highlighter is process-wide (see ``content.highlight``).
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import markdown
import yaml
from frontmatter.default_handlers import YAMLHandler
from markdown.extensions import Extension
from markdown.postprocessors import Postprocessor
from pydantic import TypeAdapter, ValidationError

from pichu._errors import (
    FrontmatterDeserializeError,
    MissingFrontmatterError,
    NoFileStemError,
)
from pichu.config import default_encoding
from pichu.content.highlight import get_highlighter

_EXTENSIONS = [
    "tables",
    "fenced_code",
    "footnotes",
    "def_list",
    "smarty",
    "toc",
    "codehilite",
    "pymdownx.tilde",
    "pymdownx.caret",
]

_EXTENSION_CONFIGS: dict[str, dict[str, Any]] = {
    # Only the strikethrough/superscript halves; subscript and insert would
    # reinterpret single ``~`` and double ``^^``.
    "pymdownx.tilde": {"subscript": False},
    "pymdownx.caret": {"insert": False},
}

# Tags GFM's tagfilter escapes even when raw HTML is allowed
_DISALLOWED_TAG = re.compile(
    r"<(?=/?(?:title|textarea|style|xmp|iframe|noembed|noframes|script|plaintext)(?:[\s/>]|$))",
    re.IGNORECASE,
)

_YAML = YAMLHandler()
_local = threading.local()


@dataclass(frozen=True, slots=True)
class Markdown[T]:
    """A parsed Markdown file.

    Attributes:
        frontmatter: Frontmatter validated into the caller's schema.
        basename: File name without its final extension.
        markdown: Raw Markdown body (frontmatter removed).
        html: Rendered HTML of the body.
        path: Source path the item was parsed from.

    """

    frontmatter: T
    basename: str
    markdown: str
    html: str
    path: Path


class _TagFilter(Postprocessor):
    def run(self, text: str) -> str:
        return _DISALLOWED_TAG.sub("&lt;", text)


class TagFilterExtension(Extension):
    """Escape the opening ``<`` of raw tags GFM disallows.

    Runs after raw HTML is restored from the stash, so it sees exactly what
    the author passed through.  Code spans and blocks are already escaped
    and never match.
    """

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        md.postprocessors.register(_TagFilter(md), "tagfilter", 5)


def _converter() -> markdown.Markdown:
    """Per-thread Python-Markdown instance, reset for each document."""
    md = getattr(_local, "md", None)
    if md is None:
        md = markdown.Markdown(
            extensions=[*_EXTENSIONS, TagFilterExtension()],
            extension_configs={
                **_EXTENSION_CONFIGS,
                "codehilite": get_highlighter().codehilite_config(),
            },
            output_format="html",
        )
        _local.md = md
    return md.reset()


def render_markdown(body: str) -> str:
    """Render a Markdown body (no frontmatter) to highlighted HTML."""
    return _converter().convert(body)


def split_frontmatter(text: str, path: Path) -> tuple[Any, str]:
    """Split ``text`` into its loaded YAML frontmatter and body.

    Raises:
        MissingFrontmatterError: No leading ``---`` block.
        FrontmatterDeserializeError: The block is not valid YAML.

    """
    if not _YAML.detect(text):
        raise MissingFrontmatterError(path)
    try:
        raw, body = _YAML.split(text)
    except ValueError:
        # Opening marker without a closing one
        raise MissingFrontmatterError(path) from None
    try:
        metadata = _YAML.load(raw)
    except yaml.YAMLError as exc:
        raise FrontmatterDeserializeError(path, exc) from exc
    return (metadata if metadata is not None else {}), body.lstrip("\n")


def parse_markdown(
    path: str | Path,
    schema: Any = dict,
    *,
    encoding: str | None = None,
    adapter: TypeAdapter[Any] | None = None,
) -> Markdown[Any]:
    """Parse one Markdown file with frontmatter.

    Args:
        path: Content file to read.
        schema: Type the frontmatter is validated into.
        encoding: Text encoding of the file (the configured default if
            omitted).
        adapter: Prebuilt ``TypeAdapter`` for ``schema`` (saves rebuilding
            it for every file).

    Raises:
        OSError: The file cannot be read.
        MissingFrontmatterError: The file has no frontmatter block.
        FrontmatterDeserializeError: The frontmatter does not fit ``schema``.
        NoFileStemError: The path has no file stem.

    """
    source = Path(path)
    text = source.read_text(encoding=encoding or default_encoding())
    metadata, body = split_frontmatter(text, source)

    validator = adapter if adapter is not None else TypeAdapter(schema)
    try:
        matter = validator.validate_python(metadata)
    except ValidationError as exc:
        raise FrontmatterDeserializeError(source, exc) from exc

    basename = source.stem
    if not basename:
        raise NoFileStemError(source)

    return Markdown(
        frontmatter=matter,
        basename=basename,
        markdown=body,
        html=render_markdown(body),
        path=source,
    )


class MarkdownParser:
    """Parse function for ``Pipeline.from_paths`` bound to one schema.

    Builds the schema's ``TypeAdapter`` once; instances are safe to call
    from several worker threads.

    """

    __slots__ = ("_adapter", "_encoding", "schema")

    def __init__(self, schema: Any = dict, *, encoding: str | None = None) -> None:
        self.schema = schema
        self._encoding = encoding or default_encoding()
        self._adapter: TypeAdapter[Any] = TypeAdapter(schema)

    def __call__(self, path: Path) -> Markdown[Any]:
        return parse_markdown(
            path, self.schema, encoding=self._encoding, adapter=self._adapter,
        )
