"""Content layer — Markdown sources and file watching.

Parses frontmatter + Markdown content files into pipeline items, highlights
fenced code, and watches source trees for changes.
"""

from pichu.content.highlight import Highlighter, get_highlighter
from pichu.content.markdown import Markdown, MarkdownParser, parse_markdown
from pichu.content.watcher import ChangeBatch, Watcher, watch

__all__ = [
    "ChangeBatch",
    "Highlighter",
    "Markdown",
    "MarkdownParser",
    "Watcher",
    "get_highlighter",
    "parse_markdown",
    "watch",
]
