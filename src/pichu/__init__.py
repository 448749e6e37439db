"""Pichu — a static site generator that evolves with your needs.

Pichu does not impose a site layout.  You describe the build as a chain:
discover sources by glob, parse them in parallel, sort, and render each
item (and an index of all of them) to files.

Quick start::

    import pichu

    (
        pichu.glob("content/blog/*.md")
        .parse_markdown(BlogPost)
        .sort_by_key_reverse(lambda post: post.frontmatter.date)
        .render_each(render_post, lambda post: f"dist/blog/{post.basename}/index.html")
        .render_all(render_blog, "dist/blog/index.html")
    )

Also included::

    pichu.write(path, content)            # write, creating parent dirs
    pichu.mirror_directory("static", "dist")
    pichu.render_sass("styles/main.scss", "dist/main.css")  # -> fingerprint
    pichu.watch("content", lambda batch: build())

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pichu._errors import (
    ConfigError,
    ContentError,
    FrontmatterDeserializeError,
    MissingFrontmatterError,
    NoFileStemError,
    NotifyError,
    ParseError,
    PatternError,
    PichuError,
    PipelineConsumedError,
    RenderError,
    SassCompileError,
)

if TYPE_CHECKING:
    from pichu.config import PichuConfig

__version__ = "0.4.1"
__all__ = [
    "ChangeBatch",
    "ConfigError",
    "ContentError",
    "FrontmatterDeserializeError",
    "Markdown",
    "MissingFrontmatterError",
    "NoFileStemError",
    "NotifyError",
    "ParseError",
    "PathSet",
    "PatternError",
    "PichuConfig",
    "PichuError",
    "Pipeline",
    "PipelineConsumedError",
    "RenderError",
    "SassCompileError",
    "Watcher",
    "__version__",
    "configure",
    "glob",
    "mirror_directory",
    "parse_markdown",
    "render_sass",
    "resolve",
    "watch",
    "write",
]

# Lazy attribute -> defining module. Keeps ``import pichu`` from loading
# Markdown, Pygments, libsass and watchfiles until they are used.
_LAZY: dict[str, str] = {
    "PathSet": "pichu.paths",
    "glob": "pichu.paths",
    "resolve": "pichu.paths",
    "Pipeline": "pichu.pipeline",
    "write": "pichu.export.writer",
    "mirror_directory": "pichu.export.writer",
    "render_sass": "pichu.export.sass",
    "Markdown": "pichu.content.markdown",
    "parse_markdown": "pichu.content.markdown",
    "ChangeBatch": "pichu.content.watcher",
    "Watcher": "pichu.content.watcher",
    "watch": "pichu.content.watcher",
    "PichuConfig": "pichu.config",
}


def configure(config: PichuConfig) -> None:
    """Apply process-wide settings from a config.

    Sizes the shared worker pool, sets the default text encoding and picks
    the highlighting style.  Call it before the first build; the
    highlighter cannot change style once built.

    """
    from pichu import _pool
    from pichu.config import set_default_encoding
    from pichu.content import highlight

    _pool.set_max_workers(config.max_workers)
    set_default_encoding(config.encoding)
    highlight.set_style(config.highlight_style)


def __getattr__(name: str) -> object:
    """Lazy imports for the public API."""
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
