"""Build the example blog into ``dist/``.

Run from this directory::

    python build.py
"""

from __future__ import annotations

import html
import shutil
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from pydantic import BaseModel

import pichu
from pichu.config_loader import load_config
from pichu.content import get_highlighter

CONFIG = load_config(Path(__file__).parent)
DIST = CONFIG.output_path


class BlogPost(BaseModel):
    title: str
    date: date


def render_post(post: pichu.Markdown[BlogPost], css: str) -> str:
    return (
        f'<!doctype html><link rel="stylesheet" href="/{css}">'
        f"<title>{html.escape(post.frontmatter.title)}</title>"
        f"<article>{post.html}</article>"
    )


def render_blog(posts: Sequence[pichu.Markdown[BlogPost]], css: str) -> str:
    items = "".join(
        f'<li><a href="/blog/{p.basename}/">{html.escape(p.frontmatter.title)}</a>'
        f" <time>{p.frontmatter.date.isoformat()}</time></li>"
        for p in posts
    )
    return (
        f'<!doctype html><link rel="stylesheet" href="/{css}">'
        f"<h1>{len(posts)} posts</h1><ul>{items}</ul>"
    )


def build() -> None:
    """Rebuild the whole site from scratch."""
    if DIST.exists():
        shutil.rmtree(DIST)

    pichu.mirror_directory("static", DIST)
    digest = pichu.render_sass("styles/main.scss", DIST / "main.css")
    pichu.write(DIST / "code.css", get_highlighter().stylesheet())
    css = f"main.css?v={digest}"

    (
        pichu.glob("content/blog/*.md")
        .parse_markdown(BlogPost)
        .sort_by_key_reverse(lambda post: (post.frontmatter.date, post.basename))
        .render_each(
            lambda post: render_post(post, css),
            lambda post: DIST / "blog" / post.basename / "index.html",
        )
        .render_all(lambda posts: render_blog(posts, css), DIST / "blog" / "index.html")
    )


if __name__ == "__main__":
    pichu.configure(CONFIG)
    build()
