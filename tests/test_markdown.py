"""Tests for pichu.content.markdown — frontmatter + Markdown stage."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel

from pichu._errors import (
    FrontmatterDeserializeError,
    MissingFrontmatterError,
    ParseError,
)
from pichu.content.markdown import (
    Markdown,
    MarkdownParser,
    parse_markdown,
    render_markdown,
    split_frontmatter,
)
from pichu.paths import resolve


class Post(BaseModel):
    title: str
    order: int = 0


@dataclass
class PlainPost:
    title: str


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# parse_markdown
# ---------------------------------------------------------------------------


class TestParseMarkdown:
    """parse_markdown — one file to a Markdown item."""

    def test_hello_fixture(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "hello-world.md", "---\ntitle: Hello\n---\n# Hi\n")
        item = parse_markdown(path, Post)

        assert isinstance(item, Markdown)
        assert item.frontmatter.title == "Hello"
        assert item.basename == "hello-world"
        assert "<h1" in item.html
        assert ">Hi</h1>" in item.html
        assert item.markdown.strip() == "# Hi"
        assert item.path == path

    def test_default_schema_is_dict(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.md", "---\ntitle: Hello\ntags: [x, y]\n---\nbody\n")
        item = parse_markdown(path)
        assert item.frontmatter == {"title": "Hello", "tags": ["x", "y"]}

    def test_dataclass_schema(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.md", "---\ntitle: Plain\n---\nbody\n")
        item = parse_markdown(path, PlainPost)
        assert item.frontmatter == PlainPost(title="Plain")

    def test_basename_strips_only_last_extension(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "notes.v2.md", "---\ntitle: x\n---\n")
        assert parse_markdown(path).basename == "notes.v2"

    def test_missing_frontmatter(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bare.md", "# No frontmatter here\n")
        with pytest.raises(MissingFrontmatterError) as exc_info:
            parse_markdown(path, Post)
        assert exc_info.value.path == path
        assert "bare.md" in str(exc_info.value)

    def test_unclosed_frontmatter(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "open.md", "---\ntitle: Hello\n\n# Hi\n")
        with pytest.raises(MissingFrontmatterError):
            parse_markdown(path)

    def test_schema_mismatch(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bad.md", "---\norder: 3\n---\nbody\n")
        with pytest.raises(FrontmatterDeserializeError) as exc_info:
            parse_markdown(path, Post)
        assert exc_info.value.path == path
        assert "title" in str(exc_info.value.cause)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bad.md", "---\ntitle: [unclosed\n---\nbody\n")
        with pytest.raises(FrontmatterDeserializeError):
            parse_markdown(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            parse_markdown(tmp_path / "nope.md")


class TestSplitFrontmatter:
    """split_frontmatter — YAML block and body."""

    def test_split(self) -> None:
        meta, body = split_frontmatter("---\na: 1\n---\n\nbody\n", Path("x.md"))
        assert meta == {"a": 1}
        assert body == "body\n"

    def test_empty_block(self) -> None:
        meta, body = split_frontmatter("---\n---\nbody\n", Path("x.md"))
        assert meta == {}
        assert body == "body\n"


# ---------------------------------------------------------------------------
# Rendering options
# ---------------------------------------------------------------------------


class TestRenderMarkdown:
    """render_markdown — configured extensions."""

    def test_heading_ids(self) -> None:
        assert '<h2 id="getting-started">Getting Started</h2>' in render_markdown(
            "## Getting Started"
        )

    def test_raw_html_passthrough(self) -> None:
        html = render_markdown('<div class="note">raw</div>\n\ntext')
        assert '<div class="note">raw</div>' in html

    def test_table(self) -> None:
        html = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_strikethrough(self) -> None:
        assert "<del>gone</del>" in render_markdown("this is ~~gone~~")

    def test_superscript(self) -> None:
        assert "<sup>10</sup>" in render_markdown("2^10^ bytes")

    def test_footnotes(self) -> None:
        html = render_markdown("Claim.[^1]\n\n[^1]: Source.\n")
        assert 'class="footnote"' in html
        assert "Source." in html

    def test_description_list(self) -> None:
        html = render_markdown("Term\n:   Definition\n")
        assert "<dl>" in html
        assert "<dd>Definition</dd>" in html

    def test_smart_typography(self) -> None:
        html = render_markdown('"quoted" -- and...')
        assert "&ldquo;quoted&rdquo;" in html
        assert "&hellip;" in html

    def test_highlighted_fence(self) -> None:
        html = render_markdown("```python\ndef f():\n    return 1\n```\n")
        assert 'class="highlight"' in html
        assert "<span" in html
        assert "language-python" not in html

    def test_unknown_language_as_plain_text(self) -> None:
        html = render_markdown("```nosuchlanguage\nx < y\n```\n")
        assert '<div class="highlight">' in html
        assert "x &lt; y" in html
        assert "language-nosuchlanguage" not in html

    def test_raw_code_block_not_rehighlighted(self) -> None:
        raw = '<pre><code class="language-python">x = 1</code></pre>'
        html = render_markdown(f"{raw}\n\ntext")
        assert raw in html
        assert 'class="highlight"' not in html

    def test_disallowed_raw_tags_escaped(self) -> None:
        html = render_markdown(
            '<script>alert(1)</script>\n\nA <iframe></iframe> and <b>bold</b>\n'
        )
        assert "&lt;script>alert(1)&lt;/script>" in html
        assert "&lt;iframe>&lt;/iframe>" in html
        assert "<b>bold</b>" in html
        assert "<script" not in html

    def test_tag_filter_leaves_code_alone(self) -> None:
        html = render_markdown("Use `<script>` tags.")
        assert "<code>&lt;script&gt;</code>" in html
        assert "&amp;lt;" not in html

    def test_converter_state_does_not_leak(self) -> None:
        render_markdown("# Same")
        assert '<h1 id="same">Same</h1>' in render_markdown("# Same")


# ---------------------------------------------------------------------------
# Pipeline integration
# ---------------------------------------------------------------------------


class TestParseMarkdownPipeline:
    """PathSet.parse_markdown — concurrent stage over a content tree."""

    def test_blog(self, blog: Path, tmp_path: Path) -> None:
        dist = tmp_path / "dist"
        posts = (
            resolve(f"{blog}/*.md")
            .parse_markdown(Post)
            .sort_by_key(lambda post: post.frontmatter.order)
            .render_each(
                lambda post: f"<h1>{post.frontmatter.title}</h1>{post.html}",
                lambda post: dist / post.basename / "index.html",
            )
            .render_all(
                lambda posts: f"{len(posts)} posts: "
                + ", ".join(p.frontmatter.title for p in posts),
                dist / "index.html",
            )
            .into_list()
        )

        assert [p.basename for p in posts] == ["third", "first", "second"]
        assert (dist / "index.html").read_text() == "3 posts: Third, First, Second"
        page = (dist / "first" / "index.html").read_text()
        assert page.startswith("<h1>First</h1>")
        assert "First post" in page

    def test_one_bad_file_fails_parse(self, blog: Path) -> None:
        bad = _write(blog / "broken.md", "no frontmatter\n")
        with pytest.raises(ParseError) as exc_info:
            resolve(f"{blog}/*.md").parse_markdown(Post)
        assert exc_info.value.path == bad
        assert isinstance(exc_info.value.cause, MissingFrontmatterError)

    def test_parser_safe_across_threads(self, blog: Path) -> None:
        parser = MarkdownParser(Post)
        paths = sorted(blog.glob("*.md"))
        results: dict[int, list[str]] = {}

        def worker(n: int) -> None:
            results[n] = [parser(p).frontmatter.title for p in paths]

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(titles == ["First", "Second", "Third"] for titles in results.values())
