"""Shared test fixtures for pichu."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def blog(tmp_path: Path) -> Path:
    """Create a small content tree with three blog posts.

    Returns the ``content/blog`` directory.
    """
    blog_dir = tmp_path / "content" / "blog"
    blog_dir.mkdir(parents=True)
    (blog_dir / "first.md").write_text(
        "---\ntitle: First\norder: 2\n---\n\n# First post\n\nHello.\n"
    )
    (blog_dir / "second.md").write_text(
        "---\ntitle: Second\norder: 3\n---\n\n# Second post\n\nAgain.\n"
    )
    (blog_dir / "third.md").write_text(
        "---\ntitle: Third\norder: 1\n---\n\n# Third post\n\nDone.\n"
    )
    return blog_dir


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with ``tmp_path`` as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def make_paths(root: Path, names: list[str]) -> list[Path]:
    """Create empty files under ``root`` and return their paths."""
    paths = []
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name)
        paths.append(path)
    return paths
