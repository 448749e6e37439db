"""Syntax highlighting for fenced code blocks.

The highlighter resolves a Pygments style and builds its HTML formatter,
which is the expensive part.  It is constructed once per process by
:func:`get_highlighter` and then shared, read-only, by every concurrent
Markdown parse: Python-Markdown's ``codehilite`` extension asks
:meth:`Highlighter.formatter` for a formatter per block and always gets
this one.
"""

from __future__ import annotations

import threading
from typing import Any

from pygments.formatters import HtmlFormatter
from pygments.styles import get_style_by_name


class Highlighter:
    """Pygments style and formatter shared by every Markdown converter.

    Args:
        style: Name of a Pygments style.
        css_class: Class on the wrapping ``<div>`` of each highlighted block.

    """

    __slots__ = ("_css_class", "_formatter", "_style")

    def __init__(self, style: str = "default", css_class: str = "highlight") -> None:
        self._style = get_style_by_name(style)
        self._css_class = css_class
        self._formatter = HtmlFormatter(style=self._style, cssclass=css_class, wrapcode=True)

    @property
    def style_name(self) -> str:
        return self._style.name

    def formatter(self, lang_str: str = "", **options: Any) -> HtmlFormatter:
        """Formatter factory for ``codehilite``'s ``pygments_formatter`` option.

        Per-block options are ignored; every block shares one formatter.
        """
        return self._formatter

    def codehilite_config(self) -> dict[str, Any]:
        """Settings for Python-Markdown's ``codehilite`` extension."""
        return {
            "css_class": self._css_class,
            "guess_lang": False,
            "pygments_formatter": self.formatter,
        }

    def stylesheet(self) -> str:
        """CSS rules for the configured style, scoped to ``css_class``."""
        return self._formatter.get_style_defs(f".{self._css_class}")


_lock = threading.Lock()
_instance: Highlighter | None = None
_style = "default"


def get_highlighter() -> Highlighter:
    """Return the shared highlighter, constructing it on first call."""
    global _instance  # noqa: PLW0603
    if _instance is None:
        with _lock:
            if _instance is None:
                _instance = Highlighter(_style)
    return _instance


def set_style(style: str) -> None:
    """Choose the Pygments style for the shared highlighter.

    Raises:
        RuntimeError: The highlighter was already constructed with a
            different style.

    """
    global _style  # noqa: PLW0603
    with _lock:
        if _instance is not None and _style != style:
            msg = (
                f"highlighter already constructed with style {_style!r}; "
                "set the style before the first Markdown parse"
            )
            raise RuntimeError(msg)
        _style = style
