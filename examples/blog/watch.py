"""Rebuild the example blog whenever content, styles or static files change.

Run from this directory::

    python watch.py
"""

from __future__ import annotations

import sys

import pichu
from build import CONFIG, build


def on_change(batch: pichu.ChangeBatch) -> None:
    print(f"  Changed: {', '.join(str(p) for p in batch)}", file=sys.stderr)
    try:
        build()
    except (pichu.PichuError, OSError) as exc:
        print(f"  Build error: {exc}", file=sys.stderr)


if __name__ == "__main__":
    pichu.configure(CONFIG)
    build()
    pichu.watch(["content", "styles", "static"], on_change, debounce_ms=CONFIG.debounce_ms)
