"""Export layer — writing output files.

Single-file writes, recursive directory mirroring, and SASS compilation.
The SASS names load libsass on first access only.
"""

from __future__ import annotations

__all__ = [
    "compile_sass",
    "fingerprint",
    "mirror_directory",
    "render_sass",
    "write",
]

_LAZY: dict[str, str] = {
    "compile_sass": "pichu.export.sass",
    "fingerprint": "pichu.export.sass",
    "render_sass": "pichu.export.sass",
    "mirror_directory": "pichu.export.writer",
    "write": "pichu.export.writer",
}


def __getattr__(name: str) -> object:
    """Lazy imports for the export API."""
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
