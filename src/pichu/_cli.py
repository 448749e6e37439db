"""Pichu CLI — pichu sass / pichu mirror / pichu watch.

Entry point for the ``pichu`` command-line interface.  Builds themselves are
Python scripts; the CLI covers the steps that need no code.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pichu._errors import PichuError

if TYPE_CHECKING:
    from pichu.content.watcher import ChangeBatch


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the pichu CLI."""
    parser = argparse.ArgumentParser(
        prog="pichu",
        description="Static site generator toolkit.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # pichu sass
    sass_parser = subparsers.add_parser(
        "sass",
        help="Compile a SASS/SCSS file and print its fingerprint",
    )
    sass_parser.add_argument("source", help="Entry stylesheet")
    sass_parser.add_argument(
        "dest", nargs="?", help="Destination CSS file (default: <output>/<stem>.css)",
    )
    sass_parser.add_argument(
        "--root", default=".", help="Project root holding pichu.yaml/pichu.toml",
    )

    # pichu mirror
    mirror_parser = subparsers.add_parser(
        "mirror",
        help="Copy a directory tree, skipping dotfiles except .well-known",
    )
    mirror_parser.add_argument("src", help="Directory to copy from")
    mirror_parser.add_argument(
        "dest", nargs="?", help="Directory to copy into (default: the output directory)",
    )
    mirror_parser.add_argument(
        "--root", default=".", help="Project root holding pichu.yaml/pichu.toml",
    )

    # pichu watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Re-run a command whenever files change",
    )
    watch_parser.add_argument("paths", nargs="+", help="Paths to watch")
    watch_parser.add_argument(
        "--exec", dest="exec_cmd", required=True, help="Shell command to run per batch",
    )
    watch_parser.add_argument(
        "--debounce", type=int, default=None, help="Debounce window in ms",
    )
    watch_parser.add_argument(
        "--root", default=".", help="Project root holding pichu.yaml/pichu.toml",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from pichu import __version__

    return __version__


def _output_dir(root: str) -> Path:
    """Output directory named by the project config under ``root``."""
    from pichu.config_loader import load_config

    return load_config(Path(root)).output_path


def _run_command(cmd: str, batch: ChangeBatch) -> None:
    """Run the rebuild command for one batch; failures are reported, not raised."""
    print(f"  Changed: {len(batch)} path{'s' if len(batch) != 1 else ''}", file=sys.stderr)
    proc = subprocess.run(cmd, shell=True, check=False)  # noqa: S602
    if proc.returncode != 0:
        print(f"  Command failed with code {proc.returncode}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "sass":
            from pichu.export.sass import render_sass

            dest = args.dest
            if dest is None:
                dest = _output_dir(args.root) / f"{Path(args.source).stem}.css"
            print(render_sass(args.source, dest))
        elif args.command == "mirror":
            from pichu.export.writer import mirror_directory

            dest = args.dest if args.dest is not None else _output_dir(args.root)
            copied = mirror_directory(args.src, dest)
            print(f"  Copied {len(copied)} file{'s' if len(copied) != 1 else ''}", file=sys.stderr)
        elif args.command == "watch":
            from pichu.config_loader import load_config
            from pichu.content.watcher import watch

            overrides: dict[str, object] = {}
            if args.debounce is not None:
                overrides["debounce_ms"] = args.debounce
            config = load_config(Path(args.root), **overrides)

            print(f"  Watching {', '.join(args.paths)}. Ctrl+C to stop.", file=sys.stderr)
            watch(
                args.paths,
                lambda batch: _run_command(args.exec_cmd, batch),
                debounce_ms=config.debounce_ms,
            )
    except (PichuError, OSError) as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n  Stopped.", file=sys.stderr)


if __name__ == "__main__":
    main()
